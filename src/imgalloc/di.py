"""IoC container wiring imgalloc collaborators."""

import inspect
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from imgalloc.models import Settings

T = TypeVar("T")


@dataclass
class ServiceRegistration:
    """Registration info for a service."""

    factory: Callable[..., Any]
    singleton: bool = True
    instance: Optional[Any] = None


class DependencyContainer:
    """
    IoC container for dependency injection.

    Usage:
        container = DependencyContainer()
        container.register(DriveManager, DriveRegistry)
        drives = container.resolve(DriveManager)
    """

    def __init__(self):
        self._registrations: Dict[Type, ServiceRegistration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        implementation: Type[T] = None,
        factory: Callable[..., T] = None,
        singleton: bool = True,
        instance: T = None,
    ) -> "DependencyContainer":
        """
        Register a service.

        Args:
            interface: The interface/base class
            implementation: Concrete implementation class
            factory: Factory function to create instance
            singleton: If True, reuse same instance
            instance: Pre-created instance to use
        """
        if instance is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=lambda: instance,
                singleton=True,
                instance=instance,
            )
        elif factory is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=factory,
                singleton=singleton,
            )
        elif implementation is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=implementation,
                singleton=singleton,
            )
        else:
            raise ValueError("Must provide implementation, factory, or instance")

        return self

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        with self._lock:
            if interface not in self._registrations:
                if inspect.isclass(interface) and not inspect.isabstract(interface):
                    return self._create_instance(interface)
                raise KeyError(f"No registration for {interface}")

            reg = self._registrations[interface]

            if reg.singleton and reg.instance is not None:
                return reg.instance

            instance = self._create_instance(reg.factory)

            if reg.singleton:
                reg.instance = instance

            return instance

    def _create_instance(self, factory: Callable) -> Any:
        """Create instance, resolving annotated constructor dependencies."""
        try:
            sig = inspect.signature(factory)
        except ValueError:
            return factory()

        kwargs = {}
        for name, param in sig.parameters.items():
            if param.annotation == inspect.Parameter.empty:
                continue
            try:
                kwargs[name] = self.resolve(param.annotation)
            except (KeyError, TypeError):
                if param.default == inspect.Parameter.empty:
                    raise

        return factory(**kwargs)

    def has(self, interface: Type) -> bool:
        """Check if service is registered."""
        return interface in self._registrations

    def reset(self) -> None:
        """Reset all singleton instances."""
        with self._lock:
            for reg in self._registrations.values():
                reg.instance = None


def create_container(settings: Optional[Settings] = None) -> DependencyContainer:
    """Create a container with the default collaborators for ``settings``."""
    from imgalloc.backends import DriveRegistry, select_allocator
    from imgalloc.interfaces.allocator import Allocator
    from imgalloc.interfaces.drives import DriveManager

    if settings is None:
        settings = Settings()

    container = DependencyContainer()
    container.register(Settings, instance=settings)
    container.register(DriveManager, DriveRegistry)
    container.register(
        Allocator,
        factory=lambda: select_allocator(settings.allocator, chunk_size=settings.chunk_size),
    )

    return container
