"""Interface for reserving zero-filled storage behind an open file."""

from abc import ABC, abstractmethod


class Allocator(ABC):
    """Strategy that backs the first ``size`` bytes of a file with real blocks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Allocator name (e.g., 'native', 'portable')."""
        pass

    @abstractmethod
    def allocate(self, fd: int, size: int) -> None:
        """Allocate ``size`` bytes at offset 0 of ``fd``. Raises OSError."""
        pass
