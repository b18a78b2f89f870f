"""Allocator and drive manager implementations."""

import io

from ..errors import ConfigurationError
from ..interfaces.allocator import Allocator
from .drive_registry import DriveRegistry
from .fallocate import NativeAllocator, native_available
from .zero_fill import ZeroFillAllocator

ALLOCATOR_CHOICES = ("auto", "native", "portable")


def select_allocator(preference: str = "auto", chunk_size: int = io.DEFAULT_BUFFER_SIZE) -> Allocator:
    """Pick an allocator by name, detecting the native primitive for 'auto'."""
    if preference not in ALLOCATOR_CHOICES:
        raise ConfigurationError(
            f"unknown allocator '{preference}' (expected one of: {', '.join(ALLOCATOR_CHOICES)})"
        )
    if preference == "native":
        if not native_available():
            raise ConfigurationError("posix_fallocate is not available on this platform")
        return NativeAllocator()
    if preference == "auto" and native_available():
        return NativeAllocator()
    return ZeroFillAllocator(chunk_size=chunk_size)


__all__ = [
    "ALLOCATOR_CHOICES",
    "DriveRegistry",
    "NativeAllocator",
    "ZeroFillAllocator",
    "native_available",
    "select_allocator",
]
