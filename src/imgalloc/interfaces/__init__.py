"""Collaborator interfaces for imgalloc."""

from imgalloc.interfaces.allocator import Allocator
from imgalloc.interfaces.drives import Drive, DriveManager

__all__ = ["Allocator", "Drive", "DriveManager"]
