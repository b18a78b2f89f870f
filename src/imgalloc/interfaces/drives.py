"""Interfaces for the disk-management backend that owns virtual drives."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass
class Drive:
    """A registered virtual drive."""

    index: int
    path: Path
    format: str = "raw"
    readonly: bool = False


class DriveManager(ABC):
    """Abstract interface for drive registration."""

    @abstractmethod
    def is_configurable(self) -> bool:
        """True while drives may still be added."""
        pass

    @abstractmethod
    def add_drive(self, path: Path, readonly: bool = False, format: str = "raw") -> Drive:
        """Register an image file as a drive. Raises DriveRegistrationError."""
        pass

    @abstractmethod
    def drives(self) -> List[Drive]:
        """Registered drives in the order they were added."""
        pass

    @abstractmethod
    def launch(self) -> None:
        """Close drive configuration."""
        pass
