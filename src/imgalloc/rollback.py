"""
Delete-on-error support for image creation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

log = logging.getLogger(__name__)


@dataclass
class RollbackContext:
    """
    Context manager that removes partially created images.

    Usage:
        with RollbackContext("alloc disk.img") as ctx:
            ctx.add_file(path)   # deleted if anything below raises
            write_image(path)
            drives.add_drive(path)
            ctx.commit()

    Cleanup is best effort: failures are logged and never replace the
    exception that triggered the rollback.
    """

    operation_name: str
    _files: List[Path] = field(default_factory=list)
    _committed: bool = False

    def add_file(self, path: Path) -> Path:
        """Register a file for cleanup on rollback."""
        self._files.append(Path(path))
        log.debug(f"Registered file for rollback: {path}")
        return path

    def commit(self) -> None:
        """Mark operation as successful, preventing rollback."""
        self._committed = True
        log.debug(f"Operation '{self.operation_name}' committed")

    def rollback(self) -> List[str]:
        """Delete registered files. Returns list of errors."""
        errors = []

        for path in reversed(self._files):
            try:
                path.unlink()
                log.debug(f"Deleted file: {path}")
            except FileNotFoundError:
                pass
            except OSError as e:
                errors.append(f"Failed to delete {path}: {e}")

        for error in errors:
            log.debug(error)
        return errors

    def __enter__(self) -> "RollbackContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None and not self._committed:
            self.rollback()
        return False  # Don't suppress the exception
