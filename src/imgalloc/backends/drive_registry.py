"""In-process drive manager."""

from pathlib import Path
from typing import List

import structlog

from ..errors import DriveRegistrationError, PreconditionFailed
from ..interfaces.drives import Drive, DriveManager

log = structlog.get_logger(__name__)


class DriveRegistry(DriveManager):
    """
    Track drives for a backend that has not been launched yet.

    Drives can only be added while the registry is configurable; ``launch``
    closes configuration for good.
    """

    def __init__(self):
        self._drives: List[Drive] = []
        self._launched = False

    def is_configurable(self) -> bool:
        return not self._launched

    def add_drive(self, path: Path, readonly: bool = False, format: str = "raw") -> Drive:
        path = Path(path)

        if self._launched:
            raise DriveRegistrationError(f"{path}: cannot add drives after launching")
        if not path.exists():
            raise DriveRegistrationError(f"{path}: no such file")
        if not path.is_file():
            raise DriveRegistrationError(f"{path}: not a regular file")

        resolved = path.resolve()
        for drive in self._drives:
            if drive.path.resolve() == resolved:
                raise DriveRegistrationError(f"{path}: already added as drive {drive.index}")

        drive = Drive(index=len(self._drives), path=path, format=format, readonly=readonly)
        self._drives.append(drive)
        log.info("drive.added", path=str(path), index=drive.index, format=format, readonly=readonly)
        return drive

    def drives(self) -> List[Drive]:
        return list(self._drives)

    def launch(self) -> None:
        if self._launched:
            raise PreconditionFailed("the backend has already been launched")
        self._launched = True
        log.info("drives.launched", count=len(self._drives))
