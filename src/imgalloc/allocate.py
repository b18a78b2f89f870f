"""
Create fully allocated and sparse disk images and register them as drives.

Both commands follow the same sequence: parse the size, check that drive
configuration is still open, create the file, populate it, close it and
hand it to the drive manager. Any failure after the file exists deletes it.
"""

import errno
import os
from pathlib import Path
from typing import Callable, Optional, Union

import structlog

from imgalloc.backends import select_allocator
from imgalloc.errors import DriveRegistrationError, ImageIOError, PreconditionFailed
from imgalloc.interfaces.allocator import Allocator
from imgalloc.interfaces.drives import DriveManager
from imgalloc.logging import log_operation
from imgalloc.rollback import RollbackContext
from imgalloc.sizes import as_file_offset, parse_size

log = structlog.get_logger(__name__)

OPEN_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOCTTY", 0)
DEFAULT_MODE = 0o666

PathLike = Union[str, Path]


def allocate(
    drives: DriveManager,
    path: PathLike,
    size_spec: str,
    allocator: Optional[Allocator] = None,
    checked: bool = False,
    mode: int = DEFAULT_MODE,
) -> Path:
    """
    Create a fully allocated, zero-filled image at ``path`` and add it as a drive.

    Args:
        drives: Drive manager that receives the image
        path: Image file to create or truncate
        size_spec: Size specification, see :func:`imgalloc.sizes.parse_size`
        allocator: Allocation strategy (default: detected at runtime)
        checked: Reject sizes that overflow instead of wrapping
        mode: Creation mode, subject to the umask

    Raises:
        InvalidSizeFormat, PreconditionFailed, ImageIOError, DriveRegistrationError
    """
    if allocator is None:
        allocator = select_allocator()

    def populate(fd: int, size: int) -> None:
        try:
            allocator.allocate(fd, size)
        except OSError as e:
            operation = "fallocate" if allocator.name == "native" else "write"
            raise ImageIOError(operation, path, e) from e

    return _create_image("alloc", drives, path, size_spec, populate, checked, mode,
                         allocator=allocator.name)


def sparse_allocate(
    drives: DriveManager,
    path: PathLike,
    size_spec: str,
    checked: bool = False,
    mode: int = DEFAULT_MODE,
) -> Path:
    """
    Create a sparse image whose logical length is the parsed size.

    A size of zero fails: the seek to ``size - 1`` is a negative offset.
    """

    def populate(fd: int, size: int) -> None:
        try:
            os.lseek(fd, size - 1, os.SEEK_SET)
        except OSError as e:
            raise ImageIOError("lseek", path, e) from e
        try:
            written = os.write(fd, b"\0")
        except OSError as e:
            raise ImageIOError("write", path, e) from e
        if written != 1:
            raise ImageIOError("write", path, OSError(errno.EIO, "short write"))

    return _create_image("sparse", drives, path, size_spec, populate, checked, mode)


def _create_image(
    operation: str,
    drives: DriveManager,
    path: PathLike,
    size_spec: str,
    populate: Callable[[int, int], None],
    checked: bool,
    mode: int,
    **log_context,
) -> Path:
    size = parse_size(size_spec, checked=checked)

    if not drives.is_configurable():
        raise PreconditionFailed("can't allocate or add disks after launching")

    path = Path(path)
    if _is_registered(drives, path):
        raise DriveRegistrationError(f"{path}: already added as a drive")

    with log_operation(log, operation, path=str(path), size=size, **log_context):
        try:
            fd = os.open(path, OPEN_FLAGS, mode)
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte in the path.
            raise ImageIOError("open", path, e) from e

        with RollbackContext(f"{operation} {path}") as ctx:
            ctx.add_file(path)

            try:
                populate(fd, as_file_offset(size))
            except BaseException:
                try:
                    os.close(fd)
                except OSError:
                    pass
                raise

            try:
                os.close(fd)
            except OSError as e:
                raise ImageIOError("close", path, e) from e

            drives.add_drive(path)
            ctx.commit()

    return path


def _is_registered(drives: DriveManager, path: Path) -> bool:
    try:
        target = path.resolve()
    except (OSError, ValueError):
        return False
    return any(Path(drive.path).resolve() == target for drive in drives.drives())
