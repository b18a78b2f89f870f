"""Portable allocator that writes zero blocks until the file is full."""

import errno
import io
import os

import structlog

from ..interfaces.allocator import Allocator

log = structlog.get_logger(__name__)


class ZeroFillAllocator(Allocator):
    """
    Emulate posix_fallocate by writing zeros in ``chunk_size`` blocks.

    Short writes are retried: the remaining count drops by exactly the
    number of bytes each write reports.
    """

    def __init__(self, chunk_size: int = io.DEFAULT_BUFFER_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    @property
    def name(self) -> str:
        return "portable"

    def allocate(self, fd: int, size: int) -> None:
        if size < 0:
            raise OSError(errno.EINVAL, os.strerror(errno.EINVAL))

        buffer = bytes(self.chunk_size)
        remaining = size
        writes = 0
        while remaining > 0:
            n = min(remaining, self.chunk_size)
            written = os.write(fd, buffer[:n] if n < self.chunk_size else buffer)
            if written == 0:
                raise OSError(errno.EIO, "write accepted no data")
            remaining -= written
            writes += 1

        log.debug("zero_fill.done", size=size, writes=writes, chunk_size=self.chunk_size)
