"""Exception hierarchy for imgalloc commands."""

from typing import Optional


class ImgAllocError(Exception):
    """Base class for every error a command can report."""


class ArgumentCountError(ImgAllocError):
    """Wrong number of positional arguments for a shell command."""

    def __init__(self, usage: str):
        super().__init__(usage)
        self.usage = usage


class InvalidSizeFormat(ImgAllocError, ValueError):
    """The size specification could not be parsed."""

    def __init__(self, spec: str, reason: Optional[str] = None):
        message = f"could not parse size specification '{spec}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.spec = spec


class SizeOverflowError(InvalidSizeFormat):
    """Checked mode only: the size does not fit in a file offset."""

    def __init__(self, spec: str):
        super().__init__(spec, "size does not fit in a 64-bit file offset")


class PreconditionFailed(ImgAllocError):
    """Drive configuration is closed."""


class ImageIOError(ImgAllocError):
    """An open, write, seek or close on the image failed."""

    def __init__(self, operation: str, path, cause: Exception):
        reason = getattr(cause, "strerror", None) or cause
        super().__init__(f"{operation}: {path}: {reason}")
        self.operation = operation
        self.path = path
        self.errno = getattr(cause, "errno", None)


class DriveRegistrationError(ImgAllocError):
    """The drive manager rejected the image."""


class ConfigurationError(ImgAllocError, ValueError):
    """Invalid settings or an unusable allocator choice."""
