"""
Size specifications for disk images.

A size is written as ``<uint>[k|K|m|M|g|G|t|T|p|P|e|E|s]``. Bare integers are
in units of 1024 bytes and ``s`` counts 512-byte sectors. Uppercase ``S`` is
not a suffix.
"""

import re

from imgalloc.errors import InvalidSizeFormat, SizeOverflowError

SECTOR_SIZE = 512

UINT64_MASK = (1 << 64) - 1
OFF_T_MAX = (1 << 63) - 1

SUFFIXES = {
    "k": 1024,
    "K": 1024,
    "m": 1024**2,
    "M": 1024**2,
    "g": 1024**3,
    "G": 1024**3,
    "t": 1024**4,
    "T": 1024**4,
    "p": 1024**5,
    "P": 1024**5,
    "e": 1024**6,
    "E": 1024**6,
    "s": SECTOR_SIZE,
}

# Leading blanks and '+' are what the scanner historically let through.
_SIZE_RE = re.compile(r"\s*\+?(?P<digits>[0-9]+)(?P<suffix>.)?", re.DOTALL)

_UNITS = ["", "K", "M", "G", "T", "P", "E"]


def parse_size(spec: str, checked: bool = False) -> int:
    """
    Parse a size specification into a byte count.

    Multiplication by the suffix factor wraps modulo 2**64. With
    ``checked=True`` a product that does not fit in a signed 64-bit file
    offset raises :class:`SizeOverflowError` instead.

    Raises:
        InvalidSizeFormat: the string is not a valid size specification
    """
    match = _SIZE_RE.fullmatch(spec)
    if match is None:
        raise InvalidSizeFormat(spec)

    value = int(match.group("digits"))
    if value > UINT64_MASK:
        raise InvalidSizeFormat(spec, "number out of range")

    suffix = match.group("suffix")
    if suffix is None:
        factor = 1024
    elif suffix in SUFFIXES:
        factor = SUFFIXES[suffix]
    else:
        raise InvalidSizeFormat(spec)

    size = value * factor
    if checked and size > OFF_T_MAX:
        raise SizeOverflowError(spec)
    return size & UINT64_MASK


def as_file_offset(size: int) -> int:
    """Reinterpret an unsigned 64-bit size as a signed file offset."""
    size &= UINT64_MASK
    return size - (1 << 64) if size > OFF_T_MAX else size


def format_size(size: int) -> str:
    """Render a byte count in the largest binary unit that divides it exactly."""
    if size <= 0:
        return f"{size}"
    unit = 0
    while unit < len(_UNITS) - 1 and size % 1024 == 0:
        size //= 1024
        unit += 1
    return f"{size}{_UNITS[unit]}" if unit else f"{size}B"
