"""
imgalloc - create raw disk images and hand them to a drive manager.

Fully allocated (``alloc``) and sparse (``sparse``) images are created from
a compact size specification such as ``10G`` or ``2048s`` and registered as
virtual drives while drive configuration is still open.
"""

__version__ = "0.1.0"
__author__ = "imgalloc Team"

from imgalloc.allocate import allocate, sparse_allocate
from imgalloc.sizes import format_size, parse_size

__all__ = ["allocate", "sparse_allocate", "parse_size", "format_size", "__version__"]
