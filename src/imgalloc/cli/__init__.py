#!/usr/bin/env python3
"""
imgalloc CLI package.
"""

from .commands import COMMANDS, do_add, do_alloc, do_launch, do_list_drives, do_sparse
from .parsers import main
from .shell import Shell
from .utils import Session, console, err_console

__all__ = [
    "main",
    "COMMANDS",
    "Session",
    "Shell",
    "console",
    "err_console",
    "do_add",
    "do_alloc",
    "do_launch",
    "do_list_drives",
    "do_sparse",
]
