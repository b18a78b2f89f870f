#!/usr/bin/env python3
"""
Shell commands for imgalloc.

Every handler takes the session, the command name and its positional
arguments, returns 0 on success and -1 on failure, and reports failures on
stderr instead of raising.
"""

from pathlib import Path
from typing import Callable, Dict, List

from rich.markup import escape
from rich.table import Table

from imgalloc.allocate import allocate, sparse_allocate
from imgalloc.cli.utils import Session, console, print_error
from imgalloc.errors import ArgumentCountError, ImgAllocError
from imgalloc.sizes import format_size

Handler = Callable[[Session, str, List[str]], int]


def _run(action: Callable[[], None]) -> int:
    try:
        action()
    except ArgumentCountError as e:
        print_error(e.usage)
        return -1
    except ImgAllocError as e:
        print_error(str(e))
        return -1
    return 0


def _expect_args(argv: List[str], count: int, usage: str) -> None:
    if len(argv) != count:
        raise ArgumentCountError(usage)


def do_alloc(session: Session, cmd: str, argv: List[str]) -> int:
    """alloc FILE SIZE - create a fully allocated image and add it as a drive."""

    def action():
        _expect_args(argv, 2, "use 'alloc file size' to create an image")
        allocate(
            session.drives,
            argv[0],
            argv[1],
            allocator=session.allocator,
            checked=session.settings.checked_sizes,
            mode=session.settings.file_mode,
        )

    return _run(action)


def do_sparse(session: Session, cmd: str, argv: List[str]) -> int:
    """sparse FILE SIZE - create a sparse image and add it as a drive."""

    def action():
        _expect_args(argv, 2, "use 'sparse file size' to create a sparse image")
        sparse_allocate(
            session.drives,
            argv[0],
            argv[1],
            checked=session.settings.checked_sizes,
            mode=session.settings.file_mode,
        )

    return _run(action)


def do_add(session: Session, cmd: str, argv: List[str]) -> int:
    """add FILE - add an existing image as a drive."""

    def action():
        _expect_args(argv, 1, "use 'add file' to add an existing image")
        session.drives.add_drive(Path(argv[0]))

    return _run(action)


def do_list_drives(session: Session, cmd: str, argv: List[str]) -> int:
    """list-drives - show the drives added so far."""

    def action():
        _expect_args(argv, 0, "use 'list-drives' with no arguments")
        drives = session.drives.drives()
        if not drives:
            console.print("[dim]No drives added[/]")
            return

        table = Table(title="Drives")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Path", style="green")
        table.add_column("Format", style="yellow")
        table.add_column("Size", justify="right")
        table.add_column("Mode", style="magenta")

        for drive in drives:
            try:
                size = format_size(drive.path.stat().st_size)
            except OSError:
                size = "?"
            table.add_row(
                str(drive.index),
                escape(str(drive.path)),
                drive.format,
                size,
                "ro" if drive.readonly else "rw",
            )
        console.print(table)

    return _run(action)


def do_launch(session: Session, cmd: str, argv: List[str]) -> int:
    """launch - close drive configuration."""

    def action():
        _expect_args(argv, 0, f"use '{cmd}' with no arguments")
        session.drives.launch()

    return _run(action)


COMMANDS: Dict[str, Handler] = {
    "alloc": do_alloc,
    "allocate": do_alloc,
    "sparse": do_sparse,
    "add": do_add,
    "list-drives": do_list_drives,
    "launch": do_launch,
    "run": do_launch,
}
