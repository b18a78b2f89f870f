#!/usr/bin/env python3
"""
Command loop for the imgalloc shell.
"""

import shlex
from typing import Iterable, Optional

import questionary
from questionary import Style
from rich.markup import escape

from imgalloc.cli.commands import COMMANDS
from imgalloc.cli.utils import Session, console, print_banner, print_error

custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("instruction", "fg:gray italic"),
    ]
)

QUIT_COMMANDS = {"quit", "exit", "q"}

SIZE_HELP = (
    "Sizes are <number>[k|K|m|M|g|G|t|T|p|P|e|E|s]; "
    "a bare number counts kilobytes and 's' counts 512-byte sectors."
)


class Shell:
    """Tokenise command lines and dispatch them to the shell commands."""

    def __init__(self, session: Session):
        self.session = session

    def execute(self, line: str) -> Optional[int]:
        """Run one line. Returns the command status, or None for blank lines."""
        try:
            words = shlex.split(line, comments=True)
        except ValueError as e:
            print_error(f"parse error: {e}")
            return -1
        if not words:
            return None

        cmd, argv = words[0], words[1:]
        if cmd == "help":
            self.print_help()
            return 0

        handler = COMMANDS.get(cmd)
        if handler is None:
            print_error(f"{cmd}: unknown command")
            return -1
        return handler(self.session, cmd, argv)

    def run_lines(self, lines: Iterable[str]) -> int:
        """Run a script. Returns -1 if any command failed, else 0."""
        status = 0
        for line in lines:
            if line.strip() in QUIT_COMMANDS:
                break
            if self.execute(line) == -1:
                status = -1
        return status

    def interactive(self) -> int:
        """Read commands until quit or end of input."""
        print_banner()
        status = 0
        while True:
            line = questionary.text("><imgalloc>", qmark="", style=custom_style).ask()
            if line is None or line.strip() in QUIT_COMMANDS:
                console.print("[dim]Goodbye![/]")
                return status
            result = self.execute(line)
            if result is not None:
                status = result

    def print_help(self) -> None:
        names = sorted(set(COMMANDS))
        width = max(len(name) for name in names)
        for name in names:
            doc = (COMMANDS[name].__doc__ or "").strip().splitlines()[0]
            summary = doc.split(" - ", 1)[-1]
            console.print(f"  [cyan]{name.ljust(width)}[/]  {summary}", highlight=False)
        console.print(f"\n[dim]{escape(SIZE_HELP)}[/]", highlight=False)
