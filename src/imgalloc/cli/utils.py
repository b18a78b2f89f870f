#!/usr/bin/env python3
"""
Shared utilities for the imgalloc CLI.
"""

from dataclasses import dataclass

from rich.console import Console
from rich.markup import escape

from imgalloc import __version__
from imgalloc.di import DependencyContainer, create_container
from imgalloc.interfaces.allocator import Allocator
from imgalloc.interfaces.drives import DriveManager
from imgalloc.models import Settings

console = Console()
err_console = Console(stderr=True)


@dataclass
class Session:
    """Collaborators shared by every command in one shell session."""

    drives: DriveManager
    allocator: Allocator
    settings: Settings

    @classmethod
    def from_container(cls, container: DependencyContainer) -> "Session":
        return cls(
            drives=container.resolve(DriveManager),
            allocator=container.resolve(Allocator),
            settings=container.resolve(Settings),
        )

    @classmethod
    def create(cls, settings: Settings = None) -> "Session":
        return cls.from_container(create_container(settings))


def print_error(message: str) -> None:
    """Write a diagnostic to stderr."""
    err_console.print(f"[red]{escape(message)}[/]", highlight=False)


def print_banner():
    """Print the shell banner."""
    console.print(f"[cyan]imgalloc shell[/] [dim]{__version__}[/]")
    console.print("[dim]Type 'help' for a list of commands, 'quit' to leave.[/]\n")
