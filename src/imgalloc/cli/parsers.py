#!/usr/bin/env python3
"""
Argument parsers for the imgalloc CLI.
"""

import argparse
import sys
from pathlib import Path

from imgalloc import __version__
from imgalloc.backends import ALLOCATOR_CHOICES
from imgalloc.cli.commands import do_alloc, do_sparse
from imgalloc.cli.shell import SIZE_HELP, Shell
from imgalloc.cli.utils import Session, print_error
from imgalloc.config import load_settings
from imgalloc.errors import ImgAllocError
from imgalloc.logging import configure_logging


def cmd_alloc(args, session: Session) -> int:
    return do_alloc(session, "alloc", [args.file, args.size])


def cmd_sparse(args, session: Session) -> int:
    return do_sparse(session, "sparse", [args.file, args.size])


def cmd_shell(args, session: Session) -> int:
    shell = Shell(session)
    if args.script:
        try:
            with open(args.script) as f:
                lines = f.readlines()
        except OSError as e:
            print_error(f"{args.script}: {e.strerror or e}")
            return -1
        return shell.run_lines(lines)
    return shell.interactive()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgalloc",
        description="Create raw disk images and add them as drives",
        epilog=SIZE_HELP,
    )
    parser.add_argument("--version", action="version", version=f"imgalloc {__version__}")
    parser.add_argument("--config", "-c", type=Path, help="Settings file (default: ./.imgalloc.yaml)")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Log as JSON")
    parser.add_argument(
        "--checked-sizes",
        action="store_true",
        default=None,
        help="Reject sizes that overflow a 64-bit offset instead of wrapping",
    )
    parser.add_argument("--allocator", choices=ALLOCATOR_CHOICES, help="Allocation strategy")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Default: interactive shell
    parser.set_defaults(func=cmd_shell, script=None)

    alloc_parser = subparsers.add_parser("alloc", help="Create a fully allocated image")
    alloc_parser.add_argument("file", help="Image file to create")
    alloc_parser.add_argument("size", help="Size, e.g. 10G, 512M, 2048s")
    alloc_parser.set_defaults(func=cmd_alloc)

    sparse_parser = subparsers.add_parser("sparse", help="Create a sparse image")
    sparse_parser.add_argument("file", help="Image file to create")
    sparse_parser.add_argument("size", help="Size, e.g. 10G, 512M, 2048s")
    sparse_parser.set_defaults(func=cmd_sparse)

    shell_parser = subparsers.add_parser("shell", help="Run the interactive shell")
    shell_parser.add_argument("--file", "-f", dest="script", help="Run commands from a script file")
    shell_parser.set_defaults(func=cmd_shell)

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            log_level=args.log_level,
            json_logs=args.json_logs,
            checked_sizes=args.checked_sizes,
            allocator=args.allocator,
        )
        configure_logging(level=settings.log_level, json_output=settings.json_logs)
        session = Session.create(settings)
    except ImgAllocError as e:
        print_error(str(e))
        return 1

    return 0 if args.func(args, session) == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
