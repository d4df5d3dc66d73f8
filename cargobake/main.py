"""Main CLI entry point for cargobake.

Installed as ``cargo-bitbake`` so it runs as ``cargo bitbake``, and as
``cargobake``. Provides commands: bitbake
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from cargobake.cli.bitbake import bitbake_command

logger = logging.getLogger("cargobake.cli")


def setup_logging(
    verbose: int = 0,
    quiet: bool = False,
    console: Optional[Console] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Verbosity count; one -v enables INFO, two or more DEBUG.
        quiet: Only report errors.
        console: Rich Console instance for coordinated output (optional).
    """
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose >= 3,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cargo",
        description="Generates a BitBake recipe for a given Cargo project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    bitbake_parser = subparsers.add_parser(
        "bitbake",
        help="Generates a BitBake recipe for a given Cargo project",
    )
    bitbake_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Silence all output",
    )
    bitbake_parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode (-v, -vv, -vvv, etc.)",
    )
    bitbake_parser.add_argument(
        "-R",
        "--reproducible",
        action="store_true",
        help="Reproducible mode: Output exact git references for git projects",
    )
    bitbake_parser.add_argument(
        "-l",
        "--legacy-overrides",
        action="store_true",
        help="Legacy Overrides: Use legacy override syntax (PV_append)",
    )
    bitbake_parser.add_argument(
        "--manifest-path",
        help="Path to Cargo.toml (defaults to the nearest one above the current directory)",
    )
    bitbake_parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory to write the recipe to (default: current directory)",
    )
    bitbake_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional recipe configuration. Can be a path to a TOML/JSON "
            "file or an inline TOML/JSON string. Command-line flags take "
            "precedence."
        ),
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != "bitbake":
        parser.print_help()
        return 1

    console = Console()
    setup_logging(args.verbose, args.quiet, console=console)
    return bitbake_command(args, console=console)


if __name__ == "__main__":
    sys.exit(main())
