"""Argument parser shared by the Shikomi subcommands."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import NoReturn

from shikomi.core.errors import ShikomiError
from shikomi.helpers.helpers_logging import Colors, print_error, print_info

# Usage errors use the same exit status as every other failure
USAGE_EXIT_CODE = 1


class ShikomiArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors in color and exits with status 1."""

    def error(self, message: str) -> NoReturn:
        print_error(message)
        self.print_usage(sys.stderr)
        print(
            f"{Colors.DIM}Run '{self.prog} --help' for details.{Colors.ENDC}",
            file=sys.stderr,
        )
        self.exit(USAGE_EXIT_CODE)


def parse_or_exit_code(
    parser: argparse.ArgumentParser,
    argv: Sequence[str],
) -> argparse.Namespace | int:
    """Parse ``argv``; return the exit code instead of raising ``SystemExit``.

    ``--help`` yields 0, usage errors yield 1.
    """
    try:
        return parser.parse_args(list(argv))
    except SystemExit as exc:
        code = exc.code
        if code is None:
            return 0
        return code if isinstance(code, int) else USAGE_EXIT_CODE


def report_error(exc: ShikomiError) -> None:
    """Print an error and its remediation hint."""
    print_error(str(exc))
    if exc.hint:
        print_info(f"   {exc.hint}")
