#!/usr/bin/env python3
"""Shikomi CLI - Main Entry Point.

Scaffolds versioned Jamf Pro scripts and keeps their versions in sync.

Usage:
    shikomi <command> [options]

Commands:
    new        Generate a new script with README and CHANGELOG
    bump       Bump a script's version (major, minor, patch) or add versioning (init)
    check      Verify script, README, CHANGELOG and tag versions agree
    help       Show this help message
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

import click

from shikomi import __version__
from shikomi.helpers.helpers_logging import print_error, print_warning

CommandMain = Callable[[Sequence[str]], int]

COMMANDS: dict[str, dict[str, str]] = {
    "new": {
        "description": "Generate a new script with README and CHANGELOG",
        "usage": "shikomi new <name> [--description TEXT] [--no-git]",
    },
    "bump": {
        "description": "Bump a script's version or add versioning to it",
        "usage": 'shikomi bump [SCRIPT_FILE] <major|minor|patch|init> "Description" [--tag]',
    },
    "check": {
        "description": "Verify script, README, CHANGELOG and tag versions agree",
        "usage": "shikomi check [SCRIPT_FILE] [--tag TAG]",
    },
}

# Top-level aliases that defer to canonical commands
COMMAND_ALIASES: dict[str, str] = {
    "generate": "new",
}


def print_help() -> None:
    """Print help message with all available commands."""
    print(__doc__)
    print("📦 Commands:")
    for cmd, info in COMMANDS.items():
        print(f"  {cmd:8} - {info['description']}")
        print(f"  {' ' * 8}   Usage: {info['usage']}")

    print("\n⚡ Aliases:")
    for alias, canonical in COMMAND_ALIASES.items():
        print(f"  {alias:8} - alias for {canonical}")

    print("\n💡 Tip: 'shikomi <command> --help' shows the options of a command")


def _command_main(command: str) -> CommandMain:
    """Import the ``main`` function of a subcommand."""
    if command == "new":
        from shikomi.cli.generate_command import main as generate_main

        return generate_main
    if command == "bump":
        from shikomi.cli.bump_command import main as bump_main

        return bump_main
    from shikomi.cli.check_command import main as check_main

    return check_main


def execute_command(command: str, extra_args: list[str]) -> int:
    """Run a subcommand with its own arguments."""
    canonical = COMMAND_ALIASES.get(command, command)
    if canonical not in COMMANDS:
        print_error(f"Unknown command: {command}")
        print("\nRun 'shikomi help' to see available commands.")
        return 1
    return _command_main(canonical)(extra_args)


@click.group(invoke_without_command=True)
@click.pass_context
def _click_cli(ctx: click.Context) -> int:
    """Top-level Shikomi command group with passthrough command registration."""
    if ctx.invoked_subcommand is not None:
        return 0
    print_help()
    return 0


def _register_passthrough_command(command_name: str, description: str) -> None:
    """Register a passthrough click command; argparse parses its options."""

    @click.command(
        name=command_name,
        help=description,
        context_settings={
            "allow_extra_args": True,
            "ignore_unknown_options": True,
        },
        add_help_option=False,
    )
    @click.pass_context
    def _cmd(ctx: click.Context) -> int:
        return execute_command(command_name, list(ctx.args))

    _click_cli.add_command(_cmd)


def _register_commands() -> None:
    for cmd, info in COMMANDS.items():
        _register_passthrough_command(cmd, info["description"])
    for alias, canonical in COMMAND_ALIASES.items():
        _register_passthrough_command(alias, f"Alias for {canonical}")

    @click.command(name="help", help="Show help message")
    def _help_cmd() -> int:
        print_help()
        return 0

    _click_cli.add_command(_help_cmd)


_register_commands()


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args[0] in ("help", "--help", "-h"):
        print_help()
        return 0
    if args[0] in ("-v", "--version"):
        print(f"shikomi {__version__}")
        return 0

    try:
        result = _click_cli.main(
            args=args,
            prog_name="shikomi",
            standalone_mode=False,
        )
    except click.Abort:
        print_warning("Cancelled by user")
        return 1
    except click.ClickException as exc:
        exc.show()
        return 1

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
