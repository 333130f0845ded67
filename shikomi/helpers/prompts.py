"""Interactive prompts on stdin.

``ask`` is the production prompt function handed to the collector; tests
pass a scripted replacement instead.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from shikomi.helpers.helpers_logging import Colors


def ask(prompt: str) -> str:
    """Prompt and return the raw answer (EOF counts as an empty answer).

    Raises:
        click.Abort: On Ctrl-C.
    """
    try:
        return input(f"{Colors.BOLD}{prompt}{Colors.ENDC}")
    except EOFError:
        return ""
    except KeyboardInterrupt as exc:
        raise click.Abort from exc


def confirm(prompt: str, ask: Callable[[str], str] = ask) -> bool:
    """Ask a y/n question; anything starting with ``y`` is yes."""
    return ask(f"{prompt} (y/n): ").strip()[:1] in ("y", "Y")
