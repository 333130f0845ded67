"""Explicit run context shared by the collector, renderer and version engine.

Operator identity, the clock and filesystem locations are injected through
:class:`Context` instead of being read from the environment, so rendering
and bumping stay deterministic under test.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

DEFAULT_SHELL = "/bin/zsh"
DEFAULT_SECRETS_FILENAME = ".jamf_secrets"


@dataclass(frozen=True)
class Context:
    """Identity, clock and locations for one CLI invocation.

    Attributes:
        author_name: Operator name written into headers and READMEs.
        author_email: Operator email written into script headers.
        root: Working directory the invocation operates in.
        home: Home directory, used to render ``$HOME``-relative paths.
        secrets_file: Local secrets store sourced by generated scripts.
        shell: Interpreter for the generated shebang line.
        clock: Callable returning today's date.
    """

    author_name: str
    author_email: str
    root: Path
    home: Path
    secrets_file: Path
    shell: str = DEFAULT_SHELL
    clock: Callable[[], date] = field(default=date.today, compare=False)

    @property
    def today(self) -> str:
        """Current date as ``YYYY-MM-DD``."""
        return self.clock().isoformat()

    @property
    def secrets_file_display(self) -> str:
        """Secrets path as the generated script refers to it.

        Paths under the home directory become ``$HOME/...`` so the script
        stays portable between operators.
        """
        try:
            relative = self.secrets_file.relative_to(self.home)
        except ValueError:
            return str(self.secrets_file)
        return f"$HOME/{relative.as_posix()}"

    @property
    def secrets_file_short(self) -> str:
        """Secrets path for human-facing text (``~/.jamf_secrets``)."""
        display = self.secrets_file_display
        if display.startswith("$HOME/"):
            return "~/" + display[len("$HOME/"):]
        return display
