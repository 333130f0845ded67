"""Builds the run :class:`~shikomi.core.context.Context` from the environment."""

from __future__ import annotations

from pathlib import Path

from shikomi.core.context import Context
from shikomi.helpers import git_ops
from shikomi.helpers.config import ShikomiConfig, load_config

PLACEHOLDER_AUTHOR = "First Last"
PLACEHOLDER_EMAIL = "first.last@example.com"


def resolve_identity(config: ShikomiConfig, cwd: Path) -> tuple[str, str]:
    """Author name and email: config, then ``git config``, then placeholders."""
    name = (
        config.author_name
        or git_ops.config_value("user.name", cwd=cwd)
        or PLACEHOLDER_AUTHOR
    )
    email = (
        config.author_email
        or git_ops.config_value("user.email", cwd=cwd)
        or PLACEHOLDER_EMAIL
    )
    return name, email


def build_context(
    cwd: Path | None = None,
    config: ShikomiConfig | None = None,
) -> Context:
    """Context for one CLI invocation."""
    root = cwd or Path.cwd()
    settings = config or load_config()
    author_name, author_email = resolve_identity(settings, root)
    return Context(
        author_name=author_name,
        author_email=author_email,
        root=root,
        home=Path.home(),
        secrets_file=settings.secrets_file.expanduser(),
        shell=settings.shell,
    )
