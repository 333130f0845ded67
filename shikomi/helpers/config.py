"""User configuration for the Shikomi CLI.

Settings come from an optional YAML file, by default
``~/.config/shikomi/config.yaml`` (override the location with
``SHIKOMI_CONFIG``)::

    author:
      name: Jane Doe
      email: jane.doe@example.com
    scripts_dir: ~/Documents/JamfScripts   # default: current directory
    secrets_file: ~/.jamf_secrets
    shell: /bin/zsh

``JAMF_SCRIPTS_DIR`` and ``SHIKOMI_SECRETS_FILE`` override the matching
keys. A missing file means defaults; an unreadable file is reported and
ignored.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from shikomi.core.context import DEFAULT_SECRETS_FILENAME, DEFAULT_SHELL
from shikomi.helpers.helpers_logging import print_warning

CONFIG_ENV_VAR = "SHIKOMI_CONFIG"
SCRIPTS_DIR_ENV_VAR = "JAMF_SCRIPTS_DIR"
SECRETS_FILE_ENV_VAR = "SHIKOMI_SECRETS_FILE"

DEFAULT_CONFIG_PATH = Path("~/.config/shikomi/config.yaml")


@dataclass(frozen=True)
class ShikomiConfig:
    """Resolved settings; ``None`` fields fall back at the point of use.

    Attributes:
        author_name: Overrides ``git config user.name``.
        author_email: Overrides ``git config user.email``.
        scripts_dir: Parent of standalone projects (current directory if unset).
        secrets_file: Local secrets store sourced by generated scripts.
        shell: Interpreter for generated shebang lines.
    """

    author_name: str | None = None
    author_email: str | None = None
    scripts_dir: Path | None = None
    secrets_file: Path = Path("~") / DEFAULT_SECRETS_FILENAME
    shell: str = DEFAULT_SHELL


def config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Location of the config file, honoring ``SHIKOMI_CONFIG``."""
    env = os.environ if environ is None else environ
    raw = env.get(CONFIG_ENV_VAR)
    return Path(raw).expanduser() if raw else DEFAULT_CONFIG_PATH.expanduser()


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the YAML config file.

    Returns:
        Parsed mapping, or an empty dict when the file is missing, empty
        or invalid (invalid files produce a warning).
    """
    if not path.is_file():
        return {}

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        print_warning(f"Ignoring config file {path}: {exc}")
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        print_warning(f"Ignoring config file {path}: top level must be a mapping")
        return {}
    return cast(dict[str, Any], data)


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_config(environ: Mapping[str, str] | None = None) -> ShikomiConfig:
    """Load settings from the config file and environment overrides."""
    env = os.environ if environ is None else environ
    data = load_config_file(config_path(env))

    author_obj = data.get("author") or {}
    author: dict[str, Any] = (
        cast(dict[str, Any], author_obj) if isinstance(author_obj, dict) else {}
    )

    defaults = ShikomiConfig()
    scripts_dir = _text(env.get(SCRIPTS_DIR_ENV_VAR)) or _text(data.get("scripts_dir"))
    secrets_file = (
        _text(env.get(SECRETS_FILE_ENV_VAR))
        or _text(data.get("secrets_file"))
        or str(defaults.secrets_file)
    )

    return ShikomiConfig(
        author_name=_text(author.get("name")),
        author_email=_text(author.get("email")),
        scripts_dir=Path(scripts_dir).expanduser() if scripts_dir else None,
        secrets_file=Path(secrets_file).expanduser(),
        shell=_text(data.get("shell")) or defaults.shell,
    )
