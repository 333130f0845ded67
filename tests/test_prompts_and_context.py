"""Tests for stdin prompts and run-context construction."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import click
import pytest

from shikomi.helpers import prompts
from shikomi.helpers.config import ShikomiConfig
from shikomi.helpers.context_builder import (
    PLACEHOLDER_AUTHOR,
    PLACEHOLDER_EMAIL,
    build_context,
    resolve_identity,
)


def _raise(exc: BaseException) -> Callable[..., str]:
    def _input(prompt: str = "") -> str:
        raise exc

    return _input


def test_ask_returns_raw_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt="": "  Target Dept ")

    assert prompts.ask("Label: ") == "  Target Dept "


def test_ask_eof_is_empty_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("builtins.input", _raise(EOFError()))

    assert prompts.ask("Label: ") == ""


def test_ask_ctrl_c_aborts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("builtins.input", _raise(KeyboardInterrupt()))

    with pytest.raises(click.Abort):
        prompts.ask("Label: ")


@pytest.mark.parametrize(
    ("answer", "expected"),
    [("y", True), ("Yes", True), ("n", False), ("", False)],
)
def test_confirm(answer: str, expected: bool) -> None:
    seen: list[str] = []

    def _ask(prompt: str) -> str:
        seen.append(prompt)
        return answer

    assert prompts.confirm("Create branch?", ask=_ask) is expected
    assert seen == ["Create branch? (y/n): "]


def test_identity_from_config(tmp_path: Path) -> None:
    config = ShikomiConfig(author_name="Jane Doe", author_email="jane@example.com")

    with patch("shikomi.helpers.context_builder.git_ops") as mock_git:
        assert resolve_identity(config, tmp_path) == ("Jane Doe", "jane@example.com")

    mock_git.config_value.assert_not_called()


def test_identity_from_git_config(tmp_path: Path) -> None:
    values = {"user.name": "Git User", "user.email": None}

    with patch("shikomi.helpers.context_builder.git_ops") as mock_git:
        mock_git.config_value.side_effect = lambda key, cwd=None: values[key]
        name, email = resolve_identity(ShikomiConfig(), tmp_path)

    assert name == "Git User"
    assert email == PLACEHOLDER_EMAIL


def test_identity_placeholders(tmp_path: Path) -> None:
    with patch("shikomi.helpers.context_builder.git_ops") as mock_git:
        mock_git.config_value.return_value = None
        assert resolve_identity(ShikomiConfig(), tmp_path) == (
            PLACEHOLDER_AUTHOR,
            PLACEHOLDER_EMAIL,
        )


def test_build_context(tmp_path: Path) -> None:
    config = ShikomiConfig(
        author_name="Jane Doe",
        author_email="jane@example.com",
        secrets_file=tmp_path / "secrets",
        shell="/bin/bash",
    )

    ctx = build_context(tmp_path, config)

    assert ctx.root == tmp_path
    assert ctx.secrets_file == tmp_path / "secrets"
    assert ctx.shell == "/bin/bash"
    assert len(ctx.today) == len("2026-01-31")
