"""Shared fixtures for the Shikomi test suite.

Provides a deterministic :class:`~shikomi.core.context.Context`, a scripted
prompt function standing in for ``input()``, and a factory that lays out a
generated script with its README and CHANGELOG.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from datetime import date
from pathlib import Path

import pytest

from shikomi.core.artifacts import (
    GeneratedArtifactSet,
    GenerationMode,
    resolve_artifacts,
    write_artifacts,
)
from shikomi.core.context import Context
from shikomi.core.parameters import ParameterSlot
from shikomi.core.renderer import RenderRequest

FIXED_DAY = date(2026, 1, 31)
FIXED_DAY_TEXT = "2026-01-31"


# ---------------------------------------------------------------------------
# Scripted prompts
# ---------------------------------------------------------------------------


class ScriptedAsk:
    """Prompt function returning canned answers in order.

    Records every prompt it was shown. Running out of answers fails the
    test instead of blocking on stdin.
    """

    def __init__(self, answers: Sequence[str]) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return self._answers.pop(0)

    @property
    def remaining(self) -> list[str]:
        return list(self._answers)


@pytest.fixture()
def scripted_ask() -> Callable[..., ScriptedAsk]:
    """Build a :class:`ScriptedAsk`.

    Usage::

        ask = scripted_ask("Target Dept", "n", "IT", "")
    """

    def _make(*answers: str) -> ScriptedAsk:
        return ScriptedAsk(answers)

    return _make


# ---------------------------------------------------------------------------
# Context and filesystem
# ---------------------------------------------------------------------------


def make_context(root: Path, day: date = FIXED_DAY) -> Context:
    home = root / "home"
    home.mkdir(exist_ok=True)
    return Context(
        author_name="Jane Doe",
        author_email="jane.doe@example.com",
        root=root,
        home=home,
        secrets_file=home / ".jamf_secrets",
        clock=lambda: day,
    )


@pytest.fixture()
def ctx(tmp_path: Path) -> Context:
    """Context with a fixed date and a home directory under ``tmp_path``."""
    return make_context(tmp_path)


@pytest.fixture()
def isolated_cwd(tmp_path: Path) -> Iterator[Path]:
    """cd into ``tmp_path`` for the duration of the test."""
    original_cwd = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


# ---------------------------------------------------------------------------
# Generated projects
# ---------------------------------------------------------------------------

SAMPLE_SLOTS = (
    ParameterSlot(position=4, label="Target Dept", identifier="TARGET_DEPT", default_value="IT"),
    ParameterSlot(position=5, label="API Key", identifier="API_KEY", is_secret=True),
)

ProjectFactory = Callable[..., GeneratedArtifactSet]


@pytest.fixture()
def make_project(tmp_path: Path, ctx: Context) -> ProjectFactory:
    """Write a generated script set to disk.

    Usage::

        artifacts = make_project("install_printer", mode=GenerationMode.STANDALONE)
    """

    def _make(
        name: str = "install_printer",
        mode: GenerationMode = GenerationMode.ATTACHED,
        slots: Sequence[ParameterSlot] = (),
        base_dir: Path | None = None,
    ) -> GeneratedArtifactSet:
        artifacts = resolve_artifacts(name, mode, base_dir or tmp_path / "repo")
        artifacts.project_dir.parent.mkdir(parents=True, exist_ok=True)
        if mode is GenerationMode.ATTACHED:
            artifacts.project_dir.mkdir(parents=True, exist_ok=True)
        request = RenderRequest(name=name, slots=tuple(slots))
        return write_artifacts(artifacts, request, ctx)

    return _make
