"""Shared fixtures for end-to-end CLI tests.

Every CLI e2e test gets an isolated temporary directory to work in, with
``HOME`` and the Shikomi config pointed into it, so tests never pollute
each other or the real workspace.

Tests invoke the real ``shikomi`` command through a subprocess, exactly as
a user would type it. Interactive answers are fed through stdin. This
validates the full chain: ``shikomi`` entry point → ``commands.py`` dispatch
→ subcommand module → core.

**Isolation:** If the ``shikomi`` entry point is not installed (e.g. running
from a bare checkout), every test that depends on ``run_shikomi`` is
automatically skipped with a clear reason.
"""

import os
import shutil
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

RunShikomi = Callable[..., subprocess.CompletedProcess[str]]

# ---------------------------------------------------------------------------
# Pre-flight checks (evaluated once at import time)
# ---------------------------------------------------------------------------

_SHIKOMI_AVAILABLE = shutil.which("shikomi") is not None

_SKIP_REASON_SHIKOMI = "shikomi entry point is not installed (run: pip install -e .)"

_CONFIG_YAML = """author:
  name: E2E Tester
  email: e2e@example.com
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def isolated_project(tmp_path: Path) -> Iterator[Path]:
    """Create an isolated empty working directory and cd into it.

    Yields:
        Path to the temporary working directory.

    After the test, the working directory is restored.
    """
    workdir = tmp_path / "work"
    workdir.mkdir()
    original_cwd = Path.cwd()
    os.chdir(workdir)
    try:
        yield workdir
    finally:
        os.chdir(original_cwd)


@pytest.fixture()
def cli_env(tmp_path: Path) -> dict[str, str]:
    """Environment with a private HOME and config file."""
    home = tmp_path / "home"
    home.mkdir()
    config_file = tmp_path / "shikomi.yaml"
    config_file.write_text(_CONFIG_YAML, encoding="utf-8")

    env = {
        key: value
        for key, value in os.environ.items()
        if key not in ("JAMF_SCRIPTS_DIR", "SHIKOMI_SECRETS_FILE")
    }
    env.update({
        "HOME": str(home),
        "SHIKOMI_CONFIG": str(config_file),
        "GIT_CONFIG_NOSYSTEM": "1",
    })
    return env


@pytest.fixture()
def run_shikomi(isolated_project: Path, cli_env: dict[str, str]) -> RunShikomi:
    """Return a helper that invokes ``shikomi <args>`` in a subprocess.

    Tests that use this fixture are **automatically skipped** when the
    ``shikomi`` entry point is not installed.

    Usage in tests::

        def test_new(run_shikomi: RunShikomi) -> None:
            result = run_shikomi("new", "demo", "--no-git", stdin="\\nn\\n")
            assert result.returncode == 0

    Returns:
        A callable ``(*args, stdin="") -> CompletedProcess[str]``.
    """
    if not _SHIKOMI_AVAILABLE:
        pytest.skip(_SKIP_REASON_SHIKOMI)

    def _run(*args: str, stdin: str = "") -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            ["shikomi", *args],
            cwd=isolated_project,
            env=cli_env,
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )

    return _run
