"""End-to-end tests for ``shikomi bump`` and ``shikomi check``.

Coverage matrix
---------------
- generate → bump → check on a standalone project
- ``init`` on an informal script, a refused second ``init``, then an
  auto-detected ``patch``
- Error paths (invalid kind, unversioned script, unknown command)
- Drift between README and script makes ``check`` exit 1
"""

from pathlib import Path

import pytest

from tests.cli.conftest import RunShikomi

# Mark all tests in this module as CLI end-to-end tests
pytestmark = pytest.mark.cli

SCRIPT = "install_printer/install_printer.sh"


def _new_project(run_shikomi: RunShikomi) -> None:
    result = run_shikomi("new", "install_printer", "--no-git")
    assert result.returncode == 0, result.stderr


def test_generate_bump_check(run_shikomi: RunShikomi, isolated_project: Path) -> None:
    _new_project(run_shikomi)

    bumped = run_shikomi("bump", SCRIPT, "minor", "Added duplex option")
    assert bumped.returncode == 0, bumped.stderr
    assert "1.0.0 → 1.1.0" in bumped.stdout

    project = isolated_project / "install_printer"
    assert 'readonly SCRIPT_VERSION="1.1.0"' in (project / "install_printer.sh").read_text(
        encoding="utf-8",
    )
    assert (project / "install_printer.sh.bak").is_file()
    changelog = (project / "CHANGELOG.md").read_text(encoding="utf-8")
    assert "### Added\n- Added duplex option" in changelog

    checked = run_shikomi("check", SCRIPT, "--tag", "v1.1.0")
    assert checked.returncode == 0, checked.stderr
    assert "All versions match: 1.1.0" in checked.stdout


def test_check_detects_drift(run_shikomi: RunShikomi, isolated_project: Path) -> None:
    _new_project(run_shikomi)
    readme = isolated_project / "install_printer" / "README.md"
    readme.write_text(
        readme.read_text(encoding="utf-8").replace("**Version:** 1.0.0", "**Version:** 1.0.3"),
        encoding="utf-8",
    )

    result = run_shikomi("check", SCRIPT)

    assert result.returncode == 1
    assert "README version 1.0.3 != script version 1.0.0" in result.stderr


def test_init_then_refuse_second_init(
    run_shikomi: RunShikomi,
    isolated_project: Path,
) -> None:
    (isolated_project / "legacy.sh").write_text(
        "#!/bin/bash\n# Description: Legacy cleanup\n\nrm -rf /tmp/legacy\n",
        encoding="utf-8",
    )

    first = run_shikomi("bump", "legacy.sh", "init", "Initial versioned release")
    assert first.returncode == 0, first.stderr
    text = (isolated_project / "legacy.sh").read_text(encoding="utf-8")
    assert 'readonly SCRIPT_VERSION="1.0.0"' in text
    assert "# Description: Legacy cleanup" in text
    assert text.endswith("rm -rf /tmp/legacy\n")

    second = run_shikomi("bump", "legacy.sh", "init", "Again")
    assert second.returncode == 1
    assert "already versioned" in second.stderr

    bumped = run_shikomi("bump", "patch", "Fixed path")
    assert bumped.returncode == 0, bumped.stderr
    assert "Auto-detected script: legacy.sh" in bumped.stdout


def test_invalid_bump_kind(run_shikomi: RunShikomi) -> None:
    result = run_shikomi("bump", "hotfix", "Nope")

    assert result.returncode == 1
    assert "Invalid bump type: 'hotfix'" in result.stderr


def test_bump_unversioned_script(run_shikomi: RunShikomi, isolated_project: Path) -> None:
    (isolated_project / "plain.sh").write_text("echo hi\n", encoding="utf-8")

    result = run_shikomi("bump", "plain.sh", "patch", "Fix")

    assert result.returncode == 1
    assert "does not appear to be a versioned script" in result.stderr
    assert (isolated_project / "plain.sh").read_text(encoding="utf-8") == "echo hi\n"


def test_unknown_command(run_shikomi: RunShikomi) -> None:
    result = run_shikomi("frobnicate")

    assert result.returncode == 1


def test_version_flag(run_shikomi: RunShikomi) -> None:
    result = run_shikomi("--version")

    assert result.returncode == 0
    assert result.stdout.startswith("shikomi ")
