"""Artifact layout and no-clobber writes for generated scripts.

Two layouts exist:

    attached    inside an existing Git repository, files land in the
                current directory: <name>.sh, <name>_README.md,
                <name>_CHANGELOG.md
    standalone  no repository, a new <scripts_dir>/<name>/ directory with
                <name>.sh, README.md, CHANGELOG.md
"""

from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from shikomi.core.context import Context
from shikomi.core.errors import PreconditionError
from shikomi.core.renderer import (
    RenderRequest,
    render_changelog,
    render_readme,
    render_script,
)
from shikomi.core.versioning import INITIAL_VERSION, SemVer


class GenerationMode(Enum):
    ATTACHED = "attached"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class GeneratedArtifactSet:
    """Paths of one script's artifacts plus the version they carry."""

    mode: GenerationMode
    project_dir: Path
    script_path: Path
    readme_path: Path
    changelog_path: Path
    version: SemVer = INITIAL_VERSION

    @property
    def paths(self) -> tuple[Path, Path, Path]:
        return (self.script_path, self.readme_path, self.changelog_path)


def clean_script_name(raw: str) -> str:
    """Strip whitespace and a trailing ``.sh`` from a script name.

    Raises:
        PreconditionError: Name is empty or contains a path separator.
    """
    name = raw.strip()
    if name.endswith(".sh"):
        name = name[: -len(".sh")]
    if not name or "/" in name or name in (".", ".."):
        raise PreconditionError(
            f"Invalid script name: '{raw}'",
            hint="Use a plain name such as 'install_printer'",
        )
    return name


def resolve_artifacts(
    name: str,
    mode: GenerationMode,
    base_dir: Path,
) -> GeneratedArtifactSet:
    """Compute artifact paths for a name and generation mode.

    Args:
        name: Script name without extension.
        mode: Attached (current directory) or standalone (new directory).
        base_dir: Current directory for attached mode, scripts directory
            for standalone mode.
    """
    if mode is GenerationMode.ATTACHED:
        return GeneratedArtifactSet(
            mode=mode,
            project_dir=base_dir,
            script_path=base_dir / f"{name}.sh",
            readme_path=base_dir / f"{name}_README.md",
            changelog_path=base_dir / f"{name}_CHANGELOG.md",
        )

    project_dir = base_dir / name
    return GeneratedArtifactSet(
        mode=mode,
        project_dir=project_dir,
        script_path=project_dir / f"{name}.sh",
        readme_path=project_dir / "README.md",
        changelog_path=project_dir / "CHANGELOG.md",
    )


def ensure_target_free(artifacts: GeneratedArtifactSet) -> None:
    """Fail before any write if the target script or directory exists.

    Raises:
        PreconditionError: Attached script or standalone directory exists.
    """
    if artifacts.mode is GenerationMode.STANDALONE:
        if artifacts.project_dir.exists():
            raise PreconditionError(
                f"Directory already exists: {artifacts.project_dir}",
                hint="Use a different name or remove the existing directory first",
            )
        return

    for path in artifacts.paths:
        if path.exists():
            raise PreconditionError(
                f"Script already exists: {path}" if path == artifacts.script_path
                else f"File already exists: {path}",
                hint="Use a different name or delete the existing files first",
            )


def _write_new(path: Path, content: str) -> None:
    # 'x' refuses to replace a file that appeared after the precondition check
    with path.open("x", encoding="utf-8") as handle:
        handle.write(content)


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def write_artifacts(
    artifacts: GeneratedArtifactSet,
    request: RenderRequest,
    ctx: Context,
) -> GeneratedArtifactSet:
    """Render and write the script, README and CHANGELOG.

    Raises:
        PreconditionError: Any target already exists.
    """
    ensure_target_free(artifacts)
    standalone = artifacts.mode is GenerationMode.STANDALONE
    if standalone:
        artifacts.project_dir.mkdir(parents=True)

    script = render_script(request, ctx)
    readme = render_readme(request, ctx, standalone=standalone)
    changelog = render_changelog(request, ctx)

    try:
        _write_new(artifacts.script_path, script)
        _write_new(artifacts.readme_path, readme)
        _write_new(artifacts.changelog_path, changelog)
    except FileExistsError as exc:
        raise PreconditionError(
            f"File appeared while generating: {exc.filename}",
            hint="Re-run with a different name",
        ) from exc

    _make_executable(artifacts.script_path)
    return artifacts
