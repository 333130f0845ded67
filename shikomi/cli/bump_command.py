#!/usr/bin/env python3
"""
Bump the semantic version of a generated script.

Updates the script header and ``SCRIPT_VERSION`` constant, the README
(``**Version:**``, ``**Last Updated:**``, Version History) and the
CHANGELOG in one go. The previous script is kept as ``<script>.bak``.

Usage:
    shikomi bump <script.sh> <major|minor|patch> "Change description" [--tag]
    shikomi bump <major|minor|patch> "Change description" [--tag]
    shikomi bump <script.sh> init "Initial versioned release"

Without a script path the first versioned ``*.sh`` file in the current
directory (sorted by name) is used.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import click

from shikomi.cli.arg_parser import ShikomiArgumentParser, parse_or_exit_code, report_error
from shikomi.core.errors import PreconditionError, ShikomiError
from shikomi.core.version_engine import (
    BumpResult,
    InitResult,
    bump_artifact,
    detect_target,
    find_companions,
    init_artifact,
    tag_name_for,
)
from shikomi.core.versioning import SemVer, validate_bump_kind
from shikomi.helpers import git_ops
from shikomi.helpers.context_builder import build_context
from shikomi.helpers.helpers_logging import (
    print_dim,
    print_header,
    print_info,
    print_success,
    print_warning,
)

INIT_KIND = "init"

_EXPLICIT_ARGS = 3
_AUTO_DETECT_ARGS = 2


@dataclass(frozen=True)
class BumpInvocation:
    """Resolved positional arguments."""

    script_path: Path
    kind: str
    description: str


def resolve_invocation(args: Sequence[str], cwd: Path) -> BumpInvocation:
    """Map 2 or 3 positional arguments to script, kind and description.

    The kind is validated before any file is read or detected.

    Raises:
        PreconditionError: Wrong argument count, ``init`` without a script
            path, or no versioned script to auto-detect.
        InvalidBumpKindError: Unknown kind.
    """
    if len(args) == _EXPLICIT_ARGS:
        script, kind, description = args
        if kind != INIT_KIND:
            validate_bump_kind(kind)
        path = Path(script)
        return BumpInvocation(path if path.is_absolute() else cwd / path, kind, description)

    if len(args) == _AUTO_DETECT_ARGS:
        kind, description = args
        if kind == INIT_KIND:
            raise PreconditionError(
                "'init' needs an explicit script path",
                hint='Usage: shikomi bump <script.sh> init "Initial versioned release"',
            )
        validate_bump_kind(kind)
        detection = detect_target(cwd)
        if detection.ambiguous:
            others = ", ".join(path.name for path in detection.candidates[1:])
            print_warning(
                f"Multiple versioned scripts found; using {detection.target.name} "
                + f"(also: {others})",
            )
        else:
            print_info(f"Auto-detected script: {detection.target.name}")
        return BumpInvocation(detection.target, kind, description)

    raise PreconditionError(
        f"Expected 2 or 3 arguments, got {len(args)}",
        hint='Usage: shikomi bump [SCRIPT_FILE] <major|minor|patch|init> "Change description"',
    )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _print_bump_result(result: BumpResult) -> None:
    print_success(f"Version bumped: {result.previous} → {result.version}")
    print_success(f"Updated {result.script_path.name}")
    if not result.changelog_marker_found:
        print_warning("No '# CHANGELOG' marker in the script header; header changelog not updated")

    readme = result.companions.readme
    if readme is not None:
        if result.readme_synced:
            print_success(f"Updated {readme.name}")
        else:
            print_warning(f"{readme.name} has no **Version:** line; version not updated")
    if result.companions.changelog is not None:
        print_success(f"Updated {result.companions.changelog.name}")
    print_dim(f"   Backup: {result.backup_path.name}")

    script = result.script_path.name
    files = " ".join(
        path.name
        for path in (result.script_path, readme, result.companions.changelog)
        if path is not None
    )
    print("\nNext steps:")
    print(f"  1. Review changes: git diff {script}")
    print(f'  2. Commit changes: git add {files} && git commit -m "chore: bump {script} to {result.version}"')
    print(f'  3. (Optional) Tag release: git tag -a "{result.tag_name}" -m "{result.description}"')
    print("  4. Push changes: git push && git push --tags")


def _print_init_result(result: InitResult) -> None:
    informal = result.informal
    print_success(f"Versioning initialized: {result.script_path.name} at {result.version}")
    if informal.description:
        print_info(f"   Description: {informal.description}")
    if informal.author:
        print_info(f"   Author: {informal.author}")
    if informal.usage:
        print_info(f"   Usage: {informal.usage}")
    print_dim(f"   Backup: {result.backup_path.name}")

    script = result.script_path.name
    print("\nNext steps:")
    print(f"  1. Review the new header: {script}")
    print(f"  2. Review changes: git diff {script}")
    print(f'  3. Commit changes: git add {script} && git commit -m "chore: initialize versioning for {script}"')


def tag_release(
    script_path: Path,
    version: SemVer,
    description: str,
    paths: Sequence[Path],
) -> str | None:
    """Commit the bumped files and create an annotated tag.

    Every Git failure is a warning; the bump itself already succeeded.

    Returns:
        The created tag name, or ``None``.
    """
    cwd = script_path.parent
    tag = tag_name_for(script_path, version, find_companions(script_path).standalone)
    if not git_ops.tool_available("git") or not git_ops.is_inside_work_tree(cwd):
        print_warning(f"Not a Git repository; tag {tag} not created")
        return None
    if git_ops.tag_exists(cwd, tag):
        print_warning(f"Tag {tag} already exists; not created")
        return None

    if not git_ops.stage(cwd, list(paths)):
        print_warning("Could not stage the bumped files; tag not created")
        return None
    if not git_ops.commit(cwd, f"chore: bump {script_path.name} to {version}"):
        print_warning("Commit failed; tag not created")
        return None
    if not git_ops.create_annotated_tag(cwd, tag, description):
        print_warning(f"Could not create tag {tag}")
        return None
    print_success(f"Committed and tagged {tag}")
    return tag


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_bump(args: Sequence[str], tag: bool = False, cwd: Path | None = None) -> int:
    """Execute a bump or init for already parsed positional arguments."""
    cwd = cwd or Path.cwd()
    invocation = resolve_invocation(args, cwd)
    ctx = build_context(cwd)

    if invocation.kind == INIT_KIND:
        print_header(f"Initialize versioning: {invocation.script_path.name}")
        init_result = init_artifact(invocation.script_path, invocation.description, ctx)
        _print_init_result(init_result)
        if tag:
            tag_release(
                init_result.script_path,
                init_result.version,
                invocation.description,
                [init_result.script_path],
            )
        return 0

    print_header(f"Bump {invocation.kind}: {invocation.script_path.name}")
    result = bump_artifact(
        invocation.script_path,
        invocation.kind,
        invocation.description,
        ctx,
    )
    _print_bump_result(result)
    if tag:
        changed = [
            path
            for path in (result.script_path, result.companions.readme, result.companions.changelog)
            if path is not None
        ]
        tag_release(result.script_path, result.version, result.description, changed)
    return 0


def build_parser(prog: str = "shikomi bump") -> argparse.ArgumentParser:
    parser = ShikomiArgumentParser(
        prog=prog,
        usage=f'{prog} [SCRIPT_FILE] <major|minor|patch|init> "Change description" [--tag]',
        description="Bump the semantic version of a generated script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Bump types:
  major   Breaking changes (1.2.3 → 2.0.0)
  minor   New features, backward-compatible (1.2.3 → 1.3.0)
  patch   Bug fixes (1.2.3 → 1.2.4)
  init    Add versioning to an existing script (starts at 1.0.0)

Examples:
  {prog} patch "Fixed parameter validation"
  {prog} install_printer.sh minor "Added duplex option"
  {prog} legacy.sh init "Initial versioned release"
        """,
    )
    parser.add_argument("args", nargs="*", metavar="ARG", help=argparse.SUPPRESS)
    parser.add_argument(
        "--tag",
        action="store_true",
        help="Commit the bumped files and create an annotated Git tag",
    )
    return parser


def main(argv: Sequence[str] | None = None, prog: str = "shikomi bump") -> int:
    """Main entry point for the bump command (also installed as ``bump-version``)."""
    parser = build_parser(prog)
    parsed = parse_or_exit_code(parser, sys.argv[1:] if argv is None else argv)
    if isinstance(parsed, int):
        return parsed

    try:
        return run_bump(parsed.args, tag=parsed.tag)
    except ShikomiError as exc:
        report_error(exc)
        return 1
    except (KeyboardInterrupt, click.Abort):
        print_warning("Cancelled by user")
        return 1


def bump_version_main() -> int:
    """Console script ``bump-version``."""
    return main(prog="bump-version")


if __name__ == "__main__":
    sys.exit(main())
