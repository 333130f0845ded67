#!/usr/bin/env python3
"""
Generate a new versioned Jamf Pro script with README and CHANGELOG.

Inside an existing Git repository the files are written next to each other
in the current directory (attached mode)::

    <name>.sh  <name>_README.md  <name>_CHANGELOG.md

Otherwise a new project directory is created under the scripts directory
(``JAMF_SCRIPTS_DIR``, the ``scripts_dir`` config key, or the current
directory) and initialized as a Git repository (standalone mode)::

    <name>/<name>.sh  README.md  CHANGELOG.md  .gitignore

Usage:
    shikomi new install_printer
    shikomi new install_printer --description "Installs the office printer"
    shikomi new install_printer --no-git
"""

from __future__ import annotations

import argparse
import functools
import sys
from collections.abc import Sequence
from pathlib import Path

import click

from shikomi import __version__
from shikomi.cli.arg_parser import ShikomiArgumentParser, parse_or_exit_code, report_error
from shikomi.core.artifacts import (
    GeneratedArtifactSet,
    GenerationMode,
    clean_script_name,
    ensure_target_free,
    resolve_artifacts,
    write_artifacts,
)
from shikomi.core.context import Context
from shikomi.core.errors import ShikomiError
from shikomi.core.parameters import (
    Ask,
    collect_parameters,
    collect_static_variables,
    secret_reminders,
)
from shikomi.core.renderer import DEFAULT_DESCRIPTION, RESERVED_IDENTIFIERS, RenderRequest
from shikomi.core.versioning import ensure_single_line
from shikomi.helpers import git_ops, prompts
from shikomi.helpers.config import ShikomiConfig, load_config
from shikomi.helpers.context_builder import build_context
from shikomi.helpers.helpers_logging import (
    print_header,
    print_info,
    print_success,
    print_warning,
)
from shikomi.scaffolding.create import (
    create_feature_branch,
    ensure_clean_work_tree,
    finalize_standalone_project,
    stage_artifacts,
)


def _detect_mode(cwd: Path, use_git: bool) -> GenerationMode:
    """Attached inside a Git work tree, standalone everywhere else."""
    if use_git and git_ops.tool_available("git") and git_ops.is_inside_work_tree(cwd):
        return GenerationMode.ATTACHED
    return GenerationMode.STANDALONE


def _print_banner(artifacts: GeneratedArtifactSet, cwd: Path) -> None:
    if artifacts.mode is GenerationMode.ATTACHED:
        print_header("macOS Script Generator (Attached Mode)")
        root = git_ops.repo_root(cwd)
        if root is not None:
            print_info(f"Detected existing Git repository: {root.name}")
    else:
        print_header("macOS Script Generator (New Project)")
        print_info("No existing Git repository detected. Creating new project.")


def _warn_missing_tools() -> None:
    if not git_ops.tool_available("gh"):
        print_warning("GitHub CLI ('gh') not installed. Remote repo creation will be skipped.")
    if not git_ops.tool_available("pre-commit"):
        print_warning("'pre-commit' not installed. Security hooks will be skipped.")


def _print_summary(
    artifacts: GeneratedArtifactSet,
    request: RenderRequest,
    ctx: Context,
    extras: Sequence[Path],
    branch: str | None,
) -> None:
    attached = artifacts.mode is GenerationMode.ATTACHED
    print("")
    print_header("Script Successfully Created!" if attached else "Project Successfully Created!")
    if attached:
        print("Mode: Attached (existing repository)")
        print(f"Branch: {branch or git_ops.current_branch(artifacts.project_dir) or 'N/A'}")
    else:
        print("Mode: Standalone (new project)")
        print(f"Location: {artifacts.project_dir}")

    print("\nGenerated Files:")
    print(f"  * {artifacts.script_path.name} (v{artifacts.version})")
    print(f"  * {artifacts.readme_path.name}")
    print(f"  * {artifacts.changelog_path.name}")
    for extra in extras:
        print(f"  * {extra.relative_to(artifacts.project_dir).as_posix()}")

    reminders = secret_reminders(request.slots)
    if reminders:
        print("")
        print_warning("Secrets configuration needed:")
        print(f"Add these to {ctx.secrets_file_short}:")
        for line in reminders:
            print(f"   {line}")

    script = artifacts.script_path.name
    print("\nQuick Start:")
    print(f"  1. Edit your script: {script}")
    print(f"  2. Test locally: sudo ./{script}")
    if attached:
        print(f'  3. Bump version: shikomi bump {script} patch "Your changes"')
        print(f'  4. Commit: git commit -m "Add {request.name} script"')
    else:
        print('  3. Bump version: shikomi bump patch "Your changes"')
        print('  4. Commit & tag: git commit -am "your message" && git tag v1.0.1')
    print("")


def run_generate(
    raw_name: str,
    description: str = DEFAULT_DESCRIPTION,
    use_git: bool = True,
    ask: Ask = prompts.ask,
    cwd: Path | None = None,
    config: ShikomiConfig | None = None,
) -> GeneratedArtifactSet:
    """Collect parameters, write the artifacts and run the Git glue.

    Raises:
        PreconditionError: Invalid name, multi-line description, existing
            target or dirty work tree.
        ParameterValidationError: Unusable or duplicate identifier.
    """
    cwd = cwd or Path.cwd()
    settings = config or load_config()
    ctx = build_context(cwd, settings)
    confirm = functools.partial(prompts.confirm, ask=ask)

    name = clean_script_name(raw_name)
    ensure_single_line(description, "Description")
    mode = _detect_mode(cwd, use_git)
    base_dir = cwd if mode is GenerationMode.ATTACHED else (settings.scripts_dir or cwd)
    artifacts = resolve_artifacts(name, mode, base_dir)

    _print_banner(artifacts, cwd)
    ensure_target_free(artifacts)
    if mode is GenerationMode.ATTACHED:
        ensure_clean_work_tree(cwd)
    elif use_git:
        _warn_missing_tools()

    print_info(f"Target: {artifacts.script_path}")
    print("Define Parameters ($4-$11). Press [Enter] on Label to finish.\n")
    slots = collect_parameters(ask, ctx.secrets_file, reserved=RESERVED_IDENTIFIERS)
    static_variables = collect_static_variables(
        ask,
        reserved=[*RESERVED_IDENTIFIERS, *(slot.identifier for slot in slots)],
    )
    request = RenderRequest(
        name=name,
        slots=tuple(slots),
        static_variables=tuple(static_variables),
        description=description.strip() or DEFAULT_DESCRIPTION,
    )

    branch: str | None = None
    if mode is GenerationMode.ATTACHED and confirm(
        "Do you want to create a new branch for this script? (Recommended)",
    ):
        branch = create_feature_branch(cwd, name)

    write_artifacts(artifacts, request, ctx)
    for path in artifacts.paths:
        print_success(f"Generated {path.name}")

    extras: list[Path] = []
    if mode is GenerationMode.ATTACHED:
        stage_artifacts(artifacts)
    else:
        extras = finalize_standalone_project(artifacts, ctx, confirm, use_git=use_git)

    _print_summary(artifacts, request, ctx, extras, branch)
    return artifacts


def build_parser() -> argparse.ArgumentParser:
    parser = ShikomiArgumentParser(
        prog="shikomi new",
        description="Generate a versioned Jamf Pro script with README and CHANGELOG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shikomi new install_printer
  shikomi new install_printer --description "Installs the office printer"
  shikomi new install_printer --no-git

Environment:
  JAMF_SCRIPTS_DIR       Parent directory for standalone projects
  SHIKOMI_SECRETS_FILE   Local secrets file (default ~/.jamf_secrets)
  SHIKOMI_CONFIG         Config file (default ~/.config/shikomi/config.yaml)
        """,
    )
    parser.add_argument("name", help="Script name (a trailing .sh is stripped)")
    parser.add_argument(
        "--description",
        default=DEFAULT_DESCRIPTION,
        help="One-line description for the header and README",
    )
    parser.add_argument(
        "--no-git",
        action="store_true",
        help="Create a standalone project without any Git, gh or pre-commit steps",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"shikomi {__version__}",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the generate command."""
    parsed = parse_or_exit_code(build_parser(), sys.argv[1:] if argv is None else argv)
    if isinstance(parsed, int):
        return parsed

    try:
        run_generate(parsed.name, parsed.description, use_git=not parsed.no_git)
    except ShikomiError as exc:
        report_error(exc)
        return 1
    except (KeyboardInterrupt, click.Abort):
        print_warning("Cancelled by user")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
