"""Git glue and project extras around generated artifacts.

Attached mode (inside an existing repository)::

    ensure_clean_work_tree  ->  [create_feature_branch]  ->  write  ->  stage_artifacts

Standalone mode (new project directory)::

    write  ->  finalize_standalone_project
               (git init, .gitignore, pre-commit, workflow, commit, gh)

Missing ``git``/``gh``/``pre-commit`` executables and failed Git commands
are reported as warnings; only a dirty work tree stops generation.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from shikomi.core.artifacts import GeneratedArtifactSet
from shikomi.core.context import Context
from shikomi.core.errors import PreconditionError
from shikomi.helpers import git_ops
from shikomi.helpers.helpers_logging import (
    print_dim,
    print_info,
    print_success,
    print_warning,
)
from shikomi.scaffolding.templates import (
    get_gitignore_template,
    get_pre_commit_template,
    get_validate_version_workflow,
)

Confirm = Callable[[str], bool]

WORKFLOW_PATH = Path(".github") / "workflows" / "validate-version.yml"
PRE_COMMIT_FILENAME = ".pre-commit-config.yaml"


# ---------------------------------------------------------------------------
# Attached mode
# ---------------------------------------------------------------------------


def ensure_clean_work_tree(cwd: Path) -> None:
    """Refuse to generate into a repository with pending changes.

    Raises:
        PreconditionError: ``git status --porcelain`` is not empty.
    """
    if git_ops.has_uncommitted_changes(cwd):
        raise PreconditionError(
            "You have uncommitted changes in this repository",
            hint="Commit or stash them before creating a new script",
        )


def feature_branch_name(name: str) -> str:
    return f"feature/{name}"


def create_feature_branch(cwd: Path, name: str) -> str | None:
    """Switch to ``feature/<name>``, creating it from the default branch.

    Returns:
        The branch name, or ``None`` if Git refused (a warning is printed).
    """
    branch = feature_branch_name(name)
    if git_ops.branch_exists(cwd, branch):
        print_warning(f"Branch {branch} already exists. Switching to it.")
        switched = git_ops.switch_branch(cwd, branch)
    else:
        base = git_ops.default_branch(cwd)
        print_info(f"Creating branch: {branch}" + (f" (from {base})" if base else ""))
        switched = git_ops.switch_to_new_branch(cwd, branch, base)

    if not switched:
        print_warning(f"Could not switch to {branch}; staying on the current branch")
        return None
    print_success(f"On branch: {branch}")
    return branch


def stage_artifacts(artifacts: GeneratedArtifactSet) -> bool:
    """``git add`` the generated files."""
    if git_ops.stage(artifacts.project_dir, list(artifacts.paths)):
        print_success("Files staged")
        return True
    print_warning("Could not stage the generated files; run 'git add' manually")
    return False


# ---------------------------------------------------------------------------
# Standalone mode
# ---------------------------------------------------------------------------


def write_gitignore(project_dir: Path, ctx: Context) -> Path:
    path = project_dir / ".gitignore"
    path.write_text(get_gitignore_template(ctx.secrets_file.name), encoding="utf-8")
    print_success("Created .gitignore")
    return path


def write_pre_commit_config(project_dir: Path) -> Path:
    path = project_dir / PRE_COMMIT_FILENAME
    path.write_text(get_pre_commit_template(), encoding="utf-8")
    print_success(f"Created {PRE_COMMIT_FILENAME} (gitleaks)")
    return path


def write_workflow(project_dir: Path) -> Path:
    path = project_dir / WORKFLOW_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(get_validate_version_workflow(), encoding="utf-8")
    print_success(f"Created {WORKFLOW_PATH.as_posix()}")
    return path


def finalize_standalone_project(
    artifacts: GeneratedArtifactSet,
    ctx: Context,
    confirm: Confirm,
    use_git: bool = True,
) -> list[Path]:
    """Add project extras and, unless disabled, initialize the repository.

    Args:
        artifacts: Already written standalone artifacts.
        ctx: Run context (secrets file name for .gitignore).
        confirm: Yes/no prompt for optional steps.
        use_git: False skips every Git, ``gh`` and ``pre-commit`` step.

    Returns:
        Extra files written next to the artifacts.
    """
    project_dir = artifacts.project_dir
    extras = [write_gitignore(project_dir, ctx)]

    if not use_git:
        print_dim("   (Skipping Git setup)")
        return extras
    if not git_ops.tool_available("git"):
        print_warning("git not found, skipping repository initialization")
        return extras

    if not git_ops.init_repository(project_dir):
        print_warning("Could not initialize Git repository")
        return extras
    print_success("Initialized Git repository")

    if git_ops.tool_available("pre-commit"):
        extras.append(write_pre_commit_config(project_dir))
        if not git_ops.install_pre_commit(project_dir):
            print_warning("'pre-commit install' failed")
    else:
        print_dim("   (Skipping pre-commit setup)")

    if confirm("Add GitHub Actions workflow for version validation?"):
        extras.append(write_workflow(project_dir))

    if git_ops.commit_all(project_dir, f"Initial commit: Scaffolding for {project_dir.name}"):
        print_success("Created initial commit")
    else:
        print_warning("Initial commit failed (is user.name/user.email configured?)")
        return extras

    if git_ops.tool_available("gh") and confirm("Create private GitHub repo?"):
        if git_ops.create_private_github_repo(project_dir, project_dir.name):
            print_success("Created private GitHub repository")
        else:
            print_warning("GitHub repository creation failed")

    return extras
