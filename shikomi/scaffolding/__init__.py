"""Standalone project extras and repository setup."""

from shikomi.scaffolding.create import (
    create_feature_branch,
    ensure_clean_work_tree,
    finalize_standalone_project,
    stage_artifacts,
)

__all__ = [
    "create_feature_branch",
    "ensure_clean_work_tree",
    "finalize_standalone_project",
    "stage_artifacts",
]
