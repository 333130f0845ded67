"""
Shikomi

Scaffolds versioned Jamf Pro / macOS shell scripts with README and
CHANGELOG, and keeps their versions in sync on every bump.
"""

__version__ = "1.1.0"

from shikomi.core.renderer import RenderRequest, render_script
from shikomi.core.version_engine import bump_artifact, init_artifact

__all__ = [
    "RenderRequest",
    "bump_artifact",
    "init_artifact",
    "render_script",
]
