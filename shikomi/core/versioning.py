"""Semantic versions and the on-disk version contract of generated artifacts.

The renderer writes these lines and the version engine parses them back, so
both sides share the patterns defined here:

    # VERSION:     1.2.3                  header comment
    # CHANGELOG                           marker, newest entry right below
    # 1.2.3 - 2026-01-31 - Fixed thing    header changelog entry
    readonly SCRIPT_VERSION="1.2.3"       version constant (ground truth)

README side:

    **Version:** 1.2.3
    **Last Updated:** 2026-01-31
    ## Version History
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from shikomi.core.errors import InvalidBumpKindError, PreconditionError, VersionFormatError

BumpKind = Literal["major", "minor", "patch"]
BUMP_KINDS: tuple[str, ...] = ("major", "minor", "patch")

BANNER = "#" * 80
CHANGELOG_MARKER = "# CHANGELOG"
VERSION_HISTORY_HEADING = "## Version History"

VERSION_CONSTANT_RE = re.compile(r'^readonly SCRIPT_VERSION="([^"]*)".*$', re.MULTILINE)
HEADER_VERSION_RE = re.compile(r"^# VERSION:[^\r\n]*", re.MULTILINE)
README_VERSION_RE = re.compile(r"^\*\*Version:\*\* [^\r\n]*", re.MULTILINE)
README_UPDATED_RE = re.compile(r"^\*\*Last Updated:\*\* [^\r\n]*", re.MULTILINE)
CHANGELOG_ENTRY_RE = re.compile(r"^## \[([^\]]+)\]", re.MULTILINE)

_VERSION_PARTS = 3
_NUMERIC_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class SemVer:
    """Immutable ``major.minor.patch`` triple, ordered lexicographically."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse ``X.Y.Z`` (an optional leading ``v`` is accepted).

        Raises:
            VersionFormatError: Wrong arity or a non-numeric component.
        """
        raw = text.strip()
        if raw[:1] in ("v", "V"):
            raw = raw[1:]
        parts = raw.split(".")
        if len(parts) != _VERSION_PARTS or not all(_NUMERIC_RE.fullmatch(part) for part in parts):
            raise VersionFormatError(
                f"Malformed version string: '{text}'",
                hint="Versions must look like MAJOR.MINOR.PATCH, e.g. 1.4.2",
            )
        major, minor, patch = (int(part) for part in parts)
        return cls(major, minor, patch)

    def bump(self, kind: str) -> SemVer:
        """Return the next version for a bump kind.

        Raises:
            InvalidBumpKindError: ``kind`` is not major, minor or patch.
        """
        if kind == "major":
            return SemVer(self.major + 1, 0, 0)
        if kind == "minor":
            return SemVer(self.major, self.minor + 1, 0)
        if kind == "patch":
            return SemVer(self.major, self.minor, self.patch + 1)
        raise InvalidBumpKindError(
            f"Invalid bump type: '{kind}'",
            hint="Use major, minor, or patch",
        )

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


INITIAL_VERSION = SemVer(1, 0, 0)


def validate_bump_kind(kind: str) -> BumpKind:
    """Return ``kind`` if it is a known bump kind, else raise."""
    if kind not in BUMP_KINDS:
        raise InvalidBumpKindError(
            f"Invalid bump type: '{kind}'",
            hint="Use major, minor, or patch",
        )
    return kind  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Line builders (single source of truth for the rendered shapes)
# ---------------------------------------------------------------------------


def ensure_single_line(text: str, what: str = "Change description") -> str:
    """Return ``text`` unchanged, refusing embedded line breaks.

    Header and history lines are single comment or list lines; a line break
    would turn the rest of the text into script code or README structure.
    """
    if "\n" in text or "\r" in text:
        raise PreconditionError(
            f"{what} must be a single line",
            hint="Remove the line breaks and describe the change in one sentence",
        )
    return text


def header_field(name: str, value: str) -> str:
    """Render a ``# NAME:  value`` header line with aligned values."""
    return f"# {name + ':':<12} {value}".rstrip()


def version_constant_line(version: SemVer | str) -> str:
    return f'readonly SCRIPT_VERSION="{version}"'


def script_changelog_line(version: SemVer | str, day: str, description: str) -> str:
    return f"# {version} - {day} - {description}"


def readme_version_line(version: SemVer | str) -> str:
    return f"**Version:** {version}"


def readme_updated_line(day: str) -> str:
    return f"**Last Updated:** {day}"


def readme_history_line(version: SemVer | str, day: str, description: str) -> str:
    return f"- {version} ({day}) - {description}"


def changelog_entry_heading(version: SemVer | str, day: str) -> str:
    return f"## [{version}] - {day}"
