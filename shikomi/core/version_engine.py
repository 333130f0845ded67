"""Version engine: init, bump, auto-detect and consistency checks.

Works on scripts that carry the version contract described in
:mod:`shikomi.core.versioning`. A script is *versioned* when it contains
exactly one ``readonly SCRIPT_VERSION="X.Y.Z"`` line.

A bump rewrites up to three files, in this order:

    1. rewrite_script     header VERSION, constant, header changelog line
    2. rewrite_readme     **Version:**, **Last Updated:**, Version History
    3. rewrite_changelog  new ``## [X.Y.Z]`` section

The steps are independent writes. Before step 1 the script is copied to
``<script>.bak``; restoring that copy is the only rollback.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from shikomi.core.context import Context
from shikomi.core.errors import (
    AlreadyVersionedError,
    NotVersionedError,
    PreconditionError,
    VersionFormatError,
)
from shikomi.core.versioning import (
    BANNER,
    CHANGELOG_ENTRY_RE,
    CHANGELOG_MARKER,
    HEADER_VERSION_RE,
    INITIAL_VERSION,
    README_UPDATED_RE,
    README_VERSION_RE,
    VERSION_CONSTANT_RE,
    VERSION_HISTORY_HEADING,
    SemVer,
    changelog_entry_heading,
    ensure_single_line,
    header_field,
    readme_history_line,
    readme_updated_line,
    readme_version_line,
    script_changelog_line,
    validate_bump_kind,
    version_constant_line,
)

BUMP_TOOL_FILENAME = "bump_version.sh"
BACKUP_SUFFIX = ".bak"
DEFAULT_INIT_DESCRIPTION = "(Add description here)"

# Keep a Changelog section per bump kind
CHANGELOG_SECTIONS: dict[str, str] = {
    "major": "Changed",
    "minor": "Added",
    "patch": "Fixed",
}

_INFORMAL_FIELDS: dict[str, re.Pattern[str]] = {
    "description": re.compile(r"^\s*#\s*(?:description|desc)\s*:\s*(.+)$", re.IGNORECASE),
    "author": re.compile(r"^\s*#\s*author\s*:\s*(.+)$", re.IGNORECASE),
    "usage": re.compile(r"^\s*#\s*usage\s*:\s*(.+)$", re.IGNORECASE),
}
_SCRIPT_NAME_RE = re.compile(r"^readonly SCRIPT_NAME=", re.MULTILINE)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionHeader:
    """Parsed version information of a versioned script.

    Attributes:
        version: Value of the version constant.
        constant_line: Zero-based line index of the constant.
        changelog_marker_line: Line index of ``# CHANGELOG``, if present.
    """

    version: SemVer
    constant_line: int
    changelog_marker_line: int | None


@dataclass(frozen=True)
class InformalHeader:
    """Metadata found in the leading comment block of an unversioned script."""

    shebang: str | None
    description: str | None
    author: str | None
    usage: str | None
    body_start: int


@dataclass(frozen=True)
class CompanionFiles:
    """README / CHANGELOG that travel with a script.

    Attributes:
        readme: README to keep in sync, if one exists.
        changelog: CHANGELOG to extend, if one exists.
        standalone: True for the ``README.md``/``CHANGELOG.md`` layout.
    """

    readme: Path | None
    changelog: Path | None
    standalone: bool


@dataclass(frozen=True)
class BumpResult:
    script_path: Path
    kind: str
    description: str
    previous: SemVer
    version: SemVer
    day: str
    backup_path: Path
    companions: CompanionFiles
    changelog_marker_found: bool
    readme_synced: bool

    @property
    def tag_name(self) -> str:
        return tag_name_for(self.script_path, self.version, self.companions.standalone)


@dataclass(frozen=True)
class InitResult:
    script_path: Path
    version: SemVer
    backup_path: Path
    informal: InformalHeader


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of scanning a directory for versioned scripts."""

    target: Path
    candidates: tuple[Path, ...]

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass
class ConsistencyReport:
    """Versions found across a script's artifacts."""

    script_path: Path
    script_version: SemVer
    readme_version: SemVer | None = None
    changelog_version: SemVer | None = None
    tag_version: SemVer | None = None
    mismatches: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _split_lines(text: str) -> list[str]:
    # split("\n") keeps a trailing "" so join() restores the final newline
    return text.split("\n")


def _join_lines(lines: list[str], original: str) -> str:
    """Join ``lines`` with the line endings used by ``original``."""
    text = "\n".join(lines)
    if "\r\n" in original:
        return text.replace("\r\n", "\n").replace("\n", "\r\n")
    return text


def find_version_constants(text: str) -> list[str]:
    """Return the raw values of every version constant line."""
    return VERSION_CONSTANT_RE.findall(text)


def is_versioned(text: str) -> bool:
    return bool(find_version_constants(text))


def parse_version_header(text: str, source: str = "script") -> VersionHeader:
    """Locate and parse the version constant and changelog marker.

    Raises:
        NotVersionedError: No version constant.
        VersionFormatError: Several constants, or an unparsable value.
    """
    lines = _split_lines(text)
    constant_lines = [
        index for index, line in enumerate(lines) if VERSION_CONSTANT_RE.match(line)
    ]
    if not constant_lines:
        raise NotVersionedError(
            f"{source} does not appear to be a versioned script",
            hint="Expected to find a 'readonly SCRIPT_VERSION=' line; "
                 + "run 'shikomi bump <file> init \"Initial versioned release\"' first",
        )
    if len(constant_lines) > 1:
        raise VersionFormatError(
            f"{source} declares SCRIPT_VERSION {len(constant_lines)} times",
            hint="Keep exactly one 'readonly SCRIPT_VERSION=' line",
        )

    index = constant_lines[0]
    version = SemVer.parse(find_version_constants(lines[index])[0])

    marker = next(
        (i for i, line in enumerate(lines) if line.rstrip() == CHANGELOG_MARKER),
        None,
    )
    return VersionHeader(version=version, constant_line=index, changelog_marker_line=marker)


def read_version(path: Path) -> SemVer:
    """Return the version of a script file."""
    return parse_version_header(_read(path), source=path.name).version


def parse_informal_header(text: str) -> InformalHeader:
    """Scan the leading comment block for description/author/usage lines.

    The block starts after an optional shebang and ends at the first line
    that is neither blank nor a comment.
    """
    lines = _split_lines(text)
    shebang: str | None = None
    start = 0
    if lines and lines[0].startswith("#!"):
        shebang = lines[0]
        start = 1

    found: dict[str, str] = {}
    index = start
    while index < len(lines):
        line = lines[index]
        if line.strip() and not line.lstrip().startswith("#"):
            break
        for key, pattern in _INFORMAL_FIELDS.items():
            match = pattern.match(line)
            if match and key not in found:
                found[key] = match.group(1).strip()
                break
        index += 1

    return InformalHeader(
        shebang=shebang,
        description=found.get("description"),
        author=found.get("author"),
        usage=found.get("usage"),
        body_start=index,
    )


def parse_readme_version(text: str) -> SemVer | None:
    """Version from a README ``**Version:**`` line, if present."""
    match = README_VERSION_RE.search(text)
    if match is None:
        return None
    return SemVer.parse(match.group(0).split(" ", 1)[1])


def parse_changelog_version(text: str) -> SemVer | None:
    """Newest ``## [X.Y.Z]`` entry of a CHANGELOG, if any."""
    match = CHANGELOG_ENTRY_RE.search(text)
    if match is None:
        return None
    return SemVer.parse(match.group(1))


def parse_tag_version(tag: str) -> SemVer:
    """Version carried by a tag: ``v1.2.3``, ``name-v1.2.3`` or a full ref."""
    name = tag.removeprefix("refs/tags/")
    if "-v" in name:
        name = name.rsplit("-v", 1)[1]
    return SemVer.parse(name)


# ---------------------------------------------------------------------------
# Companions and naming
# ---------------------------------------------------------------------------


def find_companions(script_path: Path) -> CompanionFiles:
    """Resolve README/CHANGELOG that belong to a script.

    ``<stem>_README.md`` / ``<stem>_CHANGELOG.md`` (attached layout) win.
    Otherwise ``README.md`` in the same directory is used when it carries a
    ``**Version:**`` line (standalone layout), together with ``CHANGELOG.md``.
    """
    directory = script_path.parent
    stem = script_path.stem
    readme = directory / f"{stem}_README.md"
    changelog = directory / f"{stem}_CHANGELOG.md"
    if readme.is_file() or changelog.is_file():
        return CompanionFiles(
            readme=readme if readme.is_file() else None,
            changelog=changelog if changelog.is_file() else None,
            standalone=False,
        )

    readme = directory / "README.md"
    if readme.is_file() and README_VERSION_RE.search(_read(readme)):
        changelog = directory / "CHANGELOG.md"
        return CompanionFiles(
            readme=readme,
            changelog=changelog if changelog.is_file() else None,
            standalone=True,
        )
    return CompanionFiles(readme=None, changelog=None, standalone=False)


def tag_name_for(script_path: Path, version: SemVer, standalone: bool) -> str:
    """Git tag for a release: ``v1.2.3`` standalone, ``<stem>-v1.2.3`` attached."""
    if standalone:
        return f"v{version}"
    return f"{script_path.stem}-v{version}"


def detect_target(directory: Path) -> DetectionResult:
    """Find versioned scripts in ``directory`` (sorted by name).

    The bump tool's own file is never a candidate. When several scripts
    qualify the first is chosen and the caller is expected to warn.

    Raises:
        PreconditionError: No versioned script found.
    """
    candidates = tuple(
        path
        for path in sorted(directory.glob("*.sh"))
        if path.name != BUMP_TOOL_FILENAME
        and path.is_file()
        and is_versioned(_scan(path))
    )
    if not candidates:
        raise PreconditionError(
            f"No versioned script found in {directory}",
            hint="Expected a .sh file with a 'readonly SCRIPT_VERSION=' line, "
                 + "or pass the script path explicitly",
        )
    return DetectionResult(target=candidates[0], candidates=candidates)


# ---------------------------------------------------------------------------
# Rewrites (pure text in, text out)
# ---------------------------------------------------------------------------


def rewrite_script(
    text: str,
    version: SemVer,
    day: str,
    description: str,
) -> tuple[str, bool]:
    """Set the header VERSION line and constant, add a header changelog line.

    Returns:
        New text and whether the ``# CHANGELOG`` marker was found.
    """
    header = parse_version_header(text)
    lines = _split_lines(text)
    lines[header.constant_line] = version_constant_line(version)

    for index, line in enumerate(lines):
        if HEADER_VERSION_RE.match(line):
            lines[index] = header_field("VERSION", str(version))
            break

    marker = header.changelog_marker_line
    if marker is not None:
        lines.insert(marker + 1, script_changelog_line(version, day, description))
    return _join_lines(lines, text), marker is not None


def rewrite_readme(
    text: str,
    version: SemVer,
    day: str,
    description: str,
) -> tuple[str, bool]:
    """Update version and date fields and add a Version History bullet.

    Returns:
        New text and whether a ``**Version:**`` line was updated.
    """
    synced = README_VERSION_RE.search(text) is not None
    text = README_VERSION_RE.sub(readme_version_line(version), text, count=1)
    text = README_UPDATED_RE.sub(readme_updated_line(day), text, count=1)

    lines = _split_lines(text)
    for index, line in enumerate(lines):
        if line.rstrip() == VERSION_HISTORY_HEADING:
            lines.insert(index + 1, readme_history_line(version, day, description))
            break
    return _join_lines(lines, text), synced


def rewrite_changelog(
    text: str,
    version: SemVer,
    day: str,
    description: str,
    kind: str,
) -> str:
    """Insert a ``## [X.Y.Z]`` section above the newest entry."""
    entry = [
        changelog_entry_heading(version, day),
        "",
        f"### {CHANGELOG_SECTIONS[kind]}",
        f"- {description}",
        "",
    ]
    lines = _split_lines(text)
    for index, line in enumerate(lines):
        if CHANGELOG_ENTRY_RE.match(line):
            lines[index:index] = entry
            return _join_lines(lines, text)

    body = text.rstrip("\r\n")
    appended = body + "\n\n" + "\n".join(entry).rstrip("\n") + "\n"
    return _join_lines(_split_lines(appended), text)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _read(path: Path) -> str:
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            return handle.read()
    except UnicodeDecodeError as exc:
        raise PreconditionError(
            f"{path.name} is not a UTF-8 text file",
            hint="Convert it first, e.g. iconv -f latin1 -t utf-8",
        ) from exc


def _scan(path: Path) -> str:
    # candidates are only searched for the version constant
    return path.read_text(encoding="utf-8", errors="replace")


def _write(path: Path, text: str) -> None:
    # line endings are already those of the file being rewritten
    path.write_text(text, encoding="utf-8", newline="")


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise PreconditionError(
            f"Script file not found: {path}",
            hint="Check the path or run without a file to auto-detect",
        )


def _require_description(description: str) -> str:
    cleaned = ensure_single_line(description).strip()
    if not cleaned:
        raise PreconditionError(
            "Change description must not be empty",
            hint='Describe the change, e.g. "Fixed parameter validation"',
        )
    return cleaned


def backup_file(path: Path) -> Path:
    """Copy ``path`` to ``<path>.bak`` (overwriting an older backup)."""
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copy2(path, backup)
    return backup


def bump_artifact(
    script_path: Path,
    kind: str,
    description: str,
    ctx: Context,
) -> BumpResult:
    """Advance a versioned script by one semantic-version step.

    Args:
        script_path: Versioned script to bump.
        kind: ``major``, ``minor`` or ``patch``.
        description: Change description for all changelogs.
        ctx: Provides today's date.

    Raises:
        InvalidBumpKindError: Unknown kind (nothing is read or written).
        PreconditionError: Missing file or empty description.
        NotVersionedError: No version constant (file untouched).
        VersionFormatError: Malformed version (file untouched).
    """
    validate_bump_kind(kind)
    description = _require_description(description)
    _require_file(script_path)

    text = _read(script_path)
    current = parse_version_header(text, source=script_path.name).version
    new_version = current.bump(kind)
    day = ctx.today
    companions = find_companions(script_path)

    backup = backup_file(script_path)

    new_text, marker_found = rewrite_script(text, new_version, day, description)
    _write(script_path, new_text)

    readme_synced = False
    if companions.readme is not None:
        readme_text, readme_synced = rewrite_readme(
            _read(companions.readme), new_version, day, description,
        )
        _write(companions.readme, readme_text)

    if companions.changelog is not None:
        _write(
            companions.changelog,
            rewrite_changelog(
                _read(companions.changelog), new_version, day, description, kind,
            ),
        )

    return BumpResult(
        script_path=script_path,
        kind=kind,
        description=description,
        previous=current,
        version=new_version,
        day=day,
        backup_path=backup,
        companions=companions,
        changelog_marker_found=marker_found,
        readme_synced=readme_synced,
    )


def build_init_header(
    script_path: Path,
    informal: InformalHeader,
    description: str,
    ctx: Context,
    declare_name: bool = True,
) -> list[str]:
    """Structured header lines that replace an informal header."""
    lines = [
        informal.shebang or f"#!{ctx.shell}",
        "",
        BANNER,
        header_field("SCRIPT", script_path.name),
        header_field("VERSION", str(INITIAL_VERSION)),
        header_field("AUTHOR", informal.author or ctx.author_name),
        header_field("EMAIL", ctx.author_email),
        header_field("DATE", ctx.today),
        header_field("Description", informal.description or DEFAULT_INIT_DESCRIPTION),
        "#",
        f"# USAGE: {informal.usage or f'./{script_path.name} [options]'}",
        BANNER,
        CHANGELOG_MARKER,
        script_changelog_line(INITIAL_VERSION, ctx.today, description),
        BANNER,
        "",
        "# --- Script Metadata ---",
        version_constant_line(INITIAL_VERSION),
    ]
    if declare_name:
        lines.append(f'readonly SCRIPT_NAME="{script_path.stem}"')
    lines.append("")
    return lines


def init_artifact(script_path: Path, description: str, ctx: Context) -> InitResult:
    """Add a structured header to an unversioned script, at ``1.0.0``.

    Raises:
        PreconditionError: Missing file or empty description.
        AlreadyVersionedError: A version constant already exists (file
            untouched).
    """
    description = _require_description(description)
    _require_file(script_path)

    text = _read(script_path)
    existing = find_version_constants(text)
    if existing:
        raise AlreadyVersionedError(
            f"{script_path.name} is already versioned (v{existing[0]})",
            hint="Use 'patch', 'minor', or 'major' to bump the version instead",
        )

    informal = parse_informal_header(text)
    body_lines = _split_lines(text)[informal.body_start:]
    body = "\n".join(body_lines)
    header = build_init_header(
        script_path,
        informal,
        description,
        ctx,
        declare_name=_SCRIPT_NAME_RE.search(body) is None,
    )

    backup = backup_file(script_path)
    new_text = "\n".join(header + body_lines)
    if not new_text.endswith("\n"):
        new_text += "\n"
    new_text = _join_lines(_split_lines(new_text), text)
    _write(script_path, new_text)

    return InitResult(
        script_path=script_path,
        version=INITIAL_VERSION,
        backup_path=backup,
        informal=informal,
    )


def check_consistency(script_path: Path, tag: str | None = None) -> ConsistencyReport:
    """Compare the script version with README, CHANGELOG and an optional tag.

    Raises:
        PreconditionError: Missing file.
        NotVersionedError: Script has no version constant.
        VersionFormatError: Script version is malformed.
    """
    _require_file(script_path)
    version = read_version(script_path)
    report = ConsistencyReport(script_path=script_path, script_version=version)
    companions = find_companions(script_path)

    if companions.readme is not None:
        try:
            report.readme_version = parse_readme_version(_read(companions.readme))
        except VersionFormatError as exc:
            report.mismatches.append(f"README: {exc}")
        else:
            if report.readme_version is None:
                report.mismatches.append(
                    f"README {companions.readme.name} has no **Version:** line",
                )
            elif report.readme_version != version:
                report.mismatches.append(
                    f"README version {report.readme_version} != script version {version}",
                )

    if companions.changelog is not None:
        try:
            report.changelog_version = parse_changelog_version(_read(companions.changelog))
        except VersionFormatError as exc:
            report.mismatches.append(f"CHANGELOG: {exc}")
        else:
            if (
                report.changelog_version is not None
                and report.changelog_version != version
            ):
                report.mismatches.append(
                    f"CHANGELOG latest entry {report.changelog_version} "
                    + f"!= script version {version}",
                )

    if tag:
        try:
            report.tag_version = parse_tag_version(tag)
        except VersionFormatError:
            report.mismatches.append(f"Tag '{tag}' does not carry a version")
        else:
            if report.tag_version != version:
                report.mismatches.append(
                    f"Tag version ({report.tag_version}) does not match "
                    + f"script version ({version})",
                )

    return report
