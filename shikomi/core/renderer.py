"""Artifact rendering: script, README and CHANGELOG for a new Jamf script.

Each artifact is assembled from named sections so every part can be
rendered and tested on its own. The script sections, in order:

    header      shebang, metadata header, parameter index, changelog, constants
    secrets     guarded ``source`` of the local secrets file
    static      static configuration variables
    parameters  Jamf parameter declarations
    logging     log file and ``log()`` helper
    log_lines   start line plus one (masked or plain) line per parameter
    footer      completion line and ``exit 0``

Rendering is a pure function of the :class:`RenderRequest` and the
:class:`~shikomi.core.context.Context`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from shikomi.core.context import Context
from shikomi.core.parameters import ParameterSlot, StaticVariable, uses_secrets
from shikomi.core.versioning import (
    BANNER,
    CHANGELOG_MARKER,
    INITIAL_VERSION,
    VERSION_HISTORY_HEADING,
    changelog_entry_heading,
    header_field,
    readme_history_line,
    readme_updated_line,
    readme_version_line,
    script_changelog_line,
    version_constant_line,
)

DEFAULT_DESCRIPTION = "(Add description here)"
INITIAL_CHANGE = "Initial release"
MASK = "*******"

# Names the script template declares itself
RESERVED_IDENTIFIERS = ("SCRIPT_VERSION", "SCRIPT_NAME", "LOG_FILE")


@dataclass(frozen=True)
class Section:
    """One named block of rendered text."""

    name: str
    text: str


@dataclass
class Document:
    """Ordered list of sections joined by blank lines."""

    sections: list[Section] = field(default_factory=list)

    def add(self, name: str, text: str) -> Document:
        self.sections.append(Section(name, text))
        return self

    def get(self, name: str) -> Section:
        for section in self.sections:
            if section.name == name:
                return section
        raise KeyError(name)

    @property
    def names(self) -> list[str]:
        return [section.name for section in self.sections]

    def render(self) -> str:
        return "\n\n".join(section.text.rstrip("\n") for section in self.sections) + "\n"


@dataclass(frozen=True)
class RenderRequest:
    """Everything collected for one generation session.

    Attributes:
        name: Script name without extension.
        slots: Jamf parameters in collection order.
        static_variables: Static variables in collection order.
        description: One-line description for headers and README.
    """

    name: str
    slots: tuple[ParameterSlot, ...] = ()
    static_variables: tuple[StaticVariable, ...] = ()
    description: str = DEFAULT_DESCRIPTION

    @property
    def script_filename(self) -> str:
        return f"{self.name}.sh"


# ---------------------------------------------------------------------------
# Script sections
# ---------------------------------------------------------------------------


def _parameter_index_line(slot: ParameterSlot) -> str:
    if slot.is_secret:
        return f"#   ${slot.position}: {slot.label} (secret: {slot.fallback_name})"
    return f"#   ${slot.position}: {slot.label}"


def render_header_section(request: RenderRequest, ctx: Context) -> str:
    """Shebang, metadata header, parameter index, changelog and constants."""
    index = [_parameter_index_line(slot) for slot in request.slots] or ["#   None"]
    lines = [
        f"#!{ctx.shell}",
        "",
        BANNER,
        header_field("SCRIPT", request.script_filename),
        header_field("VERSION", str(INITIAL_VERSION)),
        header_field("AUTHOR", ctx.author_name),
        header_field("EMAIL", ctx.author_email),
        header_field("DATE", ctx.today),
        header_field("Description", request.description),
        "#",
        BANNER,
        "# PARAMETERS:",
        *index,
        BANNER,
        CHANGELOG_MARKER,
        script_changelog_line(INITIAL_VERSION, ctx.today, INITIAL_CHANGE),
        BANNER,
        "",
        "# --- Script Metadata ---",
        version_constant_line(INITIAL_VERSION),
        f'readonly SCRIPT_NAME="{request.name}"',
    ]
    return "\n".join(lines)


def render_secrets_section(ctx: Context) -> str:
    """Guarded source of the local secrets file."""
    path = ctx.secrets_file_display
    return "\n".join([
        "# --- Local Development Secrets ---",
        f'if [[ -f "{path}" ]]; then',
        f'    source "{path}"',
        "fi",
    ])


def _static_line(variable: StaticVariable) -> str:
    if variable.source_kind == "literal":
        declaration = f'readonly {variable.name}="{variable.value}"'
    else:
        declaration = f'{variable.name}="{variable.value}"'
    if variable.description:
        return f"{declaration}  # {variable.description}"
    return declaration


def render_static_section(variables: Sequence[StaticVariable]) -> str:
    """Static variable declarations in collection order."""
    lines = ["# --- Static Configuration ---"]
    lines.extend(_static_line(variable) for variable in variables)
    if not variables:
        lines.append("# (none)")
    return "\n".join(lines)


def _parameter_line(slot: ParameterSlot) -> str:
    if slot.is_secret:
        return f'{slot.identifier}="${{{slot.identifier}:-${slot.fallback_name}}}"'
    default = slot.default_value or ""
    return f'{slot.identifier}="${{{slot.position}:-"{default}"}}"'


def render_parameters_section(slots: Sequence[ParameterSlot]) -> str:
    """Jamf parameter declarations in collection order."""
    lines = ["# --- Configuration (Jamf Parameters) ---"]
    lines.extend(_parameter_line(slot) for slot in slots)
    if not slots:
        lines.append("# (none)")
    return "\n".join(lines)


def render_logging_section(request: RenderRequest) -> str:
    """Log file location and the ``log()`` helper."""
    return "\n".join([
        "# --- Logging Setup ---",
        f'LOG_FILE="/var/log/{request.name}.log"',
        "function log() { echo \"[$(date '+%Y-%m-%d %H:%M:%S')] $*\"; }",
    ])


def _log_line(slot: ParameterSlot) -> str:
    prefix = f"Config: {slot.label} [{slot.identifier}]"
    if not slot.is_secret:
        return f'log "{prefix}: ${slot.identifier}"'
    if slot.secret_source_known:
        return f'log "{prefix}: {MASK} (Loaded from existing local secret)"'
    return f'log "{prefix}: {MASK} (Masked)"'


def render_log_lines_section(slots: Sequence[ParameterSlot]) -> str:
    """Start line and one log line per parameter; secrets are masked."""
    lines = [
        "# --- Main Logic ---",
        'log "Starting $SCRIPT_NAME v$SCRIPT_VERSION..."',
    ]
    lines.extend(_log_line(slot) for slot in slots)
    return "\n".join(lines)


def render_footer_section() -> str:
    return "\n".join([
        'log "----------------------------------------"',
        "# --- Script logic goes here ---",
        "",
        'log "$SCRIPT_NAME completed successfully"',
        "exit 0",
    ])


def build_script_document(request: RenderRequest, ctx: Context) -> Document:
    """Assemble the script sections in their fixed order."""
    return (
        Document()
        .add("header", render_header_section(request, ctx))
        .add("secrets", render_secrets_section(ctx))
        .add("static", render_static_section(request.static_variables))
        .add("parameters", render_parameters_section(request.slots))
        .add("logging", render_logging_section(request))
        .add("log_lines", render_log_lines_section(request.slots))
        .add("footer", render_footer_section())
    )


def render_script(request: RenderRequest, ctx: Context) -> str:
    return build_script_document(request, ctx).render()


# ---------------------------------------------------------------------------
# README
# ---------------------------------------------------------------------------


def _static_readme_row(variable: StaticVariable) -> str:
    if variable.source_kind == "literal":
        return f"| {variable.name} | Static | `{variable.value}` | {variable.description} |"
    return f"| {variable.name} | Runtime | Dynamic | {variable.description} |"


def render_static_table(variables: Sequence[StaticVariable]) -> str:
    """Static configuration table, or an empty-state sentence."""
    lines = ["## Static Configuration"]
    if not variables:
        lines.append("No static configuration variables defined.")
        return "\n".join(lines)
    lines.append("| Variable | Type | Value | Description |")
    lines.append("|----------|------|-------|-------------|")
    lines.extend(_static_readme_row(variable) for variable in variables)
    return "\n".join(lines)


def _parameter_readme_row(slot: ParameterSlot) -> str:
    if not slot.is_secret:
        return f"| {slot.position} | {slot.label} | `{slot.default_value or ''}` |"
    state = "Existing" if slot.secret_source_known else "Secret"
    return f"| {slot.position} | {slot.label} | `${slot.fallback_name}` ({state}) |"


def render_parameters_table(slots: Sequence[ParameterSlot]) -> str:
    """Jamf parameter table; a ``None`` row when there are no parameters."""
    lines = [
        "## Jamf Parameters",
        "| Parameter | Label | Local Default / Env Var |",
        "|-----------|-------|-------------------------|",
    ]
    lines.extend(_parameter_readme_row(slot) for slot in slots)
    if not slots:
        lines.append("| None | N/A | N/A |")
    return "\n".join(lines)


def _bump_usage(request: RenderRequest, standalone: bool) -> str:
    if standalone:
        return (
            "# Auto-detect script (typical usage)\n"
            'shikomi bump [major|minor|patch] "Description of changes"\n'
            "\n"
            "# Or specify script explicitly\n"
            f'shikomi bump {request.script_filename} [major|minor|patch] "Description"'
        )
    return f'shikomi bump {request.script_filename} [major|minor|patch] "Description"'


def build_readme_document(
    request: RenderRequest,
    ctx: Context,
    standalone: bool = True,
) -> Document:
    """Assemble README sections."""
    description = request.description
    if description == DEFAULT_DESCRIPTION:
        description = "This script is designed for Jamf Pro deployment."

    title = "\n".join([
        f"# {request.name}",
        "",
        readme_version_line(INITIAL_VERSION),
        f"**Author:** {ctx.author_name}",
        readme_updated_line(ctx.today),
    ])
    local_testing = "\n".join([
        "## Local Testing",
        f"1. Ensure `{ctx.secrets_file_short}` exists (for secrets).",
        "2. Run:",
        "   ```bash",
        f"   sudo ./{request.script_filename}",
        "   ```",
    ])
    versioning = "\n".join([
        "## Versioning",
        "This project uses [Semantic Versioning](https://semver.org/):",
        "- **MAJOR**: Breaking changes or incompatible API changes",
        "- **MINOR**: New features, backward-compatible",
        "- **PATCH**: Bug fixes, backward-compatible",
        "",
        "To bump the version, use the Shikomi bump command:",
        "```bash",
        _bump_usage(request, standalone),
        "```",
    ])
    history = "\n".join([
        VERSION_HISTORY_HEADING,
        readme_history_line(INITIAL_VERSION, ctx.today, INITIAL_CHANGE),
    ])

    return (
        Document()
        .add("title", title)
        .add("description", f"## Description\n{description}")
        .add("static", render_static_table(request.static_variables))
        .add("parameters", render_parameters_table(request.slots))
        .add("local_testing", local_testing)
        .add("versioning", versioning)
        .add("history", history)
    )


def render_readme(request: RenderRequest, ctx: Context, standalone: bool = True) -> str:
    return build_readme_document(request, ctx, standalone).render()


# ---------------------------------------------------------------------------
# CHANGELOG
# ---------------------------------------------------------------------------

CHANGELOG_PREAMBLE = """# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html)."""


def render_changelog(request: RenderRequest, ctx: Context) -> str:
    """Keep-a-Changelog file with the initial ``1.0.0`` entry."""
    added = [
        f"- Initial release of {request.name}",
        "- Core functionality implemented",
        "- Jamf Pro parameter support",
    ]
    if uses_secrets(request.slots):
        added.append(f"- Secure secrets management via {ctx.secrets_file_short}")

    entry = "\n".join([
        changelog_entry_heading(INITIAL_VERSION, ctx.today),
        "",
        "### Added",
        *added,
    ])
    return (
        Document()
        .add("preamble", CHANGELOG_PREAMBLE)
        .add("initial", entry)
        .render()
    )
