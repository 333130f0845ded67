"""Tests for script, README and CHANGELOG rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from shikomi.core.context import Context
from shikomi.core.parameters import ParameterSlot, StaticVariable
from shikomi.core.renderer import (
    DEFAULT_DESCRIPTION,
    Document,
    RenderRequest,
    build_readme_document,
    build_script_document,
    render_changelog,
    render_header_section,
    render_log_lines_section,
    render_parameters_section,
    render_parameters_table,
    render_readme,
    render_script,
    render_secrets_section,
    render_static_section,
    render_static_table,
)
from tests.conftest import FIXED_DAY_TEXT, SAMPLE_SLOTS, make_context

API_KEY = ParameterSlot(position=5, label="API Key", identifier="API_KEY", is_secret=True)
DEPT = ParameterSlot(position=4, label="Target Dept", identifier="TARGET_DEPT", default_value="IT")
COMPANY = StaticVariable("COMPANY_NAME", "literal", "Acme Corp", "Company display name")
SERIAL = StaticVariable(
    "SERIAL_NUMBER",
    "derived",
    "$(system_profiler SPHardwareDataType | awk '/Serial/ {print $4}')",
    "Mac serial number",
)


# ---------------------------------------------------------------------------
# Document builder
# ---------------------------------------------------------------------------


def test_document_joins_sections_with_blank_line() -> None:
    document = Document().add("a", "first\n").add("b", "second")

    assert document.names == ["a", "b"]
    assert document.get("b").text == "second"
    assert document.render() == "first\n\nsecond\n"


def test_document_get_unknown_section() -> None:
    with pytest.raises(KeyError):
        Document().get("missing")


# ---------------------------------------------------------------------------
# Script
# ---------------------------------------------------------------------------


def test_script_section_order(ctx: Context) -> None:
    document = build_script_document(RenderRequest(name="demo"), ctx)

    assert document.names == [
        "header", "secrets", "static", "parameters", "logging", "log_lines", "footer",
    ]


def test_header_section(ctx: Context) -> None:
    header = render_header_section(RenderRequest(name="demo", slots=SAMPLE_SLOTS), ctx)
    lines = header.splitlines()

    assert lines[0] == "#!/bin/zsh"
    assert "# SCRIPT:      demo.sh" in lines
    assert "# VERSION:     1.0.0" in lines
    assert "# AUTHOR:      Jane Doe" in lines
    assert "# EMAIL:       jane.doe@example.com" in lines
    assert f"# DATE:        {FIXED_DAY_TEXT}" in lines
    assert f"# Description: {DEFAULT_DESCRIPTION}" in lines
    assert "#   $4: Target Dept" in lines
    assert "#   $5: API Key (secret: LOCAL_API_KEY)" in lines
    marker = lines.index("# CHANGELOG")
    assert lines[marker + 1] == f"# 1.0.0 - {FIXED_DAY_TEXT} - Initial release"
    assert 'readonly SCRIPT_VERSION="1.0.0"' in lines
    assert 'readonly SCRIPT_NAME="demo"' in lines


def test_header_without_parameters(ctx: Context) -> None:
    header = render_header_section(RenderRequest(name="demo"), ctx)

    assert "#   None" in header.splitlines()


def test_secrets_section_uses_home_relative_path(ctx: Context) -> None:
    section = render_secrets_section(ctx)

    assert 'if [[ -f "$HOME/.jamf_secrets" ]]; then' in section
    assert '    source "$HOME/.jamf_secrets"' in section


def test_secrets_section_outside_home(tmp_path: Path) -> None:
    base = make_context(tmp_path)
    ctx = Context(
        author_name=base.author_name,
        author_email=base.author_email,
        root=tmp_path,
        home=base.home,
        secrets_file=Path("/etc/jamf/secrets"),
    )

    assert 'source "/etc/jamf/secrets"' in render_secrets_section(ctx)
    assert ctx.secrets_file_short == "/etc/jamf/secrets"


def test_static_section() -> None:
    section = render_static_section([COMPANY, SERIAL])

    assert 'readonly COMPANY_NAME="Acme Corp"  # Company display name' in section
    assert (
        "SERIAL_NUMBER=\"$(system_profiler SPHardwareDataType | awk '/Serial/ {print $4}')\""
        "  # Mac serial number"
    ) in section
    assert "# (none)" not in section


def test_static_section_empty() -> None:
    assert render_static_section([]).splitlines()[-1] == "# (none)"


def test_parameters_section() -> None:
    section = render_parameters_section([DEPT, API_KEY])

    assert 'TARGET_DEPT="${4:-"IT"}"' in section
    assert 'API_KEY="${API_KEY:-$LOCAL_API_KEY}"' in section


def test_secret_slot_masking(ctx: Context) -> None:
    script = render_script(RenderRequest(name="demo", slots=(API_KEY,)), ctx)

    assert 'log "Config: API Key [API_KEY]: ******* (Masked)"' in script
    assert "${5:-" not in script
    assert "$API_KEY\"" not in script


def test_secret_slot_loaded_from_existing_secret() -> None:
    known = ParameterSlot(5, "API Key", "API_KEY", is_secret=True, secret_source_known=True)

    section = render_log_lines_section([known])

    assert "******* (Loaded from existing local secret)" in section


def test_log_lines_for_plain_parameters() -> None:
    section = render_log_lines_section([DEPT])

    assert section.splitlines()[1] == 'log "Starting $SCRIPT_NAME v$SCRIPT_VERSION..."'
    assert 'log "Config: Target Dept [TARGET_DEPT]: $TARGET_DEPT"' in section


def test_script_ends_with_exit(ctx: Context) -> None:
    script = render_script(RenderRequest(name="demo"), ctx)

    assert script.endswith("exit 0\n")
    assert 'LOG_FILE="/var/log/demo.log"' in script


def test_rendering_is_deterministic(tmp_path: Path) -> None:
    request = RenderRequest(
        name="demo",
        slots=SAMPLE_SLOTS,
        static_variables=(COMPANY, SERIAL),
        description="Installs things",
    )

    first = render_script(request, make_context(tmp_path))
    second = render_script(request, make_context(tmp_path))

    assert first == second


def test_custom_shell(tmp_path: Path) -> None:
    base = make_context(tmp_path)
    ctx = Context(
        author_name=base.author_name,
        author_email=base.author_email,
        root=tmp_path,
        home=base.home,
        secrets_file=base.secrets_file,
        shell="/bin/bash",
    )

    assert render_script(RenderRequest(name="demo"), ctx).startswith("#!/bin/bash\n")


# ---------------------------------------------------------------------------
# README
# ---------------------------------------------------------------------------


def test_readme_fields(ctx: Context) -> None:
    readme = render_readme(RenderRequest(name="demo", description="Installs things"), ctx)
    lines = readme.splitlines()

    assert lines[0] == "# demo"
    assert "**Version:** 1.0.0" in lines
    assert "**Author:** Jane Doe" in lines
    assert f"**Last Updated:** {FIXED_DAY_TEXT}" in lines
    assert "Installs things" in lines
    history = lines.index("## Version History")
    assert lines[history + 1] == f"- 1.0.0 ({FIXED_DAY_TEXT}) - Initial release"


def test_readme_default_description(ctx: Context) -> None:
    readme = render_readme(RenderRequest(name="demo"), ctx)

    assert "This script is designed for Jamf Pro deployment." in readme


def test_readme_section_order(ctx: Context) -> None:
    document = build_readme_document(RenderRequest(name="demo"), ctx)

    assert document.names == [
        "title", "description", "static", "parameters",
        "local_testing", "versioning", "history",
    ]


def test_readme_bump_usage_depends_on_layout(ctx: Context) -> None:
    request = RenderRequest(name="demo")

    standalone = render_readme(request, ctx, standalone=True)
    attached = render_readme(request, ctx, standalone=False)

    assert 'shikomi bump [major|minor|patch] "Description of changes"' in standalone
    assert 'shikomi bump [major|minor|patch] "Description of changes"' not in attached
    assert 'shikomi bump demo.sh [major|minor|patch] "Description"' in attached


def test_parameters_table() -> None:
    known = ParameterSlot(6, "Token", "TOKEN", is_secret=True, secret_source_known=True)

    table = render_parameters_table([DEPT, API_KEY, known]).splitlines()

    assert "| 4 | Target Dept | `IT` |" in table
    assert "| 5 | API Key | `$LOCAL_API_KEY` (Secret) |" in table
    assert "| 6 | Token | `$LOCAL_TOKEN` (Existing) |" in table


def test_parameters_table_empty() -> None:
    assert render_parameters_table([]).splitlines()[-1] == "| None | N/A | N/A |"


def test_static_table() -> None:
    table = render_static_table([COMPANY, SERIAL]).splitlines()

    assert "| COMPANY_NAME | Static | `Acme Corp` | Company display name |" in table
    assert "| SERIAL_NUMBER | Runtime | Dynamic | Mac serial number |" in table


def test_static_table_empty() -> None:
    assert "No static configuration variables defined." in render_static_table([])


# ---------------------------------------------------------------------------
# CHANGELOG
# ---------------------------------------------------------------------------


def test_changelog_without_secrets(ctx: Context) -> None:
    changelog = render_changelog(RenderRequest(name="demo", slots=(DEPT,)), ctx)

    assert changelog.startswith("# Changelog\n")
    assert f"## [1.0.0] - {FIXED_DAY_TEXT}" in changelog
    assert "### Added" in changelog
    assert "- Initial release of demo" in changelog
    assert "Secure secrets management" not in changelog


def test_changelog_with_secrets(ctx: Context) -> None:
    changelog = render_changelog(RenderRequest(name="demo", slots=(API_KEY,)), ctx)

    assert "- Secure secrets management via ~/.jamf_secrets" in changelog
