"""Version consistency check.

Usage:
    shikomi check                      Auto-detect the script in the current directory
    shikomi check <script.sh>          Check a specific script
    shikomi check --tag v1.2.3         Also compare against a Git tag
    shikomi check --tag "$GITHUB_REF"  Full refs (refs/tags/...) are accepted

Exits 1 if the README, the newest CHANGELOG entry or the tag disagree with
the script's ``SCRIPT_VERSION``.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from shikomi.cli.arg_parser import ShikomiArgumentParser, parse_or_exit_code, report_error
from shikomi.core.errors import ShikomiError
from shikomi.core.version_engine import ConsistencyReport, check_consistency, detect_target
from shikomi.helpers.helpers_logging import print_error, print_success, print_warning


def _describe(version: object | None) -> str:
    return str(version) if version is not None else "-"


def print_report(report: ConsistencyReport) -> None:
    print("=" * 60)
    print(f"  Version check: {report.script_path.name}")
    print("=" * 60)
    print(f"  Script:    {report.script_version}")
    print(f"  README:    {_describe(report.readme_version)}")
    print(f"  CHANGELOG: {_describe(report.changelog_version)}")
    if report.tag_version is not None:
        print(f"  Tag:       {report.tag_version}")
    print()

    if report.ok:
        print_success(f"All versions match: {report.script_version}")
        return
    for mismatch in report.mismatches:
        print_error(mismatch)


def run_check(script: str | None, tag: str | None, cwd: Path | None = None) -> int:
    """Check one script and print the report.

    Returns:
        Exit code (0 if consistent, 1 on any mismatch)
    """
    cwd = cwd or Path.cwd()
    if script is None:
        detection = detect_target(cwd)
        if detection.ambiguous:
            print_warning(f"Multiple versioned scripts found; checking {detection.target.name}")
        path = detection.target
    else:
        path = Path(script) if Path(script).is_absolute() else cwd / script

    report = check_consistency(path, tag)
    print_report(report)
    return 0 if report.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the check command."""
    parser = ShikomiArgumentParser(
        prog="shikomi check",
        description="Verify that script, README, CHANGELOG and tag versions agree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("script", nargs="?", help="Script to check (auto-detected if omitted)")
    parser.add_argument("--tag", help="Git tag to compare (v1.2.3, name-v1.2.3 or refs/tags/...)")
    parsed = parse_or_exit_code(parser, sys.argv[1:] if argv is None else argv)
    if isinstance(parsed, int):
        return parsed

    try:
        return run_check(parsed.script, parsed.tag)
    except ShikomiError as exc:
        report_error(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
