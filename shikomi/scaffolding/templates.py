"""Template generation functions for standalone script projects."""

from __future__ import annotations

import yaml

GITLEAKS_REPO = "https://github.com/gitleaks/gitleaks"
GITLEAKS_REV = "v8.18.0"


def get_gitignore_template(secrets_filename: str = ".jamf_secrets") -> str:
    """Generate the .gitignore for a standalone project.

    Args:
        secrets_filename: Name of the local secrets file to keep out of Git.

    Returns:
        Complete .gitignore content as string
    """
    return f"""# --- macOS System Files ---
.DS_Store
.AppleDouble
.LSOverride
._*
.DocumentRevisions-V100
.fseventsd
.Spotlight-V100
.TemporaryItems
.Trashes
.VolumeIcon.icns
.com.apple.timemachine.donotpresent

# --- Editors & IDEs ---
.vscode/
.idea/
*.swp

# --- Secrets & Local Configs ---
.env
.env.local
{secrets_filename}
secrets.sh
config.local

# --- Version bump backups ---
*.bak

# --- Binary Artifacts ---
*.dmg
*.pkg
*.zip
"""


def get_pre_commit_config() -> dict[str, object]:
    """pre-commit configuration running gitleaks on every commit."""
    return {
        "repos": [
            {
                "repo": GITLEAKS_REPO,
                "rev": GITLEAKS_REV,
                "hooks": [{"id": "gitleaks"}],
            },
        ],
    }


def get_pre_commit_template() -> str:
    """Generate .pre-commit-config.yaml content."""
    return yaml.safe_dump(
        get_pre_commit_config(),
        default_flow_style=False,
        sort_keys=False,
        indent=2,
    )


def get_validate_version_workflow() -> str:
    """Generate the GitHub Actions workflow that checks version consistency.

    The workflow finds the versioned script, compares its version constant
    with the README and, on tag pushes, with the tag.
    """
    return """name: Validate Version

on:
  pull_request:
    branches: [ main, master ]
  push:
    tags:
      - 'v*'

jobs:
  validate:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4

      - name: Extract version from script
        id: script_version
        run: |
          SCRIPT_FILE=""
          shopt -s nullglob
          for file in *.sh; do
            if [[ "$file" != "bump_version.sh" ]] && grep -q '^readonly SCRIPT_VERSION=' "$file"; then
              SCRIPT_FILE="$file"
              break
            fi
          done
          if [[ -z "$SCRIPT_FILE" ]]; then
            echo "Error: No versioned script found"
            exit 1
          fi
          VERSION=$(sed -n 's/^readonly SCRIPT_VERSION="\\([^"]*\\)".*/\\1/p' "$SCRIPT_FILE")
          echo "version=$VERSION" >> "$GITHUB_OUTPUT"
          echo "Script $SCRIPT_FILE version: $VERSION"

      - name: Extract version from README
        id: readme_version
        run: |
          VERSION=$(sed -n 's/^\\*\\*Version:\\*\\* //p' README.md | head -n 1)
          echo "version=$VERSION" >> "$GITHUB_OUTPUT"
          echo "README version: $VERSION"

      - name: Validate versions match
        run: |
          if [ "${{ steps.script_version.outputs.version }}" != "${{ steps.readme_version.outputs.version }}" ]; then
            echo "ERROR: Version mismatch!"
            echo "Script: ${{ steps.script_version.outputs.version }}"
            echo "README: ${{ steps.readme_version.outputs.version }}"
            exit 1
          fi
          echo "Versions match: ${{ steps.script_version.outputs.version }}"

      - name: Validate tag matches version
        if: startsWith(github.ref, 'refs/tags/')
        run: |
          TAG_VERSION=${GITHUB_REF#refs/tags/v}
          SCRIPT_VERSION="${{ steps.script_version.outputs.version }}"
          if [ "$TAG_VERSION" != "$SCRIPT_VERSION" ]; then
            echo "ERROR: Tag version ($TAG_VERSION) does not match script version ($SCRIPT_VERSION)"
            exit 1
          fi
          echo "Tag matches version: v$SCRIPT_VERSION"

  shellcheck:
    runs-on: macos-latest
    steps:
      - uses: actions/checkout@v4

      - name: Run ShellCheck
        uses: ludeeus/action-shellcheck@master
        with:
          ignore_paths: .github
"""
