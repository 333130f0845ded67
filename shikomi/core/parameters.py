"""Parameter collection for generated Jamf scripts.

Turns a bounded sequence of operator answers into an ordered list of
:class:`ParameterSlot` (Jamf positional parameters ``$4``-``$11``) and an
ordered list of :class:`StaticVariable` (hardcoded or system-derived values).

The prompt function is injected, so the collector never touches stdin
directly::

    slots = collect_parameters(input, secrets_file=Path("~/.jamf_secrets"))

Collection is single-pass: an empty label ends the parameter loop, and an
empty custom-variable name ends the custom-variable loop.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shikomi.core.catalog import CUSTOM_VARIABLE_KEY, format_menu, get_entry
from shikomi.core.errors import ParameterValidationError
from shikomi.helpers.helpers_logging import print_info, print_success, print_warning

Ask = Callable[[str], str]
SourceKind = Literal["literal", "derived"]

# Jamf Pro reserves $1-$3; $4-$11 are the custom parameter slots.
PARAMETER_POSITIONS = range(4, 12)

SECRET_PREFIX = "LOCAL_"
SECRET_PLACEHOLDER = "REPLACE_WITH_REAL_SECRET"

_WHITESPACE_RE = re.compile(r"\s")
_INVALID_CHARS_RE = re.compile(r"[^A-Z0-9_]")
_SELECTION_TOKEN_RE = re.compile(r"[0-9]+")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParameterSlot:
    """One Jamf positional parameter collected from the operator.

    Attributes:
        position: Jamf parameter index (4-11).
        label: Description as typed by the operator.
        identifier: Shell variable name derived from ``label``.
        is_secret: Resolved from env/secrets file instead of a default.
        default_value: Fallback when ``$<position>`` is unset (non-secret only).
        secret_source_known: ``LOCAL_<identifier>`` already in the secrets file.
    """

    position: int
    label: str
    identifier: str
    is_secret: bool = False
    default_value: str | None = None
    secret_source_known: bool = False

    @property
    def fallback_name(self) -> str:
        """Name of the secrets-file variable backing a secret slot."""
        return f"{SECRET_PREFIX}{self.identifier}"


@dataclass(frozen=True)
class StaticVariable:
    """A non-parameter configuration value embedded in the script.

    Attributes:
        name: Shell variable name.
        source_kind: ``literal`` (operator constant) or ``derived`` (catalog).
        value: Literal text or the catalog shell expression, never evaluated.
        description: Human description.
    """

    name: str
    source_kind: SourceKind
    value: str
    description: str


# ---------------------------------------------------------------------------
# Identifier helpers
# ---------------------------------------------------------------------------


def normalize_identifier(label: str) -> str:
    """Derive a shell identifier from a free-text label.

    Uppercases, turns each whitespace character into ``_`` and drops every
    character outside ``[A-Z0-9_]``.

    Example:
        >>> normalize_identifier("Target Dept.")
        'TARGET_DEPT'
    """
    upper = _WHITESPACE_RE.sub("_", label.strip().upper())
    return _INVALID_CHARS_RE.sub("", upper)


def _require_identifier(text: str, what: str) -> str:
    identifier = normalize_identifier(text)
    if not identifier:
        raise ParameterValidationError(
            f"{what} '{text}' does not contain any usable characters",
            hint="Use letters, digits, spaces or underscores (e.g. 'Target Dept')",
        )
    return identifier


def _reject_duplicate(identifier: str, taken: set[str], text: str) -> None:
    if identifier in taken:
        raise ParameterValidationError(
            f"'{text}' maps to {identifier}, which is already defined",
            hint="Choose a label that differs after normalization",
        )


def _is_yes(answer: str) -> bool:
    return answer.strip()[:1] in ("y", "Y")


def secret_is_known(secrets_file: Path, identifier: str) -> bool:
    """Return True if ``LOCAL_<identifier>=`` is defined in the secrets file.

    Only checks for the line's existence; values are never returned.
    """
    if not secrets_file.is_file():
        return False
    marker = f"{SECRET_PREFIX}{identifier}="
    with secrets_file.open(encoding="utf-8", errors="replace") as handle:
        return any(line.startswith(marker) for line in handle)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def collect_parameters(
    ask: Ask,
    secrets_file: Path,
    positions: Iterable[int] = PARAMETER_POSITIONS,
    reserved: Iterable[str] = (),
) -> list[ParameterSlot]:
    """Prompt for Jamf parameters until an empty label or the last position.

    Args:
        ask: Prompt function returning the operator's answer.
        secrets_file: Secrets store checked for existing ``LOCAL_*`` lines.
        positions: Parameter indices offered, in order.
        reserved: Identifiers the generated script already declares.

    Returns:
        Slots in collection order.

    Raises:
        ParameterValidationError: Label normalizes to an empty or
            already used identifier.
    """
    slots: list[ParameterSlot] = []
    taken: set[str] = set(reserved)

    for position in positions:
        print(f"--- Parameter {position} ---")
        label = ask("Label (e.g. 'Target Dept'): ").strip()
        if not label:
            break

        identifier = _require_identifier(label, "Label")
        _reject_duplicate(identifier, taken, label)
        taken.add(identifier)

        if _is_yes(ask("Is this a secret? (y/n): ")):
            known = secret_is_known(secrets_file, identifier)
            if known:
                print_success(f"Found existing local secret: {SECRET_PREFIX}{identifier}")
            else:
                print_warning("Local secret missing. You will need to add it later.")
            slots.append(ParameterSlot(
                position=position,
                label=label,
                identifier=identifier,
                is_secret=True,
                secret_source_known=known,
            ))
        else:
            default = ask("Default Local Value: ")
            slots.append(ParameterSlot(
                position=position,
                label=label,
                identifier=identifier,
                default_value=default,
            ))

    return slots


def _collect_custom_variables(ask: Ask, taken: set[str]) -> list[StaticVariable]:
    """Loop over custom literal variables until an empty name."""
    variables: list[StaticVariable] = []
    while True:
        raw_name = ask("Custom variable name (or Enter to finish): ").strip()
        if not raw_name:
            break
        name = _require_identifier(raw_name, "Variable name")
        _reject_duplicate(name, taken, raw_name)
        value = ask("Value: ")
        description = ask("Description: ").strip()
        taken.add(name)
        variables.append(StaticVariable(name, "literal", value, description))
        print_success(f"Added: {name}")
    return variables


def collect_static_variables(
    ask: Ask,
    reserved: Iterable[str] = (),
) -> list[StaticVariable]:
    """Prompt for static configuration variables.

    The operator picks catalog entries by number on one line; ``0`` opens
    the custom-variable loop. Unknown or out-of-range numbers are ignored
    and a repeated catalog number only adds the entry once.

    Args:
        ask: Prompt function returning the operator's answer.
        reserved: Identifiers already used by parameter slots.

    Returns:
        Static variables in selection order.

    Raises:
        ParameterValidationError: Custom name is empty after normalization
            or collides with an existing identifier.
    """
    print("")
    print("--- Static Configuration Variables ---")
    print("These are hardcoded in the script (not MDM parameters)")
    if not _is_yes(ask("Add static configuration variables? (y/n): ")):
        return []

    print_info("\nSelect from standard macOS variables (enter numbers separated by spaces):")
    for line in format_menu():
        print(line)
    print("")

    selection = ask("Selection (e.g., '1 2 4' or '0' for custom, or Enter to skip): ")
    taken = set(reserved)
    variables: list[StaticVariable] = []

    for token in selection.split():
        if not _SELECTION_TOKEN_RE.fullmatch(token):
            continue
        key = int(token)
        if key == CUSTOM_VARIABLE_KEY:
            variables.extend(_collect_custom_variables(ask, taken))
            continue
        entry = get_entry(key)
        if entry is None:
            continue
        if entry.name in taken:
            print_warning(f"Skipped {entry.name}: already defined")
            continue
        taken.add(entry.name)
        variables.append(
            StaticVariable(entry.name, "derived", entry.expression, entry.description),
        )
        print_success(f"Added: {entry.name}")

    return variables


def secret_reminders(slots: Sequence[ParameterSlot]) -> list[str]:
    """Secrets-file lines the operator still needs to add."""
    return [
        f'{slot.fallback_name}="{SECRET_PLACEHOLDER}"'
        for slot in slots
        if slot.is_secret and not slot.secret_source_known
    ]


def uses_secrets(slots: Sequence[ParameterSlot]) -> bool:
    """True if any slot is secret-valued."""
    return any(slot.is_secret for slot in slots)
