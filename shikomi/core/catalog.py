"""Catalog of well-known macOS system facts offered as static variables.

Each entry is embedded verbatim into generated scripts; the expression is
evaluated by the generated script at its own runtime, never by Shikomi.
"""

from dataclasses import dataclass

CUSTOM_VARIABLE_KEY = 0


@dataclass(frozen=True)
class CatalogEntry:
    """One standard variable.

    Attributes:
        key: Menu number shown to the operator (1-based).
        name: Variable identifier in the generated script.
        expression: Shell command substitution that yields the value.
        description: Human description for README and inline comment.
    """

    key: int
    name: str
    expression: str
    description: str


STANDARD_VARIABLES: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        1, "SERIAL_NUMBER",
        "$(system_profiler SPHardwareDataType | awk '/Serial/ {print $4}')",
        "Mac serial number",
    ),
    CatalogEntry(
        2, "LOGGED_IN_USER",
        "$(stat -f%Su /dev/console)",
        "Currently logged in user",
    ),
    CatalogEntry(
        3, "COMPUTER_NAME",
        "$(scutil --get ComputerName)",
        "Computer name from System Preferences",
    ),
    CatalogEntry(
        4, "OS_VERSION",
        "$(sw_vers -productVersion)",
        "macOS version number",
    ),
    CatalogEntry(
        5, "MODEL_IDENTIFIER",
        "$(sysctl -n hw.model)",
        "Hardware model identifier",
    ),
    CatalogEntry(
        6, "PRIMARY_IP",
        "$(ipconfig getifaddr en0 || ipconfig getifaddr en1)",
        "Primary network IP address",
    ),
    CatalogEntry(
        7, "HOSTNAME",
        "$(hostname)",
        "Network hostname",
    ),
    CatalogEntry(
        8, "MAC_ADDRESS",
        "$(ifconfig en0 | awk '/ether/ {print $2}')",
        "Primary MAC address",
    ),
    CatalogEntry(
        9, "CURRENT_USER_HOME",
        "$(eval echo ~$(stat -f%Su /dev/console))",
        "Home directory of logged in user",
    ),
    CatalogEntry(
        10, "BOOT_VOLUME",
        "$(diskutil info / | awk '/Volume Name/ {print $3}')",
        "Name of boot volume",
    ),
    CatalogEntry(
        11, "TOTAL_RAM_GB",
        '$(echo "scale=2; $(sysctl -n hw.memsize) / 1073741824" | bc)',
        "Total RAM in gigabytes",
    ),
    CatalogEntry(
        12, "PROCESSOR_NAME",
        "$(sysctl -n machdep.cpu.brand_string)",
        "CPU processor name",
    ),
)


def get_entry(key: int) -> CatalogEntry | None:
    """Return the catalog entry for a menu number, or None if unknown."""
    for entry in STANDARD_VARIABLES:
        if entry.key == key:
            return entry
    return None


def format_menu() -> list[str]:
    """Return the selection menu lines, one per entry plus the custom slot."""
    lines = [
        f"  {f'{entry.key}.':<4}{entry.name:<20}- {entry.description}"
        for entry in STANDARD_VARIABLES
    ]
    lines.append(f"  {f'{CUSTOM_VARIABLE_KEY}.':<4}Custom variable")
    return lines
