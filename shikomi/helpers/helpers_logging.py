"""Console output helpers for the Shikomi CLI."""

import sys


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


def print_header(msg: str) -> None:
    """Print a header message framed by separator lines."""
    bar = "=" * 46
    print(f"{Colors.HEADER}{Colors.BOLD}{bar}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{msg.center(46).rstrip()}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{bar}{Colors.ENDC}")


def print_info(msg: str) -> None:
    """Print an info message."""
    print(f"{Colors.CYAN}{msg}{Colors.ENDC}")


def print_success(msg: str) -> None:
    """Print a success message."""
    print(f"{Colors.GREEN}✓ {msg}{Colors.ENDC}")


def print_warning(msg: str) -> None:
    """Print a warning message."""
    print(f"{Colors.YELLOW}⚠️  {msg}{Colors.ENDC}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"{Colors.RED}❌ {msg}{Colors.ENDC}", file=sys.stderr)


def print_dim(msg: str) -> None:
    """Print a de-emphasized message (skipped steps, hints)."""
    print(f"{Colors.DIM}{msg}{Colors.ENDC}")
