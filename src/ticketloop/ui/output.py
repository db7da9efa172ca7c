"""Terminal output helpers with colors."""

# Colors
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
GRAY = "\033[90m"
MAGENTA = "\033[0;35m"
NC = "\033[0m"

PREFIX = "[ticketloop]"


def log(msg: str) -> None:
    print(f"\r\033[K{BLUE}{PREFIX}{NC} {msg}")


def success(msg: str) -> None:
    print(f"\r\033[K{GREEN}{PREFIX}{NC} {msg}")


def warn(msg: str) -> None:
    print(f"\r\033[K{YELLOW}{PREFIX}{NC} {msg}")


def error(msg: str) -> None:
    print(f"\r\033[K{RED}{PREFIX}{NC} {msg}")


def rule(char: str = "━", width: int = 50) -> None:
    """Print a blue horizontal separator."""
    print(f"{BLUE}{char * width}{NC}")
