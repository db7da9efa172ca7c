"""File reading helpers."""

from pathlib import Path

from ticketloop.errors import DocumentUnreadable


def read_document(path: Path) -> str:
    """Read a UTF-8 document, raising DocumentUnreadable on any failure."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentUnreadable(str(path), str(e)) from e
