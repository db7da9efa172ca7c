"""Locate and check the three project documents."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ticketloop.config.settings import get_setting
from ticketloop.constants import (
    DOCUMENTS_DIR,
    PROJECTS_DIR,
    SPECIFICATION_FILE,
    STANDARD_PROMPT_FILE,
    TICKETS_FILE,
)
from ticketloop.errors import DocumentUnreadable
from ticketloop.models.core import Ticket
from ticketloop.tickets import load_tickets

# Keys double as the names shown to the operator
DOCUMENT_KINDS = ("specification", "tickets", "standard_prompt")


@dataclass
class DocumentPaths:
    specification: Path
    tickets: Path
    standard_prompt: Path

    def get(self, kind: str) -> Path:
        return getattr(self, kind)

    def set(self, kind: str, path: Path) -> None:
        setattr(self, kind, path)


@dataclass
class DocumentCheck:
    """Which documents exist, plus the parsed tickets when they do."""

    found: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    tickets: list[Ticket] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing

    @property
    def ticket_count(self) -> int:
        return len(self.tickets)


def document_dir(settings: dict, project: Optional[str] = None) -> Path:
    """Folder holding the documents: input/<project>/ or specifications/."""
    if project:
        return Path(get_setting(settings, "documents.projects_dir", PROJECTS_DIR)) / project
    return Path(get_setting(settings, "documents.dir", DOCUMENTS_DIR))


def resolve_documents(
    settings: dict,
    project: Optional[str] = None,
    specification: Optional[str] = None,
    tickets: Optional[str] = None,
    standard_prompt: Optional[str] = None,
) -> DocumentPaths:
    """Resolve document paths. Explicit paths win over the folder layout."""
    base = document_dir(settings, project)
    spec_name = get_setting(settings, "documents.specification", SPECIFICATION_FILE)
    tickets_name = get_setting(settings, "documents.tickets", TICKETS_FILE)
    prompt_name = get_setting(settings, "documents.standard_prompt", STANDARD_PROMPT_FILE)
    return DocumentPaths(
        specification=Path(specification) if specification else base / spec_name,
        tickets=Path(tickets) if tickets else base / tickets_name,
        standard_prompt=Path(standard_prompt) if standard_prompt else base / prompt_name,
    )


def check_documents(paths: DocumentPaths) -> DocumentCheck:
    """Check each document is a readable file and parse the tickets document."""
    result = DocumentCheck()
    for kind in DOCUMENT_KINDS:
        path = paths.get(kind)
        if path.is_file():
            result.found.append(kind)
        else:
            result.missing.append(kind)

    if "tickets" in result.found:
        try:
            result.tickets = load_tickets(paths.tickets)
        except DocumentUnreadable:
            result.found.remove("tickets")
            result.missing.append("tickets")
    return result

