"""ticketloop init: scaffold project config and documents."""

from pathlib import Path
from typing import Optional

import yaml

from ticketloop.constants import (
    DEFAULT_AGENT_COMMAND,
    DOCUMENTS_DIR,
    PROJECTS_DIR,
    SPECIFICATION_FILE,
    STANDARD_PROMPT_FILE,
    STATE_DIR,
    TICKETS_FILE,
)
from ticketloop.ui.output import GRAY, GREEN, NC, YELLOW, error, log, success, warn

STATE_PATH = Path(STATE_DIR)
CONFIG_FILE = STATE_PATH / "config.yaml"

SPECIFICATION_TEMPLATE = """# Specification

Describe what the project should do. The agent reads this before every ticket.
"""

TICKETS_TEMPLATE = """# Tickets

## Ticket 1: Set up the project skeleton
Create the initial layout and a passing test run.

## Ticket 2: Describe the next piece of work
"""

STANDARD_PROMPT_TEMPLATE = """You are working on this repository unattended.
Read the specification and the tickets before changing anything.
Keep changes focused on the ticket you are given and leave the test suite passing.
"""

DOCUMENT_TEMPLATES = {
    SPECIFICATION_FILE: SPECIFICATION_TEMPLATE,
    TICKETS_FILE: TICKETS_TEMPLATE,
    STANDARD_PROMPT_FILE: STANDARD_PROMPT_TEMPLATE,
}


def _ask(question: str) -> Optional[str]:
    try:
        return input(question).strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def _default_config(agent_command: str) -> dict:
    return {
        "agent": {"command": agent_command},
        "documents": {"dir": DOCUMENTS_DIR, "projects_dir": PROJECTS_DIR},
    }


def _config_to_yaml(config: dict) -> str:
    return yaml.dump(config, default_flow_style=False, sort_keys=False, width=120)


def _print_config_preview(config: dict) -> None:
    print(f"\n  {GRAY}--- {CONFIG_FILE} ---{NC}")
    for line in _config_to_yaml(config).splitlines():
        print(f"  {line}")
    print()


def _write_config(config: dict) -> bool:
    try:
        STATE_PATH.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            f.write("# ticketloop project configuration\n")
            f.write(
                "# Override chain: bundled defaults < ~/.config/ticketloop/config.yaml"
                " < .ticketloop/config.yaml\n\n"
            )
            f.write(_config_to_yaml(config))
    except OSError as e:
        error(f"Failed to write {CONFIG_FILE}: {e}")
        return False
    success(f"Wrote {CONFIG_FILE}")
    return True


def scaffold_documents(directory: Path) -> list[Path]:
    """Create any missing document from its template. Existing files are left alone."""
    created = []
    directory.mkdir(parents=True, exist_ok=True)
    for name, template in DOCUMENT_TEMPLATES.items():
        path = directory / name
        if path.exists():
            log(f"  {name}: already exists")
            continue
        path.write_text(template, encoding="utf-8")
        created.append(path)
    return created


def _print_howto(directory: Path) -> None:
    print(f"\n{GREEN}{'=' * 50}{NC}")
    print(f"{GREEN}ticketloop is ready!{NC}\n")
    print(f"  Config:     {GRAY}{CONFIG_FILE}{NC}")
    print(f"  Documents:  {GRAY}{directory}/{NC}")

    print(f"\n{YELLOW}Quick start:{NC}\n")
    print("  ticketloop --dry-run              list the parsed tickets")
    print("  ticketloop                        run every ticket in order")
    print("  ticketloop -y --report run.json   unattended, with a JSON report")
    print("  ticketloop --project NAME         use documents from input/NAME/")
    print()


def run_init(yes: bool = False, agent_command: str = DEFAULT_AGENT_COMMAND) -> bool:
    """Interactive project setup. Returns True when config and documents are in place."""
    print(f"\n{GREEN}ticketloop init{NC} - configure ticketloop for this directory\n")

    write_config = True
    if CONFIG_FILE.exists():
        if yes:
            log(f"Found existing {CONFIG_FILE}, keeping it (--yes)")
            write_config = False
        else:
            warn(f"Found existing {CONFIG_FILE}")
            answer = _ask("  Overwrite the config? [y/N] ")
            write_config = answer in ("y", "yes")

    if write_config:
        config = _default_config(agent_command)
        _print_config_preview(config)
        if not yes:
            answer = _ask(f"  Write to {CONFIG_FILE}? [Y/n] ")
            if answer is None or answer in ("n", "no"):
                log("Aborted.")
                return False
        if not _write_config(config):
            return False

    directory = Path(DOCUMENTS_DIR)
    try:
        created = scaffold_documents(directory)
    except OSError as e:
        error(f"Failed to create documents in {directory}: {e}")
        return False
    for path in created:
        success(f"Created {path}")

    _print_howto(directory)
    return True
