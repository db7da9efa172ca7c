"""CLI entry point and argument parsing."""

import argparse
import signal
import sys
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Optional

try:
    __version__ = get_version("ticketloop")
except Exception:
    __version__ = "dev"

from ticketloop.agent.prompt import DEFAULT_TEMPLATE, check_template
from ticketloop.config.settings import get_setting, load_settings
from ticketloop.constants import (
    BASE_DELAY,
    DEFAULT_AGENT_COMMAND,
    MAX_DELAY,
    POLL_INTERVAL,
    RATE_LIMIT_MARKERS,
    SENTINEL_FILE,
)
from ticketloop.documents import DocumentCheck, DocumentPaths, check_documents, resolve_documents
from ticketloop.errors import ConfigError
from ticketloop.models.core import Ticket
from ticketloop.models.state import RunConfig, RunPhase
from ticketloop.runner.report import print_summary, write_report
from ticketloop.runner.sequencer import Sequencer
from ticketloop.ui.output import GREEN, NC, YELLOW, error, log, success, warn
from ticketloop.utils.debug import DEBUG_LOG

EXIT_CANCELLED = 130

DOCUMENT_LABELS = {
    "specification": "specification.md",
    "tickets": "tickets.md",
    "standard_prompt": "standard-prompt.md",
}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ticketloop",
        description="Run a coding agent once per ticket, strictly one at a time.",
        epilog="""
Commands:
  ticketloop init                   Scaffold .ticketloop/config.yaml and project documents

Examples:
  %(prog)s                          Run every ticket in specifications/tickets.md
  %(prog)s --project shop           Use documents from input/shop/
  %(prog)s --agent "my-agent --fast" Use a custom agent command
  %(prog)s --dry-run                List parsed tickets without running anything
  %(prog)s -y --report run.json     Start without confirmation, save a JSON report

How it works:
  1. Reads ticket headings from tickets.md (## Ticket 1: ..., ### Ticket #2 - ...)
  2. For each ticket, runs the agent with the standard prompt plus the ticket number
  3. Waits until the agent writes killmenow.md containing 'success' or 'failure'
  4. Stops the agent, records the outcome, cools down, moves to the next ticket

Cool-down:
  - 2s between tickets by default
  - Doubles (max 30s) when a failure mentions rate limits or server overload
  - Resets to 2s after any success

Press Ctrl-C to abort: the running agent is killed and a summary is printed.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--project",
        metavar="NAME",
        help="Read documents from input/NAME/ instead of specifications/",
    )
    parser.add_argument(
        "-a",
        "--agent",
        metavar="CMD",
        help=f"Agent command; the prompt is appended as last argument (default: {DEFAULT_AGENT_COMMAND})",
    )
    parser.add_argument("--spec", metavar="PATH", help="Path to specification.md")
    parser.add_argument("--tickets", metavar="PATH", help="Path to tickets.md")
    parser.add_argument("--prompt", metavar="PATH", help="Path to standard-prompt.md")
    parser.add_argument(
        "--report",
        metavar="PATH",
        help="Write a JSON report of the run to PATH",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        metavar="SECONDS",
        help=f"Seconds between checks for the sentinel file (default: {POLL_INTERVAL})",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Start without asking for confirmation (never prompts)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List parsed tickets and the agent command without executing",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Enable debug mode - logs prompts and sentinel contents to {DEBUG_LOG}",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def _number(settings: dict, key: str, default, kind):
    value = get_setting(settings, key, default)
    # YAML true/false load as bool, an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    return kind(value)


def build_run_config(
    args: argparse.Namespace, settings: dict, paths: DocumentPaths
) -> RunConfig:
    """Combine settings, CLI flags and resolved document paths into one RunConfig.

    Raises ConfigError for values the run loop cannot work with.
    """
    log_dir = get_setting(settings, "agent.log_dir")
    poll_interval = args.poll_interval
    if poll_interval is None:
        poll_interval = _number(settings, "sentinel.poll_interval", POLL_INTERVAL, float)
    if poll_interval <= 0:
        raise ConfigError(f"sentinel.poll_interval must be positive, got {poll_interval}")

    base_delay = _number(settings, "backoff.base", BASE_DELAY, int)
    max_delay = _number(settings, "backoff.cap", MAX_DELAY, int)
    if base_delay < 1:
        raise ConfigError(f"backoff.base must be at least 1, got {base_delay}")
    if max_delay < base_delay:
        raise ConfigError(f"backoff.cap ({max_delay}) must not be below backoff.base ({base_delay})")

    markers = get_setting(settings, "backoff.rate_limit_markers", list(RATE_LIMIT_MARKERS))
    if not isinstance(markers, list) or not all(isinstance(m, str) and m for m in markers):
        raise ConfigError("backoff.rate_limit_markers must be a list of non-empty strings")

    template = get_setting(settings, "prompt.template", DEFAULT_TEMPLATE)
    if not isinstance(template, str):
        raise ConfigError("prompt.template must be a string")
    check_template(template)

    return RunConfig(
        agent_command=args.agent or get_setting(settings, "agent.command", DEFAULT_AGENT_COMMAND),
        specification_path=paths.specification,
        tickets_path=paths.tickets,
        standard_prompt_path=paths.standard_prompt,
        project=args.project,
        workdir=Path.cwd(),
        sentinel_file=get_setting(settings, "sentinel.file", SENTINEL_FILE),
        poll_interval=poll_interval,
        base_delay=base_delay,
        max_delay=max_delay,
        rate_limit_markers=tuple(markers),
        prompt_template=template,
        agent_log_dir=Path(log_dir) if log_dir else None,
        debug=args.debug,
    )


def log_config(config: RunConfig, sources: list[str]) -> None:
    """Log configuration status."""
    overrides = [s for s in sources if s != "defaults"]
    if overrides:
        log(f"Config overrides: {', '.join(overrides)}")
    if config.project:
        log(f"Project: {YELLOW}{config.project}{NC}")
    if config.debug:
        log(f"Debug logging to {DEBUG_LOG}")


def _ask(question: str) -> Optional[str]:
    try:
        return input(question).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def confirm(question: str) -> bool:
    answer = _ask(f"{question} [Y/n] ")
    return answer is not None and answer.lower() in ("", "y", "yes")


def reselect_documents(paths: DocumentPaths, check: DocumentCheck) -> Optional[DocumentCheck]:
    """Ask for a path to each missing document until all are found. None if the user gives up."""
    while not check.ok:
        for kind in list(check.missing):
            label = DOCUMENT_LABELS[kind]
            answer = _ask(f"  Path to {label} (Enter to abort): ")
            if not answer:
                return None
            candidate = Path(answer).expanduser()
            if not candidate.is_file():
                warn(f"Not a readable file: {candidate}")
                continue
            paths.set(kind, candidate)
        check = check_documents(paths)
    return check


def select_agent(default: str) -> Optional[str]:
    """Offer the default agent or a custom command."""
    log("Select coding agent:")
    print(f"  1. {default}")
    print("  2. Other (custom command)")
    choice = _ask("  Choice [1]: ")
    if choice is None:
        return None
    if choice in ("", "1"):
        return default
    command = _ask("  Agent command: ")
    return command or None


def show_tickets(tickets: list[Ticket]) -> None:
    print(f"\n{GREEN}Tickets:{NC} {len(tickets)}")
    for t in tickets:
        print(f"  ○ Ticket {t.number}: {t.description}")


def show_confirmation(config: RunConfig, tickets: list[Ticket]) -> None:
    """Print what is about to run."""
    print(f"\n{GREEN}Specification:{NC} {config.specification_path}")
    print(f"{GREEN}Tickets:{NC} {config.tickets_path} ({len(tickets)} tickets)")
    print(f"{GREEN}Prompt:{NC} {config.standard_prompt_path}")
    print(f"{GREEN}Agent:{NC} {config.agent_command}")
    print(f"{GREEN}Delay between agents:{NC} {config.base_delay} seconds")
    print()


def exit_code_for(phase: str, failed: int) -> int:
    if phase == RunPhase.CANCELLED.name.lower():
        return EXIT_CANCELLED
    return 1 if failed else 0


def main() -> None:
    # Handle init before argparse
    if len(sys.argv) > 1 and sys.argv[1] == "init":
        from ticketloop.init import run_init

        yes = "--yes" in sys.argv or "-y" in sys.argv
        sys.exit(0 if run_init(yes=yes) else 1)

    args = parse_args()
    interactive = not args.yes and sys.stdin.isatty()

    try:
        settings, sources = load_settings()
    except (OSError, ValueError) as e:
        error(f"Could not load config: {e}")
        sys.exit(1)

    paths = resolve_documents(
        settings,
        project=args.project,
        specification=args.spec,
        tickets=args.tickets,
        standard_prompt=args.prompt,
    )

    log("Checking for required files...")
    check = check_documents(paths)
    for kind in check.found:
        success(f"Found {DOCUMENT_LABELS[kind]} ({paths.get(kind)})")
    for kind in check.missing:
        error(f"Missing {DOCUMENT_LABELS[kind]} ({paths.get(kind)})")

    if not check.ok:
        if not interactive:
            error("Required documents missing. Pass --spec/--tickets/--prompt or run `ticketloop init`.")
            sys.exit(1)
        reselected = reselect_documents(paths, check)
        if reselected is None:
            error("Required documents missing")
            sys.exit(1)
        check = reselected

    tickets = check.tickets
    try:
        config = build_run_config(args, settings, paths)
    except ConfigError as e:
        error(f"Invalid config: {e}")
        sys.exit(1)
    log_config(config, sources)

    if args.dry_run:
        show_tickets(tickets)
        log(f"Agent: {config.agent_command}")
        log(f"{YELLOW}DRY RUN MODE - no agent will be started{NC}")
        sys.exit(0)

    if interactive and not args.agent:
        agent = select_agent(config.agent_command)
        if agent is None:
            warn("User quit")
            sys.exit(1)
        config.agent_command = agent

    show_tickets(tickets)
    show_confirmation(config, tickets)
    if interactive and not confirm("Start execution?"):
        warn("User quit")
        sys.exit(1)

    sequencer = Sequencer(config, tickets)

    def handle_signal(sig: int, frame: object) -> None:
        sequencer.cancel()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    log(f"Running {len(tickets)} tickets in series")
    report = sequencer.run()
    print_summary(report)

    if args.report:
        write_report(report, Path(args.report))
        log(f"Report written to {args.report}")

    sys.exit(exit_code_for(report.phase, report.failed))


if __name__ == "__main__":
    main()
