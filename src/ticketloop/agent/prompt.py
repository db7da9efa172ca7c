"""Prompt rendering for a single ticket."""

from pathlib import Path

from ticketloop.errors import ConfigError
from ticketloop.models.core import Ticket
from ticketloop.models.state import RunConfig
from ticketloop.utils.files import read_document

DEFAULT_TEMPLATE = (
    "{standard_prompt} Please use the documentation in the {documents_dir} folder, "
    "especially {specification_path} and {tickets_path}. "
    "Please work on ticket {ticket_number}. "
    "As your final task, create a file named '{sentinel_file}' containing either "
    "'success' or 'failure' to indicate whether you successfully completed the task."
)

SENTINEL_INSTRUCTION = (
    "As your final task, create a file named '{sentinel_file}' containing "
    "either 'success' or 'failure' to indicate whether you successfully completed the task."
)


def _fill(template: str, values: dict) -> str:
    try:
        return template.format(**values)
    except (KeyError, IndexError) as e:
        raise ConfigError(f"Unknown placeholder {e} in prompt template") from e
    except ValueError as e:
        raise ConfigError(f"Malformed prompt template ({e}); write literal braces as {{{{ and }}}}") from e


def check_template(template: str) -> None:
    """Raise ConfigError if the template would fail to render."""
    _fill(
        template,
        {
            "standard_prompt": "",
            "documents_dir": "",
            "specification_path": "",
            "tickets_path": "",
            "ticket_number": 1,
            "ticket_description": "",
            "sentinel_file": "",
        },
    )


def render_prompt(config: RunConfig, ticket: Ticket) -> str:
    """Build the agent prompt: standard prompt + ticket instruction + sentinel instruction.

    Raises DocumentUnreadable if the standard prompt cannot be read and
    ConfigError if the template does not render.
    """
    standard_prompt = read_document(config.standard_prompt_path).strip()
    template = config.prompt_template or DEFAULT_TEMPLATE
    prompt = _fill(
        template,
        {
            "standard_prompt": standard_prompt,
            "documents_dir": Path(config.specification_path).parent,
            "specification_path": config.specification_path,
            "tickets_path": config.tickets_path,
            "ticket_number": ticket.number,
            "ticket_description": ticket.description,
            "sentinel_file": config.sentinel_file,
        },
    )
    # Custom templates must still carry the completion contract
    if config.sentinel_file not in prompt:
        prompt += "\n\n" + SENTINEL_INSTRUCTION.format(sentinel_file=config.sentinel_file)
    return prompt
