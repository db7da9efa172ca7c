"""Agent invocation: prompt rendering and process supervision."""

from ticketloop.agent.prompt import DEFAULT_TEMPLATE, check_template, render_prompt
from ticketloop.agent.supervisor import AgentSupervisor

__all__ = [
    "AgentSupervisor",
    "DEFAULT_TEMPLATE",
    "check_template",
    "render_prompt",
]
