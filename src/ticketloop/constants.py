"""Constants for ticket execution."""

# Completion signal written by the agent into the working directory
SENTINEL_FILE = "killmenow.md"
POLL_INTERVAL = 0.5  # seconds between sentinel checks

# Cool-down between tickets
BASE_DELAY = 2
MAX_DELAY = 30

# Case-insensitive substrings that mark a failure as rate limiting
RATE_LIMIT_MARKERS = ("server overload", "rate limit", "too many requests")

DEFAULT_AGENT_COMMAND = "claude --dangerously-skip-permissions"

# Document layout
DOCUMENTS_DIR = "specifications"
PROJECTS_DIR = "input"
SPECIFICATION_FILE = "specification.md"
TICKETS_FILE = "tickets.md"
STANDARD_PROMPT_FILE = "standard-prompt.md"

STATE_DIR = ".ticketloop"
