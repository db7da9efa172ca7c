"""Settings loading with layered overrides.

Priority chain: bundled defaults < ~/.config/ticketloop/config.yaml < .ticketloop/config.yaml
Deep merge: dicts merge recursively, lists/scalars replace.

Nothing is cached at module level: callers load once and pass the result on.
"""

import importlib.resources
from pathlib import Path
from typing import Optional

import yaml

from ticketloop.config.utils import deep_merge, load_yaml

GLOBAL_CONFIG = Path.home() / ".config" / "ticketloop" / "config.yaml"
PROJECT_CONFIG = Path(".ticketloop") / "config.yaml"


def _load_defaults() -> dict:
    """Load bundled default config."""
    try:
        files = importlib.resources.files("ticketloop")
        config_path = files / "defaults" / "config.yaml"
        content = config_path.read_text()
        return yaml.safe_load(content)
    except (FileNotFoundError, TypeError):
        dev_path = Path(__file__).parent.parent / "defaults" / "config.yaml"
        if dev_path.exists():
            with open(dev_path) as f:
                return yaml.safe_load(f)
        raise FileNotFoundError("Could not find defaults/config.yaml")


def load_settings(project_config: Optional[Path] = None) -> tuple[dict, list[str]]:
    """Load settings with layered overrides: defaults < global < project.

    Returns the merged settings and the list of sources that contributed.
    """
    sources = ["defaults"]
    result = _load_defaults()

    global_overrides = load_yaml(GLOBAL_CONFIG)
    if global_overrides:
        result = deep_merge(result, global_overrides)
        sources.append(str(GLOBAL_CONFIG))

    project_path = project_config or PROJECT_CONFIG
    project_overrides = load_yaml(project_path)
    if project_overrides:
        result = deep_merge(result, project_overrides)
        sources.append(str(project_path))

    return result, sources


def get_setting(settings: dict, dotted: str, default=None):
    """Look up 'section.key' in nested settings, returning default if absent."""
    node = settings
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node
