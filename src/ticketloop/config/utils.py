"""Helpers for layered YAML settings."""

from pathlib import Path
from typing import Optional, Union

import yaml


def deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base. Nested dicts merge, anything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_yaml(path: Union[str, Path]) -> Optional[dict]:
    """Read a YAML mapping. None if the file is missing, empty or not a mapping.

    Raises ValueError when the file exists but is not valid YAML.
    """
    path = Path(path)
    if not path.is_file():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    return data if isinstance(data, dict) else None
