"""Loading Git Productivity settings from a JSON config file."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from git_productivity.models.settings import Settings

CONFIG_ENV_VAR = "GIT_PRODUCTIVITY_CONFIG"


def config_file_path() -> Path:
    """Get the config file path, honouring the environment override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".git-productivity" / "config.json"


def load_settings(
    config_file: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None
) -> Settings:
    """Read settings from the config file and apply command line overrides.

    A missing config file means defaults. Unreadable or invalid settings raise
    ValueError.
    """
    config_file = Path(config_file) if config_file is not None else config_file_path()
    data: Dict[str, Any] = {}

    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Could not read config file {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_file} must contain a JSON object")

    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(str(e)) from e
