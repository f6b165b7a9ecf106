import os
from pathlib import Path
from typing import Optional

import yaml

from revline_core.models import REVIEW_DEPTHS, SEVERITIES

DEFAULT_CONFIG: dict = {
    "review_depth": "auto",
    "severity_threshold": "low",
    "custom_instructions": "",
    "max_files": 20,
    "api_url": "https://api.revline.dev",
}

# Keys that may also arrive as GitHub Actions inputs (INPUT_<KEY> in the environment).
_INPUT_KEYS = tuple(DEFAULT_CONFIG)


class ConfigError(ValueError):
    """Raised for invalid settings. Always raised before any network call."""


def _action_input(name: str) -> Optional[str]:
    value = os.environ.get(f"INPUT_{name.upper()}", "").strip()
    return value or None


def load_config(config_path: str = ".revline.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .revline.yml in the current directory
      3. GitHub Actions inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}")
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping of settings.")
        config.update(file_config)

    for key in _INPUT_KEYS:
        value = _action_input(key)
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials: action inputs first, then plain environment variables
    config["api_key"] = _action_input("api_key") or os.environ.get("REVLINE_API_KEY")
    config["anthropic_api_key"] = _action_input("anthropic_api_key") or os.environ.get("ANTHROPIC_API_KEY")
    config["github_token"] = _action_input("github_token") or os.environ.get("GITHUB_TOKEN")

    return config


def validate_config(config: dict) -> dict:
    """Return a normalised copy of config, or raise ConfigError."""
    validated = dict(config)

    depth = validated.get("review_depth")
    if depth not in REVIEW_DEPTHS:
        raise ConfigError(f'Invalid review_depth "{depth}". Must be one of: {", ".join(REVIEW_DEPTHS)}')

    threshold = validated.get("severity_threshold")
    if threshold not in SEVERITIES:
        raise ConfigError(f'Invalid severity_threshold "{threshold}". Must be one of: {", ".join(SEVERITIES)}')

    raw_max = validated.get("max_files")
    try:
        if isinstance(raw_max, bool):
            raise ValueError
        max_files = int(raw_max)
    except (TypeError, ValueError):
        raise ConfigError(f'Invalid max_files "{raw_max}". Must be a positive integer.')
    if max_files < 1:
        raise ConfigError(f'Invalid max_files "{raw_max}". Must be a positive integer.')
    validated["max_files"] = max_files

    if not validated.get("api_key"):
        raise ConfigError("Missing review API key. Set the api_key input or REVLINE_API_KEY.")
    if not validated.get("anthropic_api_key"):
        raise ConfigError("Missing Anthropic API key. Set the anthropic_api_key input or ANTHROPIC_API_KEY.")

    validated["api_url"] = str(validated.get("api_url") or DEFAULT_CONFIG["api_url"]).rstrip("/")
    validated["custom_instructions"] = validated.get("custom_instructions") or ""
    return validated
