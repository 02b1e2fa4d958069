"""
Configuration management for the Atlas instance lifecycle tools.
"""

import json
import os
import uuid
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_TOKEN_URL = "https://fluidstack.us.auth0.com/oauth/token"
DEFAULT_AUDIENCE = "https://api.fluidstack.io"

REQUIRED_KEYS = ["ATLAS_PROJECT_ID", "ATLAS_REGION_URL"]
NUMERIC_KEYS = [
    "ATLAS_POLL_INTERVAL",
    "ATLAS_POLL_MAX_ATTEMPTS",
    "ATLAS_POLL_TIMEOUT",
    "ATLAS_REQUEST_TIMEOUT",
]


def load_config(config_file: Path | None = None) -> dict[str, Any]:
    """Load configuration from file or environment variables."""
    config: dict[str, Any] = {}

    # Load .env file if it exists
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file {config_file} does not exist")
        try:
            with open(config_file) as f:
                config.update(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config file {config_file}: {e}")

    env_config = {
        "ATLAS_PROJECT_ID": os.getenv("ATLAS_PROJECT_ID"),
        "ATLAS_REGION_URL": os.getenv("ATLAS_REGION_URL"),
        "ATLAS_TOKEN": os.getenv("ATLAS_TOKEN"),
        "ATLAS_CLIENT_ID": os.getenv("ATLAS_CLIENT_ID"),
        "ATLAS_CLIENT_SECRET": os.getenv("ATLAS_CLIENT_SECRET"),
        "ATLAS_TOKEN_URL": os.getenv("ATLAS_TOKEN_URL"),
        "ATLAS_AUDIENCE": os.getenv("ATLAS_AUDIENCE"),
        "ATLAS_POLL_INTERVAL": os.getenv("ATLAS_POLL_INTERVAL"),
        "ATLAS_POLL_MAX_ATTEMPTS": os.getenv("ATLAS_POLL_MAX_ATTEMPTS"),
        "ATLAS_POLL_TIMEOUT": os.getenv("ATLAS_POLL_TIMEOUT"),
        "ATLAS_REQUEST_TIMEOUT": os.getenv("ATLAS_REQUEST_TIMEOUT"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL"),
    }

    # Filter out None values
    env_config = {k: v for k, v in env_config.items() if v is not None}
    config.update(env_config)

    config.setdefault("ATLAS_TOKEN_URL", DEFAULT_TOKEN_URL)
    config.setdefault("ATLAS_AUDIENCE", DEFAULT_AUDIENCE)
    config.setdefault("ATLAS_POLL_INTERVAL", 5)
    config.setdefault("ATLAS_REQUEST_TIMEOUT", 30)
    config.setdefault("LOG_LEVEL", "INFO")

    return config


def validate_config(config: dict[str, Any]) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    for key in REQUIRED_KEYS:
        if key not in config or not config[key]:
            errors.append(f"Missing required configuration: {key}")

    project_id = config.get("ATLAS_PROJECT_ID")
    if project_id:
        try:
            uuid.UUID(str(project_id))
        except ValueError:
            errors.append(f"Invalid UUID for ATLAS_PROJECT_ID: {project_id}")

    if not config.get("ATLAS_TOKEN"):
        for key in ["ATLAS_CLIENT_ID", "ATLAS_CLIENT_SECRET"]:
            if not config.get(key):
                errors.append(
                    f"Missing required configuration: {key} (or set ATLAS_TOKEN)"
                )

    for key in NUMERIC_KEYS:
        if config.get(key) in (None, ""):
            continue
        try:
            value = float(config[key])
        except (ValueError, TypeError):
            errors.append(f"Invalid numeric value for {key}: {config[key]}")
            continue
        if value <= 0:
            errors.append(f"{key} must be positive, got {config[key]}")

    return errors


def require_config(config: dict[str, Any]) -> dict[str, Any]:
    """Return the configuration or raise ConfigurationError listing every problem."""
    errors = validate_config(config)
    if errors:
        raise ConfigurationError("; ".join(errors))
    return config
