"""CLI configuration.

Settings are read from a YAML file, then from environment variables; command
line options override both.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from envteardown.teardown.guest import DEFAULT_GUEST_COMMAND

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".envteardown" / "config.yaml"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment variable -> (field, converter)
ENV_OVERRIDES = {
    "ENVTEARDOWN_REGION": ("region", str),
    "AWS_PROFILE": ("aws_profile", str),
    "ENVTEARDOWN_MIN_FILTER_LENGTH": ("min_filter_length", int),
    "ENVTEARDOWN_MAX_INSTANCES": ("max_instances", int),
    "ENVTEARDOWN_PROMPT": ("prompt", _parse_bool),
    "ENVTEARDOWN_LOG_LEVEL": ("log_level", str),
    "ENVTEARDOWN_EXPECTED_ACCOUNT": ("expected_account_id", str),
}


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        aws_profile: AWS profile name
        region: AWS region
        expected_account_id: Refuse to run against any other account
        min_filter_length: Shortest filter accepted without override
        max_instances: Largest instance count accepted without override
        prompt: Ask for confirmation before deleting
        deregister_guests: Run guest deregistration before termination
        guest_command: Command run on each guest for deregistration
        detach_retries: Volume state polls before giving up
        detach_delay: Seconds between volume state polls
        max_workers: Parallel calls within a teardown phase
        log_level: Default log level
    """

    aws_profile: Optional[str] = None
    region: Optional[str] = None
    expected_account_id: Optional[str] = None
    min_filter_length: int = 8
    max_instances: int = 6
    prompt: bool = True
    deregister_guests: bool = True
    guest_command: str = DEFAULT_GUEST_COMMAND
    detach_retries: int = 5
    detach_delay: float = 10
    max_workers: int = 1
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[dict[str, str]] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: $ENVTEARDOWN_CONFIG or ~/.envteardown/config.yaml)
            environ: Environment mapping (default: os.environ)

        Returns:
            Config instance

        Raises:
            ValueError: If the file is not a YAML mapping or has unknown keys
        """
        env = os.environ if environ is None else environ
        config_path = Path(path or env.get("ENVTEARDOWN_CONFIG") or DEFAULT_CONFIG_PATH)

        values: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {config_path} must contain a mapping")

            known = {f.name for f in fields(cls)}
            unknown = set(data) - known
            if unknown:
                raise ValueError(f"Unknown config keys in {config_path}: {', '.join(sorted(unknown))}")
            values.update(data)
            logger.debug(f"Loaded config from {config_path}")

        for var, (name, convert) in ENV_OVERRIDES.items():
            raw = env.get(var)
            if raw:
                values[name] = convert(raw)

        return cls(**values)
