# src/graphbridge/core/config.py
"""
Configuration schema and loading for graphbridge.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    max_depth: 32
    hook_name: run
    include_nulls: false
    null_empty_collections: true
    map_placeholder_key: key
    root_name: root
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from graphbridge.core.traversal import DEFAULT_MAX_DEPTH


class BridgeSettings(BaseModel):
    """Options shared by the walkers and the interop session."""

    model_config = {"frozen": True}

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        gt=0,
        description="Recursion cap for every walker",
    )
    hook_name: str = Field(
        default="run",
        description="Name under which per-node hooks are attached",
    )
    include_nulls: bool = Field(
        default=False,
        description="Keep None-valued children in attribute maps",
    )
    null_empty_collections: bool = Field(
        default=True,
        description="Pruner sets collections that end up empty to None",
    )
    map_placeholder_key: str = Field(
        default="key",
        description="Key used when the populator seeds an empty map",
    )
    root_name: str = Field(
        default="root",
        description="Name the session binds the root attribute map under",
    )

    @field_validator("hook_name", "root_name")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Host-visible names must be valid identifiers."""
        if not v.isidentifier():
            raise ValueError(f"'{v}' is not a valid identifier")
        return v


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Expand ${VAR} and ${VAR:-default} patterns in string values."""

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        if match.group(2) is not None:
            return match.group(2)
        # No env var and no default - keep original so validation reports it
        return match.group(0)

    return {k: _ENV_VAR_PATTERN.sub(replacer, v) if isinstance(v, str) else v for k, v in config.items()}


def load_settings(config_path: Path) -> BridgeSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (GRAPHBRIDGE_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated BridgeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="GRAPHBRIDGE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
    )

    # Dynaconf returns uppercase keys; filter its internal settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return BridgeSettings(**_expand_env_vars(raw_config))
