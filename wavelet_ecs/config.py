"""Settings loaded from wavelet_ecs.toml.

Resolution order:
    1. WAVELET_ECS_CONFIG environment variable
    2. explicit config_path argument
    3. ./wavelet_ecs.toml
    4. ~/wavelet_ecs.toml
    5. built-in defaults

Example file:

    [dwt]
    wavelet = "db4"
    levels = 3

    [world]
    arena_bytes = 67108864

    [logging]
    level = "INFO"
    file = "logs/wavelet_ecs.log"
"""

from __future__ import annotations

import os
from typing import Any, cast

from pydantic import BaseModel, Field, field_validator

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

from wavelet_ecs.core.world import DEFAULT_ARENA_BYTES

ENV_VAR = "WAVELET_ECS_CONFIG"
CONFIG_NAME = "wavelet_ecs.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Runtime defaults for transforms, worlds and logging.

    Attributes:
        wavelet: Default wavelet name for systems and the api
        levels: Default number of decomposition levels
        arena_bytes: Arena size for worlds created by the api
        log_level: Level passed to setup_logging()
        log_file: Optional log file path
    """

    wavelet: str = "db2"
    levels: int = Field(default=3, ge=1)
    arena_bytes: int = Field(default=DEFAULT_ARENA_BYTES, gt=0)
    log_level: str = "WARNING"
    log_file: str | None = None

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level {value!r}, expected one of {LOG_LEVELS}")
        return level


def resolve_config_path(config_path: str | None = None) -> str | None:
    """Find the config file to load, or None to use defaults.

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
    """
    explicit = os.environ.get(ENV_VAR) or config_path
    if explicit:
        if not os.path.exists(explicit):
            raise FileNotFoundError(
                f"Config file not found at {explicit}. Set {ENV_VAR} or create {CONFIG_NAME}"
            )
        return explicit
    for candidate in (CONFIG_NAME, os.path.expanduser(f"~/{CONFIG_NAME}")):
        if os.path.exists(candidate):
            return candidate
    return None


def load_settings(config_path: str | None = None) -> Settings:
    """Load settings from the resolved TOML file, falling back to defaults."""
    resolved = resolve_config_path(config_path)
    if resolved is None:
        return Settings()

    with open(resolved, "rb") as f:
        config = cast(dict[str, Any], tomllib.load(f))

    dwt = config.get("dwt", {})
    world = config.get("world", {})
    logging_cfg = config.get("logging", {})

    values: dict[str, Any] = {}
    if "wavelet" in dwt:
        values["wavelet"] = dwt["wavelet"]
    if "levels" in dwt:
        values["levels"] = dwt["levels"]
    if "arena_bytes" in world:
        values["arena_bytes"] = world["arena_bytes"]
    if "level" in logging_cfg:
        values["log_level"] = logging_cfg["level"]
    if "file" in logging_cfg:
        values["log_file"] = logging_cfg["file"]
    return Settings(**values)
