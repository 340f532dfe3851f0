"""Runtime settings for elicit.

Settings are read from the environment:
- ELICIT_STRICT_OVERRIDES: "1"/"true"/"yes" to make the builder raise when an
  assumption matches no question (default: log a warning and continue).
- ELICIT_LOG_LEVEL: level name used by configure_logging() (default WARNING).
- ELICIT_MAX_ATTEMPTS: answers a scripted surface may try per question
  before the run is treated as cancelled (default 3).

Validation: Pydantic models enforce value constraints; invalid values raise
ConfigError.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from elicit.errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    strict_overrides: bool = Field(default=False)
    log_level: str = Field(default="WARNING")
    max_attempts: int = Field(default=3, ge=1)

    @field_validator("log_level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        name = str(v).strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v!r}")
        return name


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean flag, got {raw!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (or an explicit mapping, for tests)."""
    env = os.environ if environ is None else environ
    values = {}
    if "ELICIT_STRICT_OVERRIDES" in env:
        values["strict_overrides"] = _parse_bool("ELICIT_STRICT_OVERRIDES", env["ELICIT_STRICT_OVERRIDES"])
    if "ELICIT_LOG_LEVEL" in env:
        values["log_level"] = env["ELICIT_LOG_LEVEL"]
    if "ELICIT_MAX_ATTEMPTS" in env:
        values["max_attempts"] = env["ELICIT_MAX_ATTEMPTS"]
    try:
        settings = Settings(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid elicit settings: {e}") from e
    logger.debug("Loaded settings: %s", settings)
    return settings
