"""
Runtime settings read from the environment.

Environment Variables:
    REWIND_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    REWIND_LOG_FORMAT: Log format (json, text) - default: text
    REWIND_STRICT: Validate JUMP_TO_STATE/TOGGLE_ACTION/IMPORT_STATE (1, true, yes) - default: off
"""

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_format: str = "text"
    strict: bool = False

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            log_level=os.getenv("REWIND_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("REWIND_LOG_FORMAT", "text").lower(),
            strict=os.getenv("REWIND_STRICT", "").strip().lower() in _TRUTHY,
        )
