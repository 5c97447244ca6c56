"""Configuration for eventdriver.

Provides the options consumed by the provider layer. None of them
change how the registry or the dispatcher behave.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUTHY = ("1", "true", "True")


@dataclass
class EventBusConfig:
    """
    Configuration for an event provider.

    Args:
        max_listeners: Listener count per key above which a warning is
            logged (0 = unlimited)
        debug: Log every subscribe/unsubscribe/trigger at info level
        log_level: Level used by configure_from_config
        json_logs: Render logs as JSON instead of console output
    """

    max_listeners: int = 100
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        if self.max_listeners < 0:
            raise ValueError("max_listeners must be >= 0")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @classmethod
    def from_env(cls) -> EventBusConfig:
        """Load configuration from environment variables.

        Returns:
            EventBusConfig instance
        """
        max_listeners = os.environ.get("EVENTDRIVER_MAX_LISTENERS", "100")
        try:
            limit = int(max_listeners)
        except ValueError as e:
            raise ValueError(
                f"EVENTDRIVER_MAX_LISTENERS must be an integer, got {max_listeners!r}"
            ) from e

        return cls(
            max_listeners=limit,
            debug=os.environ.get("EVENTDRIVER_DEBUG", "0") in _TRUTHY,
            log_level=os.environ.get("EVENTDRIVER_LOG_LEVEL", "INFO"),
            json_logs=os.environ.get("EVENTDRIVER_JSON_LOGS", "0") in _TRUTHY,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
