"""
Application configuration.

Responsibilities:
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No counter or dispatch logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import (
    COUNTER_INITIAL_VALUE_DEFAULT,
    DEMO_JITTER_MAX_MS,
    DEMO_JITTER_MIN_MS,
    HTTP_HOST_DEFAULT,
    HTTP_PORT_DEFAULT,
)


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed downward to the
    app factory / demo runner.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # Counter / dispatch
    # ------------------------------------------------------------------

    counter_initial_value: int
    dispatch_max_in_flight: int | None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool

    # ------------------------------------------------------------------
    # Demo
    # ------------------------------------------------------------------

    demo_jitter_min_ms: int
    demo_jitter_max_ms: int

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    http_host: str
    http_port: int

    def __post_init__(self) -> None:
        if self.dispatch_max_in_flight is not None and self.dispatch_max_in_flight <= 0:
            raise ValueError("DISPATCH_MAX_IN_FLIGHT must be > 0")
        if self.demo_jitter_min_ms < 0 or self.demo_jitter_max_ms < self.demo_jitter_min_ms:
            raise ValueError("demo jitter range must satisfy 0 <= min <= max")

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable is malformed or out of range.
        """
        max_in_flight = os.environ.get("DISPATCH_MAX_IN_FLIGHT")

        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            counter_initial_value=int(
                os.environ.get("COUNTER_INITIAL_VALUE", COUNTER_INITIAL_VALUE_DEFAULT)
            ),
            dispatch_max_in_flight=int(max_in_flight) if max_in_flight else None,

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",

            demo_jitter_min_ms=int(
                os.environ.get("DEMO_JITTER_MIN_MS", DEMO_JITTER_MIN_MS)
            ),
            demo_jitter_max_ms=int(
                os.environ.get("DEMO_JITTER_MAX_MS", DEMO_JITTER_MAX_MS)
            ),

            http_host=os.environ.get("HTTP_HOST", HTTP_HOST_DEFAULT),
            http_port=int(os.environ.get("HTTP_PORT", HTTP_PORT_DEFAULT)),
        )
