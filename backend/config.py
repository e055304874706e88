"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No orchestration logic
- No mode priorities (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import INTER_TRANSFER_MS, START_SETTLE_MS, TICK_INTERVAL_MS


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to bootstrap code, which hands the relevant values
    to the pipelines and the runtime driver.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str = "dev"
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool = True

    # ------------------------------------------------------------------
    # Tick driver
    # ------------------------------------------------------------------

    tick_interval_ms: int = TICK_INTERVAL_MS

    # ------------------------------------------------------------------
    # Transfer pipelines
    # ------------------------------------------------------------------

    start_settle_ms: int = START_SETTLE_MS
    inter_transfer_ms: int = INTER_TRANSFER_MS
    pause_time_on_transfer: bool = True

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    first_bundle: str | None = None
    core_bundles: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable is not an integer.
        """
        core = os.environ.get("CORE_BUNDLES", "")

        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",

            tick_interval_ms=int(os.environ.get("TICK_INTERVAL_MS", TICK_INTERVAL_MS)),
            start_settle_ms=int(os.environ.get("START_SETTLE_MS", START_SETTLE_MS)),
            inter_transfer_ms=int(os.environ.get("INTER_TRANSFER_MS", INTER_TRANSFER_MS)),
            pause_time_on_transfer=os.environ.get("PAUSE_TIME_ON_TRANSFER", "1") == "1",

            first_bundle=os.environ.get("FIRST_BUNDLE") or None,
            core_bundles=tuple(name.strip() for name in core.split(",") if name.strip()),
        )
