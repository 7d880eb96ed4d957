"""Mini README: Centralised configuration for the Dairy Ledger service.

Structure:
    * DairyLedgerSettings - Pydantic settings model read from the environment.
    * get_settings - cached accessor used by the web app and the CLI.

Usage:
    Variables use the ``DAIRYLEDGER_`` prefix (``DAIRYLEDGER_INTERFACE_PORT``
    and so on) and may also live in a ``.env`` file. Settings are validated
    once per process.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class DairyLedgerSettings(BaseSettings):
    """Runtime configuration for the record-keeping service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the HTTP service exposes.",
        ge=1,
        le=65535,
    )
    currency_label: str = Field(
        "KSh",
        description="Currency label attached to finance summaries. Amounts are whole units.",
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level applied when the service starts.",
    )
    seed_demo_data: bool = Field(
        False,
        description="Populate the in-memory ledger with demo transactions on start-up.",
    )

    class Config:
        env_prefix = "DAIRYLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("log_level")
    def _check_log_level(cls, value: str) -> str:
        """Reject level names the logging module does not know."""

        normalised = value.strip().upper()
        if not isinstance(logging.getLevelName(normalised), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalised


@lru_cache()
def get_settings() -> DairyLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return DairyLedgerSettings()
