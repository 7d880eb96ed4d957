"""Mini README: Tests for environment-driven settings.

Checks defaults, the ``DAIRYLEDGER_`` prefix and log level validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dairyledger.configuration import DairyLedgerSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DAIRYLEDGER_INTERFACE_PORT", raising=False)
    settings = DairyLedgerSettings(_env_file=None)

    assert settings.interface_port == 8000
    assert settings.currency_label == "KSh"
    assert settings.seed_demo_data is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAIRYLEDGER_INTERFACE_PORT", "9100")
    monkeypatch.setenv("DAIRYLEDGER_LOG_LEVEL", "debug")

    settings = DairyLedgerSettings(_env_file=None)

    assert settings.interface_port == 9100
    assert settings.log_level == "DEBUG"


def test_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAIRYLEDGER_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        DairyLedgerSettings(_env_file=None)
