# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from config import AppConfig
from constants import INTER_TRANSFER_MS, START_SETTLE_MS, TICK_INTERVAL_MS, ms_to_seconds


def test_defaults_come_from_constants():
    config = AppConfig()

    assert config.tick_interval_ms == TICK_INTERVAL_MS
    assert config.start_settle_ms == START_SETTLE_MS
    assert config.inter_transfer_ms == INTER_TRANSFER_MS
    assert config.pause_time_on_transfer is True
    assert config.first_bundle is None
    assert config.core_bundles == ()


def test_load_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("ENABLE_JSON_LOGS", "0")
    monkeypatch.setenv("TICK_INTERVAL_MS", "33")
    monkeypatch.setenv("START_SETTLE_MS", "0")
    monkeypatch.setenv("INTER_TRANSFER_MS", "10")
    monkeypatch.setenv("PAUSE_TIME_ON_TRANSFER", "0")
    monkeypatch.setenv("FIRST_BUNDLE", "title")
    monkeypatch.setenv("CORE_BUNDLES", " core, ui ,,")

    config = AppConfig.load_from_env()

    assert config.env == "prod"
    assert config.log_level == "WARNING"
    assert config.enable_json_logs is False
    assert config.tick_interval_ms == 33
    assert config.start_settle_ms == 0
    assert config.inter_transfer_ms == 10
    assert config.pause_time_on_transfer is False
    assert config.first_bundle == "title"
    assert config.core_bundles == ("core", "ui")


def test_empty_first_bundle_means_none(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FIRST_BUNDLE", "")
    assert AppConfig.load_from_env().first_bundle is None


def test_invalid_number_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TICK_INTERVAL_MS", "fast")
    with pytest.raises(ValueError):
        AppConfig.load_from_env()


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        AppConfig().env = "prod"  # type: ignore[misc]


def test_ms_to_seconds():
    assert ms_to_seconds(250) == 0.25
    assert ms_to_seconds(0) == 0.0
    assert ms_to_seconds(-5) == 0.0
