"""Tests for environment-backed settings."""

from __future__ import annotations

import pytest

from carbon_curves.settings import DEFAULT_EXPECTED_LIFESPAN_SECONDS, get_settings


def test_defaults() -> None:
    settings = get_settings()

    assert settings.data_dir is None
    assert settings.expected_lifespan_seconds == DEFAULT_EXPECTED_LIFESPAN_SECONDS
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARBON_CURVES_DATA_DIR", "/srv/tables")
    monkeypatch.setenv("CARBON_CURVES_EXPECTED_LIFESPAN", " 86400 ")
    monkeypatch.setenv("CARBON_CURVES_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.data_dir == "/srv/tables"
    assert settings.expected_lifespan_seconds == 86400.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["abc", "-5", "0", ""])
def test_malformed_lifespan_falls_back_to_default(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("CARBON_CURVES_EXPECTED_LIFESPAN", raw)

    assert get_settings().expected_lifespan_seconds == DEFAULT_EXPECTED_LIFESPAN_SECONDS


def test_blank_log_level_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARBON_CURVES_LOG_LEVEL", "  ")

    assert get_settings().log_level == "WARNING"
