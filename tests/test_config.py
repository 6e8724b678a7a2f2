"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from wow.config import DEFAULT_QUOTES_FILE, Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.server_address == ":7700"
    assert settings.pow_difficulty == 22
    assert settings.pow_prefix_bytes == 8
    assert settings.pow_challenge_ttl_seconds == 5.0
    assert settings.quotes_file_path == DEFAULT_QUOTES_FILE


def test_bundled_quotes_file_exists():
    assert DEFAULT_QUOTES_FILE.is_file()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("WOW_POW_DIFFICULTY", "12")
    monkeypatch.setenv("WOW_SERVER_ADDRESS", "127.0.0.1:9000")
    monkeypatch.setenv("WOW_CLIENT_TIMEOUT_SECONDS", "0.5")

    settings = Settings(_env_file=None)

    assert settings.pow_difficulty == 12
    assert settings.server_address == "127.0.0.1:9000"
    assert settings.client_timeout_seconds == 0.5


def test_log_format_is_normalised(monkeypatch):
    monkeypatch.setenv("WOW_LOG_FORMAT", "JSON")

    assert Settings(_env_file=None).log_format == "json"


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError, match="log_format"):
        Settings(_env_file=None, log_format="xml")
