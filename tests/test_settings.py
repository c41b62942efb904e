"""Tests for settings and configuration."""

import pytest
from pydantic import ValidationError

from curation_desk.models.settings import Settings

MAILCHIMP_VARS = (
    "MAILCHIMP_API_KEY",
    "MAILCHIMP_SERVER_PREFIX",
    "MAILCHIMP_LIST_ID",
    "DATABASE_PATH",
    "ESP_PROVIDER",
    "DEBUG",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in MAILCHIMP_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    """Test that settings have proper default values."""
    settings = Settings(_env_file=None)
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.database_path == ".data/curation_desk.db"
    assert settings.esp_provider == "mailchimp"
    assert settings.mailchimp_api_key is None
    assert settings.mailchimp_server_prefix is None
    assert settings.mailchimp_min_schedule_minutes == 15


def test_settings_from_env(monkeypatch):
    """Test that settings are loaded from environment variables."""
    monkeypatch.setenv("MAILCHIMP_API_KEY", "abc123-us21")
    monkeypatch.setenv("MAILCHIMP_LIST_ID", "list-9")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings(_env_file=None)
    assert settings.mailchimp_list_id == "list-9"
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.mailchimp_server_prefix == "us21"


def test_settings_case_insensitive(monkeypatch):
    """Test that environment variable names are case insensitive."""
    monkeypatch.setenv("mailchimp_list_id", "lowercase_list")

    settings = Settings(_env_file=None)
    assert settings.mailchimp_list_id == "lowercase_list"


def test_explicit_server_prefix_wins():
    settings = Settings(
        _env_file=None, mailchimp_api_key="abc-us7", mailchimp_server_prefix="us1"
    )
    assert settings.mailchimp_server_prefix == "us1"


def test_key_without_data_center_leaves_prefix_unset():
    settings = Settings(_env_file=None, mailchimp_api_key="abc")
    assert settings.mailchimp_server_prefix is None


@pytest.mark.parametrize(
    "field,value",
    [("mailchimp_timeout", 1.0), ("mailchimp_timeout", 120.0), ("mailchimp_min_schedule_minutes", -1)],
)
def test_settings_validation(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
