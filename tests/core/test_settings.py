"""Tests for authkit/core/settings.py - environment-driven settings."""

import pytest
from pydantic import ValidationError

from authkit.core.settings import Settings, get_settings

REQUIRED_ENV = {
    "FIREBASE_PROJECT_ID": "demo-project",
    "FIREBASE_API_KEY": "env-api-key",
}


@pytest.fixture(name="env")
def env_fixture(monkeypatch):
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_reads_environment(env):
    env.setenv("ENABLE_BIOMETRIC_AUTH", "true")
    env.setenv("PASSWORD_MIN_LENGTH", "10")
    env.setenv("APPLE_SIGN_IN_TIMEOUT_SECONDS", "30")

    settings = Settings(_env_file=None)

    assert settings.firebase_project_id == "demo-project"
    assert settings.firebase_api_key == "env-api-key"
    assert settings.enable_biometric_auth is True
    assert settings.password_min_length == 10
    assert settings.apple_sign_in_timeout_seconds == 30.0


def test_missing_api_key(env):
    env.delenv("FIREBASE_API_KEY")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_to_configuration(env):
    env.setenv("GOOGLE_CLIENT_ID", "client-id")
    env.setenv("GOOGLE_REDIRECT_URI", "http://localhost:8000/auth/callback/google")
    env.setenv("ENABLE_APPLE_SIGN_IN", "false")
    env.setenv("PASSWORD_REQUIRE_NUMBERS", "1")
    env.setenv("APP_NAME", "Demo")

    configuration = Settings(_env_file=None).to_configuration()

    assert configuration.firebase_api_key == "env-api-key"
    assert configuration.google_client_id == "client-id"
    assert configuration.enable_apple_sign_in is False
    assert configuration.password_policy.require_numbers is True
    assert configuration.branding.app_name == "Demo"


def test_populate_by_field_name():
    settings = Settings(
        _env_file=None, firebase_project_id="p", firebase_api_key="k"
    )
    assert settings.to_configuration().firebase_project_id == "p"


def test_get_settings_is_cached(env):
    assert get_settings() is get_settings()
