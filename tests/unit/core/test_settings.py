"""Tests for the settings composition."""

import pytest
from pydantic import ValidationError

from marketplace_client.core.config.settings import Settings, create_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

        config = Settings(_env_file=None)

        assert config.API_BASE_URL == "http://localhost:5000/api"
        assert config.OTP_LENGTH == 6
        assert config.OTP_RESEND_COOLDOWN_SECONDS == 60
        assert config.PAGE_SIZE == 10
        assert config.TOKEN_EXPIRES_IN == "1y"
        assert config.DEBUG is True

    def test_environment_variables_override_defaults(self, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "https://market.example.com/api/")
        monkeypatch.setenv("OTP_LENGTH", "4")
        monkeypatch.setenv("SUPPORTED_LANGUAGES", "en, ES")

        config = Settings(_env_file=None)

        assert config.API_BASE_URL == "https://market.example.com/api"
        assert config.OTP_LENGTH == 4
        assert config.SUPPORTED_LANGUAGES == ["en", "es"]

    def test_token_store_backend_is_normalized(self):
        config = Settings(_env_file=None, TOKEN_STORE_BACKEND=" Redis ")

        assert config.TOKEN_STORE_BACKEND == "redis"

    def test_unknown_token_store_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, TOKEN_STORE_BACKEND="sqlite")

    @pytest.mark.parametrize("field, value", [("PAGE_SIZE", 0), ("READ_RETRY_ATTEMPTS", 9), ("API_TIMEOUT_SECONDS", 0)])
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_unsupported_default_language_falls_back(self):
        config = Settings(_env_file=None, DEFAULT_LANGUAGE="fr", SUPPORTED_LANGUAGES="es,en")

        assert config.DEFAULT_LANGUAGE == "es"

    def test_production_is_not_debug(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("APP_ENV", "production")

        config = create_settings()

        assert config.APP_ENV == "production"
        assert config.DEBUG is False
