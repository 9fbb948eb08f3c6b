"""
Settings 테스트

@FEAT:framework @COMP:test @TYPE:unit
"""

import pytest
from pydantic import ValidationError

from merchant_sync.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.ORDER_CACHE_TTL_MS == 30_000
        assert settings.ORDERS_CACHE_TTL_MS == 300_000
        assert settings.DEPOSITS_CACHE_TTL_MS == 180_000
        assert settings.DEPOSIT_CACHE_TTL_MS == 120_000
        assert settings.PROFILE_CACHE_TTL_MS == 600_000
        assert settings.PAYMENT_COMPLETED_EVENT == "payment_completed"

    def test_base_url_gets_trailing_slash(self):
        settings = Settings(_env_file=None, API_BASE_URL="https://api.example.com")

        assert settings.API_BASE_URL == "https://api.example.com/"

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_env_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENV="staging")

    def test_ttl_must_be_non_negative(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ORDER_CACHE_TTL_MS=-1)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PUSHER_CLUSTER", "ap3")
        monkeypatch.setenv("API_MAX_RETRIES", "3")

        settings = Settings(_env_file=None)

        assert settings.PUSHER_CLUSTER == "ap3"
        assert settings.API_MAX_RETRIES == 3
