"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from foodles.core.config import EnvironmentMode, Settings


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_defaults(self):
        settings = make_settings()

        assert settings.is_development
        assert not settings.use_real_services
        assert settings.missed_call_timeout_seconds == 15
        assert settings.notification_retention_seconds == 60.0
        assert settings.status_cache_ttl_seconds == 10.0
        assert settings.tracked_restaurant_ids_list == ["1", "2", "3"]

    def test_env_mode_is_case_insensitive(self):
        assert make_settings(env_mode="PRODUCTION").env_mode == EnvironmentMode.PRODUCTION

    def test_invalid_env_mode(self):
        with pytest.raises(ValidationError):
            make_settings(env_mode="qa")

    def test_cors_origins_list(self):
        settings = make_settings(cors_origins="https://a.example, https://b.example ,")

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_twilio_credentials_need_sid_and_token(self):
        settings = make_settings(
            twilio_account_sid_1="AC1",
            twilio_auth_token_1="t1",
            twilio_phone_number_1="+15550001111",
            twilio_account_sid_2="AC2",
        )

        credentials = settings.twilio_credentials

        assert list(credentials) == ["1"]
        assert credentials["1"].phone_number == "+15550001111"

    def test_production_config_reports_missing_keys(self):
        settings = make_settings(env_mode="production", razorpay_key_id="rzp_live_x")

        missing = settings.validate_production_config()

        assert "RAZORPAY_KEY_SECRET" in missing
        assert "SENDGRID_API_KEY" in missing
        assert "RAZORPAY_KEY_ID" not in missing

    def test_development_needs_nothing(self):
        assert make_settings().validate_production_config() == []
