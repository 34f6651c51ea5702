"""
Tests for settings and service wiring.
"""
from typing import Any, Dict

import pytest
from pydantic import ValidationError

from failure_monitor.api.services import build_services
from failure_monitor.config import Settings, get_settings

BASE_ENV: Dict[str, Any] = {
    "stripe_secret_key": "sk_test_fake_key_for_testing",
    "airtable_api_key": "pat_test",
    "gmail_user": "monitor@example.com",
    "gmail_app_password": "app-password",
}


class TestSettings:
    """Test suite for Settings."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        settings = Settings(**BASE_ENV)

        assert settings.airtable_base_id == "appUNIsu8KgvOlmi0"
        assert settings.airtable_table_name == "Failed Payments"
        assert settings.port == 3000
        assert settings.activity_log_capacity == 100
        assert settings.alert_recipient == "monitor@example.com"

    @pytest.mark.unit
    def test_alert_override(self) -> None:
        settings = Settings(**BASE_ENV, alert_email="ops@example.com")

        assert settings.alert_recipient == "ops@example.com"

    @pytest.mark.unit
    def test_invalid_stripe_key(self) -> None:
        with pytest.raises(ValidationError, match="Invalid Stripe secret key"):
            Settings(**{**BASE_ENV, "stripe_secret_key": "pk_test_nope"})

    @pytest.mark.unit
    def test_restricted_stripe_key_accepted(self) -> None:
        settings = Settings(**{**BASE_ENV, "stripe_secret_key": "rk_live_abc"})

        assert settings.stripe_secret_key == "rk_live_abc"

    @pytest.mark.unit
    def test_invalid_stripe_key_lists_accepted_prefixes(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Settings(**{**BASE_ENV, "stripe_secret_key": "pk_test_nope"})

        message = str(exc_info.value)
        for prefix in ("sk_test_", "sk_live_", "rk_test_", "rk_live_"):
            assert prefix in message

    @pytest.mark.unit
    def test_log_level_normalized(self) -> None:
        assert Settings(**BASE_ENV, log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValidationError):
            Settings(**BASE_ENV, log_level="chatty")

    @pytest.mark.unit
    def test_loaded_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key, value in BASE_ENV.items():
            monkeypatch.setenv(key.upper(), value)
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ALERT_EMAIL", "ops@example.com")
        get_settings.cache_clear()

        try:
            settings = get_settings()
            assert settings.port == 8080
            assert settings.alert_recipient == "ops@example.com"
            assert get_settings() is settings
        finally:
            get_settings.cache_clear()


class TestBuildServices:
    """Test suite for service wiring."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_components_share_activity_log(self) -> None:
        settings = Settings(**BASE_ENV, alert_email="ops@example.com", activity_log_capacity=5)

        services = build_services(settings)
        try:
            log = services.activity_log
            assert log.capacity == 5
            assert services.notifier.activity_log is log
            assert services.recorder.activity_log is log
            assert services.handler.activity_log is log
            assert services.dispatcher.activity_log is log
            assert services.dispatcher.handler is services.handler
            assert services.notifier.recipient == "ops@example.com"
            assert services.recorder.table_url.endswith("/appUNIsu8KgvOlmi0/Failed%20Payments")
        finally:
            await services.aclose()
