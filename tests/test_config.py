"""Tests for settings loading, CLI overrides, and component wiring."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from feetracker.cli import load_settings, parse_args
from feetracker.config import ApiSettings, AppSettings, InsightsSettings, PollSettings
from feetracker.insights.models import InsightsConfig
from feetracker.main import build_components
from feetracker.provider.horizon import HorizonClient
from feetracker.scheduler.poller import FeePoller


class TestSettings:
    def test_defaults(self) -> None:
        settings = AppSettings()
        assert settings.poll.interval_seconds == 10
        assert settings.store.capacity == 100
        assert settings.insights.window_size == 10
        assert settings.api.port == 8080

    def test_env_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HORIZON_URL", "https://horizon-testnet.stellar.org")
        monkeypatch.setenv("POLL_INTERVAL_SECONDS", "30")
        monkeypatch.setenv("INSIGHTS_TREND_SENSITIVITY", "0.2")

        settings = AppSettings()
        assert settings.horizon.url == "https://horizon-testnet.stellar.org"
        assert settings.poll.interval_seconds == 30
        assert settings.insights.trend_sensitivity == Decimal("0.2")

    def test_poll_interval_must_be_at_least_one(self) -> None:
        with pytest.raises(ValidationError):
            PollSettings(interval_seconds=0)

    def test_allowed_origins_split(self) -> None:
        api = ApiSettings(allowed_origins="https://a.example, https://b.example,")
        assert api.origins == ["https://a.example", "https://b.example"]

    def test_insights_settings_to_config(self) -> None:
        config = InsightsSettings(window_size=4, volatility_threshold=Decimal("2")).to_config()
        assert config == InsightsConfig(
            window_size=4,
            volatility_threshold=Decimal("2"),
            trend_sensitivity=Decimal("0.05"),
            tier_tolerance=Decimal("0.10"),
        )


class TestCliOverrides:
    def test_no_flags_keeps_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PORT", "9000")
        settings = load_settings(parse_args([]))
        assert settings.api.port == 9000

    def test_flags_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLL_INTERVAL_SECONDS", "30")
        args = parse_args([
            "--horizon-url", "http://localhost:8000",
            "--port", "9999",
            "--poll-interval", "5",
            "--log-level", "DEBUG",
        ])
        settings = load_settings(args)

        assert settings.horizon.url == "http://localhost:8000"
        assert settings.api.port == 9999
        assert settings.poll.interval_seconds == 5
        assert settings.log_level == "DEBUG"

    def test_invalid_flag_value_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            load_settings(parse_args(["--poll-interval", "0"]))

    def test_once_flag(self) -> None:
        assert parse_args(["--once"]).once is True


class TestBuildComponents:
    def test_wires_configured_components(self, mock_settings: AppSettings) -> None:
        components = build_components(mock_settings)

        assert isinstance(components["provider"], HorizonClient)
        assert components["provider"].base_url == "http://horizon.test"
        assert components["store"].capacity == 5
        assert components["engine"].config == mock_settings.insights.to_config()
        assert isinstance(components["poller"], FeePoller)
        assert components["poller"].interval == 1
