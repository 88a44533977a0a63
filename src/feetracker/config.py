"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from feetracker.insights.models import InsightsConfig


class HorizonSettings(BaseSettings):
    """Upstream Horizon API connection settings."""

    model_config = SettingsConfigDict(env_prefix="HORIZON_")

    url: str = "https://horizon.stellar.org"
    timeout_seconds: float = Field(default=10.0, gt=0)


class PollSettings(BaseSettings):
    """Fee polling cadence."""

    model_config = SettingsConfigDict(env_prefix="POLL_")

    interval_seconds: int = Field(default=10, ge=1)


class StoreSettings(BaseSettings):
    """In-memory fee history retention."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    capacity: int = Field(default=100, ge=1)


class InsightsSettings(BaseSettings):
    """Insights engine parameters.

    Controls the moving-average window, the spread ratio above which the
    window is flagged volatile, the relative change that counts as a trend,
    and the band around the moving average that maps to the "normal" tier.
    All fields configurable via INSIGHTS_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_")

    window_size: int = Field(default=10, ge=1)
    volatility_threshold: Decimal = Field(default=Decimal("1.5"), gt=0)
    trend_sensitivity: Decimal = Field(default=Decimal("0.05"), ge=0)
    tier_tolerance: Decimal = Field(default=Decimal("0.10"), ge=0, lt=1)

    def to_config(self) -> InsightsConfig:
        """Freeze these settings into the engine's immutable config."""
        return InsightsConfig(
            window_size=self.window_size,
            volatility_threshold=self.volatility_threshold,
            trend_sensitivity=self.trend_sensitivity,
            tier_tolerance=self.tier_tolerance,
        )


class ApiSettings(BaseSettings):
    """HTTP query surface configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    enabled: bool = True
    allowed_origins: str = "*"  # comma-separated

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    horizon: HorizonSettings = Field(default_factory=HorizonSettings)
    poll: PollSettings = Field(default_factory=PollSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    insights: InsightsSettings = Field(default_factory=InsightsSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
