"""Insights data models.

CRITICAL: All derived values use Decimal. Fee strings are never parsed as float.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TrendDirection(str, Enum):
    """Direction of the average fee across the window."""

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class FeeTier(str, Enum):
    """Suggested fee level relative to recent conditions (heuristic)."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


@dataclass(frozen=True)
class InsightsConfig:
    """Immutable insights engine parameters."""

    window_size: int = 10
    volatility_threshold: Decimal = Decimal("1.5")
    trend_sensitivity: Decimal = Decimal("0.05")
    tier_tolerance: Decimal = Decimal("0.10")

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {self.window_size}")
        if self.volatility_threshold <= 0:
            raise ValueError("volatility_threshold must be positive")
        if self.trend_sensitivity < 0:
            raise ValueError("trend_sensitivity must not be negative")
        if not Decimal("0") <= self.tier_tolerance < Decimal("1"):
            raise ValueError("tier_tolerance must be in [0, 1)")


@dataclass(frozen=True)
class Insights:
    """Analytics derived from the most recent window of fee snapshots."""

    moving_average: Decimal  # mean of fee_charged.avg over the window
    trend: TrendDirection
    volatile: bool
    spread_ratio: Decimal  # (max - min) / moving_average across the window
    recommended_tier: FeeTier
    latest_p50: Decimal
    sample_size: int  # snapshots actually used (<= window_size)
    window_size: int
    as_of: datetime  # captured_at of the newest snapshot used


@dataclass(frozen=True)
class InsightsStatus:
    """What readers get from the engine: last good insights plus degradation info.

    ``insights`` is None until the first successful recompute.
    """

    insights: Insights | None = None
    degraded: bool = False
    last_error: str | None = None
    degraded_at: datetime | None = None
    degraded_count: int = 0

    @property
    def available(self) -> bool:
        return self.insights is not None
