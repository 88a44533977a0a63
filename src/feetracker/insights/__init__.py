"""Fee insights -- trend, volatility, and tier analytics over the fee history."""

from feetracker.insights.engine import FeeInsightsEngine
from feetracker.insights.models import (
    FeeTier,
    Insights,
    InsightsConfig,
    InsightsStatus,
    TrendDirection,
)

__all__ = [
    "FeeInsightsEngine",
    "FeeTier",
    "Insights",
    "InsightsConfig",
    "InsightsStatus",
    "TrendDirection",
]
