"""Shared fee data models.

Fee values are carried as the opaque decimal strings Horizon returns.
Nothing here parses them; numeric interpretation belongs to the insights
engine.
"""

from dataclasses import dataclass
from datetime import datetime

#: Percentile fields reported in every fee_charged record, lowest first.
PERCENTILE_FIELDS = ("p10", "p25", "p50", "p75", "p90", "p95")


@dataclass(frozen=True)
class ChargedFees:
    """Distribution of fees charged in recent ledgers (stroops, as strings)."""

    min: str
    max: str
    avg: str
    p10: str
    p25: str
    p50: str
    p75: str
    p90: str
    p95: str

    def percentiles(self) -> dict[str, str]:
        """Return the percentile fields keyed by name."""
        return {name: getattr(self, name) for name in PERCENTILE_FIELDS}


@dataclass(frozen=True)
class FeeStats:
    """Fee statistics as returned by the provider, before timestamping."""

    base_fee: str
    charged: ChargedFees


@dataclass(frozen=True)
class FeeSnapshot:
    """Fee statistics captured at one poll.

    ``captured_at`` is assigned by the poller when the fetch completes;
    upstream timestamps are not trusted.
    """

    base_fee: str
    charged: ChargedFees
    captured_at: datetime

    @classmethod
    def from_stats(cls, stats: FeeStats, captured_at: datetime) -> "FeeSnapshot":
        return cls(base_fee=stats.base_fee, charged=stats.charged, captured_at=captured_at)
