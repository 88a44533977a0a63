"""Snapshot builders shared by the test modules."""

from datetime import datetime, timedelta, timezone

from feetracker.models import ChargedFees, FeeSnapshot, FeeStats

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_stats(
    avg: str = "100",
    p50: str = "100",
    min: str = "100",
    max: str = "200",
    base_fee: str = "100",
) -> FeeStats:
    """Build FeeStats with plausible defaults for the fields a test doesn't care about."""
    return FeeStats(
        base_fee=base_fee,
        charged=ChargedFees(
            min=min,
            max=max,
            avg=avg,
            p10="100",
            p25="100",
            p50=p50,
            p75="150",
            p90="180",
            p95="200",
        ),
    )


def make_snapshot(seq: int = 0, **fields: str) -> FeeSnapshot:
    """Build a FeeSnapshot captured ``seq`` seconds after BASE_TIME."""
    return FeeSnapshot.from_stats(
        make_stats(**fields), captured_at=BASE_TIME + timedelta(seconds=seq)
    )
