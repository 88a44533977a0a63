"""Pure fee analytics: moving average, trend, volatility, and tier heuristics.

Every function takes Decimals already parsed from the snapshot strings and
quantizes its results so repeated runs over the same window produce
identical values.

CRITICAL: All computations use Decimal. Never use float.
"""

import re
from collections.abc import Sequence
from decimal import Decimal, DecimalException, InvalidOperation

from feetracker.exceptions import ComputationDegradedError
from feetracker.insights.models import FeeTier, Insights, InsightsConfig, TrendDirection
from feetracker.models import FeeSnapshot

#: Precision limit for derived values (6 decimal places).
#: Keeps Decimal division from producing arbitrarily long representations.
_QUANTIZE = Decimal("0.000001")

#: Plain decimal notation only: no whitespace, digit separators, NaN or Infinity.
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_fee(value: str, field: str) -> Decimal:
    """Parse an opaque fee string into a finite Decimal.

    Raises:
        ComputationDegradedError: if the value is not a plain finite decimal.
    """
    if not isinstance(value, str) or not _DECIMAL_PATTERN.fullmatch(value):
        raise ComputationDegradedError(f"{field}: cannot parse {value!r} as a decimal")
    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ComputationDegradedError(f"{field}: cannot parse {value!r} as a decimal") from e
    if not parsed.is_finite():
        raise ComputationDegradedError(f"{field}: {value!r} is not a finite decimal")
    return parsed


def mean(values: Sequence[Decimal]) -> Decimal:
    """Arithmetic mean, quantized. ``values`` must not be empty."""
    return (sum(values, Decimal("0")) / Decimal(len(values))).quantize(_QUANTIZE)


def classify_trend(values: Sequence[Decimal], sensitivity: Decimal) -> TrendDirection:
    """Classify the trend by comparing the recent half of ``values`` with the earlier half.

    Each half holds ``len(values) // 2`` samples; for an odd count the middle
    sample is left out of both. The relative change of the recent mean over
    the earlier mean must reach ``sensitivity`` to count as RISING or FALLING.

    Graceful degradation: fewer than two samples is always STABLE.

    Args:
        values: Average fees ordered oldest-first.
        sensitivity: Minimum relative change (e.g. Decimal("0.05") for 5%).

    Returns:
        TrendDirection for the window.
    """
    half = len(values) // 2
    if half == 0:
        return TrendDirection.STABLE

    earlier = mean(values[:half])
    recent = mean(values[-half:])

    if earlier == 0:
        return TrendDirection.RISING if recent > 0 else TrendDirection.STABLE

    change = ((recent - earlier) / earlier).quantize(_QUANTIZE)
    if abs(change) < sensitivity:
        return TrendDirection.STABLE
    return TrendDirection.RISING if change > 0 else TrendDirection.FALLING


def spread_ratio(
    minimums: Sequence[Decimal], maximums: Sequence[Decimal], moving_average: Decimal
) -> Decimal:
    """Return (highest max - lowest min) relative to the moving average.

    Raises:
        ComputationDegradedError: if the spread is non-zero but the average is zero.
    """
    spread = max(maximums) - min(minimums)
    if moving_average == 0:
        if spread == 0:
            return Decimal("0").quantize(_QUANTIZE)
        raise ComputationDegradedError("cannot normalise fee spread by a zero moving average")
    return (spread / moving_average).quantize(_QUANTIZE)


def recommend_tier(latest_p50: Decimal, moving_average: Decimal, tolerance: Decimal) -> FeeTier:
    """Heuristic tier: where the latest median fee sits relative to the moving average.

    Inside ``moving_average * (1 +/- tolerance)`` is NORMAL, below is LOW,
    above is HIGH. This says nothing about inclusion guarantees.
    """
    if moving_average == 0:
        return FeeTier.HIGH if latest_p50 > 0 else FeeTier.NORMAL
    if latest_p50 < moving_average * (Decimal("1") - tolerance):
        return FeeTier.LOW
    if latest_p50 > moving_average * (Decimal("1") + tolerance):
        return FeeTier.HIGH
    return FeeTier.NORMAL


def compute_insights(history: Sequence[FeeSnapshot], config: InsightsConfig) -> Insights:
    """Derive Insights from the newest ``config.window_size`` snapshots of ``history``.

    Every field involved is parsed before anything is derived, so a single
    bad value fails the whole computation.

    Raises:
        ValueError: if ``history`` is empty.
        ComputationDegradedError: if any involved fee string cannot be parsed, or
            the values are too large to derive results at the fixed precision.
    """
    if not history:
        raise ValueError("cannot compute insights over an empty history")

    window = list(history[-config.window_size:])
    averages: list[Decimal] = []
    minimums: list[Decimal] = []
    maximums: list[Decimal] = []
    for snap in window:
        averages.append(parse_fee(snap.charged.avg, "avg"))
        minimums.append(parse_fee(snap.charged.min, "min"))
        maximums.append(parse_fee(snap.charged.max, "max"))
    latest = window[-1]
    latest_p50 = parse_fee(latest.charged.p50, "p50")

    try:
        moving_average = mean(averages)
        ratio = spread_ratio(minimums, maximums, moving_average)
        trend = classify_trend(averages, config.trend_sensitivity)
        tier = recommend_tier(latest_p50, moving_average, config.tier_tolerance)
    except DecimalException as e:
        raise ComputationDegradedError(
            f"fee values out of range for derived insights: {type(e).__name__}"
        ) from e

    return Insights(
        moving_average=moving_average,
        trend=trend,
        volatile=ratio > config.volatility_threshold,
        spread_ratio=ratio,
        recommended_tier=tier,
        latest_p50=latest_p50,
        sample_size=len(window),
        window_size=config.window_size,
        as_of=latest.captured_at,
    )
