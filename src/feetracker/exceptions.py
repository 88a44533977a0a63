"""Custom exceptions for the fee tracker.

Provider failures and insights degradation live here so the scheduler,
the insights engine, and the Horizon client can share them without
circular imports.
"""


class FeeTrackerError(Exception):
    """Base exception for all fee tracker errors."""

    kind = "error"


class ProviderError(FeeTrackerError):
    """Raised when the fee data provider cannot produce fee statistics."""

    kind = "provider"


class NetworkError(ProviderError):
    """Raised when the upstream API is unreachable or returns a non-success status."""

    kind = "network"


class ParseError(ProviderError):
    """Raised when the upstream payload does not match the expected shape."""

    kind = "parse"


class ComputationDegradedError(FeeTrackerError):
    """Raised when a fee value cannot be interpreted as a finite decimal."""

    kind = "computation_degraded"
