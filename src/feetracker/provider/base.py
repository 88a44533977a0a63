"""Abstract fee data provider interface.

The poller depends only on this interface, keeping Horizon-specific
HTTP details in the concrete client.
"""

from abc import ABC, abstractmethod

from feetracker.models import FeeStats


class FeeDataProvider(ABC):
    """Abstract base class for upstream fee statistics sources."""

    @abstractmethod
    async def connect(self) -> None:
        """Open underlying connections."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release underlying connections."""
        ...

    @abstractmethod
    async def fetch_fee_stats(self) -> FeeStats:
        """Fetch current fee statistics with a fresh upstream request.

        No caching and no retries.

        Raises:
            NetworkError: transport failure or non-success HTTP status.
            ParseError: payload missing required fields or with empty values.
        """
        ...
