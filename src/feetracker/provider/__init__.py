"""Fee data provider layer -- Horizon API integration via httpx."""

from feetracker.provider.base import FeeDataProvider
from feetracker.provider.horizon import HorizonClient

__all__ = ["FeeDataProvider", "HorizonClient"]
