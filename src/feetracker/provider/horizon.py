"""Horizon fee statistics client via httpx async.

Wraps ``GET {horizon_url}/fee_stats`` with explicit connect/close lifecycle,
status checking, and payload validation. Transport problems and non-2xx
statuses become NetworkError; anything wrong with the body becomes ParseError.
"""

from typing import Annotated

import httpx
from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError

from feetracker.config import HorizonSettings
from feetracker.exceptions import NetworkError, ParseError
from feetracker.logging import get_logger
from feetracker.models import ChargedFees, FeeStats
from feetracker.provider.base import FeeDataProvider

logger = get_logger(__name__)

FeeString = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _FeeChargedPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    min: FeeString
    max: FeeString
    avg: FeeString
    p10: FeeString
    p25: FeeString
    p50: FeeString
    p75: FeeString
    p90: FeeString
    p95: FeeString


class _FeeStatsPayload(BaseModel):
    """Subset of Horizon's /fee_stats response the tracker relies on."""

    model_config = ConfigDict(extra="ignore")

    last_ledger_base_fee: FeeString
    fee_charged: _FeeChargedPayload


class HorizonClient(FeeDataProvider):
    """Concrete Horizon client using httpx.AsyncClient."""

    def __init__(
        self,
        settings: HorizonSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.url.rstrip("/")
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Create the pooled HTTP client. Idempotent."""
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._settings.timeout_seconds,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        logger.info("horizon_client_connected", base_url=self._base_url)

    async def close(self) -> None:
        """Close the HTTP client. CRITICAL: must be called to avoid leaking connections."""
        if self._http is None:
            return
        await self._http.aclose()
        self._http = None
        logger.info("horizon_client_closed")

    async def fetch_fee_stats(self) -> FeeStats:
        """Fetch and validate current fee statistics from Horizon."""
        if self._http is None:
            await self.connect()
        assert self._http is not None

        try:
            response = await self._http.get("/fee_stats")
        except httpx.HTTPError as e:
            raise NetworkError(f"request to {self._base_url}/fee_stats failed: {e!r}") from e

        if not response.is_success:
            raise NetworkError(f"Horizon returned HTTP {response.status_code}")

        try:
            payload = _FeeStatsPayload.model_validate_json(response.content)
        except ValidationError as e:
            raise ParseError(f"unexpected fee_stats payload: {e.error_count()} error(s): {e}") from e

        charged = payload.fee_charged
        return FeeStats(
            base_fee=payload.last_ledger_base_fee,
            charged=ChargedFees(
                min=charged.min,
                max=charged.max,
                avg=charged.avg,
                p10=charged.p10,
                p25=charged.p25,
                p50=charged.p50,
                p75=charged.p75,
                p90=charged.p90,
                p95=charged.p95,
            ),
        )
