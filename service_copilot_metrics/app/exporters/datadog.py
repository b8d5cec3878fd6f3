"""
Datadog series intake transport.
"""

from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from shared.errors import DispatchError
from shared.logging import get_logger

from ..series.points import TimeSeriesPoint

DEFAULT_DATADOG_URL = "https://api.datadoghq.eu/api/v2/series"

# Metric intake type for gauges in the v2 series API.
GAUGE = 3


class MetricsTransport(Protocol):
    """Accepts one already-chunked payload per call."""

    async def submit(self, chunk: Sequence[TimeSeriesPoint]) -> None:
        ...


def serialize_point(point: TimeSeriesPoint) -> Dict[str, Any]:
    """Render a point as a v2 series entry."""
    return {
        "metric": point.name,
        "type": GAUGE,
        "points": [{"timestamp": point.timestamp, "value": point.value}],
        "tags": list(point.tags),
    }


class DatadogClient:
    """Posts point chunks to the Datadog series endpoint. Never retries."""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_DATADOG_URL,
        timeout: Optional[httpx.Timeout] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout or httpx.Timeout(30.0, connect=5.0)
        self.logger = get_logger("copilot_metrics.datadog_client")

    async def submit(self, chunk: Sequence[TimeSeriesPoint]) -> None:
        payload = {"series": [serialize_point(point) for point in chunk]}
        headers = {
            "Content-Type": "application/json",
            "DD-API-KEY": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.error("Datadog request failed", error=str(exc), series=len(chunk))
            raise DispatchError(message=f"Network error: {exc}") from exc

        if not 200 <= response.status_code < 300:
            self.logger.error(
                "Datadog rejected series",
                status_code=response.status_code,
                response=response.text,
                series=len(chunk)
            )
            raise DispatchError(
                message=f"HTTP error {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text}
            )

        self.logger.debug("Datadog accepted series", series=len(chunk), status_code=response.status_code)
