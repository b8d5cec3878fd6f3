"""
GitHub Copilot metrics client.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from shared.errors import FetchError
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception

from .models import MetricsSnapshot

GITHUB_API_VERSION = "2022-11-28"

_STATUS_REASONS = {
    401: "authentication",
    403: "authorization",
    404: "not_found",
    422: "validation",
    429: "rate_limit",
}

_snapshot_list = TypeAdapter(List[MetricsSnapshot])


def compute_since_date(lookback_days: int, today: Optional[date] = None) -> str:
    """ISO date ``lookback_days`` before ``today``."""
    today = today or date.today()
    return (today - timedelta(days=lookback_days)).isoformat()


class GitHubMetricsClient:
    """Fetches Copilot usage snapshots for an enterprise or organization and its teams.

    ``scope_type`` selects the ``/enterprises/{id}`` or ``/orgs/{id}`` family
    of endpoints. Connection failures are retried; HTTP error statuses are
    reported immediately as :class:`FetchError`.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        scope_type: str = "enterprise",
        api_url: str = "https://api.github.com",
        timeout: Optional[httpx.Timeout] = None,
        retry_config: Optional[RetryConfig] = None
    ):
        if scope_type not in ("enterprise", "organization"):
            raise ValueError(f"Unsupported scope type: {scope_type}")

        self.token = token
        self.owner = owner
        self.scope_type = scope_type
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout or httpx.Timeout(30.0, connect=5.0)
        self.retry_config = retry_config or RetryConfig(max_attempts=3, base_delay=1.0, max_delay=10.0)
        self.logger = get_logger("copilot_metrics.github_client")

    @property
    def _owner_path(self) -> str:
        segment = "enterprises" if self.scope_type == "enterprise" else "orgs"
        return f"{self.api_url}/{segment}/{self.owner}"

    def metrics_url(self, team_slug: Optional[str] = None) -> str:
        """Endpoint for the root scope, or for one team when ``team_slug`` is given."""
        if team_slug is None:
            return f"{self._owner_path}/copilot/metrics"
        return f"{self._owner_path}/team/{team_slug}/copilot/metrics"

    async def fetch(self, scope_identifier: Optional[str], since_date: str) -> List[MetricsSnapshot]:
        """Fetch snapshots since ``since_date``; an empty list means nothing to report."""
        scope = scope_identifier or self.owner
        url = self.metrics_url(scope_identifier)
        params = {"since": since_date, "per_page": 100}

        self.logger.info("Fetching Copilot metrics", scope=scope, scope_type=self.scope_type, since=since_date)

        try:
            response = await retry_on_exception((httpx.TransportError,), self.retry_config)(self._get)(url, params)
        except RetryError as exc:
            raise FetchError(
                scope=scope,
                reason="network",
                message=f"Network error: {exc.last_exception}",
                details={"attempts": exc.attempts}
            ) from exc

        if response.status_code != 200:
            reason = _STATUS_REASONS.get(response.status_code, "http_error")
            self.logger.error(
                "GitHub metrics request failed",
                scope=scope,
                status_code=response.status_code,
                reason=reason,
                response=response.text
            )
            raise FetchError(
                scope=scope,
                reason=reason,
                message=f"HTTP error {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text}
            )

        try:
            snapshots = _snapshot_list.validate_json(response.content)
        except ValidationError as exc:
            raise FetchError(
                scope=scope,
                reason="parse",
                message=f"Error parsing GitHub metrics: {exc.error_count()} validation errors",
                details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)[:5]}
            ) from exc

        if not snapshots:
            self.logger.info("No metrics data available", scope=scope)
        else:
            self.logger.info("Received metrics data points", scope=scope, count=len(snapshots))
            self._log_summary(scope, snapshots)

        return snapshots

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=headers)

    def _log_summary(self, scope: str, snapshots: List[MetricsSnapshot]) -> None:
        for snapshot in snapshots:
            self.logger.debug(
                "Snapshot summary",
                scope=scope,
                date=snapshot.date,
                active=snapshot.total_active_users,
                engaged=snapshot.total_engaged_users,
                features=snapshot.feature_summary()
            )
