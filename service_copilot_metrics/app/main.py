"""
Copilot Metrics service.

Exposes a trigger endpoint that a scheduler calls to pull Copilot usage
metrics from GitHub and forward them to Datadog.
"""

from typing import List, Optional

from fastapi import Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from shared.base_service import BaseService

from .config import SERVICE_NAME, SERVICE_PORT, CopilotMetricsConfig, get_copilot_config
from .pipeline import run_pipeline


class RunRequest(BaseModel):
    """Optional per-run overrides of the configured scopes."""
    teams: Optional[List[str]] = Field(None, description="Team slugs to process instead of the configured ones")
    skip_enterprise: Optional[bool] = Field(None, description="Skip the root scope for this run")
    dry_run: Optional[bool] = Field(None, description="Flatten injected snapshots and skip Datadog")


class CopilotMetricsService(BaseService):
    """Copilot metrics bridge service implementation."""

    def __init__(self, config: Optional[CopilotMetricsConfig] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config=config or get_copilot_config())
        self._last_run: Optional[dict] = None
        self._setup_copilot_routes()

    def _setup_copilot_routes(self):
        """Set up pipeline routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Copilot Metrics Bridge - GitHub Copilot usage to Datadog",
                "version": "1.0.0",
                "namespace": self.config.datadog_metric_namespace,
                "teams": self.config.team_slugs,
                "verification_mode": self.config.verification_mode
            }

        @self.app.post("/runs")
        async def trigger_run(request: Optional[RunRequest] = Body(None)):
            """Run every scope once and report the summary."""
            config = self._config_for(request)
            metrics = self.metrics if self.config.enable_self_metrics else None
            summary = await run_pipeline(config, metrics=metrics)
            self._last_run = summary.to_dict()
            return JSONResponse(
                status_code=200 if summary.ok else 502,
                content=self._last_run
            )

        @self.app.get("/runs/last")
        async def last_run():
            """Summary of the most recent run triggered through this service."""
            if self._last_run is None:
                return JSONResponse(status_code=404, content={"message": "No run recorded yet"})
            return self._last_run

    def _config_for(self, request: Optional[RunRequest]) -> CopilotMetricsConfig:
        if request is None:
            return self.config
        overrides = {}
        if request.teams is not None:
            overrides["github_team_slugs"] = ",".join(request.teams)
        if request.skip_enterprise is not None:
            overrides["skip_enterprise_metrics"] = request.skip_enterprise
        if request.dry_run is not None:
            overrides["mock_github_api"] = request.dry_run
        return self.config.model_copy(update=overrides)

    async def _check_dependencies(self):
        return {
            "github": "configured" if self.config.github_token else "missing_token",
            "datadog": "configured" if self.config.datadog_api_key else "missing_api_key"
        }


def create_app(config: Optional[CopilotMetricsConfig] = None):
    """Create Copilot metrics service application."""
    service = CopilotMetricsService(config)
    return service.app


if __name__ == "__main__":
    service = CopilotMetricsService()
    service.run()
