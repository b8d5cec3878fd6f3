"""
Configuration for the Copilot Metrics service.

Settings are read from the environment (or ``.env``) by field name, e.g.
``GITHUB_TOKEN`` or ``DATADOG_METRIC_NAMESPACE``.
"""

from typing import List, Optional

from pydantic import Field, ValidationError, field_validator

from shared.config import ServiceConfig
from shared.errors import ConfigurationError

SERVICE_NAME = "copilot_metrics"
SERVICE_PORT = 8020


class CopilotMetricsConfig(ServiceConfig):
    """Settings for fetching Copilot metrics and forwarding them to Datadog."""

    # GitHub
    github_token: Optional[str] = Field(default=None, description="Token with Copilot metrics read access")
    github_enterprise_id: Optional[str] = Field(default=None, description="Enterprise slug or organization login")
    github_scope_type: str = Field(default="enterprise", description="'enterprise' or 'organization'")
    github_api_url: str = Field(default="https://api.github.com")
    github_team_slugs: str = Field(default="", description="Comma separated team slugs")
    github_lookback_days: int = Field(default=30, ge=1, le=100)
    github_max_attempts: int = Field(default=3, ge=1)

    # Datadog
    datadog_api_key: Optional[str] = Field(default=None)
    datadog_api_url: str = Field(default="https://api.datadoghq.eu/api/v2/series")
    datadog_metric_namespace: str = Field(default="metrics.default")
    datadog_rollup_namespace: Optional[str] = Field(default=None, description="Enables IDE chat rollup totals")
    datadog_chunk_size: int = Field(default=100, gt=0)

    # Pipeline switches
    skip_enterprise_metrics: bool = Field(default=False, description="Process team scopes only")
    mock_github_api: bool = Field(default=False, description="Flatten injected snapshots, skip Datadog")

    # HTTP
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0)

    def __init__(self, service_name: str = SERVICE_NAME, port: int = SERVICE_PORT, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)

    @field_validator("github_scope_type")
    @classmethod
    def _check_scope_type(cls, value: str) -> str:
        value = value.lower()
        if value not in ("enterprise", "organization"):
            raise ValueError("github_scope_type must be 'enterprise' or 'organization'")
        return value

    @field_validator("datadog_rollup_namespace")
    @classmethod
    def _blank_rollup_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def team_slugs(self) -> List[str]:
        """Configured team slugs, trimmed, blanks dropped, order kept."""
        return [slug.strip() for slug in self.github_team_slugs.split(",") if slug.strip()]

    @property
    def verification_mode(self) -> bool:
        return self.mock_github_api

    def require_credentials(self) -> None:
        """Raise when a live run lacks GitHub or Datadog credentials."""
        missing = [
            name for name in ("github_token", "github_enterprise_id", "datadog_api_key")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(name.upper() for name in missing)}",
                details={"missing": missing}
            )


def get_copilot_config(**overrides) -> CopilotMetricsConfig:
    """Load configuration from the environment, applying explicit overrides.

    Invalid values are reported as ``ConfigurationError``.
    """
    try:
        return CopilotMetricsConfig(**overrides)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
        raise ConfigurationError(
            f"Invalid settings: {', '.join(name.upper() for name in fields)}",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)}
        ) from exc
