"""
Unit tests for Copilot metrics configuration.
"""

import pytest
from pydantic import ValidationError

from service_copilot_metrics.app.config import CopilotMetricsConfig, get_copilot_config
from service_copilot_metrics.app.pipeline import build_orchestrator, pipeline_options
from shared.errors import ConfigurationError

ENV_VARS = [
    "GITHUB_TOKEN",
    "GITHUB_ENTERPRISE_ID",
    "GITHUB_SCOPE_TYPE",
    "GITHUB_TEAM_SLUGS",
    "DATADOG_API_KEY",
    "DATADOG_METRIC_NAMESPACE",
    "DATADOG_ROLLUP_NAMESPACE",
    "DATADOG_CHUNK_SIZE",
    "SKIP_ENTERPRISE_METRICS",
    "MOCK_GITHUB_API",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestCopilotMetricsConfig:
    """Test cases for CopilotMetricsConfig."""

    def test_defaults(self):
        config = get_copilot_config()

        assert config.service_name == "copilot_metrics"
        assert config.datadog_metric_namespace == "metrics.default"
        assert config.datadog_chunk_size == 100
        assert config.github_lookback_days == 30
        assert config.datadog_rollup_namespace is None
        assert config.team_slugs == []
        assert not config.verification_mode

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TEAM_SLUGS", " platform, ,web ,")
        monkeypatch.setenv("DATADOG_METRIC_NAMESPACE", "acme.copilot")
        monkeypatch.setenv("GITHUB_SCOPE_TYPE", "Organization")
        monkeypatch.setenv("MOCK_GITHUB_API", "true")

        config = get_copilot_config()

        assert config.team_slugs == ["platform", "web"]
        assert config.datadog_metric_namespace == "acme.copilot"
        assert config.github_scope_type == "organization"
        assert config.verification_mode

    def test_blank_rollup_namespace_is_unset(self):
        assert get_copilot_config(datadog_rollup_namespace="  ").datadog_rollup_namespace is None

    def test_invalid_scope_type(self):
        with pytest.raises(ValidationError):
            CopilotMetricsConfig(github_scope_type="repository")

    def test_invalid_chunk_size(self):
        with pytest.raises(ValidationError):
            CopilotMetricsConfig(datadog_chunk_size=0)

    def test_invalid_environment_value_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("DATADOG_CHUNK_SIZE", "0")

        with pytest.raises(ConfigurationError) as exc_info:
            get_copilot_config()

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert "DATADOG_CHUNK_SIZE" in exc_info.value.message
        assert exc_info.value.details["errors"][0]["loc"] == ("datadog_chunk_size",)

    def test_invalid_override_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_copilot_config(github_scope_type="repository")

        assert "GITHUB_SCOPE_TYPE" in exc_info.value.message

    def test_require_credentials_lists_missing(self):
        config = get_copilot_config(github_token="t")

        with pytest.raises(ConfigurationError) as exc_info:
            config.require_credentials()

        assert exc_info.value.details["missing"] == ["github_enterprise_id", "datadog_api_key"]
        assert "GITHUB_ENTERPRISE_ID" in exc_info.value.message

    def test_require_credentials_passes(self):
        config = get_copilot_config(github_token="t", github_enterprise_id="acme", datadog_api_key="k")

        config.require_credentials()


class TestPipelineAssembly:
    """Test cases for wiring the orchestrator from configuration."""

    def test_pipeline_options(self):
        config = get_copilot_config(
            github_team_slugs="a,b",
            skip_enterprise_metrics=True,
            datadog_rollup_namespace="acme.rollup",
            datadog_metric_namespace="acme.copilot"
        )

        options = pipeline_options(config)

        assert options.root_namespace == "acme.copilot"
        assert list(options.sub_group_identifiers) == ["a", "b"]
        assert options.skip_root_scope
        assert options.rollup_namespace == "acme.rollup"

    def test_live_run_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            build_orchestrator(get_copilot_config())

    def test_verification_run_needs_no_credentials(self):
        orchestrator = build_orchestrator(get_copilot_config(mock_github_api=True))

        assert orchestrator.dispatcher is None
        assert orchestrator.options.verification_mode

    def test_live_run_wiring(self):
        config = get_copilot_config(
            github_token="t",
            github_enterprise_id="acme",
            datadog_api_key="k",
            datadog_chunk_size=50,
            github_scope_type="organization"
        )

        orchestrator = build_orchestrator(config)

        assert orchestrator.dispatcher.chunk_size == 50
        assert orchestrator.provider.metrics_url() == "https://api.github.com/orgs/acme/copilot/metrics"
