"""
Assembly of the orchestrator from configuration.
"""

from typing import Optional

import httpx

from shared.metrics import MetricsCollector
from shared.retry import RetryConfig

from .config import CopilotMetricsConfig
from .exporters.datadog import DatadogClient
from .exporters.dispatcher import BatchingDispatcher
from .ingestion.github_client import GitHubMetricsClient
from .ingestion.providers import verification_provider
from .orchestrator import PipelineOptions, RunSummary, ScopeOrchestrator


def pipeline_options(config: CopilotMetricsConfig) -> PipelineOptions:
    return PipelineOptions(
        root_namespace=config.datadog_metric_namespace,
        sub_group_identifiers=config.team_slugs,
        skip_root_scope=config.skip_enterprise_metrics,
        rollup_namespace=config.datadog_rollup_namespace,
        lookback_days=config.github_lookback_days,
        verification_mode=config.verification_mode,
    )


def build_orchestrator(
    config: CopilotMetricsConfig,
    metrics: Optional[MetricsCollector] = None
) -> ScopeOrchestrator:
    """Wire provider, dispatcher and options for a live or verification run."""
    options = pipeline_options(config)

    if options.verification_mode:
        return ScopeOrchestrator(verification_provider(), None, options, metrics=metrics)

    config.require_credentials()
    timeout = httpx.Timeout(config.request_timeout_seconds, connect=config.connect_timeout_seconds)

    provider = GitHubMetricsClient(
        token=config.github_token,
        owner=config.github_enterprise_id,
        scope_type=config.github_scope_type,
        api_url=config.github_api_url,
        timeout=timeout,
        retry_config=RetryConfig(max_attempts=config.github_max_attempts, base_delay=1.0, max_delay=10.0),
    )
    transport = DatadogClient(
        api_key=config.datadog_api_key,
        api_url=config.datadog_api_url,
        timeout=timeout,
    )
    dispatcher = BatchingDispatcher(transport, chunk_size=config.datadog_chunk_size, metrics=metrics)
    return ScopeOrchestrator(provider, dispatcher, options, metrics=metrics)


async def run_pipeline(
    config: CopilotMetricsConfig,
    metrics: Optional[MetricsCollector] = None
) -> RunSummary:
    """Build an orchestrator from ``config`` and run every scope once."""
    return await build_orchestrator(config, metrics).run_all()
