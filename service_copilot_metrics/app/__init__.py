"""
Copilot Metrics service package.

- ingestion: GitHub client, snapshot models and providers
- series: point model, flattening and namespace resolution
- exporters: Datadog transport and batching dispatcher
- orchestrator: per-scope fetch/flatten/dispatch with failure isolation
"""
