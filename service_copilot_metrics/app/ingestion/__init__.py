"""
Ingestion package: Copilot metrics document models and snapshot providers.
"""

from .models import MetricsSnapshot
from .github_client import GitHubMetricsClient, compute_since_date
from .providers import SnapshotProvider, StaticSnapshotProvider, verification_provider
