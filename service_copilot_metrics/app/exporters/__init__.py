"""
Exporters package: the Datadog transport and the chunking dispatcher.
"""

from .datadog import DatadogClient, MetricsTransport
from .dispatcher import BatchingDispatcher
