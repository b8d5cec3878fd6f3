"""
Copilot Metrics service.

Pulls GitHub Copilot usage metrics per enterprise/organization and team,
flattens them into tagged gauges and forwards them to Datadog.
"""
