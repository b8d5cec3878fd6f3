"""
Serverless entry point (AWS Lambda style) for scheduled runs.
"""

import asyncio
from typing import Any, Dict

from shared.errors import ConfigurationError
from shared.logging import configure_logging, get_logger

from .config import get_copilot_config
from .pipeline import run_pipeline

logger = get_logger("copilot_metrics.handler")


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Run every scope once; the event payload is ignored."""
    try:
        config = get_copilot_config()
        configure_logging(config.service_name, config.log_level)
        summary = asyncio.run(run_pipeline(config))
    except ConfigurationError as exc:
        logger.error("Invalid configuration", error=exc.message, details=exc.details)
        return {
            "statusCode": 500,
            "message": exc.message,
            "summary": None
        }

    return {
        "statusCode": 200 if summary.ok else 502,
        "message": (
            "GitHub Copilot metrics processing completed"
            if summary.ok else
            "GitHub Copilot metrics processing completed with failures"
        ),
        "summary": summary.to_dict()
    }
