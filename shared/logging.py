"""
Shared logging configuration for the Copilot Metrics Bridge.
"""

import sys
import logging
import uuid
import time
from typing import Any, Dict, Optional
from contextvars import ContextVar

import structlog

# Context variables for correlation IDs
run_id_var: ContextVar[Optional[str]] = ContextVar('run_id', default=None)
scope_var: ContextVar[Optional[str]] = ContextVar('scope', default=None)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured logging for a service."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context(service_name),
            add_correlation_context,
            add_timestamp,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


def add_service_context(service_name: str):
    """Build a processor stamping the service name onto log events."""

    def processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add run and scope correlation to log events."""
    run_id = run_id_var.get()
    if run_id:
        event_dict["run_id"] = run_id

    scope = scope_var.get()
    if scope:
        event_dict.setdefault("scope", scope)

    return event_dict


def add_timestamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add high-precision timestamp to log events."""
    event_dict["timestamp"] = time.time()
    return event_dict


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set run ID in context."""
    if run_id is None:
        run_id = str(uuid.uuid4())
    run_id_var.set(run_id)
    return run_id


def set_scope(scope: Optional[str]) -> None:
    """Set the scope currently being processed."""
    scope_var.set(scope)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
