"""
Shared error handling for the Copilot Metrics Bridge.
"""

from typing import Dict, Any, List, Optional, Sequence
from pydantic import BaseModel

from shared.logging import run_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    run_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class PipelineException(Exception):
    """Base exception for the metrics pipeline."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            run_id=run_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(PipelineException):
    """Missing or invalid settings."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class FetchError(PipelineException):
    """Upstream had no usable data for one scope.

    ``reason`` is one of ``authentication``, ``authorization``, ``not_found``,
    ``validation``, ``rate_limit``, ``http_error``, ``network`` or ``parse``.
    """

    def __init__(
        self,
        scope: str,
        reason: str,
        message: str = "Failed to fetch metrics",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.scope = scope
        self.reason = reason
        self.status_code = status_code
        merged = {"scope": scope, "reason": reason, **(details or {})}
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__("FETCH_ERROR", f"{scope}: {message}", merged)


class DispatchError(PipelineException):
    """Transport refused or failed to accept one chunk."""

    def __init__(
        self,
        message: str = "Failed to submit metrics",
        chunk_index: Optional[int] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.chunk_index = chunk_index
        self.status_code = status_code
        merged = dict(details or {})
        if chunk_index is not None:
            merged["chunk_index"] = chunk_index
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__("DISPATCH_ERROR", message, merged)

    def for_chunk(self, chunk_index: int) -> "DispatchError":
        """Return a copy of this error attributed to ``chunk_index``."""
        details = {k: v for k, v in self.details.items() if k not in ("chunk_index", "status_code")}
        return DispatchError(
            message=f"Chunk {chunk_index} failed: {self.message}",
            chunk_index=chunk_index,
            status_code=self.status_code,
            details=details
        )


class AggregateError(PipelineException):
    """One or more sub-group scopes failed during a multi-scope run."""

    def __init__(self, failures: Sequence[PipelineException]):
        self.failures: List[PipelineException] = list(failures)
        super().__init__(
            "AGGREGATE_ERROR",
            f"Failed to process {len(self.failures)} teams",
            {
                "failure_count": len(self.failures),
                "failures": [
                    {"code": failure.code, "message": failure.message, "details": failure.details}
                    for failure in self.failures
                ]
            }
        )

    @property
    def count(self) -> int:
        return len(self.failures)
