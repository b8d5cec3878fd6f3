"""
Scope orchestration: fetch, flatten and dispatch per scope.

A run walks the root scope (unless skipped) and then every configured team,
strictly one after the other. A failing root scope is reported as the run's
root error; failing teams are collected into a single ``AggregateError``.
Neither stops the teams that follow.
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from shared.errors import AggregateError, DispatchError, FetchError, PipelineException
from shared.logging import get_logger, set_run_id, set_scope
from shared.metrics import MetricsCollector

from .exporters.dispatcher import BatchingDispatcher
from .ingestion.github_client import compute_since_date
from .ingestion.providers import SnapshotProvider
from .series.flattener import SnapshotFlattener
from .series.namespace import resolve_namespace

ROOT = "root"
TEAM = "team"


@dataclass
class PipelineOptions:
    """Run-level switches."""
    root_namespace: str = "metrics.default"
    sub_group_identifiers: Sequence[str] = ()
    skip_root_scope: bool = False
    rollup_namespace: Optional[str] = None
    lookback_days: int = 30
    verification_mode: bool = False


@dataclass
class ScopeResult:
    """Outcome of one scope's fetch-flatten-dispatch cycle."""
    scope: str
    kind: str
    namespace: str
    snapshots: int = 0
    points: int = 0
    chunks: int = 0
    dispatched: bool = False
    error: Optional[PipelineException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "kind": self.kind,
            "namespace": self.namespace,
            "snapshots": self.snapshots,
            "points": self.points,
            "chunks": self.chunks,
            "dispatched": self.dispatched,
            "status": "ok" if self.ok else "error",
            "error": self.error.to_response().model_dump() if self.error else None,
        }


@dataclass
class RunSummary:
    """Aggregate result of a multi-scope run."""
    run_id: str
    root: Optional[ScopeResult] = None
    sub_groups: List[ScopeResult] = field(default_factory=list)
    aggregate_error: Optional[AggregateError] = None
    duration_seconds: float = 0.0

    @property
    def root_error(self) -> Optional[PipelineException]:
        return self.root.error if self.root is not None else None

    @property
    def failed_sub_groups(self) -> List[ScopeResult]:
        return [result for result in self.sub_groups if not result.ok]

    @property
    def ok(self) -> bool:
        return self.root_error is None and self.aggregate_error is None

    def raise_for_failures(self) -> None:
        """Raise the root error if any, otherwise the aggregate team error."""
        if self.root_error is not None:
            raise self.root_error
        if self.aggregate_error is not None:
            raise self.aggregate_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": "ok" if self.ok else "error",
            "root": self.root.to_dict() if self.root is not None else None,
            "sub_groups": [result.to_dict() for result in self.sub_groups],
            "failed_sub_groups": len(self.failed_sub_groups),
            "aggregate_error": self.aggregate_error.to_response().model_dump() if self.aggregate_error else None,
            "duration_seconds": round(self.duration_seconds, 3),
        }


class ScopeOrchestrator:
    """Runs the metrics pipeline across the root scope and its teams."""

    def __init__(
        self,
        provider: SnapshotProvider,
        dispatcher: Optional[BatchingDispatcher],
        options: Optional[PipelineOptions] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today
    ):
        self.options = options or PipelineOptions()
        if dispatcher is None and not self.options.verification_mode:
            raise ValueError("A dispatcher is required outside verification mode")
        self.provider = provider
        self.dispatcher = dispatcher
        self.metrics = metrics
        self.clock = clock
        self.today = today
        self.flattener = SnapshotFlattener(self.options.rollup_namespace)
        self.logger = get_logger("copilot_metrics.orchestrator")

    async def run_scope(
        self,
        namespace_root: str,
        scope_identifier: Optional[str] = None,
        result: Optional[ScopeResult] = None
    ) -> ScopeResult:
        """Fetch, flatten and dispatch one scope.

        Raises ``FetchError`` or ``DispatchError``; an empty fetch is a
        successful no-op. Counts are written to ``result`` as each stage
        completes, so a caller holding it still sees them after a failure.
        """
        namespace = resolve_namespace(namespace_root, scope_identifier)
        if result is None:
            result = _new_result(scope_identifier, namespace)
        kind = result.kind
        since_date = compute_since_date(self.options.lookback_days, self.today())

        snapshots = await self.provider.fetch(scope_identifier, since_date)
        result.snapshots = len(snapshots)
        if not snapshots:
            self.logger.info("No metrics data available", namespace=namespace)
            return result

        timestamp = int(self.clock())
        series = self.flattener.flatten_all(snapshots, namespace, timestamp)
        result.points = len(series)
        if self.metrics is not None:
            self.metrics.record_points_flattened(kind, result.points)

        self.logger.info(
            "Prepared series",
            namespace=namespace,
            snapshots=result.snapshots,
            points=result.points,
            dates=[snapshot.date for snapshot in snapshots]
        )

        if self.options.verification_mode:
            self.logger.info("Verification mode: skipping dispatch", namespace=namespace, points=result.points)
            series.drain()
            return result

        result.chunks = await self.dispatcher.dispatch(series)
        result.dispatched = True
        return result

    async def run_all(self) -> RunSummary:
        """Process the root scope (unless skipped) and then every team."""
        run_id = set_run_id()
        summary = RunSummary(run_id=run_id)
        started = time.monotonic()
        options = self.options

        self.logger.info(
            "Starting metrics run",
            namespace=options.root_namespace,
            teams=len(options.sub_group_identifiers),
            skip_root=options.skip_root_scope,
            verification=options.verification_mode
        )

        try:
            if options.skip_root_scope:
                self.logger.info("Skipping root scope metrics")
            else:
                summary.root = await self._run_isolated(None)
                if summary.root.ok:
                    self.logger.info("Root scope processed", points=summary.root.points, chunks=summary.root.chunks)
                else:
                    self.logger.error("Root scope failed", error=summary.root.error.message)

            for slug in options.sub_group_identifiers:
                result = await self._run_isolated(slug)
                summary.sub_groups.append(result)
                if not result.ok:
                    self.logger.warning("Team failed, continuing", team=slug, error=result.error.message)

            failures = [result.error for result in summary.failed_sub_groups]
            if failures:
                summary.aggregate_error = AggregateError(failures)

            self.logger.info(
                "Team metrics processing completed",
                successful=len(summary.sub_groups) - len(failures),
                failed=len(failures)
            )
        finally:
            set_scope(None)
            summary.duration_seconds = time.monotonic() - started
            if self.metrics is not None:
                self.metrics.get_metric("run_duration_seconds").observe(summary.duration_seconds)

        self.logger.info("Metrics run finished", status="ok" if summary.ok else "error")
        return summary

    async def _run_isolated(self, scope_identifier: Optional[str]) -> ScopeResult:
        """Run one scope, converting pipeline errors into a recorded result."""
        result = _new_result(scope_identifier, resolve_namespace(self.options.root_namespace, scope_identifier))
        set_scope(result.scope)
        try:
            await self.run_scope(self.options.root_namespace, scope_identifier, result)
        except DispatchError as exc:
            # Chunks before the failing one stay delivered.
            if exc.chunk_index is not None:
                result.chunks = exc.chunk_index
            result.error = exc
        except FetchError as exc:
            result.error = exc

        self._record(result.kind, "ok" if result.ok else "error", result.error)
        return result

    def _record(self, kind: str, status: str, error: Optional[PipelineException] = None) -> None:
        if self.metrics is None:
            return
        self.metrics.record_scope_run(kind, status)
        if error is not None:
            self.metrics.record_error(error.code)


def _new_result(scope_identifier: Optional[str], namespace: str) -> ScopeResult:
    return ScopeResult(
        scope=scope_identifier or ROOT,
        kind=ROOT if scope_identifier is None else TEAM,
        namespace=namespace
    )
