"""
Flattening of Copilot metrics snapshots into tagged time-series points.

Metric names follow ``<namespace>.<feature>.<dimension path>.<counter>``,
for example ``acme.copilot.ide.chat.editors.models.total_chats``. Each
nested dimension appends its own tags to those of its parents.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from shared.logging import get_logger

from ..ingestion.models import (
    DotcomChat,
    DotcomPullRequests,
    IdeChat,
    IdeCodeCompletions,
    LanguageMetrics,
    MetricsSnapshot,
    ModelMetrics,
)
from .points import Series, standard_tags

IDE_CODE_COMPLETIONS = "ide.code_completions"
IDE_CHAT = "ide.chat"
DOTCOM_CHAT = "dotcom.chat"
DOTCOM_PULL_REQUESTS = "dotcom.pull_requests"

LANGUAGE_COUNTERS = (
    "total_code_suggestions",
    "total_code_acceptances",
    "total_code_lines_suggested",
    "total_code_lines_accepted",
)

MODEL_COUNTERS = (
    "total_chats",
    "total_chat_insertion_events",
    "total_chat_copy_events",
    "total_pr_summaries_created",
)

ROLLUP_FEATURE = "copilot_ide_chat"


class SnapshotFlattener:
    """Turns metrics snapshots into a Series.

    When ``rollup_namespace`` is set, every IDE chat block also yields
    chat/copy/insertion totals summed over all editors and models under
    that namespace, independent of the scope being processed. Every scope
    of a run writes the same rollup names, tags and timestamp, so the value
    Datadog keeps is the one from the last scope dispatched.
    """

    def __init__(self, rollup_namespace: Optional[str] = None):
        self.rollup_namespace = rollup_namespace
        self.logger = get_logger("copilot_metrics.flattener")

    def flatten_all(self, snapshots: Iterable[MetricsSnapshot], namespace: str, timestamp: int) -> Series:
        """Flatten several snapshots into one series, in input order."""
        series = Series()
        for snapshot in snapshots:
            series.merge(self.flatten(snapshot, namespace, timestamp))
        return series

    def flatten(self, snapshot: MetricsSnapshot, namespace: str, timestamp: int) -> Series:
        """Flatten a single snapshot."""
        series = Series()
        base_tags = standard_tags(snapshot.date)

        # Top-level user counts are zero-filled so the headline series stay continuous.
        series.add_point(
            f"{namespace}.total_active_users",
            snapshot.total_active_users or 0,
            timestamp,
            base_tags
        )
        series.add_point(
            f"{namespace}.total_engaged_users",
            snapshot.total_engaged_users or 0,
            timestamp,
            base_tags
        )

        if snapshot.copilot_ide_code_completions is not None:
            series.merge(self._code_completions(
                snapshot.copilot_ide_code_completions, f"{namespace}.{IDE_CODE_COMPLETIONS}", base_tags, timestamp
            ))

        if snapshot.copilot_ide_chat is not None:
            series.merge(self._ide_chat(
                snapshot.copilot_ide_chat, f"{namespace}.{IDE_CHAT}", base_tags, timestamp
            ))

        if snapshot.copilot_dotcom_chat is not None:
            series.merge(self._dotcom_chat(
                snapshot.copilot_dotcom_chat, f"{namespace}.{DOTCOM_CHAT}", base_tags, timestamp
            ))

        if snapshot.copilot_dotcom_pull_requests is not None:
            series.merge(self._dotcom_pull_requests(
                snapshot.copilot_dotcom_pull_requests, f"{namespace}.{DOTCOM_PULL_REQUESTS}", base_tags, timestamp
            ))

        self.logger.debug(
            "Snapshot flattened",
            date=snapshot.date,
            namespace=namespace,
            points=len(series)
        )
        return series

    def _code_completions(
        self,
        block: IdeCodeCompletions,
        prefix: str,
        base_tags: List[str],
        timestamp: int
    ) -> Series:
        series = Series()
        series.add_point(f"{prefix}.total_engaged_users", block.total_engaged_users, timestamp, base_tags)

        for language in block.languages or []:
            self._add_language(series, f"{prefix}.languages", language, base_tags, timestamp)

        for editor in block.editors or []:
            editor_tags = base_tags + [f"editor:{editor.name}"]
            series.add_point(
                f"{prefix}.editors.total_engaged_users", editor.total_engaged_users, timestamp, editor_tags
            )

            for model in editor.models or []:
                model_tags = self._add_model(series, f"{prefix}.editors.models", model, editor_tags, timestamp)
                for language in model.languages or []:
                    self._add_language(
                        series, f"{prefix}.editors.models.languages", language, model_tags, timestamp
                    )

        return series

    def _ide_chat(self, block: IdeChat, prefix: str, base_tags: List[str], timestamp: int) -> Series:
        series = Series()
        series.add_point(f"{prefix}.total_engaged_users", block.total_engaged_users, timestamp, base_tags)

        for editor in block.editors or []:
            editor_tags = base_tags + [f"editor:{editor.name}"]
            series.add_point(
                f"{prefix}.editors.total_engaged_users", editor.total_engaged_users, timestamp, editor_tags
            )
            for model in editor.models or []:
                self._add_model(series, f"{prefix}.editors.models", model, editor_tags, timestamp)

        if self.rollup_namespace:
            chats, copies, insertions = ide_chat_totals(block)
            rollup_prefix = f"{self.rollup_namespace}.{ROLLUP_FEATURE}"
            series.add_point(f"{rollup_prefix}.total_chats", chats, timestamp, base_tags)
            series.add_point(f"{rollup_prefix}.total_chat_copy_events", copies, timestamp, base_tags)
            series.add_point(f"{rollup_prefix}.total_chat_insertion_events", insertions, timestamp, base_tags)

        return series

    def _dotcom_chat(self, block: DotcomChat, prefix: str, base_tags: List[str], timestamp: int) -> Series:
        series = Series()
        series.add_point(f"{prefix}.total_engaged_users", block.total_engaged_users, timestamp, base_tags)

        for model in block.models or []:
            self._add_model(series, f"{prefix}.models", model, base_tags, timestamp)

        return series

    def _dotcom_pull_requests(
        self,
        block: DotcomPullRequests,
        prefix: str,
        base_tags: List[str],
        timestamp: int
    ) -> Series:
        series = Series()
        series.add_point(f"{prefix}.total_engaged_users", block.total_engaged_users, timestamp, base_tags)

        for repository in block.repositories or []:
            repo_tags = base_tags + [f"repository:{repository.name}"]
            series.add_point(
                f"{prefix}.repositories.total_engaged_users", repository.total_engaged_users, timestamp, repo_tags
            )
            for model in repository.models or []:
                self._add_model(series, f"{prefix}.repositories.models", model, repo_tags, timestamp)

        return series

    def _add_language(
        self,
        series: Series,
        path: str,
        language: LanguageMetrics,
        parent_tags: List[str],
        timestamp: int
    ) -> List[str]:
        tags = parent_tags + [f"language:{language.name}"]
        _add_entry(series, path, language, LANGUAGE_COUNTERS, tags, timestamp)
        return tags

    def _add_model(
        self,
        series: Series,
        path: str,
        model: ModelMetrics,
        parent_tags: List[str],
        timestamp: int
    ) -> List[str]:
        tags = parent_tags + [
            f"model:{model.name}",
            f"is_custom_model:{'true' if model.is_custom_model else 'false'}",
        ]
        _add_entry(series, path, model, MODEL_COUNTERS, tags, timestamp)
        return tags


def _add_entry(
    series: Series,
    path: str,
    entry,
    counters: Sequence[str],
    tags: List[str],
    timestamp: int
) -> None:
    """Engaged-users point plus one point per counter the entry reports."""
    series.add_point(f"{path}.total_engaged_users", entry.total_engaged_users, timestamp, tags)
    for counter in counters:
        series.add_optional_point(f"{path}.{counter}", getattr(entry, counter), timestamp, tags)


def ide_chat_totals(block: IdeChat) -> Tuple[int, int, int]:
    """Sum chats, copy events and insertion events over every editor model."""
    chats = copies = insertions = 0
    for editor in block.editors or []:
        for model in editor.models or []:
            chats += model.total_chats or 0
            copies += model.total_chat_copy_events or 0
            insertions += model.total_chat_insertion_events or 0
    return chats, copies, insertions


def flatten_snapshot(
    snapshot: MetricsSnapshot,
    namespace: str,
    timestamp: int,
    rollup_namespace: Optional[str] = None
) -> Series:
    """Flatten one snapshot without keeping a flattener around."""
    return SnapshotFlattener(rollup_namespace).flatten(snapshot, namespace, timestamp)


def flatten_snapshots(
    snapshots: Iterable[MetricsSnapshot],
    namespace: str,
    timestamp: int,
    rollup_namespace: Optional[str] = None
) -> Series:
    return SnapshotFlattener(rollup_namespace).flatten_all(snapshots, namespace, timestamp)
