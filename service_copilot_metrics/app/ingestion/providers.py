"""
Snapshot provider contract and the static provider used for verification runs.
"""

from datetime import date
from typing import Dict, List, Optional, Protocol, Sequence

from shared.logging import get_logger

from .models import MetricsSnapshot


class SnapshotProvider(Protocol):
    """Anything able to return the snapshots of one scope."""

    async def fetch(self, scope_identifier: Optional[str], since_date: str) -> List[MetricsSnapshot]:
        ...


class StaticSnapshotProvider:
    """Serves fixed, injected snapshots instead of calling GitHub.

    ``team_snapshots`` maps a team slug to its snapshots; teams without an
    entry receive ``default_team_snapshots``.
    """

    def __init__(
        self,
        root_snapshots: Sequence[MetricsSnapshot],
        team_snapshots: Optional[Dict[str, Sequence[MetricsSnapshot]]] = None,
        default_team_snapshots: Sequence[MetricsSnapshot] = ()
    ):
        self.root_snapshots = list(root_snapshots)
        self.team_snapshots = {slug: list(items) for slug, items in (team_snapshots or {}).items()}
        self.default_team_snapshots = list(default_team_snapshots)
        self.calls: List[Optional[str]] = []
        self.logger = get_logger("copilot_metrics.static_provider")

    async def fetch(self, scope_identifier: Optional[str], since_date: str) -> List[MetricsSnapshot]:
        self.calls.append(scope_identifier)
        if scope_identifier is None:
            snapshots = self.root_snapshots
        else:
            snapshots = self.team_snapshots.get(scope_identifier, self.default_team_snapshots)
        self.logger.info(
            "Serving injected snapshots",
            scope=scope_identifier or "root",
            count=len(snapshots),
            since=since_date
        )
        return list(snapshots)


def verification_provider(today: Optional[date] = None) -> StaticSnapshotProvider:
    """Provider returning one small snapshot dated today for every scope."""
    day = (today or date.today()).isoformat()
    return StaticSnapshotProvider(
        root_snapshots=[MetricsSnapshot(date=day, total_active_users=100, total_engaged_users=80)],
        default_team_snapshots=[MetricsSnapshot(date=day, total_active_users=50, total_engaged_users=40)],
    )
