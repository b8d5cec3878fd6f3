"""
Time-series point and series models.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

SOURCE_TAG = "source:github-copilot-metrics"


def standard_tags(date: str) -> List[str]:
    """Baseline tags attached to every point derived from one snapshot."""
    return [f"date:{date}", SOURCE_TAG]


@dataclass(frozen=True)
class TimeSeriesPoint:
    """A single gauge observation."""
    name: str
    value: float
    timestamp: int
    tags: Tuple[str, ...] = ()


class Series:
    """Ordered, appendable collection of points.

    A series is built by one flattening pass, merged into its scope's
    accumulator and drained exactly once by the dispatcher.
    """

    def __init__(self, points: Optional[Iterable[TimeSeriesPoint]] = None):
        self._points: List[TimeSeriesPoint] = list(points or [])

    def add_point(self, name: str, value: float, timestamp: int, tags: Sequence[str]) -> None:
        self._points.append(TimeSeriesPoint(name, float(value), timestamp, tuple(tags)))

    def add_optional_point(
        self,
        name: str,
        value: Optional[int],
        timestamp: int,
        tags: Sequence[str]
    ) -> None:
        """Append a point only when the source reported a value."""
        if value is not None:
            self.add_point(name, value, timestamp, tags)

    def merge(self, other: "Series") -> "Series":
        """Move every point of ``other`` onto the end of this series."""
        self._points.extend(other.drain())
        return self

    def drain(self) -> List[TimeSeriesPoint]:
        """Hand over all points and leave the series empty."""
        points, self._points = self._points, []
        return points

    @property
    def points(self) -> Tuple[TimeSeriesPoint, ...]:
        return tuple(self._points)

    def names(self) -> List[str]:
        return [point.name for point in self._points]

    def find(self, name: str) -> List[TimeSeriesPoint]:
        """Return every point carrying ``name``, in insertion order."""
        return [point for point in self._points if point.name == name]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TimeSeriesPoint]:
        return iter(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)


def chunked(points: Sequence[TimeSeriesPoint], size: int) -> Iterator[Sequence[TimeSeriesPoint]]:
    """Yield contiguous slices of at most ``size`` points, preserving order."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(points), size):
        yield points[start:start + size]
