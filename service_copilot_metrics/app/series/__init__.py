"""
Series package: points, tags, namespaces and snapshot flattening.
"""

from .points import Series, TimeSeriesPoint, standard_tags
from .namespace import resolve_namespace
from .flattener import SnapshotFlattener, flatten_snapshot, flatten_snapshots
