"""
Metric namespace resolution per scope.
"""

from typing import Optional

TEAM_QUALIFIER = "team"


def resolve_namespace(root: str, sub_group: Optional[str] = None) -> str:
    """Prefix for metrics of the root scope or of one named team."""
    if sub_group is None:
        return root
    return f"{root}.{TEAM_QUALIFIER}.{sub_group}"
