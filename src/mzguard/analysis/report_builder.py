"""Deterministic ordering and packaging of conflict reports."""

from typing import Iterable

from mzguard.schemas.plugins import ConflictReport, PluginConflict

_SEVERITY_RANK = {"warning": 0, "info": 1}


def conflict_sort_key(conflict: PluginConflict) -> tuple[int, str]:
    """Warnings first, then by signature."""
    return _SEVERITY_RANK[conflict.severity], conflict.method


class ReportBuilder:
    """Sorts conflicts and assembles the final report."""

    def build(self, conflicts: Iterable[PluginConflict], total_overrides: int) -> ConflictReport:
        ordered = sorted(conflicts, key=conflict_sort_key)
        return ConflictReport(
            conflicts=ordered,
            total_overrides=total_overrides,
            health="conflicts" if ordered else "clean",
        )
