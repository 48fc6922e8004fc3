"""Conflict detection across a project's plugins."""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from mzguard.analysis.aggregator import aggregate_overrides
from mzguard.analysis.classifier import DEFAULT_WARNING_THRESHOLD, SeverityClassifier
from mzguard.analysis.popularity import PopularityIndex
from mzguard.analysis.report_builder import ReportBuilder
from mzguard.schemas.plugins import ConflictReport, PluginHeader

logger = logging.getLogger(__name__)

HeaderLike = Union[PluginHeader, Mapping[str, Any]]
PopularityLike = Union[PopularityIndex, Mapping[str, Any], None]


class ConflictDetector:
    """Runs aggregation, classification and report building over plugin headers."""

    def __init__(
        self,
        popularity: PopularityLike = None,
        threshold: float = DEFAULT_WARNING_THRESHOLD,
    ):
        """
        Initialize conflict detector.

        Args:
            popularity: Class popularity index or a mapping accepted by
                PopularityIndex.from_mapping
            threshold: Popularity at or above which a conflict is a warning
        """
        self.popularity = PopularityIndex.coerce(popularity)
        self.classifier = SeverityClassifier(threshold=threshold)
        self.builder = ReportBuilder()

    def detect(self, headers: Iterable[HeaderLike]) -> ConflictReport:
        """
        Detect plugins that override the same prototype methods.

        Args:
            headers: Plugin headers in load order (models or plain dicts)

        Returns:
            ConflictReport with conflicts sorted warnings-first
        """
        parsed = [
            h if isinstance(h, PluginHeader) else PluginHeader.model_validate(h)
            for h in headers
        ]
        index = aggregate_overrides(parsed)
        conflicts = self.classifier.classify(index, self.popularity)
        report = self.builder.build(conflicts, index.total_overrides)
        logger.debug(
            f"Checked {len(parsed)} plugins: {index.total_overrides} overrides, "
            f"{len(report.conflicts)} conflicts"
        )
        return report


def detect_conflicts(
    headers: Iterable[HeaderLike],
    popularity: PopularityLike = None,
    threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> ConflictReport:
    """
    Detect conflicts between plugins that override the same methods.

    Args:
        headers: Plugin headers with name and overrides, in load order
        popularity: Class popularity data; missing classes count as 0
        threshold: Popularity at or above which a conflict is a warning

    Returns:
        ConflictReport with sorted conflicts and health status
    """
    return ConflictDetector(popularity=popularity, threshold=threshold).detect(headers)
