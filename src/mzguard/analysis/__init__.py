"""Plugin override analysis."""

from mzguard.analysis.aggregator import aggregate_overrides
from mzguard.analysis.classifier import DEFAULT_WARNING_THRESHOLD, SeverityClassifier
from mzguard.analysis.dependency_analyzer import validate_dependencies
from mzguard.analysis.detector import ConflictDetector, detect_conflicts
from mzguard.analysis.extractor import OverrideExtractor, extract_overrides
from mzguard.analysis.popularity import PopularityFormatError, PopularityIndex, build_enrichment
from mzguard.analysis.report_builder import ReportBuilder
from mzguard.analysis.sanitizer import strip_comments_and_strings

__all__ = [
    "DEFAULT_WARNING_THRESHOLD",
    "ConflictDetector",
    "OverrideExtractor",
    "PopularityFormatError",
    "PopularityIndex",
    "ReportBuilder",
    "SeverityClassifier",
    "aggregate_overrides",
    "build_enrichment",
    "detect_conflicts",
    "extract_overrides",
    "strip_comments_and_strings",
    "validate_dependencies",
]
