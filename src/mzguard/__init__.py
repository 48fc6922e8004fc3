"""Detect RPG Maker MZ plugins that patch the same prototype methods."""

from mzguard.analysis import (
    PopularityIndex,
    detect_conflicts,
    extract_overrides,
    strip_comments_and_strings,
    validate_dependencies,
)

__version__ = "0.1.0"

__all__ = [
    "PopularityIndex",
    "detect_conflicts",
    "extract_overrides",
    "strip_comments_and_strings",
    "validate_dependencies",
]
