"""Class popularity data used to grade conflict severity."""

import json
import logging
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from mzguard.analysis.extractor import OverrideExtractor
from mzguard.schemas.plugins import PopularityEnrichment, split_signature

logger = logging.getLogger(__name__)

ENRICHMENT_KEYS = ("classPopularity", "class_popularity")


class PopularityFormatError(ValueError):
    """Raised when popularity data cannot be read or has an unknown shape."""


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


class PopularityIndex:
    """
    Read-only ``className -> popularity`` lookup.

    Classes that are not present have popularity 0. Instances are built by the
    caller and passed into the detector explicitly.
    """

    def __init__(self, scores: Optional[Mapping[str, float]] = None):
        self._scores: dict[str, float] = dict(scores or {})

    def get(self, class_name: str) -> float:
        return self._scores.get(class_name, 0)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._scores

    def __len__(self) -> int:
        return len(self._scores)

    def to_dict(self) -> dict[str, float]:
        return dict(self._scores)

    @classmethod
    def coerce(cls, data: "PopularityIndex | Mapping[str, Any] | None") -> "PopularityIndex":
        """Accept an index, a raw mapping or None."""
        if data is None:
            return cls()
        if isinstance(data, PopularityIndex):
            return data
        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PopularityIndex":
        """
        Build an index from any of the supported shapes.

        Supported shapes:
            - flat scores: ``{"Game_Map": 29}``
            - class catalog: ``{"Game_Map": {"popularity": 29, ...}}``
            - enrichment document: ``{"classPopularity": {"Game_Map": 29}}``

        Args:
            data: Parsed popularity data

        Returns:
            PopularityIndex

        Raises:
            PopularityFormatError: If data is not a mapping
        """
        if not isinstance(data, Mapping):
            raise PopularityFormatError(
                f"Popularity data must be a mapping, got {type(data).__name__}"
            )

        for key in ENRICHMENT_KEYS:
            nested = data.get(key)
            if isinstance(nested, Mapping):
                data = nested
                break

        scores: dict[str, float] = {}
        for class_name, value in data.items():
            if isinstance(value, Mapping):
                value = value.get("popularity", 0)
            number = _as_number(value)
            if number is None:
                if value is not None:
                    logger.debug(f"Ignoring non-numeric popularity for {class_name}: {value!r}")
                number = 0
            scores[str(class_name)] = number
        return cls(scores)

    @classmethod
    def load(cls, path: str | Path) -> "PopularityIndex":
        """
        Load popularity data from a JSON or YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            PopularityFormatError: If the file cannot be parsed
        """
        path = Path(path).expanduser()
        content = path.read_text(encoding="utf-8")
        try:
            if path.suffix == ".json":
                data = json.loads(content)
            elif path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            else:
                raise PopularityFormatError(
                    f"Unsupported popularity file type '{path.suffix}' (use .json, .yaml or .yml)"
                )
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise PopularityFormatError(f"Cannot parse popularity file {path}: {e}") from e

        index = cls.from_mapping(data)
        logger.info(f"Loaded popularity for {len(index)} classes from {path}")
        return index

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], extractor: Optional[OverrideExtractor] = None
    ) -> "PopularityIndex":
        """Derive class popularity from a corpus of plugin sources."""
        return cls(build_enrichment(sources, extractor).class_popularity)


def _sorted_counts(counts: Mapping[str, set[str]]) -> dict[str, int]:
    ranked = sorted(counts.items(), key=lambda item: (-len(item[1]), item[0]))
    return {name: len(plugins) for name, plugins in ranked}


def build_enrichment(
    sources: Mapping[str, str], extractor: Optional[OverrideExtractor] = None
) -> PopularityEnrichment:
    """
    Count how many plugins of a corpus override each class and method.

    Args:
        sources: Plugin name -> raw source
        extractor: Override extractor to use (default rules if None)

    Returns:
        PopularityEnrichment with counts sorted from most to least popular
    """
    extractor = extractor or OverrideExtractor()
    class_plugins: dict[str, set[str]] = defaultdict(set)
    method_plugins: dict[str, set[str]] = defaultdict(set)

    for plugin_name, source in sources.items():
        for signature in extractor.extract(source):
            class_name, _ = split_signature(signature)
            class_plugins[class_name].add(plugin_name)
            method_plugins[signature].add(plugin_name)

    return PopularityEnrichment(
        generated_at=datetime.now(timezone.utc).isoformat(),
        plugin_count=len(sources),
        class_popularity=_sorted_counts(class_plugins),
        method_popularity=_sorted_counts(method_plugins),
    )
