"""Extract prototype override signatures from plugin source."""

import re
from typing import Iterable

from mzguard.analysis.sanitizer import strip_comments_and_strings
from mzguard.schemas.plugins import make_signature

# ClassName.prototype.method = ...   (also .method.deeper.chain = ...)
# Only the first segment after .prototype. is kept. The lookahead rejects
# comparisons (==, ===) and arrow functions (=>). Anchored at a word boundary so
# a long identifier is tried once, not from every character.
DIRECT_ASSIGNMENT = re.compile(r"\b(\w+)\.prototype\.(\w+)(?:\.\w+)*\s*=(?![=>])")

# const|let|var _alias = ClassName.prototype.method;
ALIAS_CAPTURE = re.compile(r"\b(?:const|let|var)\s+\w+\s*=\s*(\w+)\.prototype\.(\w+)\s*[;,]")


class OverrideExtractor:
    """Finds the prototype methods a plugin reassigns or aliases."""

    def __init__(self, patterns: Iterable[re.Pattern] = (DIRECT_ASSIGNMENT, ALIAS_CAPTURE)):
        """
        Initialize extractor.

        Args:
            patterns: Compiled regexes whose groups 1 and 2 capture the class
                and method name. Matches are unioned in pattern order.
        """
        self.patterns = tuple(patterns)

    def extract_from_sanitized(self, cleaned: str) -> list[str]:
        """Extract signatures from text that has already been sanitized."""
        seen: dict[str, None] = {}
        for pattern in self.patterns:
            for match in pattern.finditer(cleaned):
                seen.setdefault(make_signature(match.group(1), match.group(2)))
        return list(seen)

    def extract(self, source: str) -> list[str]:
        """
        Extract deduplicated override signatures from raw source.

        Args:
            source: Raw plugin source

        Returns:
            Signatures like ``Game_Map.prototype.update`` in discovery order;
            empty when nothing matches
        """
        if not source:
            return []
        return self.extract_from_sanitized(strip_comments_and_strings(source))


_default_extractor = OverrideExtractor()


def extract_overrides(source: str) -> list[str]:
    """Extract override signatures with the default direct + alias rules."""
    return _default_extractor.extract(source)
