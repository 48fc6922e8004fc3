"""Blank out comments and string literals in JavaScript source."""

import re

# Block comments, line comments, template literals, double- and single-quoted
# strings. A single alternation so a delimiter inside one kind of span can
# never open another. An escape may be a backslash-newline (line continuation).
_COMMENT_OR_STRING = re.compile(
    r"/\*[\s\S]*?\*/"
    r"|//[^\n]*"
    r"|`(?:[^`\\]|\\[\s\S])*`"
    r'|"(?:[^"\\]|\\[\s\S])*"'
    r"|'(?:[^'\\]|\\[\s\S])*'"
)


def _blank(match: re.Match) -> str:
    return " " * (match.end() - match.start())


def strip_comments_and_strings(source: str) -> str:
    """
    Replace every comment and string/template literal with spaces.

    The result has exactly the same length as ``source``, so offsets into it
    map back to the original text. Line breaks inside block comments and
    template literals are blanked too, which means line numbers past such a
    span no longer match the original.

    Args:
        source: Raw JavaScript source, possibly malformed

    Returns:
        Sanitized source of identical length
    """
    if not source:
        return ""
    return _COMMENT_OR_STRING.sub(_blank, source)
