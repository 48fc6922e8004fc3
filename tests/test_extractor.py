"""Tests for prototype override extraction."""

import re
import time

import pytest

from mzguard.analysis.extractor import (
    ALIAS_CAPTURE,
    DIRECT_ASSIGNMENT,
    OverrideExtractor,
    extract_overrides,
)


class TestDirectAssignment:
    """Test the direct reassignment rule."""

    def test_simple_assignment(self):
        source = "Scene_Map.prototype.update = function() { /* ... */ };"
        assert extract_overrides(source) == ["Scene_Map.prototype.update"]

    def test_whitespace_before_equals(self):
        assert extract_overrides("Game_Map.prototype.update\n    = function() {};") == [
            "Game_Map.prototype.update"
        ]

    def test_deep_chain_truncated(self):
        """Only the first segment after .prototype. is kept."""
        assert extract_overrides('Game_Map.prototype.tileset.name = "test";') == [
            "Game_Map.prototype.tileset"
        ]

    def test_arrow_function_value(self):
        assert extract_overrides("Scene_Map.prototype.update = () => {};") == [
            "Scene_Map.prototype.update"
        ]

    @pytest.mark.parametrize(
        "source",
        [
            "if (Game_Map.prototype.update == f) {}",
            "if (Game_Map.prototype.update === f) {}",
            "Game_Map.prototype.update=> 1",
            "Game_Map.prototype.count += 1;",
            "Game_Map.prototype.update.call(this);",
        ],
    )
    def test_not_an_assignment(self, source):
        """Comparisons, compound assignment and plain reads are ignored."""
        assert extract_overrides(source) == []

    def test_multiple_in_discovery_order(self):
        source = (
            "Window_Base.prototype.drawText = function() {};\n"
            "Game_Actor.prototype.setup = function() {};\n"
        )
        assert extract_overrides(source) == [
            "Window_Base.prototype.drawText",
            "Game_Actor.prototype.setup",
        ]


class TestAliasCapture:
    """Test the alias-then-wrap rule."""

    @pytest.mark.parametrize("keyword", ["const", "let", "var"])
    def test_alias_declaration(self, keyword):
        source = f"{keyword} _alias = Game_Map.prototype.update;"
        assert extract_overrides(source) == ["Game_Map.prototype.update"]

    def test_alias_with_comma(self):
        assert extract_overrides("var _a = Game_Map.prototype.setup, b = 1;") == [
            "Game_Map.prototype.setup"
        ]

    def test_alias_and_assignment_deduplicated(self):
        """The usual alias + reassign pattern yields one signature."""
        source = (
            "const _Game_Map_update = Game_Map.prototype.update;\n"
            "Game_Map.prototype.update = function() {\n"
            "    _Game_Map_update.call(this);\n"
            "};\n"
        )
        assert extract_overrides(source) == ["Game_Map.prototype.update"]

    def test_direct_matches_come_first(self):
        """Direct-rule signatures precede alias-only ones."""
        source = "const _x = Game_Battler.prototype.refresh;\nGame_Actor.prototype.setup = f;"
        assert extract_overrides(source) == [
            "Game_Actor.prototype.setup",
            "Game_Battler.prototype.refresh",
        ]


class TestSanitizedExtraction:
    """Extraction ignores comments and strings."""

    def test_commented_out_override(self):
        assert extract_overrides("// Game_Map.prototype.update = function() {};") == []

    def test_override_in_block_comment(self):
        assert extract_overrides("/* Game_Map.prototype.update = f; */") == []

    def test_override_in_template_literal(self):
        assert extract_overrides("const s = `Window_Base.prototype.drawText = 1`;") == []

    def test_override_in_string(self):
        assert extract_overrides("log('Game_Map.prototype.update = replaced');") == []

    def test_code_after_string_with_slashes(self):
        source = 'const url = "http://x"; Game_Map.prototype.update = f;'
        assert extract_overrides(source) == ["Game_Map.prototype.update"]

    def test_quotes_in_regex_literal_hide_code(self):
        """Regex literals are not understood: a quote inside one opens a string."""
        source = 'var re = /"/; Game_Map.prototype.update = f; var s = "x";'
        assert extract_overrides(source) == []

    def test_code_after_line_continued_string(self):
        """A string continued with backslash-newline ends at its closing quote."""
        source = 'var x = "a\\\n// b"; Game_Map.prototype.update = function(){};'
        assert extract_overrides(source) == ["Game_Map.prototype.update"]

    def test_commented_line_before_real_override(self):
        source = "// Game_Actor.prototype.setup = fake\nGame_Map.prototype.setup = function(){};"
        assert extract_overrides(source) == ["Game_Map.prototype.setup"]


class TestLimitations:
    """Patterns the extractor deliberately does not recognize."""

    def test_computed_member(self):
        assert extract_overrides("Game_Map.prototype[name] = function() {};") == []

    def test_define_property(self):
        source = 'Object.defineProperty(Game_Map.prototype, "update", { value: f });'
        assert extract_overrides(source) == []

    def test_empty_and_plain_code(self):
        assert extract_overrides("") == []
        assert extract_overrides("let x = 1; function f() { return x; }") == []


class TestOverrideExtractor:
    """Test OverrideExtractor configuration."""

    def test_direct_rule_only(self):
        extractor = OverrideExtractor(patterns=[DIRECT_ASSIGNMENT])
        assert extractor.extract("const _a = Game_Map.prototype.update;") == []

    def test_alias_rule_only(self):
        extractor = OverrideExtractor(patterns=[ALIAS_CAPTURE])
        assert extractor.extract("Game_Map.prototype.update = f;") == []

    def test_custom_pattern(self):
        """Extra patterns only need class and method capture groups."""
        define_property = re.compile(r"defineProperty\((\w+)\.prototype,\s*\"(\w+)\"")
        extractor = OverrideExtractor(patterns=[DIRECT_ASSIGNMENT, define_property])
        source = 'Object.defineProperty(Game_Map.prototype, "update", {});'
        # The string literal is blanked before matching, so the custom rule sees nothing
        assert extractor.extract(source) == []
        assert extractor.extract_from_sanitized(source) == ["Game_Map.prototype.update"]


class TestLongInput:
    """Extraction stays linear on long identifier runs."""

    def test_long_identifier_without_prototype(self):
        source = "a" * 30000 + " = 1;"
        started = time.perf_counter()
        assert extract_overrides(source) == []
        assert time.perf_counter() - started < 1

    def test_long_class_name(self):
        name = "C" * 30000
        source = f"{name}.prototype.update = function() {{}};"
        started = time.perf_counter()
        assert extract_overrides(source) == [f"{name}.prototype.update"]
        assert time.perf_counter() - started < 1
