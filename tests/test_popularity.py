"""Tests for class popularity data."""

import json

import pytest

from mzguard.analysis.popularity import (
    PopularityFormatError,
    PopularityIndex,
    build_enrichment,
)


class TestPopularityIndex:
    """Test PopularityIndex construction and lookup."""

    def test_missing_class_is_zero(self):
        index = PopularityIndex({"Game_Map": 29})
        assert index.get("Game_Map") == 29
        assert index.get("Nope") == 0
        assert "Game_Map" in index
        assert "Nope" not in index

    def test_flat_scores(self):
        index = PopularityIndex.from_mapping({"Game_Map": 29, "Scene_Map": 3.5})
        assert index.to_dict() == {"Game_Map": 29, "Scene_Map": 3.5}

    def test_class_catalog(self):
        index = PopularityIndex.from_mapping(
            {"Game_Map": {"popularity": 29, "methods": ["update"]}, "Sprite": {"methods": []}}
        )
        assert index.get("Game_Map") == 29
        assert index.get("Sprite") == 0

    @pytest.mark.parametrize("key", ["classPopularity", "class_popularity"])
    def test_enrichment_document(self, key):
        index = PopularityIndex.from_mapping({"version": "1", key: {"Game_Actor": 31}})
        assert index.to_dict() == {"Game_Actor": 31}

    def test_non_numeric_values_read_as_zero(self):
        index = PopularityIndex.from_mapping({"A": "high", "B": True, "C": None})
        assert index.to_dict() == {"A": 0, "B": 0, "C": 0}

    def test_not_a_mapping(self):
        with pytest.raises(PopularityFormatError):
            PopularityIndex.from_mapping(["Game_Map"])

    def test_coerce(self):
        index = PopularityIndex({"A": 1})
        assert PopularityIndex.coerce(index) is index
        assert len(PopularityIndex.coerce(None)) == 0
        assert PopularityIndex.coerce({"A": 2}).get("A") == 2


class TestPopularityLoad:
    """Test loading popularity files."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "pop.json"
        path.write_text(json.dumps({"Game_Map": 29}), encoding="utf-8")
        assert PopularityIndex.load(path).get("Game_Map") == 29

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "pop.yaml"
        path.write_text("Game_Map:\n  popularity: 29\nScene_Map: 4\n", encoding="utf-8")
        index = PopularityIndex.load(path)
        assert index.to_dict() == {"Game_Map": 29, "Scene_Map": 4}

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "pop.txt"
        path.write_text("Game_Map 29", encoding="utf-8")
        with pytest.raises(PopularityFormatError, match="Unsupported"):
            PopularityIndex.load(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "pop.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PopularityFormatError, match="Cannot parse"):
            PopularityIndex.load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PopularityIndex.load(tmp_path / "absent.json")

    def test_format_error_is_value_error(self):
        assert issubclass(PopularityFormatError, ValueError)


class TestBuildEnrichment:
    """Test corpus popularity counting."""

    @pytest.fixture
    def corpus(self):
        return {
            "A.js": (
                "Game_Map.prototype.update = f;\n"
                "const _start = Game_Map.prototype.start;\n"
                "Game_Map.prototype.update = g;\n"
            ),
            "B.js": "Game_Map.prototype.update = g;\nScene_Map.prototype.start = h;\n",
            "C.js": "// Window_Base.prototype.drawText = nothing;\n",
        }

    def test_counts_distinct_plugins(self, corpus):
        enrichment = build_enrichment(corpus)
        assert enrichment.plugin_count == 3
        assert enrichment.class_popularity == {"Game_Map": 2, "Scene_Map": 1}
        assert enrichment.method_popularity == {
            "Game_Map.prototype.update": 2,
            "Game_Map.prototype.start": 1,
            "Scene_Map.prototype.start": 1,
        }

    def test_sorted_by_count_then_name(self, corpus):
        enrichment = build_enrichment(corpus)
        assert list(enrichment.method_popularity) == [
            "Game_Map.prototype.update",
            "Game_Map.prototype.start",
            "Scene_Map.prototype.start",
        ]

    def test_generated_at_is_utc_iso(self, corpus):
        assert build_enrichment(corpus).generated_at.endswith("+00:00")

    def test_round_trip_through_index(self, corpus):
        """Enrichment output can be fed back as popularity data."""
        data = build_enrichment(corpus).model_dump(by_alias=True)
        index = PopularityIndex.from_mapping(data)
        assert index.get("Game_Map") == 2
        assert PopularityIndex.from_sources(corpus).to_dict() == index.to_dict()

    def test_empty_corpus(self):
        enrichment = build_enrichment({})
        assert enrichment.plugin_count == 0
        assert enrichment.class_popularity == {}
