"""Tests for the staged progress display."""

import io

import pytest

from mzguard.core.progress import ProgressIndicator


@pytest.fixture
def indicator():
    return ProgressIndicator(enabled=True, stream=io.StringIO())


def completed(indicator):
    return indicator._bar.tasks[0].completed


class TestProgressIndicator:
    """Test ProgressIndicator stage arithmetic."""

    def test_scan_advances_per_file(self, indicator):
        indicator.start_stage("scan")
        indicator.advance(3, 6)
        assert completed(indicator) == 30
        indicator.complete_stage("Read 6 plugins")
        assert completed(indicator) == 60
        assert indicator.stage is None
        indicator.finish()

    def test_stages_fill_the_bar(self, indicator):
        for stage in ("scan", "dependencies", "conflicts"):
            indicator.start_stage(stage)
            indicator.complete_stage(stage)
        assert completed(indicator) == 100
        indicator.finish()

    def test_advance_outside_stage_ignored(self, indicator):
        indicator.advance(1, 2)
        assert indicator._task is None

    def test_disabled_is_silent(self):
        stream = io.StringIO()
        indicator = ProgressIndicator(enabled=False, stream=stream)
        indicator.start_stage("scan")
        indicator.advance(1, 1)
        indicator.note("something")
        indicator.finish()
        assert stream.getvalue() == ""

    def test_note(self):
        stream = io.StringIO()
        indicator = ProgressIndicator(enabled=True, stream=stream)
        indicator.note("Plugin 'Ghost' is missing")
        indicator.note("Bad.js: broken", level="error")
        output = stream.getvalue()
        assert "Plugin 'Ghost' is missing" in output
        assert "Bad.js: broken" in output
