"""Pattern detection tests — regex rules, frequency filtering, examples, stats."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timezone

import pytest

from signalscope.analysis.themes.patterns import (
    PATTERN_RULES,
    PatternDetector,
    create_pattern_detector,
)
from signalscope.config import PatternDetectorConfig
from signalscope.schemas.signal_schema import Signal


def _signal(content, idx=0):
    return Signal(
        id=f"signal-{idx}",
        source="reddit",
        content=content,
        timestamp=datetime.now(timezone.utc),
        url=f"https://example.com/{idx}",
    )


def _detector(**kwargs):
    return PatternDetector(PatternDetectorConfig(**kwargs))


class TestRules:
    def test_rule_table(self):
        assert len(PATTERN_RULES) == 26
        assert {r.type for r in PATTERN_RULES} == {"workflow", "comparison", "frustration", "request"}

    def test_rule_names_unique_per_type(self):
        keys = [(r.type, r.name) for r in PATTERN_RULES]
        assert len(keys) == len(set(keys))


class TestDetect:
    def test_workflow_usage(self):
        patterns = _detector(min_frequency=1).detect([_signal("I use VSCode for development")])
        usage = [p for p in patterns if p.type == "workflow" and p.pattern == "usage"]
        assert len(usage) == 1
        assert usage[0].frequency >= 1

    def test_default_min_frequency_filters_single_match(self):
        assert PatternDetector().detect([_signal("I use VSCode for development")]) == []

    def test_case_insensitive(self):
        patterns = _detector(min_frequency=1).detect([_signal("i USE vim FOR notes")])
        assert any(p.pattern == "usage" for p in patterns)

    def test_frustration_and_request(self):
        signals = [
            _signal("It is so annoying that the build breaks", 0),
            _signal("Please add dark mode to the settings", 1),
        ]
        patterns = _detector(min_frequency=1).detect(signals)
        names = {(p.type, p.pattern) for p in patterns}
        assert ("frustration", "annoying") in names
        assert ("request", "please_add") in names

    def test_no_pattern_below_min_frequency(self):
        signals = [
            _signal("I need a faster build", 0),
            _signal("we need tests", 1),
            _signal("I want a plugin", 2),
        ]
        for min_frequency in range(0, 5):
            for pattern in _detector(min_frequency=min_frequency).detect(signals):
                assert pattern.frequency >= min_frequency

    def test_raising_min_frequency_never_grows_result(self):
        signals = [
            _signal("I need a faster build", 0),
            _signal("we need tests and want docs", 1),
            _signal("better than vim, would love tabs", 2),
        ]
        sizes = [len(_detector(min_frequency=m).detect(signals)) for m in range(0, 6)]
        assert sizes == sorted(sizes, reverse=True)

    def test_sorted_by_frequency(self):
        signals = [
            _signal("I need a faster build", 0),
            _signal("I need a faster build", 1),
            _signal("we need tests", 2),
            _signal("I want a plugin", 3),
        ]
        patterns = _detector(min_frequency=1).detect(signals)
        frequencies = [p.frequency for p in patterns]
        assert frequencies == sorted(frequencies, reverse=True)
        assert patterns[0].pattern == "need"
        assert patterns[0].frequency == 3

    def test_examples_unique_longest_first(self):
        signals = [
            _signal("I need a faster build", 0),
            _signal("I need a faster build", 1),
            _signal("we need tests", 2),
        ]
        need = [p for p in _detector(min_frequency=1).detect(signals) if p.pattern == "need"][0]
        assert need.examples == ["need a faster build", "need tests"]

    def test_examples_capped(self):
        signals = [_signal(f"we need feature number {i}", i) for i in range(6)]
        need = [p for p in _detector(min_frequency=1, max_examples=2).detect(signals) if p.pattern == "need"][0]
        assert need.frequency == 6
        assert len(need.examples) == 2

    def test_examples_truncated(self):
        signals = [_signal("I need a faster build", 0)]
        need = [
            p for p in _detector(min_frequency=1, max_example_length=10).detect(signals)
            if p.pattern == "need"
        ][0]
        assert need.examples == ["need a ..."]
        assert len(need.examples[0]) == 10

    def test_empty_input(self):
        assert PatternDetector().detect([]) == []


class TestHelpers:
    def _patterns(self):
        signals = [
            _signal("I need a faster build", 0),
            _signal("we need tests", 1),
            _signal("better than vim", 2),
        ]
        return _detector(min_frequency=1).detect(signals)

    def test_by_type(self):
        patterns = self._patterns()
        comparison = PatternDetector.get_patterns_by_type(patterns, "comparison")
        assert [p.pattern for p in comparison] == ["better_than"]

    def test_top_patterns(self):
        top = PatternDetector.get_top_patterns(self._patterns(), 1)
        assert len(top) == 1
        assert top[0].pattern == "need"

    def test_stats(self):
        patterns = self._patterns()
        stats = PatternDetector.get_pattern_stats(patterns)
        assert stats.total_patterns == len(patterns)
        assert stats.total_occurrences == sum(p.frequency for p in patterns)
        assert set(stats.by_type) == {"workflow", "comparison", "frustration", "request"}
        assert stats.by_type["workflow"] == 0

    def test_stats_empty(self):
        stats = PatternDetector.get_pattern_stats([])
        assert stats.total_patterns == 0
        assert stats.total_occurrences == 0


class TestConfig:
    def test_example_length_too_short(self):
        with pytest.raises(ValueError):
            PatternDetectorConfig(max_example_length=3)

    def test_factory_override(self):
        detector = create_pattern_detector(min_frequency=5)
        assert detector.config.min_frequency == 5
