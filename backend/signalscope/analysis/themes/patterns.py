"""Pattern detection.

Counts workflow / comparison / frustration / request phrases in signal text
with a fixed set of case-insensitive regex rules. No LLM calls, no
scoring; same signals → same patterns.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ...config import PatternDetectorConfig
from ...constants import PATTERN_TYPES
from ...schemas.signal_schema import Signal
from ...schemas.theme_schema import DetectedPattern, PatternStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternRule:
    type: str
    name: str
    regex: re.Pattern


def _rule(type_: str, name: str, expr: str) -> PatternRule:
    return PatternRule(type=type_, name=name, regex=re.compile(expr, re.IGNORECASE))


# ---------------------------------------------------------------------------
# Rule table.  Order matters only for tie-breaking in the output.
# ---------------------------------------------------------------------------
PATTERN_RULES: tuple[PatternRule, ...] = (
    # Workflow
    _rule("workflow", "usage", r"I use\s+[\w\s]+\s+for\s+[\w\s]+"),
    _rule("workflow", "workflow_description", r"my workflow is\s+[\w\s]+"),
    _rule("workflow", "usual_practice", r"I usually\s+[\w\s]+"),
    _rule("workflow", "typical_behavior", r"typically\s+[\w\s]+"),
    _rule("workflow", "workflow_start", r"I start by\s+[\w\s]+"),
    # Comparison
    _rule("comparison", "better_than", r"better than\s+[\w\s]+"),
    _rule("comparison", "comparison", r"compared to\s+[\w\s]+"),
    _rule("comparison", "versus", r"vs\.?\s+[\w\s]+"),
    _rule("comparison", "similarity", r"similar to\s+[\w\s]+"),
    _rule("comparison", "unlike", r"unlike\s+[\w\s]+"),
    _rule("comparison", "alternative", r"instead of\s+[\w\s]+"),
    # Frustration
    _rule("frustration", "annoying", r"annoying that\s+[\w\s]+"),
    _rule("frustration", "frustrated", r"frustrated with\s+[\w\s]+"),
    _rule("frustration", "hate", r"hate that\s+[\w\s]+"),
    _rule("frustration", "cant_stand", r"can't stand\s+[\w\s]+"),
    _rule("frustration", "crazy", r"drives me crazy\s+[\w\s]+"),
    _rule("frustration", "why_question", r"why does\s+[\w\s]+"),
    _rule("frustration", "not_working", r"doesn't work\s+[\w\s]*"),
    # Request
    _rule("request", "would_love", r"would love\s+[\w\s]+"),
    _rule("request", "please_add", r"please add\s+[\w\s]+"),
    _rule("request", "wish", r"wish\s+[\w\s]+\s+would\s+[\w\s]+"),
    _rule("request", "missing", r"missing\s+[\w\s]+"),
    _rule("request", "need", r"need\s+[\w\s]+"),
    _rule("request", "want", r"want\s+[\w\s]+"),
    _rule("request", "should_have", r"should have\s+[\w\s]+"),
    _rule("request", "would_be_nice", r"would be nice\s+[\w\s]+"),
)


def find_matches(text: str, regex: re.Pattern) -> List[str]:
    """Every non-empty, whitespace-trimmed match of *regex* in *text*."""
    matches: List[str] = []
    for match in regex.finditer(text):
        matched = match.group(0).strip()
        if matched:
            matches.append(matched)
    return matches


class PatternDetector:
    def __init__(
        self,
        config: Optional[PatternDetectorConfig] = None,
        rules: Sequence[PatternRule] = PATTERN_RULES,
    ):
        self.config = config or PatternDetectorConfig()
        self.rules = tuple(rules)

    def detect(self, signals: Sequence[Signal]) -> List[DetectedPattern]:
        """Detect patterns across *signals*, most frequent first.

        Matches are grouped per (type, rule name); groups with fewer than
        ``min_frequency`` matches are dropped.
        """
        grouped: Dict[tuple[str, str], List[str]] = {}

        for signal in signals:
            for rule in self.rules:
                matches = find_matches(signal.content, rule.regex)
                if matches:
                    grouped.setdefault((rule.type, rule.name), []).extend(matches)

        patterns: List[DetectedPattern] = []
        for (type_, name), matches in grouped.items():
            frequency = len(matches)
            if frequency < self.config.min_frequency:
                continue
            patterns.append(
                DetectedPattern(
                    type=type_,
                    pattern=name,
                    frequency=frequency,
                    examples=self._select_examples(matches),
                )
            )

        patterns.sort(key=lambda p: p.frequency, reverse=True)
        logger.debug("[PATTERNS] %d signals -> %d patterns", len(signals), len(patterns))
        return patterns

    def _select_examples(self, matches: Sequence[str]) -> List[str]:
        # Longest unique matches first
        unique = list(dict.fromkeys(matches))
        unique.sort(key=len, reverse=True)
        return [self._truncate(example) for example in unique[: self.config.max_examples]]

    def _truncate(self, example: str) -> str:
        limit = self.config.max_example_length
        if len(example) <= limit:
            return example
        return example[: limit - 3] + "..."

    # ------------------------------------------------------------------ #
    #  Helpers over detected patterns                                     #
    # ------------------------------------------------------------------ #
    @staticmethod
    def get_patterns_by_type(
        patterns: Sequence[DetectedPattern], pattern_type: str
    ) -> List[DetectedPattern]:
        return [p for p in patterns if p.type == pattern_type]

    @staticmethod
    def get_top_patterns(patterns: Sequence[DetectedPattern], count: int) -> List[DetectedPattern]:
        return sorted(patterns, key=lambda p: p.frequency, reverse=True)[: max(count, 0)]

    @staticmethod
    def get_pattern_stats(patterns: Sequence[DetectedPattern]) -> PatternStats:
        by_type = {pattern_type: 0 for pattern_type in PATTERN_TYPES}
        total_occurrences = 0
        for pattern in patterns:
            by_type[pattern.type] += 1
            total_occurrences += pattern.frequency
        return PatternStats(
            total_patterns=len(patterns),
            total_occurrences=total_occurrences,
            by_type=by_type,
        )


def create_pattern_detector(**overrides: Any) -> PatternDetector:
    """Detector using env-aware defaults, optionally overriding single fields."""
    return PatternDetector(PatternDetectorConfig.from_env(**overrides))
