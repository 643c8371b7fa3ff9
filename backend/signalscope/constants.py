"""Centralized constants shared across the pipeline, analysis and report layers.

This module is the SINGLE SOURCE OF TRUTH for source types, theme
categories and the category → sentiment heuristics. Reused by:
  - Placeholder scraper
  - Theme extractor
  - Report builder
"""

from __future__ import annotations

# ── Signal sources ──────────────────────────────────────────────────────
SOURCE_TYPES: list[str] = ["reddit", "twitter", "github", "hackernews"]

SOURCE_TYPES_SET: frozenset[str] = frozenset(SOURCE_TYPES)

# ── Theme categories ──────────────────────────────────────────────────
# Sentiment attached to a theme purely from its category.
# "frustration" and "request" are pattern-type aliases of pain / desire.
CATEGORY_SENTIMENT_MAP: dict[str, float] = {
    "pain": -0.6,
    "frustration": -0.6,
    "desire": 0.3,
    "request": 0.3,
    "feature": 0.5,
    "workflow": 0.1,
    "comparison": 0.0,
}

# ── Report consumer vocabulary ──────────────────────────────────────────
# The report only distinguishes three theme categories.
REPORT_CATEGORY_MAP: dict[str, str] = {
    "pain": "pain",
    "desire": "desire",
    "feature": "desire",
    "workflow": "neutral",
    "comparison": "neutral",
}

# ── Pattern detection ───────────────────────────────────────────────────
PATTERN_TYPES: list[str] = ["workflow", "comparison", "frustration", "request"]

# ── Sentiment labelling ─────────────────────────────────────────────────
POSITIVE_THRESHOLD: float = 0.3
NEGATIVE_THRESHOLD: float = -0.3

# Tolerance used by the report consumer when checking the distribution sum.
DISTRIBUTION_TOLERANCE: float = 0.01

REPORT_VERSION: str = "0.1.0"
