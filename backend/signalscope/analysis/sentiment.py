"""Lexicon sentiment for signals (TextBlob) and aggregation for the report."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from textblob import TextBlob

from ..constants import NEGATIVE_THRESHOLD, POSITIVE_THRESHOLD
from ..schemas.sentiment_schema import (
    SentimentAnalysis,
    SentimentDistribution,
    SentimentLabel,
    SentimentResult,
)
from ..schemas.signal_schema import Signal

logger = logging.getLogger(__name__)


def _analyze_text(text: str) -> Tuple[float, float]:
    """
    Analyze sentiment using TextBlob.
    Returns (polarity, subjectivity).
    """
    blob = TextBlob(text)
    return blob.sentiment.polarity, blob.sentiment.subjectivity


def classify_score(score: float) -> SentimentLabel:
    """Label a score: strictly above 0.3 positive, strictly below -0.3 negative."""
    if score > POSITIVE_THRESHOLD:
        return "positive"
    if score < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score_signal(signal: Signal) -> SentimentResult:
    polarity, subjectivity = _analyze_text(signal.content)
    score = _clamp(polarity, -1.0, 1.0)
    # Subjectivity mapped into [0.5, 1]
    confidence = 0.5 + 0.5 * _clamp(subjectivity, 0.0, 1.0)
    return SentimentResult(
        signal_id=signal.id,
        score=score,
        confidence=confidence,
        label=classify_score(score),
    )


def analyze_signals(signals: Sequence[Signal]) -> List[SentimentResult]:
    results = [score_signal(signal) for signal in signals]
    logger.info("[SENTIMENT] Scored %d signals", len(results))
    return results


def aggregate_sentiment(results: Sequence[SentimentResult], top_n: int = 5) -> SentimentAnalysis:
    """Collapse per-signal results into the report's sentiment block.

    The distribution always sums to 1.0; with no results everything is
    neutral. Signal id lists are ordered strongest first.
    """
    if not results:
        return SentimentAnalysis(
            overall=0.0,
            distribution=SentimentDistribution(positive=0.0, neutral=1.0, negative=0.0),
        )

    overall = sum(r.score for r in results) / len(results)

    counts = {"positive": 0, "neutral": 0, "negative": 0}
    for result in results:
        counts[result.label] += 1
    total = sum(counts.values())

    positive = counts["positive"] / total
    negative = counts["negative"] / total
    # Neutral absorbs float rounding so the three fractions sum to exactly 1
    neutral = max(0.0, 1.0 - positive - negative)

    strongest_positive = sorted(
        (r for r in results if r.label == "positive"), key=lambda r: r.score, reverse=True
    )
    strongest_negative = sorted(
        (r for r in results if r.label == "negative"), key=lambda r: r.score
    )

    return SentimentAnalysis(
        overall=_clamp(overall, -1.0, 1.0),
        distribution=SentimentDistribution(positive=positive, neutral=neutral, negative=negative),
        positive_signals=[r.signal_id for r in strongest_positive[:top_n]],
        negative_signals=[r.signal_id for r in strongest_negative[:top_n]],
    )
