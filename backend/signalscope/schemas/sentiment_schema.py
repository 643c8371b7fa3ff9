from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

SentimentLabel = Literal["positive", "negative", "neutral"]


class SentimentResult(BaseModel):
    """Per-signal sentiment produced by the sentiment stage."""

    signal_id: str = Field(..., min_length=1)
    score: float = Field(..., ge=-1.0, le=1.0, description="-1 (negative) to 1 (positive)")
    confidence: float = Field(..., ge=0.0, le=1.0)
    label: SentimentLabel


class SentimentDistribution(BaseModel):
    """Fractions of signals per label. Sums to 1.0."""

    positive: float = Field(..., ge=0.0, le=1.0)
    neutral: float = Field(..., ge=0.0, le=1.0)
    negative: float = Field(..., ge=0.0, le=1.0)

    def total(self) -> float:
        return self.positive + self.neutral + self.negative


class SentimentAnalysis(BaseModel):
    """Aggregate sentiment handed to the report consumer."""

    overall: float = Field(..., ge=-1.0, le=1.0)
    distribution: SentimentDistribution
    positive_signals: List[str] = Field(
        default_factory=list,
        description="IDs of the strongest positive signals",
    )
    negative_signals: List[str] = Field(
        default_factory=list,
        description="IDs of the strongest negative signals",
    )
