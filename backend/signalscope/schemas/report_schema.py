"""Report hand-off schemas.

The downstream report consumer accepts exactly this shape. Validation here
mirrors the consumer's own checks so a pipeline never hands off data the
consumer would reject.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field, model_validator

from ..constants import DISTRIBUTION_TOLERANCE
from .sentiment_schema import SentimentAnalysis
from .signal_schema import Signal


class ReportTheme(BaseModel):
    name: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    frequency: int = Field(..., ge=0)
    keywords: List[str] = Field(default_factory=list)
    category: Literal["pain", "desire", "neutral"]
    sentiment: float = Field(..., ge=-1.0, le=1.0)


class ReportMetadata(BaseModel):
    scraped_at: datetime
    sources: List[str]
    total_signals: int = Field(..., ge=0)
    generated_at: datetime
    version: str


class ReportData(BaseModel):
    """Everything the report consumer needs to emit JSON / Markdown."""

    signals: List[Signal]
    sentiment: SentimentAnalysis
    themes: List[ReportTheme]
    metadata: ReportMetadata

    @model_validator(mode="after")
    def _check_consumer_rules(self) -> "ReportData":
        if not self.signals:
            raise ValueError("Report data must contain at least one signal")
        if not self.themes:
            raise ValueError("Report data must contain at least one theme")
        total = self.sentiment.distribution.total()
        if abs(total - 1.0) > DISTRIBUTION_TOLERANCE:
            raise ValueError(f"Sentiment distribution must sum to 1.0, got {total:.2f}")
        return self
