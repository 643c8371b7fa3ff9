"""Signal schemas — the unit of scraped text flowing through the pipeline."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

SourceType = Literal["reddit", "twitter", "github", "hackernews"]


class Signal(BaseModel):
    """A single piece of text scraped from a web source.

    Immutable once created. Produced by a scraper, consumed by the
    sentiment, pattern and theme stages.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique identifier of the signal")
    source: SourceType = Field(..., description="Source the signal was scraped from")
    content: str = Field(..., min_length=1, description="Post body, comment or tweet text")
    author: Optional[str] = Field(default=None, description="Author handle when available")
    timestamp: datetime = Field(..., description="When the content was posted")
    url: str = Field(..., min_length=1, description="Link to the original content")
    sentiment: Optional[float] = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Sentiment score from -1 (negative) to 1 (positive)",
    )
    themes: Optional[List[str]] = Field(default=None, description="Theme names attached later")
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Source-specific metadata (subreddit, score, stars, ...)",
    )


def is_signal(value: Any) -> bool:
    """Return True if *value* is a Signal or a mapping that validates as one."""
    if isinstance(value, Signal):
        return True
    if not isinstance(value, dict):
        return False
    try:
        Signal.model_validate(value)
    except ValidationError:
        return False
    return True


class ScrapeConfig(BaseModel):
    """Input of the scrape stage."""

    sources: List[str] = Field(
        ...,
        description="Data sources to scrape (e.g. 'reddit', 'hackernews')",
        examples=[["reddit"]],
    )
    subreddits: Optional[List[str]] = Field(
        default=None,
        description="Subreddits to scrape when 'reddit' is a source",
    )
    max_signals: int = Field(default=10, ge=1, le=1000)
    time_range_hours: Optional[int] = Field(default=None, ge=1)
