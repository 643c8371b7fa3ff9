"""Theme extraction schemas.

``RawThemeExtraction`` is the trust boundary for LLM output: every item the
model returns is validated against it (strict mode, no coercion) before any
of its data reaches the typed structures below.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ThemeCategory = Literal["pain", "desire", "feature", "workflow", "comparison"]
PatternType = Literal["workflow", "comparison", "frustration", "request"]


class RawThemeExtraction(BaseModel):
    """One theme as returned by the LLM. Untrusted until validated."""

    model_config = ConfigDict(strict=True, frozen=True)

    theme: str = Field(..., min_length=1)
    keywords: List[str]
    category: ThemeCategory
    examples: List[str]

    @field_validator("theme")
    @classmethod
    def theme_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("theme name must not be blank")
        return value


class ExtractedTheme(BaseModel):
    """A theme built by merging every raw extraction sharing a name."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    keywords: List[str] = Field(default_factory=list)
    category: ThemeCategory
    frequency: int = Field(..., ge=0, description="Number of raw extractions merged")
    sentiment: float = Field(..., ge=-1.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    examples: List[str] = Field(default_factory=list)


class KeywordCluster(BaseModel):
    """A group of near-duplicate keywords."""

    model_config = ConfigDict(frozen=True)

    representative: str
    keywords: List[str] = Field(..., description="Members, sorted")
    similarity: float = Field(..., ge=0.0, le=1.0, description="Mean pairwise similarity")


class DetectedPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PatternType
    pattern: str = Field(..., description="Rule name that produced the matches")
    frequency: int = Field(..., ge=0)
    examples: List[str] = Field(default_factory=list)


class PatternStats(BaseModel):
    total_patterns: int = Field(..., ge=0)
    total_occurrences: int = Field(..., ge=0)
    by_type: Dict[str, int]
