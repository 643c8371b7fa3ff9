"""Configuration for the analysis components and the LLM client.

Defaults are documented on each dataclass. Environment variables
(loaded from ``.env`` by ``main.py``) override the defaults; explicit
keyword overrides passed to the ``from_env`` factories win over both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Optional


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0 and 1, got {value}")


# ---------------------------------------------------------------------------
# Keyword clustering
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ClustererConfig:
    """Keyword clustering settings.

    similarity_threshold: minimum mean similarity to join a cluster (0-1)
    use_stemming: strip one common suffix before comparing
    min_cluster_size: clusters with fewer members are dropped
    """

    similarity_threshold: float = 0.7
    use_stemming: bool = True
    min_cluster_size: int = 1

    def __post_init__(self) -> None:
        _check_unit_interval("similarity_threshold", self.similarity_threshold)
        if self.min_cluster_size < 0:
            raise ValueError("min_cluster_size cannot be negative")


# ---------------------------------------------------------------------------
# Pattern detection
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PatternDetectorConfig:
    min_frequency: int = 2
    max_examples: int = 3
    max_example_length: int = 150

    def __post_init__(self) -> None:
        if self.min_frequency < 0:
            raise ValueError("min_frequency cannot be negative")
        if self.max_examples < 0:
            raise ValueError("max_examples cannot be negative")
        # Truncation appends "...", so anything shorter cannot hold text.
        if self.max_example_length < 4:
            raise ValueError("max_example_length must be at least 4")

    @classmethod
    def from_env(cls, **overrides: Any) -> "PatternDetectorConfig":
        base = cls(min_frequency=_env_int("PATTERN_MIN_FREQUENCY", cls.min_frequency))
        return replace(base, **overrides)


# ---------------------------------------------------------------------------
# Theme extraction
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ThemeExtractionConfig:
    """Theme extraction settings.

    batch_size: signals per LLM request
    min_frequency: themes seen fewer times are dropped
    min_confidence: themes below this are dropped unless include_low_confidence
    include_low_confidence: keep low-confidence themes
    max_examples: example quotes kept per theme
    """

    batch_size: int = 50
    min_frequency: int = 2
    min_confidence: float = 0.6
    include_low_confidence: bool = False
    max_examples: int = 5

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.min_frequency < 0:
            raise ValueError("min_frequency cannot be negative")
        if self.max_examples < 0:
            raise ValueError("max_examples cannot be negative")
        _check_unit_interval("min_confidence", self.min_confidence)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ThemeExtractionConfig":
        base = cls(
            batch_size=_env_int("THEME_BATCH_SIZE", cls.batch_size),
            min_frequency=_env_int("THEME_MIN_FREQUENCY", cls.min_frequency),
            min_confidence=_env_float("THEME_MIN_CONFIDENCE", cls.min_confidence),
            include_low_confidence=_env_bool(
                "THEME_INCLUDE_LOW_CONFIDENCE", cls.include_low_confidence
            ),
        )
        return replace(base, **overrides)


# ---------------------------------------------------------------------------
# LLM client
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class LLMSettings:
    api_key: Optional[str] = None
    model: str = "gpt-4.1"
    temperature: float = 0.2
    timeout: float = 40.0
    max_tokens: int = 4096
    max_retries: int = 1

    @classmethod
    def from_env(cls, **overrides: Any) -> "LLMSettings":
        base = cls(
            api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
            model=os.getenv("OPENAI_MODEL", cls.model).strip(),
            temperature=_env_float("OPENAI_TEMPERATURE", cls.temperature),
            timeout=_env_float("OPENAI_REQUEST_TIMEOUT", cls.timeout),
            max_tokens=_env_int("OPENAI_MAX_COMPLETION_TOKENS", cls.max_tokens),
        )
        return replace(base, **overrides)
