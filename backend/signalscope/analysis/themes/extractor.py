"""Theme Extractor — LLM-driven theme extraction over batches of signals.

Flow:
  1. Split signals into batches of ``batch_size``
  2. One LLM call per batch (sequential; a failing batch is logged and skipped)
  3. Parse + validate each response against ``RawThemeExtraction``
  4. Cluster the union of raw keywords (observability only, never gating)
  5. Merge raw extractions sharing a case-insensitive theme name
  6. Filter by frequency / confidence, rank by frequency then confidence

The LLM is injected as an async callable ``(prompt) -> str`` so tests and
alternative providers can substitute it.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections import Counter
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from pydantic import ValidationError

from ...config import ThemeExtractionConfig
from ...constants import CATEGORY_SENTIMENT_MAP
from ...pipeline.timing import StepTimer
from ...schemas.signal_schema import Signal
from ...schemas.theme_schema import ExtractedTheme, KeywordCluster, RawThemeExtraction
from ...services.openai_client import strip_code_fences
from .clusterer import KeywordClusterer
from .prompts import build_theme_extraction_prompt

logger = logging.getLogger(__name__)

LLMCallable = Callable[[str], Awaitable[str]]

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits: List[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "theme"


def calculate_confidence(frequency: int, keyword_count: int) -> float:
    """0.7 weight on how often the theme recurs, 0.3 on keyword richness."""
    frequency_score = min(frequency / 10, 1.0)
    keyword_score = min(keyword_count / 5, 1.0)
    return 0.7 * frequency_score + 0.3 * keyword_score


def parse_theme_response(raw: str) -> List[RawThemeExtraction]:
    """Parse one LLM response into validated raw extractions.

    Never raises: malformed JSON or a non-array payload yields ``[]``;
    individual items failing validation are dropped with a warning.
    """
    try:
        payload = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        logger.warning("[THEMES] Unparsable LLM response: %s", exc)
        return []

    if not isinstance(payload, list):
        logger.warning("[THEMES] LLM response is not a JSON array (got %s)", type(payload).__name__)
        return []

    extractions: List[RawThemeExtraction] = []
    for index, item in enumerate(payload):
        try:
            extractions.append(RawThemeExtraction.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "[THEMES] Dropping invalid theme at index %d: %d error(s)", index, exc.error_count()
            )
    return extractions


class ThemeExtractor:
    def __init__(
        self,
        llm: LLMCallable,
        clusterer: Optional[KeywordClusterer] = None,
        config: Optional[ThemeExtractionConfig] = None,
    ):
        self.llm = llm
        self.clusterer = clusterer or KeywordClusterer()
        self.config = config or ThemeExtractionConfig()
        self.last_clusters: List[KeywordCluster] = []

    async def extract(self, signals: Sequence[Signal]) -> List[ExtractedTheme]:
        """Extract ranked themes from *signals*.

        Empty input returns ``[]`` without calling the LLM. A batch whose LLM
        call or parse fails contributes no themes; it never aborts the run.
        """
        if not signals:
            return []

        timer = StepTimer("themes")
        batches = [
            signals[i : i + self.config.batch_size]
            for i in range(0, len(signals), self.config.batch_size)
        ]
        logger.info("[THEMES] Extracting from %d signals in %d batch(es)", len(signals), len(batches))

        raw: List[RawThemeExtraction] = []
        for number, batch in enumerate(batches, 1):
            async with timer.async_step(f"batch_{number}"):
                raw.extend(await self._process_batch(number, batch))

        if not raw:
            logger.warning("[THEMES] No themes extracted")
            timer.summary()
            return []

        with timer.step("cluster_keywords"):
            all_keywords = [kw for extraction in raw for kw in extraction.keywords]
            self.last_clusters = self.clusterer.cluster(all_keywords)
            logger.info(
                "[THEMES] %d keywords grouped into %d clusters",
                len(all_keywords),
                len(self.last_clusters),
            )

        with timer.step("merge"):
            themes = self._merge(raw)

        filtered = self._filter_and_rank(themes)
        logger.info("[THEMES] %d raw -> %d merged -> %d kept", len(raw), len(themes), len(filtered))
        timer.summary()
        return filtered

    async def _process_batch(self, number: int, batch: Sequence[Signal]) -> List[RawThemeExtraction]:
        try:
            response = await self.llm(build_theme_extraction_prompt(batch))
            extractions = parse_theme_response(response)
        except Exception as exc:
            logger.error("[THEMES] Batch %d failed, skipping: %s", number, exc)
            return []
        logger.info("[THEMES] Batch %d: %d theme(s)", number, len(extractions))
        return extractions

    # ------------------------------------------------------------------ #
    #  Merge                                                              #
    # ------------------------------------------------------------------ #
    def _merge(self, raw: Sequence[RawThemeExtraction]) -> List[ExtractedTheme]:
        groups: Dict[str, List[RawThemeExtraction]] = {}
        for extraction in raw:
            groups.setdefault(extraction.theme.lower().strip(), []).append(extraction)

        used_ids: Set[str] = set()
        timestamp = to_base36(int(time.time() * 1000))
        return [self._build_theme(group, timestamp, used_ids) for group in groups.values()]

    def _build_theme(
        self, group: Sequence[RawThemeExtraction], timestamp: str, used_ids: Set[str]
    ) -> ExtractedTheme:
        name = group[0].theme.strip()
        keywords = list(dict.fromkeys(kw for item in group for kw in item.keywords))
        examples = list(dict.fromkeys(ex for item in group for ex in item.examples))

        # Counter keeps first-seen order, so most_common breaks ties by first occurrence
        category = Counter(item.category for item in group).most_common(1)[0][0]

        theme_id = f"{slugify(name)}-{timestamp}"
        suffix = 1
        while theme_id in used_ids:
            suffix += 1
            theme_id = f"{slugify(name)}-{timestamp}-{suffix}"
        used_ids.add(theme_id)

        return ExtractedTheme(
            id=theme_id,
            name=name,
            keywords=keywords,
            category=category,
            frequency=len(group),
            sentiment=CATEGORY_SENTIMENT_MAP.get(category, 0.0),
            confidence=calculate_confidence(len(group), len(keywords)),
            examples=examples[: self.config.max_examples],
        )

    def _filter_and_rank(self, themes: Sequence[ExtractedTheme]) -> List[ExtractedTheme]:
        kept = [t for t in themes if t.frequency >= self.config.min_frequency]
        if not self.config.include_low_confidence:
            kept = [t for t in kept if t.confidence >= self.config.min_confidence]
        kept.sort(key=lambda t: (-t.frequency, -t.confidence))
        return kept


def create_theme_extractor(
    llm: LLMCallable,
    clusterer: Optional[KeywordClusterer] = None,
    **overrides: Any,
) -> ThemeExtractor:
    """Extractor using env-aware defaults, optionally overriding single fields."""
    return ThemeExtractor(llm, clusterer, ThemeExtractionConfig.from_env(**overrides))
