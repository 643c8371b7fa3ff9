"""Built-in pipeline stages for the insights workflow.

  scrape     ScrapeConfig      -> [Signal]
  sentiment  [Signal]          -> [Signal]          (scores attached)
  patterns   [Signal]          -> [Signal]          (pass-through)
  themes     [Signal]          -> [ExtractedTheme]
  report     [ExtractedTheme]  -> ReportData

Each stage records its results on the context so later stages (and the
report) can read them regardless of what flows between stages.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..analysis.sentiment import analyze_signals
from ..analysis.themes.extractor import ThemeExtractor
from ..analysis.themes.patterns import PatternDetector
from ..schemas.report_schema import ReportData
from ..schemas.signal_schema import ScrapeConfig, Signal
from ..schemas.theme_schema import ExtractedTheme
from ..services.report_builder import build_report_data
from ..services.scraper import BaseScraper, PlaceholderScraper
from .context import PipelineContext
from .hooks import create_progress_hook, create_timing_hook
from .orchestrator import PipelineOrchestrator, PipelineStage
from .timing import async_timer, sync_timer

logger = logging.getLogger(__name__)


def _is_signal_list(output: Any) -> bool:
    return isinstance(output, list) and all(isinstance(s, Signal) for s in output)


class ScrapeStage(PipelineStage[ScrapeConfig, List[Signal]]):
    """Collect signals through a scraper (placeholder scraper by default)."""

    name = "scrape"

    def __init__(self, scraper: Optional[BaseScraper] = None):
        self.scraper = scraper or PlaceholderScraper()

    async def execute(self, config: ScrapeConfig, context: PipelineContext) -> List[Signal]:
        if not config.sources:
            raise ValueError("At least one source must be specified")

        scraped = await self.scraper.scrape(config)
        signals = [s for s in scraped if self.scraper.validate(s)]
        if len(signals) < len(scraped):
            logger.warning("[SCRAPE] Dropped %d invalid signal(s)", len(scraped) - len(signals))

        context.signals = signals
        context.metadata["scrape_config"] = config
        return signals

    def validate(self, output: List[Signal]) -> bool:
        return _is_signal_list(output) and len(output) > 0

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        context.metadata["scrape_error"] = str(error)


class SentimentStage(PipelineStage[List[Signal], List[Signal]]):
    """Score every signal and hand the signals on with their score attached."""

    name = "sentiment"

    async def execute(self, signals: List[Signal], context: PipelineContext) -> List[Signal]:
        if not signals:
            raise ValueError("No signals to analyze")

        results = analyze_signals(signals)
        context.sentiments = results
        context.metadata["sentiment_count"] = len(results)

        scores = {r.signal_id: r.score for r in results}
        scored = [s.model_copy(update={"sentiment": scores[s.id]}) for s in signals]
        context.signals = scored
        return scored

    def validate(self, output: List[Signal]) -> bool:
        return _is_signal_list(output) and all(
            s.sentiment is not None and -1.0 <= s.sentiment <= 1.0 for s in output
        )

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        context.metadata["sentiment_error"] = str(error)


class PatternsStage(PipelineStage[List[Signal], List[Signal]]):
    """Detect phrase patterns; results live in metadata, input passes through."""

    name = "patterns"

    def __init__(self, detector: Optional[PatternDetector] = None):
        self.detector = detector or PatternDetector()

    async def execute(self, signals: List[Signal], context: PipelineContext) -> List[Signal]:
        with sync_timer("patterns", "DETECT"):
            patterns = self.detector.detect(signals)
        context.metadata["patterns"] = patterns
        context.metadata["pattern_stats"] = self.detector.get_pattern_stats(patterns)
        logger.info("[PATTERNS] %d pattern(s) detected", len(patterns))
        return signals

    def validate(self, output: List[Signal]) -> bool:
        return _is_signal_list(output)


class ThemesStage(PipelineStage[List[Signal], List[ExtractedTheme]]):
    name = "themes"

    def __init__(self, extractor: ThemeExtractor):
        self.extractor = extractor

    async def execute(
        self, signals: Optional[List[Signal]], context: PipelineContext
    ) -> List[ExtractedTheme]:
        signals = signals or context.signals or []
        if not signals:
            raise ValueError("No signals to analyze")

        async with async_timer("themes", "EXTRACT"):
            themes = await self.extractor.extract(signals)
        context.themes = themes
        context.metadata["theme_count"] = len(themes)
        context.metadata["keyword_clusters"] = list(self.extractor.last_clusters)
        return themes

    def validate(self, output: List[ExtractedTheme]) -> bool:
        return isinstance(output, list) and all(isinstance(t, ExtractedTheme) for t in output)

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        context.metadata["themes_error"] = str(error)


class ReportStage(PipelineStage[Any, ReportData]):
    """Assemble validated report data from everything the run collected."""

    name = "report"

    async def execute(self, _input: Any, context: PipelineContext) -> ReportData:
        return build_report_data(context)

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        context.metadata["report_error"] = str(error)


def build_insights_pipeline(
    extractor: ThemeExtractor,
    scraper: Optional[BaseScraper] = None,
    detector: Optional[PatternDetector] = None,
) -> PipelineOrchestrator:
    """scrape → sentiment → patterns → themes → report, with progress and timing hooks."""
    return (
        PipelineOrchestrator()
        .add_stage(ScrapeStage(scraper))
        .add_stage(SentimentStage())
        .add_stage(PatternsStage(detector))
        .add_stage(ThemesStage(extractor))
        .add_stage(ReportStage())
        .add_hooks(create_progress_hook())
        .add_hooks(create_timing_hook())
    )
