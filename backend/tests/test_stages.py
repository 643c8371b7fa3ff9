"""Built-in stage and end-to-end insights pipeline tests (fake LLM)."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from signalscope.analysis.themes.extractor import ThemeExtractor
from signalscope.config import ThemeExtractionConfig
from signalscope.pipeline.context import PipelineContext
from signalscope.pipeline.orchestrator import PipelineError
from signalscope.pipeline.stages import (
    ScrapeStage,
    SentimentStage,
    ThemesStage,
    build_insights_pipeline,
)
from signalscope.schemas.report_schema import ReportData
from signalscope.schemas.signal_schema import ScrapeConfig, Signal, is_signal
from signalscope.services.scraper import BaseScraper, PlaceholderScraper, ScraperError

THEMES_RESPONSE = json.dumps([
    {
        "theme": "Debugger problems",
        "keywords": ["debugger", "crash", "remote"],
        "category": "pain",
        "examples": ["the debugger doesn't work with remote containers"],
    },
    {
        "theme": "debugger problems",
        "keywords": ["breakpoints"],
        "category": "pain",
        "examples": [],
    },
    {
        "theme": "Collaboration",
        "keywords": ["share", "terminal"],
        "category": "desire",
        "examples": ["share terminal sessions"],
    },
])


def _extractor(response=THEMES_RESPONSE):
    llm = AsyncMock(return_value=response)
    config = ThemeExtractionConfig(min_frequency=1, include_low_confidence=True)
    return ThemeExtractor(llm, config=config)


def _signal(content, idx=0):
    return Signal(
        id=f"signal-{idx}",
        source="github",
        content=content,
        timestamp=datetime.now(timezone.utc),
        url=f"https://example.com/{idx}",
    )


class _StaticScraper(BaseScraper):
    def __init__(self, signals):
        self.signals = signals

    async def scrape(self, config):
        return list(self.signals)


class TestScrapeStage:
    def test_placeholder_signals(self):
        context = PipelineContext.create()
        config = ScrapeConfig(sources=["reddit"], subreddits=["python"], max_signals=4)
        signals = asyncio.run(ScrapeStage().execute(config, context))
        assert len(signals) == 4
        assert context.signals == signals
        assert context.metadata["scrape_config"] is config
        assert all(s.metadata["subreddit"] == "python" for s in signals)

    def test_requires_a_source(self):
        with pytest.raises(ValueError):
            asyncio.run(ScrapeStage().execute(ScrapeConfig(sources=[]), PipelineContext.create()))

    def test_unsupported_source(self):
        with pytest.raises(ScraperError) as exc_info:
            asyncio.run(PlaceholderScraper().scrape(ScrapeConfig(sources=["myspace"])))
        assert exc_info.value.code == "UNSUPPORTED_SOURCE"

    def test_invalid_signals_dropped(self):
        scraper = _StaticScraper([_signal("fine", 0), _signal("   ", 1)])
        context = PipelineContext.create()
        signals = asyncio.run(ScrapeStage(scraper).execute(ScrapeConfig(sources=["github"]), context))
        assert [s.id for s in signals] == ["signal-0"]

    def test_validate_requires_signals(self):
        assert ScrapeStage().validate([]) is False

    def test_base_scraper_connection(self):
        assert asyncio.run(_StaticScraper([]).test_connection()) is True


class TestSentimentStage:
    def test_attaches_scores(self):
        context = PipelineContext.create()
        signals = [_signal("I love this editor, it is great", 0), _signal("meh", 1)]
        scored = asyncio.run(SentimentStage().execute(signals, context))
        assert [s.id for s in scored] == ["signal-0", "signal-1"]
        assert all(s.sentiment is not None for s in scored)
        assert len(context.sentiments) == 2
        assert SentimentStage().validate(scored)

    def test_empty_input_fails(self):
        with pytest.raises(ValueError):
            asyncio.run(SentimentStage().execute([], PipelineContext.create()))


class TestThemesStage:
    def test_falls_back_to_context_signals(self):
        context = PipelineContext.create()
        context.signals = [_signal("debugger crashes", 0)]
        themes = asyncio.run(ThemesStage(_extractor()).execute(None, context))
        assert context.themes == themes
        assert context.metadata["theme_count"] == 2


class TestInsightsPipeline:
    def test_end_to_end(self):
        pipeline = build_insights_pipeline(_extractor())
        assert pipeline.get_stage_names() == ["scrape", "sentiment", "patterns", "themes", "report"]

        result = asyncio.run(pipeline.run(ScrapeConfig(sources=["reddit"], max_signals=10)))
        assert result.success is True
        assert isinstance(result.output, ReportData)

        report = result.output
        assert report.metadata.total_signals == 10
        assert [t.name for t in report.themes] == ["Debugger problems", "Collaboration"]
        assert report.themes[0].frequency == 2
        assert report.sentiment.distribution.total() == pytest.approx(1.0)

        context = result.context
        assert set(context.metadata["timings"]) == {
            "scrape", "sentiment", "patterns", "themes", "report",
        }
        assert context.metadata["pattern_stats"].total_patterns == len(context.metadata["patterns"])
        assert len(context.sentiments) == 10

    def test_no_sources_fails_in_scrape(self):
        pipeline = build_insights_pipeline(_extractor())
        with pytest.raises(PipelineError) as exc_info:
            asyncio.run(pipeline.run(ScrapeConfig(sources=[])))
        assert exc_info.value.stage == "scrape"
        assert "scrape_error" in exc_info.value.context.metadata

    def test_no_themes_fails_in_report(self):
        pipeline = build_insights_pipeline(_extractor(response="not json"))
        with pytest.raises(PipelineError) as exc_info:
            asyncio.run(pipeline.run(ScrapeConfig(sources=["reddit"], max_signals=3)))
        assert exc_info.value.stage == "report"
        assert exc_info.value.context.themes == []
        assert len(exc_info.value.context.errors) == 1


class TestSignalModel:
    def test_is_signal(self):
        signal = _signal("hello")
        assert is_signal(signal)
        assert is_signal(signal.model_dump())
        assert not is_signal({"id": "x"})
        assert not is_signal("hello")

    def test_sentiment_range_enforced(self):
        with pytest.raises(ValueError):
            Signal(
                id="s",
                source="reddit",
                content="text",
                timestamp=datetime.now(timezone.utc),
                url="https://example.com",
                sentiment=1.5,
            )
