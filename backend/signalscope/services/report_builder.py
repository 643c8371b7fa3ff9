"""Report hand-off: assemble validated ``ReportData`` and render it.

``build_report_data`` is the last gate before the report consumer. It maps
extraction categories to the consumer's three (pain / desire / neutral) and
raises ``ReportValidationError`` instead of handing off data the consumer
would reject.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..analysis.sentiment import aggregate_sentiment
from ..constants import REPORT_CATEGORY_MAP, REPORT_VERSION
from ..pipeline.context import PipelineContext
from ..schemas.report_schema import ReportData, ReportMetadata, ReportTheme
from ..schemas.signal_schema import Signal
from ..schemas.theme_schema import ExtractedTheme

logger = logging.getLogger(__name__)


class ReportValidationError(ValueError):
    """Report data violates the report consumer's rules."""


def to_report_theme(theme: ExtractedTheme) -> ReportTheme:
    return ReportTheme(
        name=theme.name,
        confidence=theme.confidence,
        frequency=theme.frequency,
        keywords=list(theme.keywords),
        category=REPORT_CATEGORY_MAP.get(theme.category, "neutral"),
        sentiment=theme.sentiment,
    )


def _report_sources(context: PipelineContext) -> List[str]:
    scrape_config = context.metadata.get("scrape_config")
    sources = getattr(scrape_config, "sources", None)
    if sources:
        return list(sources)
    return sorted({signal.source for signal in context.signals or []})


def themes_for_signal(signal: Signal, themes: List[ExtractedTheme]) -> List[str]:
    """Names of the themes whose keywords or examples appear in *signal*."""
    content = signal.content.lower()
    names = []
    for theme in themes:
        phrases = [p.lower().strip() for p in [*theme.keywords, *theme.examples]]
        if any(p and p in content for p in phrases):
            names.append(theme.name)
    return names


def build_report_data(context: PipelineContext) -> ReportData:
    """Build report data from a finished run's context.

    Signals get their sentiment score and the names of the themes whose
    keywords or examples occur in their content. A signal matching no theme
    keeps its existing ``themes``.

    Raises
    ------
    ReportValidationError
        If there are no signals, no themes, or the sentiment distribution
        does not sum to 1.0 within tolerance.
    """
    signals = context.signals or []
    sentiments = context.sentiments or []
    themes = context.themes or []

    scores = {result.signal_id: result.score for result in sentiments}
    enriched = [
        signal.model_copy(
            update={
                "sentiment": scores.get(signal.id, signal.sentiment),
                "themes": themes_for_signal(signal, themes) or signal.themes,
            }
        )
        for signal in signals
    ]

    try:
        report = ReportData(
            signals=enriched,
            sentiment=aggregate_sentiment(sentiments),
            themes=[to_report_theme(theme) for theme in themes],
            metadata=ReportMetadata(
                scraped_at=context.start_time,
                sources=_report_sources(context),
                total_signals=len(enriched),
                generated_at=datetime.now(timezone.utc),
                version=REPORT_VERSION,
            ),
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        logger.error("❌ [REPORT] Invalid report data: %s", messages)
        raise ReportValidationError(f"Invalid report data: {messages}") from exc

    logger.info(
        "📄 [REPORT] Built report: %d signals, %d themes", len(report.signals), len(report.themes)
    )
    return report


# ===================================================================== #
#  Renderers                                                              #
# ===================================================================== #

def _format_score(score: float) -> str:
    return f"{'+' if score >= 0 else ''}{score:.2f}"


def _sentiment_label(score: float) -> str:
    if score > 0.5:
        return "very positive"
    if score > 0.1:
        return "slightly positive"
    if score < -0.5:
        return "very negative"
    if score < -0.1:
        return "slightly negative"
    return "neutral"


def _sentiment_icon(score: float) -> str:
    if score > 0.1:
        return "✅"
    if score < -0.1:
        return "❌"
    return "➖"


_CATEGORY_LABELS = {"pain": "Pain point", "desire": "Desire", "neutral": "Neutral"}


def _ranked_themes(report: ReportData, max_themes: Optional[int]) -> List[ReportTheme]:
    ranked = sorted(report.themes, key=lambda t: t.frequency, reverse=True)
    return ranked if max_themes is None else ranked[:max_themes]


def build_summary(report: ReportData, max_themes: Optional[int] = None) -> Dict[str, Any]:
    top = _ranked_themes(report, max_themes)
    return {
        "total_signals": len(report.signals),
        "overall_sentiment": round(report.sentiment.overall, 2),
        "top_themes": [t.name for t in top],
        "pain_points": [t.name for t in top if t.category == "pain"],
        "desires": [t.name for t in top if t.category == "desire"],
    }


def render_json(report: ReportData, include_signals: bool = True, indent: int = 2) -> str:
    """Render the report as a JSON document with a summary block on top."""
    body = report.model_dump(mode="json")
    document: Dict[str, Any] = {
        "version": report.metadata.version,
        "generated_at": body["metadata"]["generated_at"],
        "summary": build_summary(report),
        "themes": body["themes"],
        "sentiment": body["sentiment"],
        "metadata": body["metadata"],
    }
    if include_signals:
        document["signals"] = body["signals"]
    return json.dumps(document, indent=indent, ensure_ascii=False)


def render_markdown(report: ReportData, max_themes: Optional[int] = None) -> str:
    """Render the report as human-readable Markdown."""
    themes = _ranked_themes(report, max_themes)
    pain_points = [t for t in themes if t.category == "pain"]
    desires = [t for t in themes if t.category == "desire"]
    meta = report.metadata
    sentiment = report.sentiment

    sections: List[str] = [
        "\n".join(
            [
                "# Signal Insights Report",
                "",
                f"**Generated:** {meta.generated_at.date().isoformat()}",
                f"**Version:** {meta.version}",
            ]
        ),
        "\n".join(
            [
                "## Summary",
                "",
                f"- **Total Signals:** {meta.total_signals}",
                f"- **Overall Sentiment:** {_format_score(sentiment.overall)}"
                f" ({_sentiment_label(sentiment.overall)})",
                f"- **Sources:** {', '.join(meta.sources)}",
                f"- **Scraped:** {meta.scraped_at.date().isoformat()}",
                f"- **Top Themes:** {len(themes)}",
                f"- **Pain Points:** {len(pain_points)}",
                f"- **Desires:** {len(desires)}",
            ]
        ),
    ]

    lines = ["## Top Themes", ""]
    for rank, theme in enumerate(themes, 1):
        lines.append(
            f"{rank}. **{theme.name}** {_sentiment_icon(theme.sentiment)} "
            f"({theme.frequency} mentions, {_format_score(theme.sentiment)} sentiment)"
        )
        lines.append(f"   - Keywords: {', '.join(theme.keywords)}")
        lines.append(f"   - Category: {_CATEGORY_LABELS[theme.category]}")
    sections.append("\n".join(lines))

    for title, group in (("Pain Points", pain_points), ("Desires", desires)):
        if group:
            sections.append(
                "\n".join(
                    [f"## {title}", ""]
                    + [
                        f"- **{t.name}** ({t.frequency} mentions, "
                        f"{_format_score(t.sentiment)} sentiment)"
                        for t in group
                    ]
                )
            )

    dist = sentiment.distribution
    lines = [
        "## Sentiment Analysis",
        "",
        f"**Overall Sentiment:** {_format_score(sentiment.overall)}",
        "",
        "**Distribution:**",
        f"- Positive: {round(dist.positive * 100)}%",
        f"- Neutral: {round(dist.neutral * 100)}%",
        f"- Negative: {round(dist.negative * 100)}%",
    ]
    if sentiment.positive_signals:
        lines += ["", "**Top Positive Signals:**"] + [f"- {s}" for s in sentiment.positive_signals[:3]]
    if sentiment.negative_signals:
        lines += ["", "**Top Negative Signals:**"] + [f"- {s}" for s in sentiment.negative_signals[:3]]
    sections.append("\n".join(lines))

    sections.append(
        "\n".join(
            [
                "## Metadata",
                "",
                f"- **Version:** {meta.version}",
                f"- **Sources:** {', '.join(meta.sources)}",
                f"- **Scraped At:** {meta.scraped_at.isoformat()}",
                f"- **Generated At:** {meta.generated_at.isoformat()}",
            ]
        )
    )

    return "\n\n".join(sections) + "\n"
