# Schemas package
from .signal_schema import ScrapeConfig, Signal, SourceType, is_signal
from .sentiment_schema import SentimentAnalysis, SentimentDistribution, SentimentResult
from .theme_schema import (
    DetectedPattern,
    ExtractedTheme,
    KeywordCluster,
    PatternStats,
    RawThemeExtraction,
)
from .report_schema import ReportData, ReportMetadata, ReportTheme
from .pipeline_schema import PipelineRunResponse

__all__ = [
    "Signal",
    "SourceType",
    "ScrapeConfig",
    "is_signal",
    "SentimentResult",
    "SentimentDistribution",
    "SentimentAnalysis",
    "RawThemeExtraction",
    "ExtractedTheme",
    "KeywordCluster",
    "DetectedPattern",
    "PatternStats",
    "ReportData",
    "ReportMetadata",
    "ReportTheme",
    "PipelineRunResponse",
]
