# Theme analysis: keyword clustering, pattern detection, LLM theme extraction
from .clusterer import KeywordClusterer, create_keyword_clusterer, string_similarity
from .extractor import ThemeExtractor, create_theme_extractor
from .patterns import PatternDetector, create_pattern_detector

__all__ = [
    "KeywordClusterer",
    "create_keyword_clusterer",
    "string_similarity",
    "ThemeExtractor",
    "create_theme_extractor",
    "PatternDetector",
    "create_pattern_detector",
]
