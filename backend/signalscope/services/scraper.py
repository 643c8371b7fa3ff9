"""Scraper contract and the placeholder scraper used until real sources exist.

A scraper implements:
  scrape(config) -> [Signal]          (async)
  validate(signal) -> bool
  test_connection() -> bool           (async)
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..constants import SOURCE_TYPES_SET
from ..schemas.signal_schema import ScrapeConfig, Signal

logger = logging.getLogger(__name__)


class ScraperError(Exception):
    """A scraper could not collect signals.

    ``code`` is a short machine-readable reason (e.g. ``"NO_SOURCES"``);
    ``details`` carries whatever context the scraper had.
    """

    def __init__(self, message: str, code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class BaseScraper(ABC):
    @abstractmethod
    async def scrape(self, config: ScrapeConfig) -> List[Signal]:
        ...

    def validate(self, signal: Signal) -> bool:
        """Required text fields must be non-blank and sentiment, if set, in [-1, 1]."""
        if not signal.id.strip() or not signal.content.strip() or not signal.url.strip():
            return False
        if signal.sentiment is not None and not -1.0 <= signal.sentiment <= 1.0:
            return False
        return True

    async def test_connection(self) -> bool:
        return True


# Canned developer comments, cycled through by PlaceholderScraper
_PLACEHOLDER_TEXTS = (
    "I use VSCode for Python development but the extension host keeps crashing.",
    "Honestly it's so annoying that the debugger doesn't work with remote containers.",
    "Would love a built-in way to share terminal sessions with my team.",
    "Compared to JetBrains the refactoring tools feel really basic.",
    "I usually start the day by clearing out stale branches, wish git would do it for me.",
    "Frustrated with how slow the language server is on large monorepos.",
    "Please add better keyboard shortcuts for the diff viewer, it's great otherwise.",
    "Typically I switch to vim when the editor gets sluggish.",
    "The new release is fantastic, search is much faster than before.",
    "We need proper offline support, the cloud sync breaks on flights.",
)


class PlaceholderScraper(BaseScraper):
    """Builds signals from canned text without touching the network."""

    async def scrape(self, config: ScrapeConfig) -> List[Signal]:
        if not config.sources:
            raise ScraperError("At least one source must be specified", "NO_SOURCES")

        source = config.sources[0]
        if source not in SOURCE_TYPES_SET:
            raise ScraperError(
                f"Unsupported source: {source}",
                "UNSUPPORTED_SOURCE",
                {"supported": sorted(SOURCE_TYPES_SET)},
            )

        subreddit = config.subreddits[0] if config.subreddits else "vscode"
        now = datetime.now(timezone.utc)

        signals = [
            Signal(
                id=f"signal-{i}",
                source=source,
                content=_PLACEHOLDER_TEXTS[i % len(_PLACEHOLDER_TEXTS)],
                author=f"user{i}",
                timestamp=now,
                url=f"https://example.com/signal-{i}",
                metadata={"subreddit": subreddit, "score": random.randint(0, 99)},
            )
            for i in range(config.max_signals)
        ]
        logger.info("🔍 [SCRAPER] Generated %d placeholder signals from %s", len(signals), source)
        return signals
