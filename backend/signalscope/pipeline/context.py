"""Pipeline context — per-run state shared by every stage and hook.

One context is created per ``PipelineOrchestrator.run`` call and is owned
exclusively by that run. Stages and hooks mutate it in place.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.sentiment_schema import SentimentResult
from ..schemas.signal_schema import Signal
from ..schemas.theme_schema import ExtractedTheme


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PipelineContext:
    """Mutable scratchpad threaded through a pipeline run.

    ``errors`` is append-only for the lifetime of a run; ``metadata`` is
    free-form space for stages and hooks (timings, counts, configs).
    """

    _start_time: datetime = field(default_factory=_utcnow)
    signals: Optional[List[Signal]] = None
    sentiments: Optional[List[SentimentResult]] = None
    themes: Optional[List[ExtractedTheme]] = None
    errors: List[Exception] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @classmethod
    def create(cls) -> "PipelineContext":
        return cls()

    def clone(self) -> "PipelineContext":
        """Independent copy: each list and the metadata dict are shallow-copied."""
        cloned = copy.copy(self)
        cloned.errors = list(self.errors)
        cloned.metadata = dict(self.metadata)
        if self.signals is not None:
            cloned.signals = list(self.signals)
        if self.sentiments is not None:
            cloned.sentiments = list(self.sentiments)
        if self.themes is not None:
            cloned.themes = list(self.themes)
        return cloned


def create_pipeline_context() -> PipelineContext:
    return PipelineContext.create()


def is_pipeline_context(value: Any) -> bool:
    """Duck-typed check used where contexts cross untyped boundaries."""
    if isinstance(value, PipelineContext):
        return True
    return (
        isinstance(getattr(value, "start_time", None), datetime)
        and isinstance(getattr(value, "errors", None), list)
        and isinstance(getattr(value, "metadata", None), dict)
    )
