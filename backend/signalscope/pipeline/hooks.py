"""Pipeline Lifecycle Hooks

Hooks let external code observe a pipeline run without touching the
orchestrator. Every lifecycle point is optional; an absent point is
``None`` so callers can check ``hooks.on_complete is not None`` cheaply.

Lifecycle points and their arguments:
  on_start(context)
  on_stage_start(stage_name, context)
  on_stage_complete(stage_name, output, context)
  on_stage_error(stage_name, error, context)
  on_complete(context)                 fires on success AND on failure
  on_error(error, context)             fatal pipeline error
"""

from __future__ import annotations

import inspect
import logging
import time
from datetime import datetime, timezone
from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .context import PipelineContext

logger = logging.getLogger(__name__)

HookFn = Callable[..., Union[Awaitable[None], None]]

HOOK_NAMES = (
    "on_start",
    "on_stage_start",
    "on_stage_complete",
    "on_stage_error",
    "on_complete",
    "on_error",
)


@dataclass
class PipelineHooks:
    on_start: Optional[HookFn] = None
    on_stage_start: Optional[HookFn] = None
    on_stage_complete: Optional[HookFn] = None
    on_stage_error: Optional[HookFn] = None
    on_complete: Optional[HookFn] = None
    on_error: Optional[HookFn] = None

    def defined(self) -> List[str]:
        """Names of the lifecycle points this object implements."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


async def _invoke(method: HookFn, *args: Any) -> None:
    result = method(*args)
    if inspect.isawaitable(result):
        await result


def _combine_method(name: str, methods: List[HookFn]) -> HookFn:
    async def combined(*args: Any) -> None:
        for method in methods:
            try:
                await _invoke(method, *args)
            except Exception as exc:
                # A failing hook must not block its siblings or the pipeline
                logger.error("[HOOKS] Hook %s failed: %s", name, exc, exc_info=True)

    combined.__name__ = f"combined_{name}"
    return combined


def combine_hooks(*hooks: PipelineHooks) -> PipelineHooks:
    """Combine several hook objects into one.

    For each lifecycle point defined by at least one input, the combined
    hook calls every implementation in the order given, logging and
    swallowing individual failures. Points no input defines stay ``None``.
    """
    combined = PipelineHooks()
    for name in HOOK_NAMES:
        methods = [getattr(h, name) for h in hooks if getattr(h, name) is not None]
        if methods:
            setattr(combined, name, _combine_method(name, methods))
    return combined


# ===================================================================== #
#  Built-in hooks                                                         #
# ===================================================================== #

def create_progress_hook() -> PipelineHooks:
    """Hooks that log pipeline progress."""

    async def on_start(context: PipelineContext) -> None:
        logger.info("🚀 [PIPELINE] Started at %s", context.start_time.isoformat())

    async def on_stage_start(stage: str, context: PipelineContext) -> None:
        logger.info("→ [PIPELINE] Starting stage: %s", stage)

    async def on_stage_complete(stage: str, output: Any, context: PipelineContext) -> None:
        logger.info("✅ [PIPELINE] Completed stage: %s", stage)

    async def on_stage_error(stage: str, error: Exception, context: PipelineContext) -> None:
        logger.error("❌ [PIPELINE] Stage %s failed: %s", stage, error)

    async def on_complete(context: PipelineContext) -> None:
        duration_ms = (datetime.now(timezone.utc) - context.start_time).total_seconds() * 1000
        error_count = len(context.errors)
        if error_count > 0:
            logger.warning(
                "⚠️  [PIPELINE] Completed with %d error(s) in %.0fms", error_count, duration_ms
            )
        else:
            logger.info("✨ [PIPELINE] Completed successfully in %.0fms", duration_ms)

    async def on_error(error: Exception, context: PipelineContext) -> None:
        logger.error("💥 [PIPELINE] Failed: %s", error)

    return PipelineHooks(
        on_start=on_start,
        on_stage_start=on_stage_start,
        on_stage_complete=on_stage_complete,
        on_stage_error=on_stage_error,
        on_complete=on_complete,
        on_error=on_error,
    )


def create_timing_hook() -> PipelineHooks:
    """Hooks that record per-stage durations (ms) in ``metadata["timings"]``."""
    stage_start_times: Dict[str, float] = {}

    async def on_start(context: PipelineContext) -> None:
        context.metadata["timings"] = {}

    async def on_stage_start(stage: str, context: PipelineContext) -> None:
        stage_start_times[stage] = time.perf_counter()

    async def on_stage_complete(stage: str, output: Any, context: PipelineContext) -> None:
        started = stage_start_times.pop(stage, None)
        if started is None:
            return
        timings = context.metadata.get("timings")
        if isinstance(timings, dict):
            timings[stage] = (time.perf_counter() - started) * 1000

    async def on_stage_error(stage: str, error: Exception, context: PipelineContext) -> None:
        stage_start_times.pop(stage, None)

    return PipelineHooks(
        on_start=on_start,
        on_stage_start=on_stage_start,
        on_stage_complete=on_stage_complete,
        on_stage_error=on_stage_error,
    )
