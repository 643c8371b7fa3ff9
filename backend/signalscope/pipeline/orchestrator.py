"""Pipeline Orchestrator — runs named stages in sequence.

Each stage receives the previous stage's output and the shared
``PipelineContext``. The orchestrator is a strict sequential reducer: no
retries, no rate limiting, no parallelism, no timeouts. The first failing
stage aborts the run with a ``PipelineError`` that carries the context.

Usage:
    pipeline = (
        PipelineOrchestrator()
        .add_stage(scrape_stage)
        .add_stage(sentiment_stage)
        .add_hooks(create_progress_hook())
    )
    result = await pipeline.run(ScrapeConfig(sources=["reddit"]))
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from .context import PipelineContext
from .hooks import PipelineHooks, combine_hooks

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class PipelineError(Exception):
    """A pipeline run failed.

    Carries the failing stage name (``"unknown"`` when the failure did not
    come from a stage), the full run context for post-mortem inspection and
    the underlying cause.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        context: PipelineContext,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.context = context
        self.cause = cause


class PipelineStage(ABC, Generic[InputT, OutputT]):
    """One named unit of work.

    Subclasses set ``name`` (unique within an orchestrator) and implement
    ``execute``. ``validate`` and ``on_error`` are optional overrides.
    """

    name: str = ""

    @abstractmethod
    async def execute(self, input: InputT, context: PipelineContext) -> OutputT:
        """Transform *input*; may read and mutate *context*."""

    def validate(self, output: OutputT) -> bool:
        return True

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        """Stage-local cleanup when this stage fails."""


class FunctionStage(PipelineStage[InputT, OutputT]):
    """Stage wrapping a plain coroutine function."""

    def __init__(
        self,
        name: str,
        execute_fn: Callable[[InputT, PipelineContext], Awaitable[OutputT]],
        validate_fn: Optional[Callable[[OutputT], bool]] = None,
        on_error_fn: Optional[Callable[[Exception, PipelineContext], Awaitable[None]]] = None,
    ):
        self.name = name
        self._execute_fn = execute_fn
        self._validate_fn = validate_fn
        self._on_error_fn = on_error_fn

    async def execute(self, input: InputT, context: PipelineContext) -> OutputT:
        return await self._execute_fn(input, context)

    def validate(self, output: OutputT) -> bool:
        if self._validate_fn is None:
            return True
        return self._validate_fn(output)

    async def on_error(self, error: Exception, context: PipelineContext) -> None:
        if self._on_error_fn is not None:
            await self._on_error_fn(error, context)


def create_stage(
    name: str,
    execute_fn: Callable[[Any, PipelineContext], Awaitable[Any]],
    validate: Optional[Callable[[Any], bool]] = None,
    on_error: Optional[Callable[[Exception, PipelineContext], Awaitable[None]]] = None,
) -> FunctionStage:
    """Build a stage from a coroutine function."""
    return FunctionStage(name, execute_fn, validate, on_error)


@dataclass
class PipelineResult(Generic[OutputT]):
    output: OutputT
    context: PipelineContext
    duration: float  # milliseconds
    success: bool


class PipelineOrchestrator:
    """Holds an ordered list of stages and the hooks observing them."""

    def __init__(self) -> None:
        self._stages: List[PipelineStage[Any, Any]] = []
        self._hooks: List[PipelineHooks] = []

    # ------------------------------------------------------------------ #
    #  Builder API                                                        #
    # ------------------------------------------------------------------ #
    def add_stage(self, stage: PipelineStage[Any, Any]) -> "PipelineOrchestrator":
        """Append a stage. Stages run in the order they were added."""
        if not stage.name:
            raise ValueError("Pipeline stages must have a name")
        if stage.name in self.get_stage_names():
            raise ValueError(f"Duplicate stage name: {stage.name}")
        self._stages.append(stage)
        return self

    def add_hooks(self, hooks: PipelineHooks) -> "PipelineOrchestrator":
        """Register hooks; every registered hooks object fires, in order."""
        self._hooks.append(hooks)
        return self

    def clear_stages(self) -> None:
        self._stages = []

    def clear_hooks(self) -> None:
        self._hooks = []

    @property
    def stage_count(self) -> int:
        return len(self._stages)

    def get_stage_names(self) -> List[str]:
        return [stage.name for stage in self._stages]

    # ------------------------------------------------------------------ #
    #  Execution                                                          #
    # ------------------------------------------------------------------ #
    async def run(self, initial_input: Any) -> PipelineResult[Any]:
        """Run every stage in order against a fresh context.

        Raises
        ------
        PipelineError
            If any stage fails. ``on_error`` and ``on_complete`` hooks have
            already fired by the time it propagates.
        """
        context = PipelineContext.create()
        hooks = combine_hooks(*self._hooks)
        start = time.perf_counter()

        logger.info("[PIPELINE] Running %d stage(s): %s", self.stage_count, self.get_stage_names())

        try:
            if hooks.on_start is not None:
                await hooks.on_start(context)

            current = initial_input
            for stage in self._stages:
                current = await self._execute_stage(stage, current, context, hooks)

            if hooks.on_complete is not None:
                await hooks.on_complete(context)

            return PipelineResult(
                output=current,
                context=context,
                duration=(time.perf_counter() - start) * 1000,
                success=True,
            )

        except Exception as exc:
            if hooks.on_error is not None:
                await hooks.on_error(exc, context)
            # Completion fires on failure too so timing / cleanup hooks can finalize
            if hooks.on_complete is not None:
                await hooks.on_complete(context)

            if isinstance(exc, PipelineError):
                raise
            raise PipelineError("Pipeline execution failed", "unknown", context, exc) from exc

    async def _execute_stage(
        self,
        stage: PipelineStage[Any, Any],
        input: Any,
        context: PipelineContext,
        hooks: PipelineHooks,
    ) -> Any:
        try:
            if hooks.on_stage_start is not None:
                await hooks.on_stage_start(stage.name, context)

            output = await stage.execute(input, context)

            if not stage.validate(output):
                raise ValueError(f"Stage {stage.name} produced invalid output")

            if hooks.on_stage_complete is not None:
                await hooks.on_stage_complete(stage.name, output, context)

            return output

        except Exception as exc:
            context.errors.append(exc)

            try:
                await stage.on_error(exc, context)
            except Exception as cleanup_exc:
                logger.error(
                    "[PIPELINE] on_error handler of stage %s failed: %s", stage.name, cleanup_exc
                )

            if hooks.on_stage_error is not None:
                await hooks.on_stage_error(stage.name, exc, context)

            raise PipelineError(
                f"Stage {stage.name} failed: {exc}", stage.name, context, exc
            ) from exc
