# Pipeline package
from .context import PipelineContext, create_pipeline_context, is_pipeline_context
from .hooks import PipelineHooks, combine_hooks, create_progress_hook, create_timing_hook
from .orchestrator import (
    FunctionStage,
    PipelineError,
    PipelineOrchestrator,
    PipelineResult,
    PipelineStage,
    create_stage,
)

__all__ = [
    "PipelineContext",
    "create_pipeline_context",
    "is_pipeline_context",
    "PipelineHooks",
    "combine_hooks",
    "create_progress_hook",
    "create_timing_hook",
    "FunctionStage",
    "PipelineError",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineStage",
    "create_stage",
]
