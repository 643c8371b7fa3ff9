"""
Pipeline Router with Timing Instrumentation

Handles the /pipeline endpoints: run the insights pipeline for a scrape
configuration and report its health.
"""

import logging
import os
import time

from fastapi import APIRouter, HTTPException, status

from ..analysis.themes.extractor import create_theme_extractor
from ..pipeline.orchestrator import PipelineError
from ..pipeline.stages import build_insights_pipeline
from ..schemas.pipeline_schema import PipelineRunResponse
from ..schemas.signal_schema import ScrapeConfig
from ..services.openai_client import call_llm_text

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/pipeline",
    tags=["Pipeline"],
    responses={
        500: {"description": "A pipeline stage failed"}
    }
)


@router.post(
    "/run",
    response_model=PipelineRunResponse,
    status_code=status.HTTP_200_OK,
    summary="Run the Insights Pipeline",
    response_description="Report data, detected patterns and per-stage timings"
)
async def run_pipeline(config: ScrapeConfig) -> PipelineRunResponse:
    """
    Run scrape → sentiment → patterns → themes → report for *config*.

    A failing stage maps to HTTP 500 with the stage name in the detail.
    """
    start_time = time.perf_counter()
    logger.info("[TIMING] pipeline_endpoint: START")

    # A single request usually fits in one LLM batch, so every merged theme is kept
    extractor = create_theme_extractor(
        call_llm_text, min_frequency=1, include_low_confidence=True
    )
    pipeline = build_insights_pipeline(extractor)

    try:
        result = await pipeline.run(config)
    except PipelineError as e:
        total_duration = (time.perf_counter() - start_time) * 1000
        logger.error(
            "[TIMING] pipeline_endpoint: ERROR after %.0fms in stage %s: %s",
            total_duration, e.stage, str(e)[:200],
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": str(e),
                "stage": e.stage,
                "errors": [str(err) for err in e.context.errors],
            },
        ) from e

    context = result.context
    total_duration = (time.perf_counter() - start_time) * 1000
    logger.info("[TIMING] pipeline_endpoint: END duration=%.0fms", total_duration)

    return PipelineRunResponse(
        success=result.success,
        report=result.output,
        patterns=context.metadata.get("patterns", []),
        errors=[str(err) for err in context.errors],
        timings=context.metadata.get("timings", {}),
        duration_ms=result.duration,
    )


@router.get(
    "/health",
    summary="Pipeline Service Health",
    description="Check that the pipeline service is up and whether an LLM key is configured",
)
async def pipeline_health():
    """Health check for the pipeline service."""
    return {
        "status": "healthy",
        "service": "pipeline",
        "stages": ["scrape", "sentiment", "patterns", "themes", "report"],
        "llm_configured": bool(os.getenv("OPENAI_API_KEY")),
    }
