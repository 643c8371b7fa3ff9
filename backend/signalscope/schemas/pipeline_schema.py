from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .report_schema import ReportData
from .theme_schema import DetectedPattern


class PipelineRunResponse(BaseModel):
    """Response body for POST /pipeline/run."""

    success: bool
    report: Optional[ReportData] = None
    patterns: List[DetectedPattern] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    timings: Dict[str, float] = Field(
        default_factory=dict,
        description="Stage durations in milliseconds",
    )
    duration_ms: float = Field(..., ge=0.0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "errors": [],
                "timings": {"scrape": 3.2, "sentiment": 12.5, "themes": 2410.0},
                "duration_ms": 2431.7,
            }
        }
    )
