"""
Analysis API Schemas

Pydantic models for template, scoring and session analysis requests and
responses.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional, List
from enum import Enum

from .pose import PoseFrameSchema


class AnalysisModeEnum(str, Enum):
    """Analysis modes for API."""
    SHOOTING = "shooting"
    DRIBBLING = "dribbling"


class HandednessEnum(str, Enum):
    """Hand selection for API; auto infers it from the motion."""
    LEFT = "left"
    RIGHT = "right"
    AUTO = "auto"


# =============================================================================
# Templates
# =============================================================================

class MetricSchema(BaseModel):
    """
    One scored metric of a template.
    """
    metric_id: str = Field(..., description="Metric identifier")
    title: str = Field(..., description="Display title")
    category: str = Field(..., description="posture, execution or consistency")
    type: str = Field(..., description="boolean, target, range or rangeByOption")
    weight: float = Field(..., description="Weight within the overall score")
    compute_key: str = Field(..., description="Feature key the metric reads")
    params: dict[str, Any] = Field(default_factory=dict, description="Resolved scoring parameters")
    hint_bad: str = Field("", description="Hint shown when the metric needs work")
    hint_good: Optional[str] = Field(None, description="Hint shown when the metric is good")


class TemplateSummarySchema(BaseModel):
    """
    Short template description for template pickers.
    """
    template_id: str = Field(..., description="Unique template ID")
    mode: AnalysisModeEnum = Field(..., description="Analysis mode")
    camera: str = Field(..., description="Camera viewpoint (front/side)")
    display_name: str = Field(..., description="Human readable name")
    metric_count: int = Field(..., description="Number of scored metrics")

    class Config:
        json_schema_extra = {
            "example": {
                "template_id": "dribble_front_onehand_v",
                "mode": "dribbling",
                "camera": "front",
                "display_name": "One-Hand V Dribble (Front)",
                "metric_count": 6
            }
        }


class TemplateDetailSchema(TemplateSummarySchema):
    """
    Full template with resolved metric definitions.
    """
    age_groups: List[str] = Field(default_factory=list, description="Supported age groups")
    options: dict[str, Any] = Field(default_factory=dict, description="Template defaults")
    weights: dict[str, float] = Field(..., description="Category weights")
    rules_note: str = Field("", description="Recording instructions")
    metrics: List[MetricSchema] = Field(default_factory=list, description="Scored metrics")


# =============================================================================
# Scoring
# =============================================================================

class FindingSchema(BaseModel):
    """
    Per-metric coaching feedback.
    """
    id: str = Field(..., description="Metric identifier")
    title: str = Field(..., description="Display title")
    score: int = Field(..., ge=0, le=100, description="Metric score out of 100")
    is_positive: bool = Field(..., description="Praise (true) or correction (false)")
    hint: str = Field(..., description="Coaching hint")
    category: str = Field(..., description="Metric category")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "dribble_height",
                "title": "Dribble Height",
                "score": 62,
                "is_positive": False,
                "hint": "Dribble lower, the ball should not come above your waist.",
                "category": "execution"
            }
        }


class ScoreSchema(BaseModel):
    """
    Overall score, grade and category breakdown.
    """
    overall: float = Field(..., description="Overall score (0-100)")
    grade: str = Field(..., description="Letter grade (S, A-D, F)")
    weights: dict[str, float] = Field(..., description="Category weights")
    breakdown: dict[str, float] = Field(..., description="Score per category")
    findings: List[FindingSchema] = Field(default_factory=list, description="Up to 8 findings")


class FeatureSchema(BaseModel):
    """Named feature value."""
    name: str = Field(..., description="Feature key, e.g. 'kneeAngleDeg'")
    value: float = Field(..., description="Feature value")


class ScoreRequest(BaseModel):
    """
    Request to score precomputed features against a template.
    """
    template_id: str = Field(..., description="Template to score against")
    features: List[FeatureSchema] = Field(..., description="Feature values")
    options: dict[str, Any] = Field(
        default_factory=dict, description="e.g. {'ageGroup': '11-13', 'handedness': 'left'}"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "template_id": "shoot_side_form_close",
                "features": [{"name": "forearmVerticalDeg", "value": 6.5}],
                "options": {"ageGroup": "14-15"}
            }
        }


# =============================================================================
# Session analysis
# =============================================================================

class CycleSchema(BaseModel):
    """
    One dribble cycle (frame indices into the submitted frames).
    """
    start_frame: int = Field(..., description="Highest point before contact")
    contact_frame: int = Field(..., description="Lowest point (contact)")
    end_frame: int = Field(..., description="Highest point after contact")
    duration: float = Field(..., description="Cycle duration in seconds")


class AnalyzeFramesRequest(BaseModel):
    """
    Request to analyze a recorded sequence of pose frames.

    Used when the frontend has already run pose detection.
    """
    template_id: str = Field(..., description="Template to analyze against")
    frames: List[PoseFrameSchema] = Field(..., min_length=1, description="Frames in playback order")
    age_group: Optional[str] = Field(None, description="Age group, e.g. '11-13'")
    handedness: HandednessEnum = Field(HandednessEnum.AUTO, description="Dribbling / shooting hand")


class AnalysisResponse(BaseModel):
    """
    Complete session analysis result.

    This is the main response from the analyze endpoint.
    """
    template_id: str = Field(..., description="Template used")
    frame_count: int = Field(..., description="Frames analyzed")
    duration: float = Field(..., description="Recording duration in seconds")
    hand_used: str = Field(..., description="Hand used for analysis")
    age_group: str = Field(..., description="Age group used for tolerances")
    is_side_view: Optional[bool] = Field(None, description="Side view (dribbling only)")
    score: ScoreSchema = Field(..., description="Score result")
    computed_values: dict[str, float] = Field(default_factory=dict, description="All feature values")
    cycles: List[CycleSchema] = Field(default_factory=list, description="Detected dribble cycles")
    contacts: List[int] = Field(default_factory=list, description="Contact frame indices")

    class Config:
        json_schema_extra = {
            "example": {
                "template_id": "dribble_front_onehand_v",
                "frame_count": 120,
                "duration": 4.0,
                "hand_used": "right",
                "age_group": "16-18",
                "score": {
                    "overall": 78.4,
                    "grade": "B",
                    "weights": {"posture": 0.4, "execution": 0.4, "consistency": 0.2},
                    "breakdown": {"posture": 81.0, "execution": 74.2, "consistency": 80.3},
                    "findings": []
                }
            }
        }


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    templates_loaded: int = Field(..., description="Number of templates available")
