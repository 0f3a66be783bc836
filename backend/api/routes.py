"""
REST API Routes

FastAPI routes for dribbling and shooting analysis.
Handles HTTP requests for templates, scoring and recorded-session analysis.
"""

import logging
from dataclasses import asdict
from functools import lru_cache
from typing import Optional
from fastapi import APIRouter, HTTPException

from .schemas import (
    AnalysisModeEnum,
    AnalysisResponse,
    AnalyzeFramesRequest,
    CycleSchema,
    FindingSchema,
    HealthResponse,
    MetricSchema,
    PoseFrameSchema,
    ScoreRequest,
    ScoreSchema,
    TemplateDetailSchema,
    TemplateSummarySchema,
)
from core.config import settings
from core.domain import ActionTemplate, AnalysisMode, AnalysisReport, PoseFrame, PoseLandmark, ScoreResult
from core.exceptions import AnalysisError, TemplateError
from core.services import MotionAnalyzer, get_registry

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@lru_cache(maxsize=1)
def get_analyzer() -> MotionAnalyzer:
    """Shared analyzer; templates are loaded once per process."""
    return MotionAnalyzer(registry=get_registry())


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check() -> HealthResponse:
    """
    Check if the API is running and templates are loaded.

    Returns:
        Health status and version information
    """
    return HealthResponse(
        status="healthy",
        version=settings.VERSION,
        templates_loaded=len(get_registry()),
    )


# =============================================================================
# Templates
# =============================================================================

@router.get(
    "/templates",
    response_model=list[TemplateSummarySchema],
    tags=["Templates"],
    summary="List action templates"
)
async def list_templates(mode: Optional[AnalysisModeEnum] = None) -> list[TemplateSummarySchema]:
    """
    List available templates, optionally filtered by analysis mode.
    """
    domain_mode = AnalysisMode(mode.value) if mode else None
    return [_template_summary(t) for t in get_registry().get_all_templates(domain_mode)]


@router.get(
    "/templates/{template_id}",
    response_model=TemplateDetailSchema,
    tags=["Templates"],
    summary="Get a template with its metrics"
)
async def get_template(template_id: str) -> TemplateDetailSchema:
    template = get_registry().get_template_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template '{template_id}'")
    return _template_detail(template)


# =============================================================================
# Analysis
# =============================================================================

@router.post(
    "/analysis/frames",
    response_model=AnalysisResponse,
    tags=["Analysis"],
    summary="Analyze a recorded sequence of pose frames"
)
async def analyze_frames(request: AnalyzeFramesRequest) -> AnalysisResponse:
    """
    Analyze pose frames detected by the frontend.

    The frames will be:
    1. Normalized against the player's trunk height
    2. Segmented into dribble cycles (dribbling templates)
    3. Aggregated into posture, execution and consistency features
    4. Scored against the template

    Args:
        request: Frames, template ID and options

    Returns:
        Score, findings, cycles and all computed feature values
    """
    frames = [pose_frame_from_schema(f) for f in request.frames]
    options = {"handedness": request.handedness.value}
    if request.age_group:
        options["ageGroup"] = request.age_group

    try:
        report = get_analyzer().analyze_frames(frames, request.template_id, options)
    except TemplateError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return report_to_response(report)


@router.post(
    "/analysis/score",
    response_model=ScoreSchema,
    tags=["Analysis"],
    summary="Score precomputed features"
)
async def score_features(request: ScoreRequest) -> ScoreSchema:
    """
    Score feature values (e.g. computed on the client) against a template.
    """
    template = get_registry().get_template_by_id(request.template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template '{request.template_id}'")

    features = [(f.name, f.value) for f in request.features]
    result = get_analyzer().scoring_engine.score(template, features, request.options)
    return _score_to_schema(result)


# =============================================================================
# Helper Functions
# =============================================================================

def pose_frame_from_schema(frame: PoseFrameSchema) -> PoseFrame:
    """Convert an API frame to the domain PoseFrame."""
    landmarks = tuple(
        PoseLandmark(x=lm.x, y=lm.y, z=lm.z, visibility=lm.visibility) if lm else None
        for lm in frame.landmarks
    )
    return PoseFrame(
        landmarks=landmarks,
        timestamp=frame.timestamp,
        frame_number=frame.frame_number,
    )


def _template_summary(template: ActionTemplate) -> TemplateSummarySchema:
    return TemplateSummarySchema(
        template_id=template.template_id,
        mode=AnalysisModeEnum(template.mode.value),
        camera=template.camera.value,
        display_name=template.display_name,
        metric_count=len(template.metrics),
    )


def _template_detail(template: ActionTemplate) -> TemplateDetailSchema:
    metrics = [
        MetricSchema(
            metric_id=m.metric_id,
            title=m.display_title,
            category=m.category.value,
            type=m.type.value,
            weight=m.weight,
            compute_key=m.compute_key,
            params=asdict(m.params),
            hint_bad=m.hint_bad,
            hint_good=m.hint_good,
        )
        for m in template.metrics
    ]
    summary = _template_summary(template)
    return TemplateDetailSchema(
        **summary.model_dump(),
        age_groups=list(template.age_groups),
        options=template.options,
        weights=template.weights.as_dict(),
        rules_note=template.rules_note,
        metrics=metrics,
    )


def _score_to_schema(result: ScoreResult) -> ScoreSchema:
    return ScoreSchema(
        overall=result.overall,
        grade=result.grade.value,
        weights=result.weights,
        breakdown=result.breakdown,
        findings=[
            FindingSchema(
                id=f.id,
                title=f.title,
                score=f.score,
                is_positive=f.is_positive,
                hint=f.hint,
                category=f.category.value,
            )
            for f in result.findings
        ],
    )


def report_to_response(report: AnalysisReport) -> AnalysisResponse:
    """Convert domain AnalysisReport to API response schema."""
    aggregation = report.aggregation
    return AnalysisResponse(
        template_id=report.template_id,
        frame_count=report.frame_count,
        duration=report.duration,
        hand_used=report.hand_used.value,
        age_group=report.age_group,
        is_side_view=aggregation.is_side_view if aggregation else None,
        score=_score_to_schema(report.score),
        computed_values=report.features,
        cycles=[
            CycleSchema(
                start_frame=c.start_frame,
                contact_frame=c.contact_frame,
                end_frame=c.end_frame,
                duration=c.duration,
            )
            for c in report.cycles
        ],
        contacts=aggregation.contacts if aggregation else [],
    )
