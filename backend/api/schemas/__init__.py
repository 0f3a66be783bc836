"""
API Schemas

Pydantic models for request/response validation.
"""

from .pose import (
    LandmarkSchema,
    PoseFrameSchema,
    WebSocketMessageType,
    WebSocketMessage,
    StartSessionMessage,
    FrameAckMessage,
)

from .analysis import (
    AnalysisModeEnum,
    HandednessEnum,
    MetricSchema,
    TemplateSummarySchema,
    TemplateDetailSchema,
    FindingSchema,
    ScoreSchema,
    FeatureSchema,
    ScoreRequest,
    CycleSchema,
    AnalyzeFramesRequest,
    AnalysisResponse,
    HealthResponse,
)

__all__ = [
    # Pose schemas
    "LandmarkSchema",
    "PoseFrameSchema",
    "WebSocketMessageType",
    "WebSocketMessage",
    "StartSessionMessage",
    "FrameAckMessage",
    # Analysis schemas
    "AnalysisModeEnum",
    "HandednessEnum",
    "MetricSchema",
    "TemplateSummarySchema",
    "TemplateDetailSchema",
    "FindingSchema",
    "ScoreSchema",
    "FeatureSchema",
    "ScoreRequest",
    "CycleSchema",
    "AnalyzeFramesRequest",
    "AnalysisResponse",
    "HealthResponse",
]
