"""
Domain Models

Pure data structures representing dribbling and shooting analysis concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import (
    BodyPart,
    Cycle,
    Handedness,
    NormalizedFrame,
    PoseFrame,
    PoseLandmark,
    SegmentationResult,
)
from .template import (
    ActionTemplate,
    AnalysisMode,
    CameraView,
    CategoryWeights,
    Metric,
    MetricCategory,
    MetricType,
)
from .analysis import (
    AggregationResult,
    AnalysisReport,
    Finding,
    Grade,
    ScoreResult,
)

__all__ = [
    "BodyPart",
    "Cycle",
    "Handedness",
    "NormalizedFrame",
    "PoseFrame",
    "PoseLandmark",
    "SegmentationResult",
    "ActionTemplate",
    "AnalysisMode",
    "CameraView",
    "CategoryWeights",
    "Metric",
    "MetricCategory",
    "MetricType",
    "AggregationResult",
    "AnalysisReport",
    "Finding",
    "Grade",
    "ScoreResult",
]
