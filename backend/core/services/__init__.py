"""
Services Layer

Business logic services for dribbling and shooting analysis.
These services orchestrate domain models and template configuration.
"""

from .angle_calculator import AngleCalculator
from .cycle_segmenter import segment_cycles
from .frame_extractor import extract_frame
from .handedness import infer_handedness
from .metric_aggregator import MetricAggregator, aggregate
from .motion_analyzer import MotionAnalyzer
from .scoring import ScoringEngine, score
from .session import AnalysisSession, SessionSnapshot
from .template_loader import TemplateRegistry, get_registry

__all__ = [
    "AngleCalculator",
    "segment_cycles",
    "extract_frame",
    "infer_handedness",
    "MetricAggregator",
    "aggregate",
    "MotionAnalyzer",
    "ScoringEngine",
    "score",
    "AnalysisSession",
    "SessionSnapshot",
    "TemplateRegistry",
    "get_registry",
]
