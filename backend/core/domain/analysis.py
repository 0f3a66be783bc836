"""
Analysis Domain Models

Data structures for scoring results, findings and session-level reports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .pose import Cycle, Handedness
from .template import MetricCategory


class Grade(str, Enum):
    """
    Letter grade on the overall score.

    S is reserved for near-perfect execution; see Grade.from_score.
    """
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @classmethod
    def from_score(cls, score: float) -> "Grade":
        """Convert score to letter grade (inclusive lower bounds)."""
        if score >= 90:
            return cls.S
        elif score >= 85:
            return cls.A
        elif score >= 75:
            return cls.B
        elif score >= 60:
            return cls.C
        elif score >= 50:
            return cls.D
        else:
            return cls.F


@dataclass
class Finding:
    """
    Per-metric feedback shown to the player.

    Attributes:
        id: Metric identifier from the template
        title: Display title derived from the id
        score: Rounded metric score (0-100)
        is_positive: Whether this is praise or a correction
        hint: Coaching hint text
        category: Metric category
    """
    id: str
    title: str
    score: int
    is_positive: bool
    hint: str
    category: MetricCategory


@dataclass
class ScoreResult:
    """
    Output of the scoring engine.

    overall and breakdown values are unrounded floats in 0-100.
    """
    overall: float
    grade: Grade
    weights: dict[str, float]
    breakdown: dict[str, float]
    findings: list[Finding] = field(default_factory=list)


@dataclass
class AggregationResult:
    """Feature values computed over a frozen frame buffer."""
    computed_values: dict[str, float]
    hand_used: Handedness
    cycles: list[Cycle] = field(default_factory=list)
    contacts: list[int] = field(default_factory=list)
    is_side_view: bool = False


@dataclass
class AnalysisReport:
    """
    Complete analysis of one session.

    This is the main result object returned after analyzing a frame stream.
    """
    template_id: str
    frame_count: int
    duration: float  # seconds
    hand_used: Handedness
    age_group: str
    features: dict[str, float]
    score: ScoreResult
    aggregation: Optional[AggregationResult] = None

    @property
    def cycles(self) -> list[Cycle]:
        return self.aggregation.cycles if self.aggregation else []
