"""
Motion Analyzer Service

High-level service that runs the full pipeline for one recording:
normalization, temporal aggregation, per-frame posture averages and
template scoring.

This is the main entry point for analyzing a dribbling or shooting session.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from ..config import settings
from ..domain.analysis import AnalysisReport
from ..domain.pose import Handedness, PoseFrame
from ..domain.template import ActionTemplate, AnalysisMode
from ..exceptions import AnalysisError, TemplateError
from .angle_calculator import AngleCalculator
from .frame_extractor import extract_frame
from .metric_aggregator import MetricAggregator
from .scoring import ScoringEngine
from .session import AnalysisSession
from .template_loader import TemplateRegistry, get_registry

logger = logging.getLogger(__name__)


def reduce_timeline(samples: Sequence[Mapping[str, float]]) -> dict[str, float]:
    """
    Collapse per-frame metric samples into one value per key.

    Keys starting with "min" / "max" keep the extreme value, all others
    are averaged over the frames where they were measured.
    """
    collected: dict[str, list[float]] = {}
    for sample in samples:
        for key, value in sample.items():
            collected.setdefault(key, []).append(value)

    reduced = {}
    for key, values in collected.items():
        if key.startswith("min"):
            reduced[key] = min(values)
        elif key.startswith("max"):
            reduced[key] = max(values)
        else:
            reduced[key] = sum(values) / len(values)
    return reduced


def _explicit_hand(value: Any) -> Optional[Handedness]:
    if isinstance(value, Handedness):
        return value
    if isinstance(value, str) and value.lower() in ("left", "right"):
        return Handedness(value.lower())
    return None


class MotionAnalyzer:
    """
    Analyzes dribbling and shooting sessions from pose frame sequences.

    This service:
    1. Normalizes raw frames
    2. Segments dribble cycles and aggregates temporal metrics (dribbling)
    3. Averages single-frame posture metrics over the timeline
    4. Scores the merged feature set against the template

    Usage:
        analyzer = MotionAnalyzer()
        report = analyzer.analyze_frames(frames, "dribble_front_onehand_v")
        print(f"Overall score: {report.score.overall:.1f} ({report.score.grade.value})")
    """

    def __init__(
        self,
        registry: Optional[TemplateRegistry] = None,
        scoring_engine: Optional[ScoringEngine] = None,
        fps_guess: Optional[int] = None,
    ):
        self.registry = registry or get_registry()
        self.scoring_engine = scoring_engine or ScoringEngine(self.registry.age_tolerance_scale)
        self.aggregator = MetricAggregator(fps_guess=fps_guess)

    def resolve_template(self, template: Union[str, ActionTemplate]) -> ActionTemplate:
        if isinstance(template, ActionTemplate):
            return template
        resolved = self.registry.get_template_by_id(template)
        if resolved is None:
            raise TemplateError(f"Unknown template '{template}'")
        return resolved

    # -------------------------------------------------------------------------
    # Main Analysis Methods
    # -------------------------------------------------------------------------

    def analyze_frames(
        self,
        frames: Sequence[PoseFrame],
        template: Union[str, ActionTemplate],
        options: Optional[Mapping[str, Any]] = None,
    ) -> AnalysisReport:
        """
        Analyze a recording from raw pose frames.

        Args:
            frames: Pose frames in playback order
            template: Template or template id
            options: {"ageGroup": "11-13", "handedness": "left" | "right" | "auto"}

        Returns:
            Complete AnalysisReport

        Raises:
            AnalysisError: no frames
            TemplateError: unknown template id
        """
        if not frames:
            raise AnalysisError("No frames to analyze")

        template = self.resolve_template(template)
        options = dict(options or {})
        normalized = [extract_frame(f) for f in frames]
        explicit = _explicit_hand(options.get("handedness"))

        # Temporal metrics only apply to dribbling
        aggregation = None
        if template.mode is AnalysisMode.DRIBBLING:
            aggregation = self.aggregator.aggregate(normalized, template, explicit)
            hand = aggregation.hand_used
        else:
            hand = MetricAggregator.resolve_hand(normalized, template, explicit)

        posture = reduce_timeline([
            AngleCalculator.calculate_frame_metrics(f, template.mode, hand) for f in frames
        ])

        features = dict(posture)
        if aggregation is not None:
            features.update(aggregation.computed_values)

        age_group = options.get("ageGroup") or settings.DEFAULT_AGE_GROUP
        score_options = {**options, "ageGroup": age_group, "handedness": hand.value}
        score = self.scoring_engine.score(template, features, score_options)

        logger.info(
            f"Analyzed {len(frames)} frames with {template.template_id}: "
            f"{score.overall:.1f} ({score.grade.value})"
        )

        return AnalysisReport(
            template_id=template.template_id,
            frame_count=len(frames),
            duration=frames[-1].timestamp - frames[0].timestamp,
            hand_used=hand,
            age_group=age_group,
            features=features,
            score=score,
            aggregation=aggregation,
        )

    def analyze_session(
        self,
        session: AnalysisSession,
        template: Union[str, ActionTemplate],
        options: Optional[Mapping[str, Any]] = None,
    ) -> AnalysisReport:
        """Analyze a frozen snapshot of a live session."""
        snapshot = session.snapshot()
        return self.analyze_frames(list(snapshot.raw_frames), template, options)
