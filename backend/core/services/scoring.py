"""
Scoring Engine

Maps computed feature values onto a template's metric definitions and
produces a 0-100 score per metric, per category and overall, plus a letter
grade and coaching findings.

Target metrics use a peaked curve: inside the tolerance the score drops
linearly from 100 to 90, beyond it from 90 to 0 across the margin. Range
metrics give full marks anywhere inside [L, U].
"""

import logging
import math
import re
from typing import Any, Iterable, Mapping, Optional, Union

from ..config import settings
from ..domain.analysis import Finding, Grade, ScoreResult
from ..domain.template import (
    ActionTemplate,
    Metric,
    MetricCategory,
    MetricType,
    OptionRange,
    RangeByOptionParams,
)

logger = logging.getLogger(__name__)

FeatureInput = Union[Mapping[str, float], Iterable[tuple[str, float]]]

MAX_FINDINGS = 8
NEEDS_WORK_BELOW = 75
GOOD_FROM = 90
DEFAULT_OK_HINT = "Improve the details of the movements to get a better score.."
DEFAULT_GOOD_HINT = "Good form maintained."


def normalize_key(name: str) -> str:
    """'wrist_Height Ratio' -> 'wristheightratio'."""
    return re.sub(r"\s", "", name.lower().replace("_", ""))


def round_half_up(value: float) -> int:
    """Round .5 up (towards +inf), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def _feature_lookup(features: FeatureInput) -> dict[str, float]:
    items = features.items() if isinstance(features, Mapping) else features
    lookup: dict[str, float] = {}
    for name, value in items:
        # first occurrence wins
        lookup.setdefault(normalize_key(name), float(value))
    return lookup


def _range_score(value: float, lower: float, upper: float, margin: float) -> float:
    if lower <= value <= upper:
        return 100.0
    distance = lower - value if value < lower else value - upper
    return max(0.0, 100.0 - distance / margin * 100)


class ScoringEngine:
    """
    Scores feature values against action templates.

    Usage:
        engine = ScoringEngine({"16-18": 1.0, "11-13": 1.3})
        result = engine.score(template, {"elbowAngleDeg": 150.0})
        print(result.overall, result.grade)
    """

    def __init__(self, age_tolerance_scale: Optional[Mapping[str, float]] = None):
        """
        Args:
            age_tolerance_scale: Age group -> tolerance multiplier. Defaults to
                the table shipped with the templates.
        """
        if age_tolerance_scale is None:
            from .template_loader import get_registry
            age_tolerance_scale = get_registry().age_tolerance_scale
        self.age_tolerance_scale = dict(age_tolerance_scale)

    def age_multiplier(self, age_group: str) -> float:
        """Tolerance multiplier for an age group; unlisted groups get 1.0."""
        return self.age_tolerance_scale.get(age_group) or 1.0

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def score(
        self,
        template: ActionTemplate,
        features: FeatureInput,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ScoreResult:
        """
        Score a set of features against a template.

        Args:
            template: Resolved action template
            features: Mapping or (name, value) pairs; names are matched
                case-insensitively ignoring underscores and whitespace
            options: Session options, e.g. {"ageGroup": "11-13", "handedness": "left"}

        Returns:
            ScoreResult; metrics without a matching feature are skipped
        """
        options = options or {}
        age_group = options.get("ageGroup") or settings.DEFAULT_AGE_GROUP
        multiplier = self.age_multiplier(age_group)
        lookup = _feature_lookup(features)

        logger.debug(
            f"Scoring {template.template_id} [age={age_group}, tolerance={multiplier}x]"
        )

        totals = {category: [0.0, 0.0] for category in MetricCategory}
        total_score = 0.0
        total_weight = 0.0
        findings: list[Finding] = []

        for metric in template.metrics:
            value = lookup.get(normalize_key(metric.compute_key))
            if value is None or not math.isfinite(value):
                logger.warning(f"Data missing for {template.template_id}: {metric.compute_key}")
                continue

            item_score = self.score_metric(metric, value, multiplier, options, template)
            finding = self._finding(metric, item_score)
            if finding is not None:
                findings.append(finding)

            weight = metric.weight or 1.0
            totals[metric.category][0] += item_score * weight
            totals[metric.category][1] += weight
            total_score += item_score * weight
            total_weight += weight

        breakdown = {
            category.value: (score / weight if weight else 0.0)
            for category, (score, weight) in totals.items()
        }
        overall = total_score / total_weight if total_weight else 0.0

        return ScoreResult(
            overall=overall,
            grade=Grade.from_score(overall),
            weights=template.weights.as_dict(),
            breakdown=breakdown,
            findings=findings[:MAX_FINDINGS],
        )

    # -------------------------------------------------------------------------
    # Per-metric scoring
    # -------------------------------------------------------------------------

    def score_metric(
        self,
        metric: Metric,
        value: float,
        multiplier: float = 1.0,
        options: Optional[Mapping[str, Any]] = None,
        template: Optional[ActionTemplate] = None,
    ) -> float:
        """
        Score one metric value in 0-100.

        A rangeByOption metric with no range for the selected option
        scores 0.
        """
        params = metric.params

        if metric.type is MetricType.BOOLEAN:
            return 100.0 if round_half_up(value) == params.target else 0.0

        if metric.type is MetricType.TARGET:
            return self.target_score(
                value, params.target, params.tol * multiplier, params.margin * multiplier
            )

        if metric.type is MetricType.RANGE:
            return _range_score(value, params.L, params.U, params.margin * multiplier)

        if metric.type is MetricType.RANGE_BY_OPTION:
            selected = self._select_range(metric, params, options or {}, template)
            if selected is None:
                return 0.0
            return _range_score(value, selected.L, selected.U, selected.margin * multiplier)

        raise ValueError(f"Unsupported metric type: {metric.type}")

    @staticmethod
    def target_score(value: float, target: float, tol: float, margin: float) -> float:
        diff = abs(value - target)
        if diff <= tol:
            return 100.0 - diff / tol * 10

        extra = diff - tol
        if extra > margin:
            return 0.0
        return 90.0 - extra / margin * 90

    @staticmethod
    def _select_range(
        metric: Metric,
        params: RangeByOptionParams,
        options: Mapping[str, Any],
        template: Optional[ActionTemplate],
    ) -> Optional[OptionRange]:
        template_options = template.options if template else {}
        option = (
            options.get(params.option_key)
            or template_options.get(params.option_key)
            or "right"
        )
        selected = params.ranges.get(str(option))
        if selected is None:
            logger.warning(
                f"No range for {params.option_key}={option} in metric {metric.metric_id}"
            )
        return selected

    @staticmethod
    def _finding(metric: Metric, item_score: float) -> Optional[Finding]:
        """Coaching finding for a metric score; exactly 90 gets none."""
        if item_score < NEEDS_WORK_BELOW:
            is_positive, hint = False, metric.hint_bad
        elif item_score < GOOD_FROM:
            is_positive, hint = True, metric.hint_good or DEFAULT_OK_HINT
        elif item_score > GOOD_FROM:
            is_positive, hint = True, metric.hint_good or DEFAULT_GOOD_HINT
        else:
            return None

        return Finding(
            id=metric.metric_id,
            title=metric.display_title,
            score=round_half_up(item_score),
            is_positive=is_positive,
            hint=hint,
            category=metric.category,
        )


def score(
    template: ActionTemplate,
    features: FeatureInput,
    options: Optional[Mapping[str, Any]] = None,
) -> ScoreResult:
    """Score with the default age tolerance table."""
    return ScoringEngine().score(template, features, options)
