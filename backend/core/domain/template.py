"""
Action Template Domain Models

Templates are static JSON documents describing which metrics an analysis
mode measures and how each metric is scored. Loading resolves every metric
into a typed parameter struct so that scoring never has to guess defaults.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..exceptions import TemplateError


class AnalysisMode(str, Enum):
    SHOOTING = "shooting"
    DRIBBLING = "dribbling"


class CameraView(str, Enum):
    FRONT = "front"
    SIDE = "side"


class MetricCategory(str, Enum):
    POSTURE = "posture"
    EXECUTION = "execution"
    CONSISTENCY = "consistency"


class MetricType(str, Enum):
    BOOLEAN = "boolean"
    TARGET = "target"
    RANGE = "range"
    RANGE_BY_OPTION = "rangeByOption"


# -----------------------------------------------------------------------------
# Metric parameter payloads (one per metric type)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BooleanParams:
    target: int = 1


@dataclass(frozen=True)
class TargetParams:
    target: float = 0.0
    tol: float = 5.0
    margin: float = 15.0


@dataclass(frozen=True)
class RangeParams:
    L: float = 0.0
    U: float = 180.0
    margin: float = 15.0


@dataclass(frozen=True)
class OptionRange:
    L: float
    U: float
    margin: float = 0.1


@dataclass(frozen=True)
class RangeByOptionParams:
    option_key: str = "handedness"
    ranges: dict[str, OptionRange] = field(default_factory=dict)


MetricParams = Union[BooleanParams, TargetParams, RangeParams, RangeByOptionParams]


@dataclass(frozen=True)
class CategoryWeights:
    posture: float = 0.4
    execution: float = 0.4
    consistency: float = 0.2

    def as_dict(self) -> dict[str, float]:
        return {
            "posture": self.posture,
            "execution": self.execution,
            "consistency": self.consistency,
        }


DEFAULT_WEIGHTS = CategoryWeights()


@dataclass(frozen=True)
class Metric:
    """A single scored metric within a template."""
    metric_id: str
    category: MetricCategory
    weight: float
    type: MetricType
    compute_key: str
    params: MetricParams
    hint_bad: str = ""
    hint_good: Optional[str] = None

    @property
    def display_title(self) -> str:
        """'elbow_flare' -> 'Elbow Flare'."""
        words = self.metric_id.replace("_", " ").split(" ")
        return " ".join(w[:1].upper() + w[1:] for w in words)


@dataclass(frozen=True)
class ActionTemplate:
    """
    Template for one analysis mode and camera viewpoint.

    Attributes:
        template_id: Unique identifier
        mode: shooting or dribbling
        camera: Declared camera viewpoint
        metrics: Metrics in declaration order (also the findings order)
        overall_weights: Category weights reported with the score, None if
            the template does not declare any
        options: Free-form defaults, e.g. {"handedness": "auto"}
    """
    template_id: str
    mode: AnalysisMode
    camera: CameraView
    display_name: str
    metrics: tuple[Metric, ...]
    overall_weights: Optional[CategoryWeights] = None
    options: dict[str, Any] = field(default_factory=dict)
    age_groups: tuple[str, ...] = ()
    rules_note: str = ""

    @property
    def weights(self) -> CategoryWeights:
        return self.overall_weights or DEFAULT_WEIGHTS

    # -------------------------------------------------------------------------
    # Resolution from JSON documents
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionTemplate":
        """
        Resolve a raw template document.

        Raises:
            TemplateError: required field missing or enum value unknown
        """
        template_id = _require(data, "templateId", "template")
        raw_metrics = _require(data, "metrics", template_id)
        if not isinstance(raw_metrics, list):
            raise TemplateError(f"{template_id}: 'metrics' must be a list")

        weights = data.get("overallWeights")
        return cls(
            template_id=template_id,
            mode=_enum(AnalysisMode, data.get("mode", "dribbling"), template_id, "mode"),
            camera=_enum(CameraView, data.get("camera", "front"), template_id, "camera"),
            display_name=data.get("displayName") or template_id,
            metrics=tuple(_resolve_metric(m, template_id) for m in raw_metrics),
            overall_weights=_resolve_weights(weights, template_id) if weights else None,
            options=dict(data.get("options") or {}),
            age_groups=tuple(data.get("ageGroups") or ()),
            rules_note=data.get("rulesNote") or "",
        )


def _require(data: dict[str, Any], key: str, owner: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise TemplateError(f"{owner}: missing required field '{key}'")
    return value


def _enum(enum_cls, value: Any, owner: str, key: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise TemplateError(f"{owner}: invalid {key} '{value}'") from None


def _positive(value: Any, default: float) -> float:
    # zero or missing tolerances would divide by zero during scoring
    if value is None or float(value) <= 0:
        return default
    return float(value)


def _number(value: Any, default: float) -> float:
    return default if value is None else float(value)


def _resolve_weights(data: dict[str, Any], owner: str) -> CategoryWeights:
    try:
        return CategoryWeights(
            posture=float(data.get("posture", DEFAULT_WEIGHTS.posture)),
            execution=float(data.get("execution", DEFAULT_WEIGHTS.execution)),
            consistency=float(data.get("consistency", DEFAULT_WEIGHTS.consistency)),
        )
    except (TypeError, ValueError, AttributeError):
        raise TemplateError(f"{owner}: invalid overallWeights") from None


def _resolve_params(metric_type: MetricType, params: dict[str, Any], owner: str) -> MetricParams:
    if metric_type is MetricType.BOOLEAN:
        return BooleanParams(target=int(_number(params.get("target"), 1)))

    if metric_type is MetricType.TARGET:
        return TargetParams(
            target=_number(params.get("target"), 0.0),
            tol=_positive(params.get("tol"), 5.0),
            margin=_positive(params.get("margin"), 15.0),
        )

    if metric_type is MetricType.RANGE:
        return RangeParams(
            L=_number(params.get("L"), 0.0),
            U=_number(params.get("U"), 180.0),
            margin=_positive(params.get("margin"), 15.0),
        )

    if metric_type is MetricType.RANGE_BY_OPTION:
        ranges = {}
        for option, row in (params.get("ranges") or {}).items():
            if "L" not in row or "U" not in row:
                raise TemplateError(f"{owner}: range '{option}' needs both L and U")
            ranges[option] = OptionRange(
                L=float(row["L"]),
                U=float(row["U"]),
                margin=_positive(row.get("margin"), 0.1),
            )
        return RangeByOptionParams(
            option_key=params.get("optionKey") or "handedness",
            ranges=ranges,
        )

    raise TemplateError(f"{owner}: unsupported metric type '{metric_type}'")


def _resolve_metric(data: dict[str, Any], template_id: str) -> Metric:
    metric_id = _require(data, "metricId", template_id)
    owner = f"{template_id}.{metric_id}"
    metric_type = _enum(MetricType, _require(data, "type", owner), owner, "type")

    try:
        params = _resolve_params(metric_type, data.get("params") or {}, owner)
        weight = _number(data.get("weight"), 1.0)
    except (TypeError, ValueError):
        raise TemplateError(f"{owner}: non-numeric parameter") from None

    return Metric(
        metric_id=metric_id,
        category=_enum(MetricCategory, _require(data, "category", owner), owner, "category"),
        weight=weight,
        type=metric_type,
        compute_key=_require(data, "computeKey", owner),
        params=params,
        hint_bad=data.get("hint_bad") or "",
        hint_good=data.get("hint_good") or None,
    )
