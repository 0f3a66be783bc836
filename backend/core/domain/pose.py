"""
Pose Domain Models

Data structures for representing human body pose landmarks
produced by an external MediaPipe-style pose estimator.

The estimator returns 33 landmarks per frame:
https://developers.google.com/mediapipe/solutions/vision/pose_landmarker
"""
from dataclasses import dataclass, field
from enum import IntEnum, Enum
from typing import Optional


class BodyPart(IntEnum):
    """
    MediaPipe Pose landmark indices.

    These map directly to MediaPipe's 33-point pose model.
    We include the ones used for dribbling and shooting analysis.
    """
    # Face
    NOSE = 0

    # Upper body
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    # Lower body
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28

    # Feet
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


LANDMARK_COUNT = 33


class Handedness(str, Enum):
    """Which hand is dribbling / shooting."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Handedness":
        return Handedness.RIGHT if self is Handedness.LEFT else Handedness.LEFT


@dataclass(frozen=True)
class PoseLandmark:
    """
    A single body landmark with coordinates and optional visibility.

    Attributes:
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
        z: Depth (smaller = closer to camera)
        visibility: Confidence score (0.0 to 1.0), None when not reported

    Note:
        Coordinates are normalized to image dimensions, so y grows downward.
        A landmark without a visibility value counts as fully visible.
    """
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def confidence(self) -> float:
        """Visibility with the 'not reported means visible' default applied."""
        return 1.0 if self.visibility is None else self.visibility

    def is_visible(self, threshold: float = 0.5) -> bool:
        """Check if landmark is visible above confidence threshold."""
        return self.confidence >= threshold

    def distance_to(self, other: "PoseLandmark") -> float:
        """Calculate 2D Euclidean distance to another landmark."""
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5


@dataclass(frozen=True)
class PoseFrame:
    """
    Raw pose estimator output for a single video frame.

    Attributes:
        landmarks: Landmarks indexed by BodyPart; None where a keypoint is absent
        timestamp: Playback timestamp in seconds
        frame_number: Sequential frame number
    """
    landmarks: tuple[Optional[PoseLandmark], ...]
    timestamp: float
    frame_number: int = 0

    def get_landmark(self, body_part: BodyPart) -> Optional[PoseLandmark]:
        """Get a specific landmark by body part."""
        index = body_part.value
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    @classmethod
    def from_points(
        cls,
        points: dict[BodyPart, PoseLandmark],
        timestamp: float,
        frame_number: int = 0,
    ) -> "PoseFrame":
        """Build a full-length frame from a sparse body part mapping."""
        landmarks: list[Optional[PoseLandmark]] = [None] * LANDMARK_COUNT
        for part, landmark in points.items():
            landmarks[part.value] = landmark
        return cls(landmarks=tuple(landmarks), timestamp=timestamp, frame_number=frame_number)


@dataclass(frozen=True)
class NormalizedFrame:
    """
    Per-frame feature record used by the temporal analysis.

    Reference points are copied from the raw frame. trunk_height is the
    primary scale reference and is always positive.
    """
    t: float

    left_ankle: Optional[PoseLandmark]
    right_ankle: Optional[PoseLandmark]
    left_wrist: Optional[PoseLandmark]
    right_wrist: Optional[PoseLandmark]
    left_elbow: Optional[PoseLandmark]
    right_elbow: Optional[PoseLandmark]
    left_shoulder: Optional[PoseLandmark]
    right_shoulder: Optional[PoseLandmark]
    left_knee: Optional[PoseLandmark]
    right_knee: Optional[PoseLandmark]
    left_hip: Optional[PoseLandmark]
    right_hip: Optional[PoseLandmark]
    left_foot: Optional[PoseLandmark]
    right_foot: Optional[PoseLandmark]

    trunk_height: float
    shoulder_width: float
    is_side_view: bool

    # -------------------------------------------------------------------------
    # Side-aware accessors
    # -------------------------------------------------------------------------

    def wrist(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_wrist if hand is Handedness.LEFT else self.right_wrist

    def elbow(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_elbow if hand is Handedness.LEFT else self.right_elbow

    def shoulder(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_shoulder if hand is Handedness.LEFT else self.right_shoulder

    def hip(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_hip if hand is Handedness.LEFT else self.right_hip

    def knee(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_knee if hand is Handedness.LEFT else self.right_knee

    def ankle(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_ankle if hand is Handedness.LEFT else self.right_ankle

    def toe(self, hand: Handedness) -> Optional[PoseLandmark]:
        return self.left_foot if hand is Handedness.LEFT else self.right_foot

    @property
    def shoulder_mid_x(self) -> Optional[float]:
        """Body midline estimate from the shoulders."""
        if self.left_shoulder is None or self.right_shoulder is None:
            return None
        return (self.left_shoulder.x + self.right_shoulder.x) / 2


@dataclass
class Cycle:
    """
    One dribble repetition: high point -> contact (lowest point) -> high point.
    """
    start_frame: int
    contact_frame: int
    end_frame: int
    duration: float  # seconds


@dataclass
class SegmentationResult:
    """Detected cycles plus the flat list of contact frame indices."""
    cycles: list[Cycle] = field(default_factory=list)
    contacts: list[int] = field(default_factory=list)
