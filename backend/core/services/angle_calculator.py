"""
Angle Calculator Service

Geometry used by dribbling and shooting analysis: joint angles, angles to
the vertical, and the single-frame posture metrics streamed for every frame.
All angles are in degrees.

This is pure mathematics - no external dependencies except numpy.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..config import settings
from ..domain.pose import BodyPart, Handedness, PoseFrame, PoseLandmark
from ..domain.template import AnalysisMode

MIN_SEGMENT_LENGTH = 1e-4
MIN_VERTICAL_SPAN = 0.001


class AngleCalculator:
    """
    Calculates biomechanical angles from pose landmarks.

    Basketball-specific measurements include:
    - Elbow / shoulder joint angles
    - Forearm and trunk deviation from vertical
    - Elbow tuck and wrist midline offset (shooting)
    - Knee flex and stance width (dribbling)

    All methods are static - no state needed.
    """

    # -------------------------------------------------------------------------
    # Core Angle Calculations
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_angle(
        p1: PoseLandmark,
        p2: PoseLandmark,  # Vertex point
        p3: PoseLandmark
    ) -> float:
        """
        Calculate angle at p2 formed by p1-p2-p3.

        Uses the law of cosines (via the dot product) to find the angle at
        the vertex (p2).

        Args:
            p1: First point
            p2: Vertex point (where angle is measured)
            p3: Third point

        Returns:
            Angle in degrees (0-180); 0 if either segment is degenerate

        Example:
            For elbow angle: shoulder -> elbow -> wrist
            angle = calculate_angle(shoulder, elbow, wrist)
        """
        v1 = np.array([p1.x - p2.x, p1.y - p2.y])
        v2 = np.array([p3.x - p2.x, p3.y - p2.y])

        len1 = np.linalg.norm(v1)
        len2 = np.linalg.norm(v2)
        if len1 < MIN_SEGMENT_LENGTH or len2 < MIN_SEGMENT_LENGTH:
            return 0.0

        cos_angle = np.dot(v1, v2) / (len1 * len2)

        # Clamp to valid range (handles floating point errors)
        cos_angle = np.clip(cos_angle, -1.0, 1.0)

        return float(np.degrees(np.arccos(cos_angle)))

    @staticmethod
    def calculate_vertical_angle(top: PoseLandmark, bottom: PoseLandmark) -> float:
        """
        Angle between the line top-bottom and the vertical.

        Returns:
            Degrees (0 = perfectly vertical, 90 = horizontal). Points at the
            same height count as horizontal.
        """
        dx = abs(top.x - bottom.x)
        dy = abs(top.y - bottom.y)
        if dy < MIN_VERTICAL_SPAN:
            return 90.0
        return math.degrees(math.atan(dx / dy))

    # -------------------------------------------------------------------------
    # Shooting Measurements
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_elbow_to_torso(frame: PoseFrame, hand: Handedness) -> Optional[float]:
        """
        Horizontal elbow distance from the same-side shoulder, in shoulder widths.

        Smaller means a tucked elbow.
        """
        left_shoulder = frame.get_landmark(BodyPart.LEFT_SHOULDER)
        right_shoulder = frame.get_landmark(BodyPart.RIGHT_SHOULDER)
        if hand is Handedness.LEFT:
            elbow = frame.get_landmark(BodyPart.LEFT_ELBOW)
            shoulder = left_shoulder
        else:
            elbow = frame.get_landmark(BodyPart.RIGHT_ELBOW)
            shoulder = right_shoulder

        if left_shoulder is None or right_shoulder is None or elbow is None:
            return None

        shoulder_width = left_shoulder.distance_to(right_shoulder) or 1.0
        return abs(elbow.x - shoulder.x) / shoulder_width

    @staticmethod
    def calculate_wrist_midline_offset(frame: PoseFrame, hand: Handedness) -> Optional[float]:
        """
        Signed wrist offset from the body midline, in shoulder widths.

        Positive means the wrist is right of the midline in the image.
        """
        left_shoulder = frame.get_landmark(BodyPart.LEFT_SHOULDER)
        right_shoulder = frame.get_landmark(BodyPart.RIGHT_SHOULDER)
        wrist = frame.get_landmark(
            BodyPart.LEFT_WRIST if hand is Handedness.LEFT else BodyPart.RIGHT_WRIST
        )
        if left_shoulder is None or right_shoulder is None or wrist is None:
            return None

        shoulder_width = left_shoulder.distance_to(right_shoulder) or 1.0
        mid_x = (left_shoulder.x + right_shoulder.x) / 2
        return (wrist.x - mid_x) / shoulder_width

    @classmethod
    def calculate_trunk_lean(cls, frame: PoseFrame) -> Optional[float]:
        """Angle of the hip-midpoint to shoulder-midpoint line from vertical."""
        shoulders = cls.calculate_midpoint(
            frame.get_landmark(BodyPart.LEFT_SHOULDER),
            frame.get_landmark(BodyPart.RIGHT_SHOULDER),
        )
        hips = cls.calculate_midpoint(
            frame.get_landmark(BodyPart.LEFT_HIP),
            frame.get_landmark(BodyPart.RIGHT_HIP),
        )
        if shoulders is None or hips is None:
            return None

        return cls.calculate_vertical_angle(
            PoseLandmark(x=shoulders[0], y=shoulders[1]),
            PoseLandmark(x=hips[0], y=hips[1]),
        )

    @classmethod
    def calculate_forearm_vertical(cls, frame: PoseFrame, hand: Handedness) -> Optional[float]:
        """Elbow-to-wrist deviation from vertical."""
        if hand is Handedness.LEFT:
            elbow = frame.get_landmark(BodyPart.LEFT_ELBOW)
            wrist = frame.get_landmark(BodyPart.LEFT_WRIST)
        else:
            elbow = frame.get_landmark(BodyPart.RIGHT_ELBOW)
            wrist = frame.get_landmark(BodyPart.RIGHT_WRIST)

        if elbow is None or wrist is None:
            return None
        return cls.calculate_vertical_angle(elbow, wrist)

    @staticmethod
    def check_knee_over_toe(
        frame: PoseFrame,
        hand: Handedness,
        threshold: Optional[float] = None,
    ) -> Optional[float]:
        """
        Rough side-view check that the knee sits above the toe.

        Without a facing direction this only tests horizontal proximity.

        Returns:
            1.0 if |knee.x - toe.x| is under the threshold, else 0.0
        """
        if threshold is None:
            threshold = settings.KNEE_OVER_TOE_THRESHOLD

        if hand is Handedness.LEFT:
            knee = frame.get_landmark(BodyPart.LEFT_KNEE)
            toe = frame.get_landmark(BodyPart.LEFT_FOOT_INDEX)
        else:
            knee = frame.get_landmark(BodyPart.RIGHT_KNEE)
            toe = frame.get_landmark(BodyPart.RIGHT_FOOT_INDEX)

        if knee is None or toe is None:
            return None
        return 1.0 if abs(knee.x - toe.x) < threshold else 0.0

    # -------------------------------------------------------------------------
    # Dribbling Measurements
    # -------------------------------------------------------------------------

    @classmethod
    def calculate_crouch_angle(cls, frame: PoseFrame) -> Optional[float]:
        """
        Average knee angle (hip-knee-ankle) over the visible knees.

        Returns:
            Degrees (180 = straight leg), None if neither knee is visible
        """
        angles = []
        for hip_part, knee_part, ankle_part in (
            (BodyPart.LEFT_HIP, BodyPart.LEFT_KNEE, BodyPart.LEFT_ANKLE),
            (BodyPart.RIGHT_HIP, BodyPart.RIGHT_KNEE, BodyPart.RIGHT_ANKLE),
        ):
            hip = frame.get_landmark(hip_part)
            knee = frame.get_landmark(knee_part)
            ankle = frame.get_landmark(ankle_part)
            if hip is None or knee is None or ankle is None:
                continue
            if knee.confidence <= 0.5:
                continue
            angles.append(cls.calculate_angle(hip, knee, ankle))

        if not angles:
            return None
        return sum(angles) / len(angles)

    @staticmethod
    def calculate_stance_to_shoulder_ratio(frame: PoseFrame) -> Optional[float]:
        """Ankle distance divided by shoulder distance."""
        points = [
            frame.get_landmark(part) for part in (
                BodyPart.LEFT_SHOULDER,
                BodyPart.RIGHT_SHOULDER,
                BodyPart.LEFT_ANKLE,
                BodyPart.RIGHT_ANKLE,
            )
        ]
        if any(p is None or not p.is_visible(0.5) for p in points):
            return None

        left_shoulder, right_shoulder, left_ankle, right_ankle = points
        shoulder_width = left_shoulder.distance_to(right_shoulder)
        if shoulder_width == 0:
            return None
        return left_ankle.distance_to(right_ankle) / shoulder_width

    # -------------------------------------------------------------------------
    # Complete Frame Analysis
    # -------------------------------------------------------------------------

    @classmethod
    def calculate_frame_metrics(
        cls,
        frame: PoseFrame,
        mode: AnalysisMode,
        hand: Handedness = Handedness.RIGHT,
        knee_over_toe_threshold: Optional[float] = None,
    ) -> dict[str, float]:
        """
        Calculate the single-frame posture metrics for an analysis mode.

        Keys match template computeKey names. Metrics whose landmarks are
        missing are left out rather than reported as zero.

        Args:
            frame: Raw pose frame
            mode: Shooting or dribbling
            hand: Shooting / dribbling hand
            knee_over_toe_threshold: Override for the knee-over-toe proximity

        Returns:
            Mapping of metric key to value
        """
        if mode is AnalysisMode.SHOOTING:
            values = {
                "elbowToTorsoDistanceNorm": cls.calculate_elbow_to_torso(frame, hand),
                "wristMidlineOffsetNorm": cls.calculate_wrist_midline_offset(frame, hand),
                "trunkLeanDegSide": cls.calculate_trunk_lean(frame),
                "forearmVerticalDeg": cls.calculate_forearm_vertical(frame, hand),
                "kneeOverToeSide": cls.check_knee_over_toe(frame, hand, knee_over_toe_threshold),
                "minKneeAngleDuringLoad": cls.calculate_crouch_angle(frame),
            }
        else:
            values = {
                "kneeAngleDeg": cls.calculate_crouch_angle(frame),
                "shoulderStanceRatio": cls.calculate_stance_to_shoulder_ratio(frame),
            }

        return {key: value for key, value in values.items() if value is not None}

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_midpoint(
        p1: Optional[PoseLandmark],
        p2: Optional[PoseLandmark]
    ) -> Optional[Tuple[float, float]]:
        """Calculate midpoint between two landmarks."""
        if p1 is None or p2 is None:
            return None
        return ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
