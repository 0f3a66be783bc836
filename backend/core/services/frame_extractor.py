"""
Landmark Frame Extractor

Turns one raw pose estimator frame into the NormalizedFrame record used by
segmentation and aggregation. Runs once per frame inside the ingest callback.
"""

from typing import Optional

from ..domain.pose import BodyPart, NormalizedFrame, PoseFrame, PoseLandmark

MIN_TRUNK_HEIGHT = 0.1
SIDE_VIEW_RATIO = 0.4


def _mean_y(*points: Optional[PoseLandmark]) -> Optional[float]:
    ys = [p.y for p in points if p is not None]
    return sum(ys) / len(ys) if ys else None


def extract_frame(frame: PoseFrame) -> NormalizedFrame:
    """
    Build a NormalizedFrame from a raw pose frame.

    Trunk height (shoulder midpoint to hip midpoint, vertical) is the scale
    reference; it stays stable whether the player faces the camera or not.
    A narrow shoulder span relative to the trunk means the body is turned
    sideways.

    Missing keypoints are carried through as None; consumers check for them.
    """
    get = frame.get_landmark

    left_shoulder = get(BodyPart.LEFT_SHOULDER)
    right_shoulder = get(BodyPart.RIGHT_SHOULDER)

    shoulder_y = _mean_y(left_shoulder, right_shoulder)
    hip_y = _mean_y(get(BodyPart.LEFT_HIP), get(BodyPart.RIGHT_HIP))
    trunk_height = MIN_TRUNK_HEIGHT
    if shoulder_y is not None and hip_y is not None:
        trunk_height = max(abs(hip_y - shoulder_y), MIN_TRUNK_HEIGHT)

    shoulder_width = 0.0
    if left_shoulder is not None and right_shoulder is not None:
        shoulder_width = abs(left_shoulder.x - right_shoulder.x)

    is_side_view = shoulder_width < trunk_height * SIDE_VIEW_RATIO

    return NormalizedFrame(
        t=frame.timestamp,
        left_ankle=get(BodyPart.LEFT_ANKLE),
        right_ankle=get(BodyPart.RIGHT_ANKLE),
        left_wrist=get(BodyPart.LEFT_WRIST),
        right_wrist=get(BodyPart.RIGHT_WRIST),
        left_elbow=get(BodyPart.LEFT_ELBOW),
        right_elbow=get(BodyPart.RIGHT_ELBOW),
        left_shoulder=left_shoulder,
        right_shoulder=right_shoulder,
        left_knee=get(BodyPart.LEFT_KNEE),
        right_knee=get(BodyPart.RIGHT_KNEE),
        left_hip=get(BodyPart.LEFT_HIP),
        right_hip=get(BodyPart.RIGHT_HIP),
        left_foot=get(BodyPart.LEFT_FOOT_INDEX),
        right_foot=get(BodyPart.RIGHT_FOOT_INDEX),
        trunk_height=trunk_height,
        # a fully sideways body can project a zero span
        shoulder_width=shoulder_width or trunk_height * 0.5,
        is_side_view=is_side_view,
    )
