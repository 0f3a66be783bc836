"""
Pytest configuration and fixtures for testing

Synthetic pose streams are built from a fixed standing body; only the
dribbling wrist moves.
"""

import math

import pytest
from fastapi.testclient import TestClient

from core.domain import ActionTemplate, BodyPart, Handedness, PoseFrame, PoseLandmark
from main import app

# Player facing the camera: their left side appears on the image right
FRONT_POSE = {
    BodyPart.NOSE: (0.50, 0.18),
    BodyPart.LEFT_SHOULDER: (0.60, 0.30),
    BodyPart.RIGHT_SHOULDER: (0.40, 0.30),
    BodyPart.LEFT_ELBOW: (0.63, 0.45),
    BodyPart.RIGHT_ELBOW: (0.37, 0.45),
    BodyPart.LEFT_WRIST: (0.62, 0.50),
    BodyPart.RIGHT_WRIST: (0.36, 0.58),
    BodyPart.LEFT_HIP: (0.57, 0.55),
    BodyPart.RIGHT_HIP: (0.43, 0.55),
    BodyPart.LEFT_KNEE: (0.58, 0.72),
    BodyPart.RIGHT_KNEE: (0.42, 0.72),
    BodyPart.LEFT_ANKLE: (0.60, 0.90),
    BodyPart.RIGHT_ANKLE: (0.40, 0.90),
    BodyPart.LEFT_HEEL: (0.60, 0.92),
    BodyPart.RIGHT_HEEL: (0.40, 0.92),
    BodyPart.LEFT_FOOT_INDEX: (0.62, 0.93),
    BodyPart.RIGHT_FOOT_INDEX: (0.38, 0.93),
}

# Player seen from their right side, facing image-right
SIDE_POSE = {
    BodyPart.NOSE: (0.55, 0.18),
    BodyPart.LEFT_SHOULDER: (0.51, 0.30),
    BodyPart.RIGHT_SHOULDER: (0.52, 0.30),
    BodyPart.LEFT_ELBOW: (0.54, 0.44),
    BodyPart.RIGHT_ELBOW: (0.55, 0.44),
    BodyPart.LEFT_WRIST: (0.60, 0.55),
    BodyPart.RIGHT_WRIST: (0.62, 0.60),
    BodyPart.LEFT_HIP: (0.47, 0.55),
    BodyPart.RIGHT_HIP: (0.48, 0.55),
    BodyPart.LEFT_KNEE: (0.52, 0.72),
    BodyPart.RIGHT_KNEE: (0.53, 0.72),
    BodyPart.LEFT_ANKLE: (0.45, 0.90),
    BodyPart.RIGHT_ANKLE: (0.46, 0.90),
    BodyPart.LEFT_HEEL: (0.43, 0.92),
    BodyPart.RIGHT_HEEL: (0.44, 0.92),
    BodyPart.LEFT_FOOT_INDEX: (0.53, 0.93),
    BodyPart.RIGHT_FOOT_INDEX: (0.54, 0.93),
}


def build_frame(points, timestamp=0.0, frame_number=0, visibility=0.9, overrides=None):
    """PoseFrame from {BodyPart: (x, y)}; overrides may set a point to None."""
    merged = dict(points)
    merged.update(overrides or {})
    landmarks = {
        part: PoseLandmark(x=xy[0], y=xy[1], visibility=visibility)
        for part, xy in merged.items()
        if xy is not None
    }
    return PoseFrame.from_points(landmarks, timestamp=timestamp, frame_number=frame_number)


def build_dribble(
    duration=4.0,
    period=0.5,
    fps=30,
    hand=Handedness.RIGHT,
    crossover=False,
    pose=FRONT_POSE,
):
    """
    Frames of a steady dribble: the active wrist's y follows a sinusoid
    between 0.55 and 0.85. With crossover=True the wrist also swings across
    the body midline once per bounce.
    """
    wrist = BodyPart.RIGHT_WRIST if hand is Handedness.RIGHT else BodyPart.LEFT_WRIST
    base_x = pose[wrist][0]
    frames = []
    for i in range(int(duration * fps)):
        t = i / fps
        phase = 2 * math.pi * t / period
        y = 0.70 + 0.15 * math.sin(phase)
        x = 0.50 - 0.12 * math.cos(phase) if crossover else base_x
        frames.append(build_frame(pose, t, i, overrides={wrist: (x, y)}))
    return frames


def dribbling_template(camera="front", handedness="auto", metrics=None):
    return ActionTemplate.from_dict({
        "templateId": f"test_dribble_{camera}",
        "mode": "dribbling",
        "camera": camera,
        "options": {"handedness": handedness},
        "metrics": metrics or [],
    })


@pytest.fixture
def front_frame():
    return build_frame(FRONT_POSE)


@pytest.fixture
def side_frame():
    return build_frame(SIDE_POSE)


@pytest.fixture
def dribble_frames():
    """4 s of right-hand pound dribble at 2 bounces/s, 30 fps."""
    return build_dribble()


@pytest.fixture
def crossover_frames():
    return build_dribble(crossover=True)


@pytest.fixture
def front_template():
    return dribbling_template("front")


@pytest.fixture
def side_template():
    return dribbling_template("side")


@pytest.fixture
def client():
    """Create a test client for FastAPI app"""
    with TestClient(app) as test_client:
        yield test_client


def frame_payload(frame: PoseFrame) -> dict:
    """JSON body for one PoseFrame."""
    return {
        "landmarks": [
            None if lm is None else {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
            for lm in frame.landmarks
        ],
        "timestamp": frame.timestamp,
        "frame_number": frame.frame_number,
    }
