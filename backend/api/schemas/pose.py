"""
Pose API Schemas

Pydantic models for incoming pose frames and WebSocket messages.
These define the JSON structure for communication with the frontend, which
runs the pose estimator in the browser and streams landmarks to the backend.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional, List
from enum import Enum

LANDMARK_COUNT = 33


class LandmarkSchema(BaseModel):
    """
    Single body landmark as reported by the pose estimator.

    Coordinates are normalized to the video frame; the estimator can report
    points slightly outside [0, 1] when a limb leaves the frame.
    """
    x: float = Field(..., description="Horizontal position (0=left, 1=right)")
    y: float = Field(..., description="Vertical position (0=top, 1=bottom)")
    z: float = Field(0.0, description="Depth (negative=closer to camera)")
    visibility: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Detection confidence, omitted if not reported"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "x": 0.45,
                "y": 0.32,
                "z": -0.15,
                "visibility": 0.95
            }
        }


class PoseFrameSchema(BaseModel):
    """
    Landmarks for one video frame.

    `landmarks` is indexed by the 33-point MediaPipe scheme; null entries
    mark keypoints the estimator did not return.
    """
    landmarks: List[Optional[LandmarkSchema]] = Field(
        ..., max_length=LANDMARK_COUNT, description="Up to 33 body landmarks"
    )
    timestamp: float = Field(..., ge=0.0, description="Playback timestamp in seconds")
    frame_number: int = Field(0, ge=0, description="Sequential frame number")

    class Config:
        json_schema_extra = {
            "example": {
                "landmarks": [
                    {"x": 0.5, "y": 0.2, "z": 0.0, "visibility": 0.99},
                    None
                ],
                "timestamp": 1.5,
                "frame_number": 45
            }
        }


# =============================================================================
# WebSocket Message Schemas
# =============================================================================

class WebSocketMessageType(str, Enum):
    """Types of WebSocket messages."""
    # Client -> Server
    START_SESSION = "start_session"    # Choose template and options
    FRAME = "frame"                    # One frame of landmarks
    RESET = "reset"                    # Drop accumulated frames
    END_SESSION = "end_session"        # Analyze and close

    # Server -> Client
    SESSION_STARTED = "session_started"
    FRAME_ACK = "frame_ack"            # Live posture sample for a frame
    SESSION_RESET = "session_reset"
    ANALYSIS_RESULT = "analysis_result"
    ERROR = "error"


class WebSocketMessage(BaseModel):
    """
    Base WebSocket message structure.

    All WebSocket communication uses this format.
    """
    type: WebSocketMessageType = Field(..., description="Message type")
    data: dict[str, Any] = Field(default_factory=dict, description="Message payload")
    timestamp: int = Field(0, description="Unix timestamp in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "frame",
                "data": {"landmarks": [], "timestamp": 0.033, "frame_number": 1},
                "timestamp": 1704067200000
            }
        }


class StartSessionMessage(BaseModel):
    """Payload of a start_session message."""
    template_id: str = Field(..., description="Template to analyze against")
    age_group: Optional[str] = Field(None, description="Age group, e.g. '11-13'")
    handedness: Optional[str] = Field(
        None, pattern="^(left|right|auto)$", description="Dribbling / shooting hand"
    )


class FrameAckMessage(BaseModel):
    """
    Sent from backend to frontend after ingesting a frame.
    """
    frame_number: int = Field(..., description="Corresponding frame number")
    frame_count: int = Field(..., description="Frames accumulated in the session")
    is_side_view: bool = Field(..., description="Per-frame camera orientation guess")
    metrics: dict[str, float] = Field(default_factory=dict, description="Live posture sample")
