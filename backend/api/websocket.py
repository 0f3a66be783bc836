"""
WebSocket Handler

Live session analysis via WebSocket connection.
The frontend runs pose detection in the browser, streams landmarks frame by
frame and receives a live posture sample per frame plus the full analysis
when the session ends.
"""

import json
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from .routes import get_analyzer, pose_frame_from_schema, report_to_response
from .schemas import (
    FrameAckMessage,
    PoseFrameSchema,
    StartSessionMessage,
    WebSocketMessageType,
)
from core.domain import ActionTemplate, Handedness
from core.exceptions import HoopCoachError
from core.services import AnalysisSession, AngleCalculator

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ConnectionState:
    """Session state owned by one connection."""
    session: AnalysisSession = field(default_factory=AnalysisSession)
    template: Optional[ActionTemplate] = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def live_hand(self) -> Handedness:
        """Hand for live samples; auto falls back to right until analysis."""
        value = self.options.get("handedness")
        if value is None and self.template is not None:
            value = self.template.options.get("handedness")
        return Handedness.LEFT if value == "left" else Handedness.RIGHT


class ConnectionManager:
    """
    Manages WebSocket connections.

    Each connection owns its own AnalysisSession; nothing else touches it.
    """

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.states: dict[WebSocket, ConnectionState] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)
        self.states[websocket] = ConnectionState()

        logger.info(f"New WebSocket connection. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        self.states.pop(websocket, None)

        logger.info(f"WebSocket disconnected. Remaining: {len(self.active_connections)}")

    def get_state(self, websocket: WebSocket) -> ConnectionState:
        return self.states[websocket]

    async def send_message(
        self,
        websocket: WebSocket,
        msg_type: WebSocketMessageType,
        data: dict,
    ) -> None:
        """Send a typed message to a specific connection."""
        await websocket.send_json({
            "type": msg_type.value,
            "data": data,
            "timestamp": int(time.time() * 1000)
        })

    async def send_error(self, websocket: WebSocket, error: str) -> None:
        await self.send_message(websocket, WebSocketMessageType.ERROR, {"error": error})


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for live session analysis.

    Protocol:
    1. Client connects and sends start_session with a template ID
    2. Client streams frames; server answers each with frame_ack
    3. Client sends end_session; server answers with analysis_result
    4. reset drops the frames collected so far

    Message format (client -> server):
    {
        "type": "frame",
        "data": {
            "landmarks": [{"x": 0.5, "y": 0.2, "visibility": 0.9}, ...],
            "timestamp": 1.533,
            "frame_number": 46
        }
    }

    Message format (server -> client):
    {
        "type": "frame_ack",
        "data": {
            "frame_number": 46,
            "frame_count": 47,
            "is_side_view": false,
            "metrics": {"kneeAngleDeg": 131.2}
        },
        "timestamp": 1704067200025
    }
    """
    await manager.connect(websocket)

    try:
        # Main message loop
        while True:
            try:
                message = json.loads(await websocket.receive_text())
            except json.JSONDecodeError:
                await manager.send_error(websocket, "Invalid JSON")
                continue

            if not isinstance(message, dict):
                await manager.send_error(websocket, "Message must be a JSON object")
                continue

            msg_type = message.get("type")
            data = message.get("data") or {}

            if msg_type == WebSocketMessageType.START_SESSION.value:
                await handle_start_session(websocket, data)

            elif msg_type == WebSocketMessageType.FRAME.value:
                await handle_frame(websocket, data)

            elif msg_type == WebSocketMessageType.RESET.value:
                manager.get_state(websocket).session.reset()
                await manager.send_message(
                    websocket, WebSocketMessageType.SESSION_RESET, {"frame_count": 0}
                )

            elif msg_type == WebSocketMessageType.END_SESSION.value:
                await handle_end_session(websocket)
                break

            else:
                await manager.send_error(websocket, f"Unknown message type: {msg_type}")

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        manager.disconnect(websocket)


async def handle_start_session(websocket: WebSocket, data: dict) -> None:
    """Select the template and options; clears any previous frames."""
    try:
        request = StartSessionMessage.model_validate(data)
    except ValidationError as e:
        await manager.send_error(websocket, f"Invalid start_session: {e.errors()[0]['msg']}")
        return

    template = get_analyzer().registry.get_template_by_id(request.template_id)
    if template is None:
        await manager.send_error(websocket, f"Unknown template '{request.template_id}'")
        return

    state = manager.get_state(websocket)
    state.session.reset()
    state.template = template
    state.options = {}
    if request.age_group:
        state.options["ageGroup"] = request.age_group
    if request.handedness:
        state.options["handedness"] = request.handedness

    logger.info(f"Session started with template {template.template_id}")
    await manager.send_message(websocket, WebSocketMessageType.SESSION_STARTED, {
        "template_id": template.template_id,
        "mode": template.mode.value,
        "camera": template.camera.value,
    })


async def handle_frame(websocket: WebSocket, data: dict) -> None:
    """
    Ingest one frame and return the live posture sample.
    """
    state = manager.get_state(websocket)
    if state.template is None:
        await manager.send_error(websocket, "Session not started")
        return

    try:
        frame = pose_frame_from_schema(PoseFrameSchema.model_validate(data))
    except ValidationError as e:
        await manager.send_error(websocket, f"Invalid frame: {e.errors()[0]['msg']}")
        return

    normalized = state.session.add_frame(frame)
    metrics = AngleCalculator.calculate_frame_metrics(frame, state.template.mode, state.live_hand)

    ack = FrameAckMessage(
        frame_number=frame.frame_number,
        frame_count=len(state.session),
        is_side_view=normalized.is_side_view,
        metrics=metrics,
    )
    await manager.send_message(websocket, WebSocketMessageType.FRAME_ACK, ack.model_dump())


async def handle_end_session(websocket: WebSocket) -> None:
    """Analyze the frozen session and send the result."""
    state = manager.get_state(websocket)
    if state.template is None:
        await manager.send_error(websocket, "Session not started")
        return

    try:
        report = get_analyzer().analyze_session(state.session, state.template, state.options)
    except HoopCoachError as e:
        logger.warning(f"Session analysis failed: {e}")
        await manager.send_error(websocket, str(e))
        return

    response = report_to_response(report)
    await manager.send_message(
        websocket, WebSocketMessageType.ANALYSIS_RESULT, response.model_dump(mode="json")
    )
