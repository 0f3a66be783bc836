"""
Analysis Session

Per-connection frame history. Frames are normalized as they arrive so that
analysis at the end of a session only has to read a frozen snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..domain.pose import NormalizedFrame, PoseFrame
from .frame_extractor import extract_frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable copy of a session's history."""
    raw_frames: tuple[PoseFrame, ...]
    frames: tuple[NormalizedFrame, ...]

    @property
    def duration(self) -> float:
        if len(self.raw_frames) < 2:
            return 0.0
        return self.raw_frames[-1].timestamp - self.raw_frames[0].timestamp


class AnalysisSession:
    """
    Accumulates frames for one recording.

    A timestamp that jumps backwards (video scrubbed or restarted) starts a
    new recording in place.

    Usage:
        session = AnalysisSession()
        for frame in frames:
            session.add_frame(frame)
        snapshot = session.snapshot()
    """

    def __init__(self, rewind_reset_seconds: Optional[float] = None):
        self.rewind_reset_seconds = (
            settings.REWIND_RESET_SECONDS if rewind_reset_seconds is None
            else rewind_reset_seconds
        )
        self._raw: list[PoseFrame] = []
        self._frames: list[NormalizedFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._raw[-1].timestamp if self._raw else None

    def add_frame(self, frame: PoseFrame) -> NormalizedFrame:
        """Normalize and append a frame, resetting first on a rewind."""
        last = self.last_timestamp
        if last is not None and frame.timestamp < last - self.rewind_reset_seconds:
            logger.info(
                f"Timestamp rewound from {last:.2f}s to {frame.timestamp:.2f}s, "
                f"resetting session ({len(self)} frames dropped)"
            )
            self.reset()

        normalized = extract_frame(frame)
        self._raw.append(frame)
        self._frames.append(normalized)
        return normalized

    def reset(self) -> None:
        self._raw.clear()
        self._frames.clear()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(raw_frames=tuple(self._raw), frames=tuple(self._frames))
