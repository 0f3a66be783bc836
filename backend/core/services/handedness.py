"""
Handedness Inferencer

Decides which hand is dribbling from accumulated vertical wrist motion.
"""

from typing import Sequence

from ..domain.pose import Handedness, NormalizedFrame

MIN_FRAMES = 5
VISIBILITY_GATE = 0.6


def infer_handedness(frames: Sequence[NormalizedFrame]) -> Handedness:
    """
    Infer the active hand.

    Sums |delta y| of each wrist between consecutive frames, counting a frame
    only when that wrist's visibility exceeds 0.6 (in side view the far hand
    is usually occluded). The hand that moved more is the dribbling hand.

    Falls back to RIGHT for fewer than 5 frames or a tie.
    """
    if len(frames) < MIN_FRAMES:
        return Handedness.RIGHT

    left_energy = 0.0
    right_energy = 0.0

    for prev, curr in zip(frames, frames[1:]):
        if (
            curr.left_wrist is not None and prev.left_wrist is not None
            and curr.left_wrist.confidence > VISIBILITY_GATE
        ):
            left_energy += abs(curr.left_wrist.y - prev.left_wrist.y)
        if (
            curr.right_wrist is not None and prev.right_wrist is not None
            and curr.right_wrist.confidence > VISIBILITY_GATE
        ):
            right_energy += abs(curr.right_wrist.y - prev.right_wrist.y)

    return Handedness.LEFT if left_energy > right_energy else Handedness.RIGHT
