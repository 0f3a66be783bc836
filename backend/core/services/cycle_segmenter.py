"""
Cycle Segmenter

Splits a frame sequence into dribble cycles using the vertical rhythm of the
active wrist. Works the same for front and side views and for any dribble
pattern (pound, V, crossover) since only the wrist's up/down motion is used.

Image y grows downward, so a local MAXIMUM of wrist y is the physical lowest
point of the dribble (the contact) and a local minimum is the high point.
"""

import logging
from typing import Optional, Sequence

from ..domain.pose import Cycle, Handedness, NormalizedFrame, SegmentationResult
from .signal import smooth

logger = logging.getLogger(__name__)

MIN_FRAMES = 10
SMOOTHING_WINDOW = 3
MIN_CONTACT_GAP_SECONDS = 0.15
MAX_LINK_GAP_SECONDS = 1.5
CONTACT_BELOW_SHOULDER = 0.1  # normalized units
FIRST_START_OFFSET = 5  # frames before the first contact


def _wrist_signal(frames: Sequence[NormalizedFrame], hand: Handedness) -> list[float]:
    """Active wrist y per frame; gaps hold the last known value."""
    signal = []
    last = 0.0
    for frame in frames:
        wrist = frame.wrist(hand)
        if wrist is not None:
            last = wrist.y
        signal.append(last)
    return signal


def _is_local_max(y: list[float], i: int) -> bool:
    val = y[i]
    return val > y[i - 1] and val > y[i - 2] and val >= y[i + 1] and val >= y[i + 2]


def _highest_between(y: list[float], start: int, stop: int) -> int:
    """Index of the minimum y (highest point) in [start, stop)."""
    best = start
    best_val: Optional[float] = None
    for j in range(start, stop):
        if best_val is None or y[j] < best_val:
            best_val = y[j]
            best = j
    return best


def find_contacts(
    frames: Sequence[NormalizedFrame],
    y: list[float],
    hand: Handedness,
    fps_guess: int,
) -> list[int]:
    """Detect contact frames (lowest wrist points) in a smoothed signal."""
    min_gap = int(fps_guess * MIN_CONTACT_GAP_SECONDS)
    contacts: list[int] = []
    last_contact = -999

    for i in range(2, len(y) - 2):
        if not _is_local_max(y, i):
            continue
        if i - last_contact <= min_gap:
            continue

        # Reject jitter while the hand is raised
        shoulder = frames[i].shoulder(hand)
        if shoulder is None or y[i] <= shoulder.y + CONTACT_BELOW_SHOULDER:
            continue

        contacts.append(i)
        last_contact = i

    return contacts


def _linked_runs(contacts: list[int], fps_guess: int) -> list[list[int]]:
    """Group contacts into runs of continuous dribbling."""
    max_gap = fps_guess * MAX_LINK_GAP_SECONDS
    runs: list[list[int]] = []
    for idx in contacts:
        if runs and idx - runs[-1][-1] <= max_gap:
            runs[-1].append(idx)
        else:
            runs.append([idx])
    return runs


def segment_cycles(
    frames: Sequence[NormalizedFrame],
    hand: Handedness,
    fps_guess: int = 30,
) -> SegmentationResult:
    """
    Segment a frozen frame buffer into dribble cycles.

    Each contact inside a run of continuous dribbling becomes one cycle:
    [start (high) -> contact (low) -> end (high)]. The highest point between
    two consecutive contacts closes one cycle and opens the next. Contacts
    further apart than 1.5 s are a break (catch, reset) and are not linked;
    a contact with no linked neighbour produces no cycle.

    Args:
        frames: Normalized frames of one session
        hand: Dribbling hand
        fps_guess: Assumed frame rate for time-based thresholds

    Returns:
        SegmentationResult with cycles and all contact indices; empty for
        fewer than 10 frames
    """
    if len(frames) < MIN_FRAMES:
        return SegmentationResult()

    y = smooth(_wrist_signal(frames, hand), SMOOTHING_WINDOW)
    contacts = find_contacts(frames, y, hand, fps_guess)

    cycles: list[Cycle] = []
    last_index = len(frames) - 1

    for run in _linked_runs(contacts, fps_guess):
        if len(run) < 2:
            continue

        boundaries = [_highest_between(y, a, b) for a, b in zip(run, run[1:])]

        for k, contact in enumerate(run):
            if k == 0:
                start = max(0, contact - FIRST_START_OFFSET)
            else:
                start = boundaries[k - 1]

            if k < len(boundaries):
                end = boundaries[k]
            else:
                limit = min(last_index, contact + fps_guess)
                end = _highest_between(y, contact, limit)

            cycles.append(Cycle(
                start_frame=start,
                contact_frame=contact,
                end_frame=end,
                duration=frames[end].t - frames[start].t,
            ))

    logger.debug(f"Segmented {len(cycles)} cycles from {len(contacts)} contacts")
    return SegmentationResult(cycles=cycles, contacts=contacts)
