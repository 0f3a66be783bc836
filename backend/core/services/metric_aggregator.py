"""
Metric Aggregator Service

Computes the catalog of dribbling features over a frozen frame buffer:
contact-point placement, dribble height, midline crossing, posture and
cycle-to-cycle consistency. Keys match template computeKey names.

Several measurements are only meaningful from the side; in front view they
take fixed fallback values so that the key set stays stable.
"""

import logging
from typing import Optional, Sequence

from ..config import settings
from ..domain.analysis import AggregationResult
from ..domain.pose import Cycle, Handedness, NormalizedFrame
from ..domain.template import ActionTemplate, CameraView
from .angle_calculator import AngleCalculator
from .cycle_segmenter import segment_cycles
from .handedness import infer_handedness
from .signal import average, population_std

logger = logging.getLogger(__name__)

# Fallbacks
DEFAULT_HEIGHT_RATIO = 0.4
DEFAULT_ALIGN_OFFSET = 0.5
DEFAULT_ELBOW_ANGLE = 160.0
DEFAULT_SHOULDER_ARM_ANGLE = 90.0
FRONT_VIEW_TRUNK_LEAN = 20.0
FRONT_VIEW_HAND_FORWARD = 0.2

MIN_STANCE_WIDTH = 0.1
CHEST_BOX_SLACK = 0.1
WRIST_BELOW_ELBOW_PASS_RATE = 0.8


def _facing_dir(frame: NormalizedFrame, hand: Handedness) -> Optional[int]:
    """+1 if the player faces image-right (toe ahead of ankle), -1 otherwise."""
    toe = frame.toe(hand)
    ankle = frame.ankle(hand)
    if toe is None or ankle is None:
        return None
    return 1 if toe.x > ankle.x else -1


def _stance(frame: NormalizedFrame) -> Optional[tuple[float, float, float]]:
    """Screen-left foot x, screen-right foot x and stance width."""
    if frame.left_foot is None or frame.right_foot is None:
        return None
    left_x = min(frame.left_foot.x, frame.right_foot.x)
    right_x = max(frame.left_foot.x, frame.right_foot.x)
    return left_x, right_x, (right_x - left_x) or MIN_STANCE_WIDTH


def _hand_in_chest_box(frame: NormalizedFrame, hand: Handedness) -> bool:
    """Is this hand inside the torso box (with slack)?"""
    point = frame.wrist(hand)
    ls, rs = frame.left_shoulder, frame.right_shoulder
    lh, rh = frame.left_hip, frame.right_hip
    if point is None or ls is None or rs is None or lh is None or rh is None:
        return False

    min_x = min(ls.x, rs.x)
    max_x = max(ls.x, rs.x)
    min_y = min(ls.y, rs.y)
    max_y = max(lh.y, rh.y)
    return (
        min_y < point.y < max_y + CHEST_BOX_SLACK
        and min_x - CHEST_BOX_SLACK < point.x < max_x + CHEST_BOX_SLACK
    )


class MetricAggregator:
    """
    Aggregates per-frame geometry into scalar features.

    Usage:
        aggregator = MetricAggregator()
        result = aggregator.aggregate(frames, template)
        print(result.computed_values["crossMidlineRate"])
    """

    def __init__(self, fps_guess: Optional[int] = None):
        self.fps_guess = fps_guess or settings.FPS_GUESS

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def aggregate(
        self,
        frames: Sequence[NormalizedFrame],
        template: ActionTemplate,
        handedness: Optional[Handedness] = None,
    ) -> AggregationResult:
        """
        Compute all features for a finished frame buffer.

        Args:
            frames: Normalized frames of one session (frozen snapshot)
            template: Template being analyzed; provides camera and options
            handedness: Explicit dribbling hand, overrides the template option

        Returns:
            AggregationResult with computed values, hand used and cycles
        """
        hand = self.resolve_hand(frames, template, handedness)
        segmentation = segment_cycles(frames, hand, self.fps_guess)
        cycles, contacts = segmentation.cycles, segmentation.contacts

        # Template configuration wins; the per-frame guess only adds side view
        is_side_view = template.camera is CameraView.SIDE or (
            len(frames) > 0 and frames[0].is_side_view
        )

        results: dict[str, float] = {}
        height_ratios = self._peak_height_ratios(frames, cycles, hand)

        results.update(self._contact_metrics(frames, contacts, hand, is_side_view))
        results.update(self._cycle_metrics(frames, cycles, hand, height_ratios))
        results.update(self._posture_metrics(frames, hand, is_side_view))
        results.update(self._consistency_metrics(
            frames, contacts, hand, is_side_view, height_ratios
        ))

        logger.info(
            f"Aggregated {len(results)} metrics over {len(frames)} frames "
            f"(hand={hand.value}, cycles={len(cycles)}, side_view={is_side_view})"
        )

        return AggregationResult(
            computed_values=results,
            hand_used=hand,
            cycles=cycles,
            contacts=contacts,
            is_side_view=is_side_view,
        )

    @staticmethod
    def resolve_hand(
        frames: Sequence[NormalizedFrame],
        template: ActionTemplate,
        handedness: Optional[Handedness] = None,
    ) -> Handedness:
        """Explicit hand, else the template option, else inferred from motion."""
        if handedness is not None:
            return handedness

        option = str(template.options.get("handedness", "auto")).lower()
        if option in (Handedness.LEFT.value, Handedness.RIGHT.value):
            return Handedness(option)
        return infer_handedness(frames)

    # -------------------------------------------------------------------------
    # Execution: contact points
    # -------------------------------------------------------------------------

    def _contact_metrics(
        self,
        frames: Sequence[NormalizedFrame],
        contacts: list[int],
        hand: Handedness,
        is_side_view: bool,
    ) -> dict[str, float]:
        zones = []
        overreach = []
        for idx in contacts:
            f = frames[idx]
            wrist = f.wrist(hand)
            if wrist is None:
                continue

            # 0 = under the screen-left foot, 1 = under the screen-right foot
            stance = _stance(f)
            if stance is not None:
                left_x, _, width = stance
                zones.append((wrist.x - left_x) / width)

            shoulder = f.shoulder(hand)
            if shoulder is not None:
                overreach.append(abs(wrist.x - shoulder.x) / f.shoulder_width)

        return {
            "receiveZoneQuarterNorm": average(zones),
            "overreachControlFront": average(overreach),
            "wristToToeForwardOffsetSide": (
                average(self._toe_offsets(frames, contacts, hand)) if is_side_view else 0.0
            ),
        }

    @staticmethod
    def _toe_offsets(
        frames: Sequence[NormalizedFrame],
        contacts: list[int],
        hand: Handedness,
    ) -> list[float]:
        """Signed contact offset ahead of the same-side toe, in trunk heights."""
        offsets = []
        for idx in contacts:
            f = frames[idx]
            wrist = f.wrist(hand)
            toe = f.toe(hand)
            direction = _facing_dir(f, hand)
            if wrist is None or toe is None or direction is None:
                continue
            offsets.append((wrist.x - toe.x) * direction / f.trunk_height)
        return offsets

    # -------------------------------------------------------------------------
    # Execution: per-cycle height and trajectory
    # -------------------------------------------------------------------------

    @staticmethod
    def _peak_height_ratios(
        frames: Sequence[NormalizedFrame],
        cycles: list[Cycle],
        hand: Handedness,
    ) -> list[float]:
        """
        Wrist height at each cycle's high point, scaled so that
        0 = ankle and 1 = shoulder.
        """
        ratios = []
        for cycle in cycles:
            start_f = frames[cycle.start_frame]
            end_f = frames[cycle.end_frame]
            start_w = start_f.wrist(hand)
            end_w = end_f.wrist(hand)

            if start_w is None and end_w is None:
                continue
            if end_w is None or (start_w is not None and start_w.y < end_w.y):
                peak = start_f
            else:
                peak = end_f

            wrist = peak.wrist(hand)
            shoulder = peak.shoulder(hand)
            ankle = peak.ankle(hand)
            if shoulder is None or ankle is None:
                continue

            total = abs(ankle.y - shoulder.y) or 0.5
            ratios.append(abs(ankle.y - wrist.y) / total)
        return ratios

    def _cycle_metrics(
        self,
        frames: Sequence[NormalizedFrame],
        cycles: list[Cycle],
        hand: Handedness,
        height_ratios: list[float],
    ) -> dict[str, float]:
        avg_height = average(height_ratios) if height_ratios else DEFAULT_HEIGHT_RATIO

        crossings = sum(1 for c in cycles if self._crosses_midline(frames, c, hand))
        aligns = [self._opposite_foot_alignment(frames, c, hand) for c in cycles]
        aligns = [a for a in aligns if a is not None]

        return {
            # Same value under both keys; hip-relative normalization is not
            # computed separately
            "wristHeightRatioToShoulder": avg_height,
            "wristHeightRatioToHip": avg_height,
            "crossMidlineRate": crossings / len(cycles) if cycles else 0.0,
            "wristAlignOppFootAtPeak": average(aligns) if aligns else DEFAULT_ALIGN_OFFSET,
        }

    @staticmethod
    def _crosses_midline(
        frames: Sequence[NormalizedFrame],
        cycle: Cycle,
        hand: Handedness,
    ) -> bool:
        xs = [
            f.wrist(hand).x
            for f in frames[cycle.start_frame:cycle.end_frame + 1]
            if f.wrist(hand) is not None
        ]
        mid_x = frames[cycle.contact_frame].shoulder_mid_x
        if not xs or mid_x is None:
            return False
        return min(xs) < mid_x < max(xs)

    @staticmethod
    def _opposite_foot_alignment(
        frames: Sequence[NormalizedFrame],
        cycle: Cycle,
        hand: Handedness,
    ) -> Optional[float]:
        """
        How closely the wrist lines up over the opposite foot once it has
        crossed the midline, in stance widths. Lower is better.
        """
        cycle_frames = frames[cycle.start_frame:cycle.end_frame + 1]
        if not cycle_frames:
            return None

        stance = _stance(frames[cycle.contact_frame])
        if stance is None:
            return None
        left_x, right_x, width = stance

        # Left hand crosses toward +x, right hand toward -x
        opp_foot_x = right_x if hand is Handedness.LEFT else left_x
        opp_sign = 1 if hand is Handedness.LEFT else -1

        best: Optional[float] = None
        for f in cycle_frames:
            wrist = f.wrist(hand)
            mid_x = f.shoulder_mid_x
            if wrist is None or mid_x is None:
                continue
            if (wrist.x - mid_x) * opp_sign <= 0:
                continue  # still on its own side

            diff = abs(wrist.x - opp_foot_x) / width
            if best is None or diff < best:
                best = diff

        return DEFAULT_ALIGN_OFFSET if best is None else best

    # -------------------------------------------------------------------------
    # Posture
    # -------------------------------------------------------------------------

    def _posture_metrics(
        self,
        frames: Sequence[NormalizedFrame],
        hand: Handedness,
        is_side_view: bool,
    ) -> dict[str, float]:
        results: dict[str, float] = {}

        below = 0
        forearm = []
        for f in frames:
            wrist, elbow = f.wrist(hand), f.elbow(hand)
            if wrist is None or elbow is None:
                below += 1
                forearm.append(0.0)
                continue
            if wrist.y > elbow.y:
                below += 1
            forearm.append(AngleCalculator.calculate_vertical_angle(elbow, wrist))

        pass_rate = below / len(frames) if frames else 0.0
        results["wristBelowElbow"] = 1.0 if pass_rate > WRIST_BELOW_ELBOW_PASS_RATE else 0.0
        results["forearmVerticalDeg"] = average(forearm)

        guide = hand.opposite
        in_box = sum(1 for f in frames if _hand_in_chest_box(f, guide))
        results["guideHandInChestBoxRate"] = in_box / len(frames) if frames else 0.0

        if is_side_view:
            results.update(self._side_posture_metrics(frames, hand))
        else:
            results.update({
                "kneeOverToeSide": 0.0,
                "hipForwardRatioSide": 0.0,
                "trunkLeanDegSide": FRONT_VIEW_TRUNK_LEAN,
                "handForwardOffsetSide": FRONT_VIEW_HAND_FORWARD,
                "elbowAngleDeg": DEFAULT_ELBOW_ANGLE,
                "shoulderArmAngleDeg": DEFAULT_SHOULDER_ARM_ANGLE,
            })
        results["handForwardOffsetSideab"] = abs(results["handForwardOffsetSide"])

        results["toeAngleDegLeft"] = average([
            AngleCalculator.calculate_vertical_angle(f.left_ankle, f.left_foot)
            if f.left_ankle is not None and f.left_foot is not None else 0.0
            for f in frames
        ])
        results["toeAngleDegRight"] = average([
            AngleCalculator.calculate_vertical_angle(f.right_ankle, f.right_foot)
            if f.right_ankle is not None and f.right_foot is not None else 0.0
            for f in frames
        ])
        return results

    @staticmethod
    def _side_posture_metrics(
        frames: Sequence[NormalizedFrame],
        hand: Handedness,
    ) -> dict[str, float]:
        """Forward/backward offsets and joint angles seen from the side."""
        posture_frames = [f for f in frames if f.trunk_height > 0.1]

        knee_over_toe = []
        hip_forward = []
        trunk_lean = []
        hand_forward = []
        elbow_angles = []
        shoulder_angles = []

        for f in posture_frames:
            direction = _facing_dir(f, hand)
            knee, toe, ankle = f.knee(hand), f.toe(hand), f.ankle(hand)
            hip, shoulder = f.hip(hand), f.shoulder(hand)
            elbow, wrist = f.elbow(hand), f.wrist(hand)

            # Positive = knee ahead of the toe
            if knee is None:
                knee_over_toe.append(0.0)
            elif direction is not None:
                knee_over_toe.append((knee.x - toe.x) * direction / f.trunk_height)

            # Positive = hips pushed ahead of the ankle
            if hip is not None and direction is not None:
                hip_forward.append((hip.x - ankle.x) * direction / f.trunk_height)

            if shoulder is not None and hip is not None:
                trunk_lean.append(AngleCalculator.calculate_vertical_angle(shoulder, hip))

            if wrist is not None and shoulder is not None and direction is not None:
                hand_forward.append((wrist.x - shoulder.x) * direction / f.trunk_height)

            if shoulder is not None and elbow is not None and wrist is not None:
                elbow_angles.append(AngleCalculator.calculate_angle(shoulder, elbow, wrist))

            if hip is not None and shoulder is not None and elbow is not None:
                shoulder_angles.append(AngleCalculator.calculate_angle(hip, shoulder, elbow))

        elbow_angles = [a for a in elbow_angles if a > 0]
        shoulder_angles = [a for a in shoulder_angles if a > 0]
        hip_forward_avg = average(hip_forward)

        return {
            "kneeOverToeSide": average(knee_over_toe),
            "hipForwardRatioSide": hip_forward_avg,
            "hipForwardRatioSideab": abs(hip_forward_avg),
            "trunkLeanDegSide": average(trunk_lean),
            "handForwardOffsetSide": average(hand_forward),
            "elbowAngleDeg": average(elbow_angles) if elbow_angles else DEFAULT_ELBOW_ANGLE,
            "shoulderArmAngleDeg": (
                average(shoulder_angles) if shoulder_angles else DEFAULT_SHOULDER_ARM_ANGLE
            ),
        }

    # -------------------------------------------------------------------------
    # Consistency
    # -------------------------------------------------------------------------

    def _consistency_metrics(
        self,
        frames: Sequence[NormalizedFrame],
        contacts: list[int],
        hand: Handedness,
        is_side_view: bool,
        height_ratios: list[float],
    ) -> dict[str, float]:
        contact_x = []
        for idx in contacts:
            f = frames[idx]
            wrist = f.wrist(hand)
            mid_x = f.shoulder_mid_x
            if wrist is None or mid_x is None:
                continue
            contact_x.append((wrist.x - mid_x) / f.trunk_height)

        height_std = population_std(height_ratios)
        return {
            "stdWristXAtContactPerCycleNormByST": population_std(contact_x),
            "stdWristHeightRatioToShoulderPerCycle": height_std,
            "stdWristHeightRatioToHipPerCycle": height_std,
            "stdWristToToeForwardOffsetPerCycle": (
                population_std(self._toe_offsets(frames, contacts, hand)) if is_side_view else 0.0
            ),
        }


def aggregate(
    frames: Sequence[NormalizedFrame],
    template: ActionTemplate,
    handedness: Optional[Handedness] = None,
    fps_guess: Optional[int] = None,
) -> AggregationResult:
    """Module-level shortcut for MetricAggregator().aggregate()."""
    return MetricAggregator(fps_guess=fps_guess).aggregate(frames, template, handedness)
