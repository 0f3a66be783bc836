"""
Tests for temporal feature aggregation.
"""

import math

import pytest

from core.domain import Handedness
from core.services import MetricAggregator, aggregate, extract_frame
from conftest import SIDE_POSE, build_dribble, dribbling_template

ALWAYS_PRESENT = {
    "receiveZoneQuarterNorm",
    "wristHeightRatioToShoulder",
    "wristHeightRatioToHip",
    "crossMidlineRate",
    "overreachControlFront",
    "wristToToeForwardOffsetSide",
    "wristAlignOppFootAtPeak",
    "wristBelowElbow",
    "forearmVerticalDeg",
    "guideHandInChestBoxRate",
    "kneeOverToeSide",
    "hipForwardRatioSide",
    "trunkLeanDegSide",
    "handForwardOffsetSide",
    "handForwardOffsetSideab",
    "elbowAngleDeg",
    "shoulderArmAngleDeg",
    "toeAngleDegLeft",
    "toeAngleDegRight",
    "stdWristXAtContactPerCycleNormByST",
    "stdWristHeightRatioToShoulderPerCycle",
    "stdWristHeightRatioToHipPerCycle",
    "stdWristToToeForwardOffsetPerCycle",
}


def _normalized(frames):
    return [extract_frame(f) for f in frames]


class TestFrontView:

    @pytest.fixture
    def result(self, dribble_frames, front_template):
        return aggregate(_normalized(dribble_frames), front_template)

    def test_keys(self, result):
        assert ALWAYS_PRESENT <= set(result.computed_values)
        assert "hipForwardRatioSideab" not in result.computed_values

    def test_hand_and_cycles(self, result):
        assert result.hand_used is Handedness.RIGHT
        assert len(result.cycles) == 8
        assert result.is_side_view is False

    def test_contact_placement(self, result):
        values = result.computed_values
        # wrist at x=0.36, feet at 0.38 / 0.62
        assert values["receiveZoneQuarterNorm"] == pytest.approx(-0.02 / 0.24)
        assert values["overreachControlFront"] == pytest.approx(0.2)
        assert values["wristToToeForwardOffsetSide"] == 0.0

    def test_peak_height_ratio(self, result):
        peak_y = 0.70 + 0.15 * math.sin(2 * math.pi * 11 / 15)
        expected = (0.90 - peak_y) / 0.60
        assert result.computed_values["wristHeightRatioToShoulder"] == pytest.approx(expected, rel=1e-6)

    def test_height_ratio_is_reported_under_both_keys(self, result):
        values = result.computed_values
        assert values["wristHeightRatioToShoulder"] == values["wristHeightRatioToHip"]
        assert (
            values["stdWristHeightRatioToShoulderPerCycle"]
            == values["stdWristHeightRatioToHipPerCycle"]
        )

    def test_steady_dribble_is_consistent(self, result):
        values = result.computed_values
        assert values["stdWristHeightRatioToShoulderPerCycle"] == pytest.approx(0.0, abs=1e-9)
        assert values["stdWristXAtContactPerCycleNormByST"] == pytest.approx(0.0, abs=1e-9)
        assert values["stdWristToToeForwardOffsetPerCycle"] == 0.0

    def test_no_crossing(self, result):
        assert result.computed_values["crossMidlineRate"] == 0.0
        assert result.computed_values["wristAlignOppFootAtPeak"] == pytest.approx(0.5)

    def test_posture(self, result):
        values = result.computed_values
        assert values["wristBelowElbow"] == 1.0
        assert values["guideHandInChestBoxRate"] == pytest.approx(1.0)
        assert values["toeAngleDegLeft"] == pytest.approx(math.degrees(math.atan(0.02 / 0.03)))
        assert values["toeAngleDegRight"] == pytest.approx(values["toeAngleDegLeft"])

    def test_side_only_fallbacks(self, result):
        values = result.computed_values
        assert values["kneeOverToeSide"] == 0.0
        assert values["hipForwardRatioSide"] == 0.0
        assert values["trunkLeanDegSide"] == 20.0
        assert values["handForwardOffsetSide"] == 0.2
        assert values["handForwardOffsetSideab"] == 0.2
        assert values["elbowAngleDeg"] == 160.0
        assert values["shoulderArmAngleDeg"] == 90.0


class TestCrossover:

    def test_every_cycle_crosses(self, crossover_frames, front_template):
        result = aggregate(_normalized(crossover_frames), front_template)

        assert result.cycles
        assert result.computed_values["crossMidlineRate"] == pytest.approx(1.0)

    def test_wrist_reaches_opposite_foot(self, crossover_frames, front_template):
        result = aggregate(_normalized(crossover_frames), front_template)
        assert result.computed_values["wristAlignOppFootAtPeak"] < 0.05


class TestSideView:

    @pytest.fixture
    def result(self, side_template):
        return aggregate(_normalized(build_dribble(pose=SIDE_POSE)), side_template)

    def test_side_view_flag(self, result):
        assert result.is_side_view is True
        assert "hipForwardRatioSideab" in result.computed_values

    def test_trunk_and_hips(self, result):
        values = result.computed_values
        assert values["trunkLeanDegSide"] == pytest.approx(math.degrees(math.atan(0.04 / 0.25)))
        assert values["hipForwardRatioSide"] == pytest.approx(0.08)
        assert values["hipForwardRatioSideab"] == pytest.approx(0.08)
        assert values["kneeOverToeSide"] == pytest.approx(-0.04)

    def test_forward_offsets(self, result):
        values = result.computed_values
        assert values["wristToToeForwardOffsetSide"] == pytest.approx(0.32)
        assert values["stdWristToToeForwardOffsetPerCycle"] == pytest.approx(0.0, abs=1e-9)
        assert values["handForwardOffsetSide"] == pytest.approx(0.4)
        assert values["handForwardOffsetSideab"] == pytest.approx(0.4)

    def test_joint_angles_are_measured(self, result):
        assert result.computed_values["elbowAngleDeg"] != 160.0
        assert 0 < result.computed_values["shoulderArmAngleDeg"] < 180

    def test_front_template_detects_side_frames(self, front_template):
        result = aggregate(_normalized(build_dribble(pose=SIDE_POSE)), front_template)
        assert result.is_side_view is True


class TestHandResolution:

    def test_explicit_hand_wins(self, dribble_frames, front_template):
        result = aggregate(_normalized(dribble_frames), front_template, Handedness.LEFT)

        assert result.hand_used is Handedness.LEFT
        # the left hand never dribbles
        assert result.cycles == []
        assert result.computed_values["wristHeightRatioToShoulder"] == 0.4
        assert result.computed_values["wristAlignOppFootAtPeak"] == 0.5
        assert result.computed_values["crossMidlineRate"] == 0.0

    def test_template_option(self, dribble_frames):
        template = dribbling_template(handedness="left")
        assert MetricAggregator.resolve_hand(_normalized(dribble_frames), template) is Handedness.LEFT

    def test_inferred_left_hand(self, front_template):
        frames = _normalized(build_dribble(hand=Handedness.LEFT))
        result = MetricAggregator().aggregate(frames, front_template)

        assert result.hand_used is Handedness.LEFT
        assert len(result.cycles) == 8


def test_empty_buffer_does_not_raise(front_template):
    result = aggregate([], front_template)

    assert result.cycles == []
    assert result.computed_values["wristBelowElbow"] == 0.0
    assert result.computed_values["wristHeightRatioToShoulder"] == 0.4
    assert ALWAYS_PRESENT <= set(result.computed_values)
