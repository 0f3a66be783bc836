"""
Tests for angle geometry and single-frame posture metrics.
"""

import pytest

from core.domain import AnalysisMode, BodyPart, Handedness, PoseLandmark
from core.services import AngleCalculator
from conftest import FRONT_POSE, build_frame


def lm(x, y):
    return PoseLandmark(x=x, y=y)


class TestCoreAngles:

    def test_right_angle(self):
        assert AngleCalculator.calculate_angle(lm(0, 0), lm(1, 0), lm(1, 1)) == pytest.approx(90.0)

    def test_straight_line(self):
        assert AngleCalculator.calculate_angle(lm(0, 0), lm(0.5, 0.5), lm(1, 1)) == pytest.approx(180.0)

    def test_degenerate_segment_is_zero(self):
        assert AngleCalculator.calculate_angle(lm(0.5, 0.5), lm(0.5, 0.5), lm(1, 1)) == 0.0

    def test_vertical_angle(self):
        assert AngleCalculator.calculate_vertical_angle(lm(0.5, 0.2), lm(0.5, 0.6)) == pytest.approx(0.0)
        assert AngleCalculator.calculate_vertical_angle(lm(0.5, 0.2), lm(0.7, 0.4)) == pytest.approx(45.0)

    def test_vertical_angle_of_flat_segment_is_90(self):
        assert AngleCalculator.calculate_vertical_angle(lm(0.2, 0.5), lm(0.7, 0.5005)) == 90.0

    def test_midpoint(self):
        assert AngleCalculator.calculate_midpoint(lm(0.2, 0.4), lm(0.6, 0.8)) == pytest.approx((0.4, 0.6))
        assert AngleCalculator.calculate_midpoint(None, lm(0.6, 0.8)) is None


class TestShootingMetrics:

    def test_elbow_to_torso(self, front_frame):
        value = AngleCalculator.calculate_elbow_to_torso(front_frame, Handedness.RIGHT)
        assert value == pytest.approx(0.03 / 0.2)

    def test_wrist_midline_offset_is_signed(self, front_frame):
        right = AngleCalculator.calculate_wrist_midline_offset(front_frame, Handedness.RIGHT)
        left = AngleCalculator.calculate_wrist_midline_offset(front_frame, Handedness.LEFT)
        assert right == pytest.approx(-0.7)
        assert left == pytest.approx(0.6)

    def test_upright_trunk(self, front_frame):
        assert AngleCalculator.calculate_trunk_lean(front_frame) == pytest.approx(0.0)

    def test_knee_over_toe_uses_threshold(self, front_frame):
        # right knee and toe are 0.04 apart
        assert AngleCalculator.check_knee_over_toe(front_frame, Handedness.RIGHT) == 0.0
        assert AngleCalculator.check_knee_over_toe(front_frame, Handedness.RIGHT, threshold=0.05) == 1.0

    def test_knee_over_toe_default_from_settings(self, front_frame, monkeypatch):
        from core.config import settings
        monkeypatch.setattr(settings, "KNEE_OVER_TOE_THRESHOLD", 0.1)
        assert AngleCalculator.check_knee_over_toe(front_frame, Handedness.RIGHT) == 1.0

    def test_frame_metrics_keys(self, front_frame):
        metrics = AngleCalculator.calculate_frame_metrics(front_frame, AnalysisMode.SHOOTING)
        assert set(metrics) == {
            "elbowToTorsoDistanceNorm",
            "wristMidlineOffsetNorm",
            "trunkLeanDegSide",
            "forearmVerticalDeg",
            "kneeOverToeSide",
            "minKneeAngleDuringLoad",
        }

    def test_missing_points_are_omitted(self):
        frame = build_frame(FRONT_POSE, overrides={BodyPart.RIGHT_ELBOW: None})
        metrics = AngleCalculator.calculate_frame_metrics(frame, AnalysisMode.SHOOTING)

        assert "elbowToTorsoDistanceNorm" not in metrics
        assert "forearmVerticalDeg" not in metrics
        assert "wristMidlineOffsetNorm" in metrics


class TestDribblingMetrics:

    def test_crouch_angle_of_straight_legs(self, front_frame):
        angle = AngleCalculator.calculate_crouch_angle(front_frame)
        assert 170 < angle <= 180

    def test_crouch_angle_skips_low_visibility_knees(self):
        frame = build_frame(FRONT_POSE, visibility=0.3)
        assert AngleCalculator.calculate_crouch_angle(frame) is None

    def test_bent_knee(self):
        frame = build_frame(FRONT_POSE, overrides={
            BodyPart.LEFT_KNEE: (0.70, 0.72),
            BodyPart.RIGHT_KNEE: (0.30, 0.72),
        })
        # both legs: hip-knee (0.13, 0.17), knee-ankle (0.10, 0.18)
        assert AngleCalculator.calculate_crouch_angle(frame) == pytest.approx(113.5, abs=0.2)

    def test_stance_ratio(self, front_frame):
        assert AngleCalculator.calculate_stance_to_shoulder_ratio(front_frame) == pytest.approx(1.0)

    def test_frame_metrics_keys(self, front_frame):
        metrics = AngleCalculator.calculate_frame_metrics(front_frame, AnalysisMode.DRIBBLING)
        assert set(metrics) == {"kneeAngleDeg", "shoulderStanceRatio"}
