import pytest

from posturelab.models import PostureLandmarks, Severity
from posturelab.services.posture_analysis import (
    analyze_head_position,
    analyze_knee_alignment,
    analyze_pelvic_tilt,
    analyze_posture,
    analyze_shoulder_alignment,
    analyze_trunk_tilt,
    classify_pelvic_tilt,
)
from posturelab.services.scoring import calculate_overall_score
from posturelab.services.severity import UNABLE_TO_DETECT

from conftest import upright


class TestHeadPosition:
    def test_upright(self, upright_landmarks):
        metric = analyze_head_position(upright_landmarks)
        assert metric.angle == pytest.approx(1.1)
        assert metric.severity == Severity.NORMAL
        assert metric.description == "Normal head position"
        assert metric.detected

    @pytest.mark.parametrize("ear_x,angle,severity,description", [
        (118, 10.2, Severity.MILD, "Slight forward head posture detected"),
        (130, 16.7, Severity.MEDIUM, "Moderate forward head posture"),
        (150, 26.6, Severity.SEVERE, "Significant forward head posture"),
    ])
    def test_forward_head(self, ear_x, angle, severity, description):
        metric = analyze_head_position(upright(ear=(ear_x, 50), shoulder=(100, 150)))
        assert metric.angle == pytest.approx(angle)
        assert metric.severity == severity
        assert metric.description == description

    def test_angle_is_absolute(self):
        metric = analyze_head_position(upright(ear=(70, 50), shoulder=(100, 150)))
        assert metric.angle == pytest.approx(16.7)

    def test_missing_ear(self):
        metric = analyze_head_position(upright(ear=None))
        assert not metric.detected
        assert metric.angle == 0
        assert metric.severity == Severity.NORMAL
        assert metric.description == UNABLE_TO_DETECT


class TestShoulderAlignment:
    def test_upright(self, upright_landmarks):
        metric = analyze_shoulder_alignment(upright_landmarks)
        assert metric.angle == pytest.approx(0.3)
        assert metric.severity == Severity.NORMAL
        assert metric.description == "Normal shoulder alignment"

    def test_protracted(self):
        metric = analyze_shoulder_alignment(upright(shoulder=(160, 150)))
        assert metric.angle == pytest.approx(7.6)
        assert metric.severity == Severity.MILD
        assert metric.description == "Protracted shoulders (mild)"

    def test_retracted(self):
        metric = analyze_shoulder_alignment(upright(shoulder=(40, 150)))
        assert metric.angle == pytest.approx(-7.6)
        assert metric.severity == Severity.MILD
        assert metric.description == "Retracted shoulders (mild)"

    def test_small_offset_keeps_normal_description(self):
        metric = analyze_shoulder_alignment(upright(shoulder=(108, 150)))
        assert metric.description == "Normal shoulder alignment"

    def test_missing_ankle(self):
        metric = analyze_shoulder_alignment(upright(ankle=None))
        assert not metric.detected
        assert metric.description == UNABLE_TO_DETECT


class TestPelvicTilt:
    @pytest.mark.parametrize("angle,severity,tilt_type", [
        (20.1, Severity.SEVERE, "Anterior"),
        (20.0, Severity.MEDIUM, "Anterior"),
        (15.0, Severity.MILD, "Anterior"),
        (12.1, Severity.MILD, "Anterior"),
        (12.0, Severity.NORMAL, "Neutral"),
        (7.0, Severity.NORMAL, "Neutral"),
        (6.9, Severity.MILD, "Posterior"),
        (5.0, Severity.MILD, "Posterior"),
        (4.9, Severity.MEDIUM, "Posterior"),
        (0.0, Severity.MEDIUM, "Posterior"),
        (-0.1, Severity.SEVERE, "Posterior"),
    ])
    def test_band_boundaries(self, angle, severity, tilt_type):
        band = classify_pelvic_tilt(angle)
        assert band.severity == severity
        assert band.tilt_type == tilt_type

    def test_upright_is_neutral(self, upright_landmarks):
        metric = analyze_pelvic_tilt(upright_landmarks)
        assert metric.angle == pytest.approx(11.1)
        assert metric.name == "Pelvic Tilt (Neutral)"
        assert metric.severity == Severity.NORMAL
        assert metric.normal_range == (7, 11)

    def test_anterior(self):
        metric = analyze_pelvic_tilt(upright(shoulder=(100, 150), knee=(150, 450)))
        assert metric.angle == pytest.approx(28.4)
        assert metric.name == "Pelvic Tilt (Anterior)"
        assert metric.severity == Severity.SEVERE

    def test_posterior(self):
        metric = analyze_pelvic_tilt(upright(shoulder=(100, 150), knee=(40, 450)))
        assert metric.angle == pytest.approx(-11.8)
        assert metric.name == "Pelvic Tilt (Posterior)"
        assert metric.severity == Severity.SEVERE

    def test_missing_knee(self):
        metric = analyze_pelvic_tilt(upright(knee=None))
        assert not metric.detected
        assert metric.name == "Pelvic Tilt"
        assert metric.normal_range == (5, 15)


class TestTrunkTilt:
    def test_upright(self, upright_landmarks):
        metric = analyze_trunk_tilt(upright_landmarks)
        assert metric.angle == pytest.approx(-0.8)
        assert metric.severity == Severity.NORMAL

    def test_forward(self):
        metric = analyze_trunk_tilt(upright(shoulder=(80, 150)))
        assert metric.angle == pytest.approx(7.6)
        assert metric.severity == Severity.MILD
        assert metric.description == "Forward trunk tilt detected"

    def test_backward(self):
        metric = analyze_trunk_tilt(upright(shoulder=(120, 150)))
        assert metric.angle == pytest.approx(-7.6)
        assert metric.severity == Severity.MILD
        assert metric.description == "Backward trunk tilt detected"

    def test_severe(self):
        metric = analyze_trunk_tilt(upright(shoulder=(50, 150)))
        assert metric.severity == Severity.SEVERE


class TestKneeAlignment:
    def test_upright(self, upright_landmarks):
        metric = analyze_knee_alignment(upright_landmarks)
        assert metric.angle == pytest.approx(179.2)
        assert metric.severity == Severity.NORMAL

    def test_mild_flexion(self):
        metric = analyze_knee_alignment(upright(knee=(116, 450)))
        assert metric.angle == pytest.approx(167.8)
        assert metric.severity == Severity.MILD
        assert metric.description == "Knee flexion detected"

    def test_medium_flexion(self):
        metric = analyze_knee_alignment(upright(knee=(130, 450)))
        assert metric.angle == pytest.approx(157.4)
        assert metric.severity == Severity.MEDIUM

    def test_missing_hip_uses_straight_sentinel(self):
        metric = analyze_knee_alignment(upright(hip=None))
        assert not metric.detected
        assert metric.angle == 180
        assert metric.severity == Severity.NORMAL


class TestAnalyzePosture:
    def test_upright_scores_full(self, upright_landmarks):
        analysis = analyze_posture(upright_landmarks)
        assert analysis.overall_score == 100
        assert all(m.severity == Severity.NORMAL for m in analysis.primary_metrics())
        assert analysis.muscle_imbalance.overall_balance == 100
        assert analysis.exercise_recommendations == []
        assert analysis.extended_metrics is not None

    def test_missing_hip_averages_detected_metrics_only(self):
        analysis = analyze_posture(upright(hip=None, ear=(130, 50), shoulder=(100, 150)))

        assert not analysis.pelvic_tilt.detected
        assert not analysis.trunk_tilt.detected
        assert not analysis.knee_alignment.detected
        assert analysis.head_position.severity == Severity.MEDIUM
        # (50 + 100) / 2
        assert analysis.overall_score == 75

    def test_no_landmarks(self):
        analysis = analyze_posture(PostureLandmarks())
        assert analysis.overall_score == 0
        assert not any(m.detected for m in analysis.primary_metrics())
        assert analysis.exercise_recommendations == []

    def test_score_is_computed_from_primary_metrics(self):
        analysis = analyze_posture(upright(ear=(150, 50), shoulder=(100, 150), hip=None))

        assert analysis.primary_metrics() == [
            analysis.head_position,
            analysis.shoulder_alignment,
            analysis.pelvic_tilt,
            analysis.trunk_tilt,
            analysis.knee_alignment,
        ]
        assert analysis.overall_score == calculate_overall_score(analysis.primary_metrics())
        # severe head (25) and normal shoulder (100); the rest undetected
        assert analysis.overall_score == 63

    def test_recommendations_respect_limit(self):
        landmarks = upright(ear=(150, 50), shoulder=(160, 150), knee=(150, 450))
        analysis = analyze_posture(landmarks, max_recommendations=2)
        assert len(analysis.exercise_recommendations) == 2

    def test_deterministic_apart_from_timestamp(self):
        landmarks = upright(ear=(130, 50), shoulder=(140, 150))
        first = analyze_posture(landmarks).model_dump(exclude={"timestamp"})
        second = analyze_posture(landmarks).model_dump(exclude={"timestamp"})
        assert first == second
