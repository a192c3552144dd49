from datetime import datetime, timedelta, timezone

import pytest

from posturelab.models import Assessment
from posturelab.services.posture_analysis import analyze_posture
from posturelab.services.progress import build_progress_report

from conftest import upright


def scored(index, score):
    landmarks = upright()
    analysis = analyze_posture(landmarks).model_copy(update={"overall_score": score})
    return Assessment(
        id=f"PA-{index}",
        landmarks=landmarks,
        analysis=analysis,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=index),
    )


def test_empty_history():
    report = build_progress_report([])
    assert not report.has_enough_data
    assert report.total == 0
    assert report.points == []


def test_single_assessment_has_no_trend():
    report = build_progress_report([scored(0, 80)])
    assert not report.has_enough_data
    assert report.latest_score == 80
    assert report.score_change == 0


def test_trend_over_history():
    # Newest first, as returned by the history store
    report = build_progress_report([scored(2, 80), scored(1, 60), scored(0, 70)])

    assert report.has_enough_data
    assert report.total == 3
    assert [p.assessment_id for p in report.points] == ["PA-0", "PA-1", "PA-2"]
    assert report.latest_score == 80
    assert report.previous_score == 60
    assert report.score_change == 20
    assert report.average_score == 70
    assert report.best_score == 80


def test_points_record_deviations():
    point = build_progress_report([scored(0, 100)]).points[0]

    assert point.head_position == pytest.approx(1.1)
    assert point.shoulder_alignment == pytest.approx(0.3)
    assert point.trunk_tilt == pytest.approx(0.8)
    assert point.pelvic_tilt == pytest.approx(11.1)
    assert point.knee_alignment == pytest.approx(0.8)
