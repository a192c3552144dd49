from posturelab.models import Severity
from posturelab.services.scoring import PostureScoringEngine, calculate_overall_score
from posturelab.services.severity import unable_to_detect

from conftest import metric


def test_all_normal():
    assert calculate_overall_score([metric() for _ in range(5)]) == 100


def test_mean_of_severity_scores():
    metrics = [metric(severity=Severity.NORMAL), metric(severity=Severity.MILD),
               metric(severity=Severity.SEVERE)]
    # (100 + 75 + 25) / 3 = 66.67
    assert calculate_overall_score(metrics) == 67


def test_half_rounds_up():
    metrics = [metric(severity=Severity.MILD), metric(severity=Severity.MEDIUM)]
    assert calculate_overall_score(metrics) == 63


def test_undetected_metrics_are_skipped():
    metrics = [
        metric(severity=Severity.MEDIUM),
        unable_to_detect("Trunk Tilt", (-3, 3), "retake"),
    ]
    assert PostureScoringEngine().calculate(metrics) == 50


def test_nothing_detected_scores_zero():
    metrics = [unable_to_detect("Head", (0, 5), "retake") for _ in range(5)]
    assert calculate_overall_score(metrics) == 0
    assert calculate_overall_score([]) == 0
