# =============================================================================
# POSTURELAB BACKEND - PROGRESS COMPARISON
# =============================================================================
"""
Progress reporting over the assessment history.
Turns the newest-first history into a chronological series of scores and
metric deviations (lower deviation = better alignment).
"""

from typing import Sequence

from posturelab.models import Assessment, ProgressPoint, ProgressReport
from posturelab.services.geometry import round_half_up

# Fewer assessments than this cannot show a trend
MIN_ASSESSMENTS_FOR_TREND = 2


def to_progress_point(assessment: Assessment) -> ProgressPoint:
    """Deviation summary of a single assessment."""
    analysis = assessment.analysis
    return ProgressPoint(
        assessment_id=assessment.id,
        date=assessment.created_at,
        overall_score=analysis.overall_score,
        head_position=abs(analysis.head_position.angle),
        shoulder_alignment=abs(analysis.shoulder_alignment.angle),
        pelvic_tilt=analysis.pelvic_tilt.angle,
        trunk_tilt=abs(analysis.trunk_tilt.angle),
        knee_alignment=abs(180 - analysis.knee_alignment.angle),
    )


def build_progress_report(assessments: Sequence[Assessment]) -> ProgressReport:
    """
    Build a progress report.

    Args:
        assessments: History, newest first

    Returns:
        ProgressReport with points in chronological order
    """
    points = [to_progress_point(a) for a in reversed(assessments)]
    total = len(points)

    if total == 0:
        return ProgressReport(has_enough_data=False, total=0)

    scores = [point.overall_score for point in points]
    latest = scores[-1]
    previous = scores[-2] if total > 1 else latest

    return ProgressReport(
        has_enough_data=total >= MIN_ASSESSMENTS_FOR_TREND,
        total=total,
        latest_score=latest,
        previous_score=previous,
        score_change=latest - previous,
        average_score=int(round_half_up(sum(scores) / total)),
        best_score=max(scores),
        points=points,
    )
