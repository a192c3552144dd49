# =============================================================================
# POSTURELAB BACKEND - SERVICES PACKAGE
# =============================================================================
"""Services module exports."""

from .posture_analysis import analyze_posture
from .scoring import PostureScoringEngine, calculate_overall_score
from .muscle_imbalance import analyze_muscle_imbalance
from .exercise_recommendations import get_exercise_recommendations, get_all_exercises
from .progress import build_progress_report
from .detector_client import DetectorClient

__all__ = [
    "analyze_posture",
    "PostureScoringEngine",
    "calculate_overall_score",
    "analyze_muscle_imbalance",
    "get_exercise_recommendations",
    "get_all_exercises",
    "build_progress_report",
    "DetectorClient"
]
