# =============================================================================
# POSTURELAB BACKEND - POSTURE SCORING ENGINE
# =============================================================================
"""
Scoring engine that aggregates the primary posture metrics into a 0-100 score.
Metrics that could not be detected are left out of the average.
"""

import logging
from typing import Iterable

from posturelab.models import PostureMetric, Severity
from posturelab.services.geometry import round_half_up

logger = logging.getLogger(__name__)


class PostureScoringEngine:
    """
    Posture Scoring Engine.

    Maps each detected metric's severity to a fixed score and averages them:
    - normal: 100, mild: 75, medium: 50, severe: 25
    """

    SEVERITY_SCORES: dict[Severity, int] = {
        Severity.NORMAL: 100,
        Severity.MILD: 75,
        Severity.MEDIUM: 50,
        Severity.SEVERE: 25,
    }

    def calculate(self, metrics: Iterable[PostureMetric]) -> int:
        """
        Calculate the overall posture score.

        Args:
            metrics: The primary posture metrics

        Returns:
            Rounded mean score, or 0 when no metric was detected
        """
        valid = [metric for metric in metrics if metric.detected]

        if not valid:
            logger.warning("No detected metrics provided for posture score calculation")
            return 0

        total = sum(self.SEVERITY_SCORES[metric.severity] for metric in valid)
        overall = int(round_half_up(total / len(valid)))

        logger.debug(f"Posture score calculated: {overall} from {len(valid)} metrics")

        return overall


def calculate_overall_score(metrics: Iterable[PostureMetric]) -> int:
    """
    Convenience function for overall score calculation.

    Args:
        metrics: The primary posture metrics

    Returns:
        Overall score (0-100)
    """
    engine = PostureScoringEngine()
    return engine.calculate(metrics)
