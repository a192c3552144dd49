# =============================================================================
# POSTURELAB BACKEND - SEVERITY CLASSIFICATION
# =============================================================================
"""
Generic severity rule and the "unable to detect" sentinel metric shared by
the primary and extended analyzers.
"""

from typing import NamedTuple

from posturelab.models import PostureMetric, Severity

UNABLE_TO_DETECT = "Unable to detect - landmarks not visible"


class Thresholds(NamedTuple):
    """Deviation limits (degrees) for each severity step."""
    mild: float
    medium: float
    severe: float


def get_severity(
    angle: float,
    normal_range: tuple[float, float],
    thresholds: Thresholds
) -> Severity:
    """Classify an angle by its absolute deviation from the range midpoint."""
    midpoint = (normal_range[0] + normal_range[1]) / 2
    deviation = abs(angle - midpoint)

    if deviation <= thresholds.mild:
        return Severity.NORMAL
    if deviation <= thresholds.medium:
        return Severity.MILD
    if deviation <= thresholds.severe:
        return Severity.MEDIUM
    return Severity.SEVERE


def unable_to_detect(
    name: str,
    normal_range: tuple[float, float],
    recommendation: str,
    angle: float = 0.0
) -> PostureMetric:
    """Sentinel metric for analyzers whose landmarks are missing."""
    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=normal_range,
        severity=Severity.NORMAL,
        description=UNABLE_TO_DETECT,
        recommendation=recommendation,
        detected=False,
    )
