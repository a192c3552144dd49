# =============================================================================
# POSTURELAB BACKEND - MUSCLE IMBALANCE INFERENCE
# =============================================================================
"""
Rule-based inference of tight and weak muscle groups.

Both rule tables are evaluated in order against the complete primary-metric
set; matches keep table order.
"""

from dataclasses import dataclass
from typing import Callable

from posturelab.models import MuscleGroup, MuscleImbalance, PostureAnalysis, Severity
from posturelab.services.geometry import round_half_up

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.NORMAL: 0,
    Severity.MILD: 1,
    Severity.MEDIUM: 2,
    Severity.SEVERE: 3,
}

MAX_SEVERITY_WEIGHT = 3


@dataclass(frozen=True)
class MusclePattern:
    """One catalog rule: when it fires and how severe the match is."""
    name: str
    condition: Callable[[PostureAnalysis], bool]
    severity: Callable[[PostureAnalysis], Severity]
    related_metrics: tuple[str, ...]


def _not_normal(metric_name: str) -> Callable[[PostureAnalysis], bool]:
    return lambda a: getattr(a, metric_name).severity != Severity.NORMAL


def _severity_of(metric_name: str) -> Callable[[PostureAnalysis], Severity]:
    return lambda a: getattr(a, metric_name).severity


TIGHT_MUSCLE_PATTERNS: tuple[MusclePattern, ...] = (
    MusclePattern(
        name="Upper Trapezius",
        condition=lambda a: (
            a.head_position.severity != Severity.NORMAL
            and a.shoulder_alignment.severity != Severity.NORMAL
        ),
        severity=_severity_of("head_position"),
        related_metrics=("Head Position", "Shoulder Alignment"),
    ),
    MusclePattern(
        name="Levator Scapulae",
        condition=_not_normal("head_position"),
        severity=_severity_of("head_position"),
        related_metrics=("Head Position",),
    ),
    MusclePattern(
        name="Suboccipitals",
        condition=_not_normal("head_position"),
        severity=_severity_of("head_position"),
        related_metrics=("Head Position",),
    ),
    MusclePattern(
        name="Pectoralis Major",
        condition=lambda a: a.shoulder_alignment.angle > 5,
        severity=_severity_of("shoulder_alignment"),
        related_metrics=("Shoulder Alignment",),
    ),
    MusclePattern(
        name="Pectoralis Minor",
        condition=lambda a: a.shoulder_alignment.angle > 5 or a.trunk_tilt.angle > 5,
        severity=_severity_of("shoulder_alignment"),
        related_metrics=("Shoulder Alignment", "Trunk Tilt"),
    ),
    MusclePattern(
        name="Hip Flexors (Iliopsoas)",
        condition=lambda a: a.pelvic_tilt.angle > 15,
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt",),
    ),
    MusclePattern(
        name="Rectus Femoris",
        condition=lambda a: a.pelvic_tilt.angle > 15,
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt",),
    ),
    MusclePattern(
        name="Erector Spinae (Lumbar)",
        condition=lambda a: a.pelvic_tilt.angle > 15 or a.trunk_tilt.angle < -5,
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt", "Trunk Tilt"),
    ),
    MusclePattern(
        name="Hamstrings",
        condition=lambda a: a.pelvic_tilt.angle < 0 or a.knee_alignment.angle < 170,
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt", "Knee Alignment"),
    ),
    MusclePattern(
        name="Gastrocnemius",
        condition=lambda a: a.knee_alignment.angle > 185,
        severity=_severity_of("knee_alignment"),
        related_metrics=("Knee Alignment",),
    ),
)

WEAK_MUSCLE_PATTERNS: tuple[MusclePattern, ...] = (
    MusclePattern(
        name="Deep Neck Flexors",
        condition=_not_normal("head_position"),
        severity=_severity_of("head_position"),
        related_metrics=("Head Position",),
    ),
    MusclePattern(
        name="Lower Trapezius",
        condition=lambda a: a.shoulder_alignment.angle > 5,
        severity=_severity_of("shoulder_alignment"),
        related_metrics=("Shoulder Alignment",),
    ),
    MusclePattern(
        name="Rhomboids",
        condition=lambda a: a.shoulder_alignment.angle > 5,
        severity=_severity_of("shoulder_alignment"),
        related_metrics=("Shoulder Alignment",),
    ),
    MusclePattern(
        name="Serratus Anterior",
        condition=_not_normal("shoulder_alignment"),
        severity=_severity_of("shoulder_alignment"),
        related_metrics=("Shoulder Alignment",),
    ),
    MusclePattern(
        name="Core Abdominals",
        condition=lambda a: (
            a.pelvic_tilt.angle > 15
            or a.trunk_tilt.severity != Severity.NORMAL
        ),
        severity=_severity_of("trunk_tilt"),
        related_metrics=("Pelvic Tilt", "Trunk Tilt"),
    ),
    MusclePattern(
        name="Gluteus Maximus",
        condition=lambda a: a.pelvic_tilt.angle > 15,
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt",),
    ),
    MusclePattern(
        name="Gluteus Medius",
        condition=_not_normal("pelvic_tilt"),
        severity=_severity_of("pelvic_tilt"),
        related_metrics=("Pelvic Tilt",),
    ),
    MusclePattern(
        name="Quadriceps (VMO)",
        condition=lambda a: a.knee_alignment.angle > 185,
        severity=_severity_of("knee_alignment"),
        related_metrics=("Knee Alignment",),
    ),
    MusclePattern(
        name="Tibialis Anterior",
        condition=_not_normal("knee_alignment"),
        severity=_severity_of("knee_alignment"),
        related_metrics=("Knee Alignment",),
    ),
)


def _match(
    patterns: tuple[MusclePattern, ...],
    status: str,
    analysis: PostureAnalysis
) -> list[MuscleGroup]:
    return [
        MuscleGroup(
            name=pattern.name,
            status=status,
            severity=pattern.severity(analysis),
            related_metrics=list(pattern.related_metrics),
        )
        for pattern in patterns
        if pattern.condition(analysis)
    ]


def calculate_balance(muscles: list[MuscleGroup]) -> int:
    """
    Balance score: 100 minus the matched severity as a share of the maximum.

    An empty match list is perfectly balanced (100).
    """
    if not muscles:
        return 100

    actual = sum(SEVERITY_WEIGHTS[muscle.severity] for muscle in muscles)
    maximum = len(muscles) * MAX_SEVERITY_WEIGHT
    return int(round_half_up(100 - (actual / maximum) * 100))


def analyze_muscle_imbalance(analysis: PostureAnalysis) -> MuscleImbalance:
    """Infer tight and weak muscle groups from the primary metrics."""
    tight_muscles = _match(TIGHT_MUSCLE_PATTERNS, "tight", analysis)
    weak_muscles = _match(WEAK_MUSCLE_PATTERNS, "weak", analysis)

    return MuscleImbalance(
        tight_muscles=tight_muscles,
        weak_muscles=weak_muscles,
        overall_balance=calculate_balance(tight_muscles + weak_muscles),
    )
