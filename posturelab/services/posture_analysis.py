# =============================================================================
# POSTURELAB BACKEND - POSTURE ANALYSIS ENGINE
# =============================================================================
"""
Primary metric analyzers and the full analysis pipeline.

Each analyzer is a pure function of PostureLandmarks. Missing landmarks never
raise: the analyzer returns the "unable to detect" sentinel metric instead.
"""

import logging
import math
from datetime import datetime, timezone
from typing import NamedTuple

from posturelab.models import PostureAnalysis, PostureLandmarks, PostureMetric, Severity
from posturelab.services.geometry import angle_at_vertex, angle_from_vertical, round_half_up
from posturelab.services.severity import Thresholds, get_severity, unable_to_detect
from posturelab.services.extended_metrics import analyze_extended_metrics
from posturelab.services.scoring import calculate_overall_score
from posturelab.services.muscle_imbalance import analyze_muscle_imbalance
from posturelab.services.exercise_recommendations import (
    MAX_RECOMMENDATIONS,
    get_exercise_recommendations,
)

logger = logging.getLogger(__name__)

# Normal ranges (degrees)
HEAD_NORMAL_RANGE = (0.0, 5.0)
SHOULDER_NORMAL_RANGE = (-5.0, 5.0)
PELVIC_NORMAL_RANGE = (7.0, 11.0)
PELVIC_SENTINEL_RANGE = (5.0, 15.0)
TRUNK_NORMAL_RANGE = (-3.0, 3.0)
KNEE_NORMAL_RANGE = (175.0, 180.0)

HEAD_THRESHOLDS = Thresholds(mild=5, medium=10, severe=15)
SHOULDER_THRESHOLDS = Thresholds(mild=5, medium=10, severe=15)
TRUNK_THRESHOLDS = Thresholds(mild=5, medium=8, severe=12)

# Horizontal shoulder offset (px) past which the shoulder is labelled
SHOULDER_OFFSET_PX = 10.0

# Neutral standing baseline added to the thigh/trunk angle difference
PELVIC_BASELINE_DEG = 10.0

TRUNK_TILT_DEG = 5.0

KNEE_HYPEREXTENSION_DEG = 185.0
KNEE_HYPEREXTENSION_MEDIUM_DEG = 190.0
KNEE_FLEXION_DEG = 170.0
KNEE_FLEXION_MEDIUM_DEG = 165.0


class PelvicBand(NamedTuple):
    """One row of the pelvic tilt lookup table."""
    lower: float
    inclusive: bool
    severity: Severity
    tilt_type: str
    description: str
    recommendation: str


# Evaluated top to bottom; the first band whose lower bound is passed wins.
PELVIC_TILT_BANDS: tuple[PelvicBand, ...] = (
    PelvicBand(
        20, False, Severity.SEVERE, "Anterior",
        "Excessive Anterior Pelvic Tilt - pelvis tilted significantly forward, "
        "causing increased lumbar lordosis (swayback)",
        "Strengthen glutes and core, stretch hip flexors (iliopsoas, rectus femoris) "
        "daily. Consider physiotherapy consultation.",
    ),
    PelvicBand(
        15, False, Severity.MEDIUM, "Anterior",
        "Moderate Anterior Pelvic Tilt - pelvis tilted forward, may cause lower back strain",
        "Focus on hip flexor stretches and glute/core strengthening exercises",
    ),
    PelvicBand(
        12, False, Severity.MILD, "Anterior",
        "Mild Anterior Pelvic Tilt - slight forward tilt of pelvis",
        "Incorporate hip flexor stretches and core stabilization exercises",
    ),
    PelvicBand(
        7, True, Severity.NORMAL, "Neutral",
        "Normal Pelvic Position - healthy neutral alignment",
        "Maintain current posture with regular stretching and strengthening",
    ),
    PelvicBand(
        5, True, Severity.MILD, "Posterior",
        "Mild Posterior Pelvic Tilt - slight backward tilt, may flatten lower back",
        "Stretch hamstrings, strengthen hip flexors gently",
    ),
    PelvicBand(
        0, True, Severity.MEDIUM, "Posterior",
        "Moderate Posterior Pelvic Tilt - pelvis tucked under, flattening lumbar curve",
        "Stretch hamstrings and glutes, strengthen hip flexors and lower back extensors",
    ),
    PelvicBand(
        -math.inf, False, Severity.SEVERE, "Posterior",
        "Excessive Posterior Pelvic Tilt - significant backward tilt causing flat back posture",
        "Consult a physiotherapist. Focus on hip flexor strengthening and hamstring flexibility.",
    ),
)


def _round_angle(angle: float) -> float:
    return round_half_up(angle, 1)


def analyze_head_position(landmarks: PostureLandmarks) -> PostureMetric:
    """Forward head posture from the ear-to-shoulder line."""
    name = "Head Position (Craniovertebral Angle)"
    ear, shoulder = landmarks.ear, landmarks.shoulder

    if ear is None or shoulder is None:
        return unable_to_detect(
            name,
            HEAD_NORMAL_RANGE,
            "Please ensure ear and shoulder are visible in the image",
        )

    angle = _round_angle(abs(angle_from_vertical(ear, shoulder)))
    severity = get_severity(angle, HEAD_NORMAL_RANGE, HEAD_THRESHOLDS)

    description = "Normal head position"
    recommendation = "Maintain current posture"

    if severity == Severity.MILD:
        description = "Slight forward head posture detected"
        recommendation = "Practice chin tucks and neck stretches"
    elif severity == Severity.MEDIUM:
        description = "Moderate forward head posture"
        recommendation = "Strengthen neck extensors, regular breaks from screens"
    elif severity == Severity.SEVERE:
        description = "Significant forward head posture"
        recommendation = "Consult a physiotherapist for corrective exercises"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=HEAD_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_shoulder_alignment(landmarks: PostureLandmarks) -> PostureMetric:
    """
    Shoulder offset from the plumb line rising from the ankle.

    The offset is expressed as an angle over the ankle-to-shoulder height.
    Offsets beyond SHOULDER_OFFSET_PX only change the description.
    """
    name = "Shoulder Alignment"
    shoulder, ankle = landmarks.shoulder, landmarks.ankle

    if shoulder is None or ankle is None:
        return unable_to_detect(
            name,
            SHOULDER_NORMAL_RANGE,
            "Please ensure shoulder and ankle are visible",
        )

    offset = shoulder.x - ankle.x
    angle = _round_angle(math.degrees(math.atan2(offset, ankle.y - shoulder.y)))
    severity = get_severity(angle, SHOULDER_NORMAL_RANGE, SHOULDER_THRESHOLDS)

    description = "Normal shoulder alignment"
    recommendation = "Maintain current posture"

    if offset > SHOULDER_OFFSET_PX:
        description = f"Protracted shoulders ({severity.value})"
        recommendation = "Strengthen rhomboids and middle trapezius"
    elif offset < -SHOULDER_OFFSET_PX:
        description = f"Retracted shoulders ({severity.value})"
        recommendation = "Stretch pectorals, maintain neutral position"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=SHOULDER_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def classify_pelvic_tilt(angle: float) -> PelvicBand:
    """Look up the pelvic tilt band for a rounded tilt estimate."""
    for band in PELVIC_TILT_BANDS:
        if angle > band.lower or (band.inclusive and angle == band.lower):
            return band
    return PELVIC_TILT_BANDS[-1]


def analyze_pelvic_tilt(landmarks: PostureLandmarks) -> PostureMetric:
    """
    Pelvic tilt estimated from the thigh and trunk segment angles.

    Positive values indicate anterior tilt. The neutral band (7-12) is wider
    than the declared normal range (7-11); both are kept as published.
    """
    hip, shoulder, knee = landmarks.hip, landmarks.shoulder, landmarks.knee

    if hip is None or shoulder is None or knee is None:
        return unable_to_detect(
            "Pelvic Tilt",
            PELVIC_SENTINEL_RANGE,
            "Please ensure hip, shoulder, and knee are visible",
        )

    trunk_angle = angle_from_vertical(shoulder, hip)
    thigh_angle = angle_from_vertical(hip, knee)
    angle = _round_angle(thigh_angle - trunk_angle + PELVIC_BASELINE_DEG)

    band = classify_pelvic_tilt(angle)

    return PostureMetric(
        name=f"Pelvic Tilt ({band.tilt_type})",
        angle=angle,
        normal_range=PELVIC_NORMAL_RANGE,
        severity=band.severity,
        description=band.description,
        recommendation=band.recommendation,
    )


def analyze_trunk_tilt(landmarks: PostureLandmarks) -> PostureMetric:
    """Trunk lean from the shoulder-to-hip line."""
    name = "Trunk Tilt"
    shoulder, hip = landmarks.shoulder, landmarks.hip

    if shoulder is None or hip is None:
        return unable_to_detect(
            name,
            TRUNK_NORMAL_RANGE,
            "Please ensure shoulder and hip are visible",
        )

    angle = _round_angle(angle_from_vertical(shoulder, hip))
    severity = get_severity(angle, TRUNK_NORMAL_RANGE, TRUNK_THRESHOLDS)

    description = "Normal trunk alignment"
    recommendation = "Maintain current posture"

    if angle > TRUNK_TILT_DEG:
        description = "Forward trunk tilt detected"
        recommendation = "Strengthen back extensors, improve core stability"
    elif angle < -TRUNK_TILT_DEG:
        description = "Backward trunk tilt detected"
        recommendation = "Strengthen abdominals, check for swayback posture"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=TRUNK_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_knee_alignment(landmarks: PostureLandmarks) -> PostureMetric:
    """Hip-knee-ankle angle with asymmetric hyperextension/flexion bands."""
    name = "Knee Alignment (Hip-Knee-Ankle)"
    hip, knee, ankle = landmarks.hip, landmarks.knee, landmarks.ankle

    if hip is None or knee is None or ankle is None:
        return unable_to_detect(
            name,
            KNEE_NORMAL_RANGE,
            "Please ensure hip, knee, and ankle are visible",
            angle=180.0,
        )

    angle = _round_angle(angle_at_vertex(hip, knee, ankle))

    severity = Severity.NORMAL
    description = "Normal knee alignment"
    recommendation = "Maintain current stance"

    if angle > KNEE_HYPEREXTENSION_DEG:
        severity = Severity.MEDIUM if angle > KNEE_HYPEREXTENSION_MEDIUM_DEG else Severity.MILD
        description = "Knee hyperextension detected"
        recommendation = "Strengthen quadriceps, avoid locking knees"
    elif angle < KNEE_FLEXION_DEG:
        severity = Severity.MEDIUM if angle < KNEE_FLEXION_MEDIUM_DEG else Severity.MILD
        description = "Knee flexion detected"
        recommendation = "Check for hamstring tightness, strengthen quads"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=KNEE_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_posture(
    landmarks: PostureLandmarks,
    max_recommendations: int = MAX_RECOMMENDATIONS
) -> PostureAnalysis:
    """
    Run the full analysis pipeline.

    1. Primary and extended metrics from the same landmarks
    2. Overall score from the primary metrics
    3. Muscle imbalance and exercise recommendations from the complete
       primary-metric set

    Args:
        landmarks: Detector output, any field may be None
        max_recommendations: Upper bound on the recommendation list

    Returns:
        Complete PostureAnalysis
    """
    head_position = analyze_head_position(landmarks)
    shoulder_alignment = analyze_shoulder_alignment(landmarks)
    pelvic_tilt = analyze_pelvic_tilt(landmarks)
    trunk_tilt = analyze_trunk_tilt(landmarks)
    knee_alignment = analyze_knee_alignment(landmarks)

    base_analysis = PostureAnalysis(
        head_position=head_position,
        shoulder_alignment=shoulder_alignment,
        pelvic_tilt=pelvic_tilt,
        trunk_tilt=trunk_tilt,
        knee_alignment=knee_alignment,
        extended_metrics=analyze_extended_metrics(landmarks),
        overall_score=0,
        timestamp=datetime.now(timezone.utc),
    )
    overall_score = calculate_overall_score(base_analysis.primary_metrics())

    # Second pass over the complete primary-metric set
    muscle_imbalance = analyze_muscle_imbalance(base_analysis)
    recommendations = get_exercise_recommendations(
        base_analysis,
        limit=max_recommendations
    )

    analysis = base_analysis.model_copy(update={
        "overall_score": overall_score,
        "muscle_imbalance": muscle_imbalance,
        "exercise_recommendations": recommendations,
    })

    logger.debug(
        f"Posture analysis: score={overall_score}, "
        f"balance={muscle_imbalance.overall_balance}, "
        f"recommendations={len(recommendations)}"
    )

    return analysis
