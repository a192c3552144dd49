# =============================================================================
# POSTURELAB BACKEND - EXTENDED METRICS
# =============================================================================
"""
Spinal curvature and ankle estimates derived from the same five landmarks.
These are approximations built from the primary segment angles with fixed
baselines and scaling.
"""

import math

from posturelab.models import ExtendedMetrics, PostureLandmarks, PostureMetric
from posturelab.services.geometry import angle_from_vertical, round_half_up
from posturelab.services.severity import Thresholds, get_severity, unable_to_detect

ANKLE_NORMAL_RANGE = (85.0, 95.0)
CERVICAL_NORMAL_RANGE = (30.0, 40.0)
THORACIC_NORMAL_RANGE = (20.0, 40.0)
LUMBAR_NORMAL_RANGE = (40.0, 60.0)

ANKLE_THRESHOLDS = Thresholds(mild=5, medium=10, severe=15)
CERVICAL_THRESHOLDS = Thresholds(mild=5, medium=10, severe=15)
THORACIC_THRESHOLDS = Thresholds(mild=10, medium=15, severe=20)
LUMBAR_THRESHOLDS = Thresholds(mild=10, medium=15, severe=20)

CERVICAL_BASELINE_DEG = 35.0
THORACIC_BASELINE_DEG = 30.0
THORACIC_LEAN_SCALE = 2.0
LUMBAR_BASELINE_DEG = 50.0


def analyze_ankle_alignment(landmarks: PostureLandmarks) -> PostureMetric:
    """Shin angle, 90 when the knee sits straight above the ankle."""
    name = "Ankle Alignment"
    knee, ankle = landmarks.knee, landmarks.ankle

    if knee is None or ankle is None:
        return unable_to_detect(
            name,
            ANKLE_NORMAL_RANGE,
            "Please ensure knee and ankle are visible",
        )

    angle = round_half_up(90 - angle_from_vertical(knee, ankle), 1)
    severity = get_severity(angle, ANKLE_NORMAL_RANGE, ANKLE_THRESHOLDS)

    description = "Normal ankle alignment"
    recommendation = "Maintain current stance"

    if angle > ANKLE_NORMAL_RANGE[1]:
        description = "Ankle dorsiflexion detected"
        recommendation = "Check for tight calf muscles, consider calf stretches"
    elif angle < ANKLE_NORMAL_RANGE[0]:
        description = "Ankle plantarflexion detected"
        recommendation = "Strengthen tibialis anterior, stretch Achilles tendon"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=ANKLE_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_cervical_lordosis(landmarks: PostureLandmarks) -> PostureMetric:
    """Cervical curve from the ear-shoulder relationship around a 35 degree baseline."""
    name = "Cervical Lordosis"
    ear, shoulder = landmarks.ear, landmarks.shoulder

    if ear is None or shoulder is None:
        return unable_to_detect(
            name,
            CERVICAL_NORMAL_RANGE,
            "Please ensure ear and shoulder are visible",
        )

    dx = ear.x - shoulder.x
    dy = shoulder.y - ear.y
    offset = math.degrees(math.atan2(abs(dx), dy))
    estimate = CERVICAL_BASELINE_DEG + (-offset if dx > 0 else offset)

    angle = round_half_up(estimate, 1)
    severity = get_severity(angle, CERVICAL_NORMAL_RANGE, CERVICAL_THRESHOLDS)

    description = "Normal cervical lordosis"
    recommendation = "Maintain current neck posture"

    if angle < 25:
        description = "Reduced cervical lordosis (flat neck)"
        recommendation = "Practice gentle neck extension exercises"
    elif angle > 45:
        description = "Increased cervical lordosis"
        recommendation = "Strengthen deep neck flexors, practice chin tucks"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=CERVICAL_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_thoracic_kyphosis(landmarks: PostureLandmarks) -> PostureMetric:
    """Thoracic curve from the doubled shoulder-over-hip forward lean."""
    name = "Thoracic Kyphosis"
    shoulder, hip = landmarks.shoulder, landmarks.hip

    if shoulder is None or hip is None:
        return unable_to_detect(
            name,
            THORACIC_NORMAL_RANGE,
            "Please ensure shoulder and hip are visible",
        )

    forward_lean = math.degrees(math.atan2(shoulder.x - hip.x, hip.y - shoulder.y))
    estimate = THORACIC_BASELINE_DEG + forward_lean * THORACIC_LEAN_SCALE

    angle = round_half_up(estimate, 1)
    severity = get_severity(angle, THORACIC_NORMAL_RANGE, THORACIC_THRESHOLDS)

    description = "Normal thoracic kyphosis"
    recommendation = "Maintain current upper back posture"

    if angle > 45:
        description = "Increased thoracic kyphosis (rounded upper back)"
        recommendation = "Strengthen thoracic extensors, practice wall angels"
    elif angle < 15:
        description = "Reduced thoracic kyphosis (flat upper back)"
        recommendation = "Gentle mobility exercises, avoid excessive extension"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=THORACIC_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_lumbar_lordosis(landmarks: PostureLandmarks) -> PostureMetric:
    """Lumbar curve from the thigh/trunk angle difference around a 50 degree baseline."""
    name = "Lumbar Lordosis"
    hip, shoulder, knee = landmarks.hip, landmarks.shoulder, landmarks.knee

    if hip is None or shoulder is None or knee is None:
        return unable_to_detect(
            name,
            LUMBAR_NORMAL_RANGE,
            "Please ensure hip, shoulder, and knee are visible",
        )

    trunk_angle = angle_from_vertical(shoulder, hip)
    lower_angle = angle_from_vertical(hip, knee)
    estimate = LUMBAR_BASELINE_DEG + (lower_angle - trunk_angle)

    angle = round_half_up(estimate, 1)
    severity = get_severity(angle, LUMBAR_NORMAL_RANGE, LUMBAR_THRESHOLDS)

    description = "Normal lumbar lordosis"
    recommendation = "Maintain current lower back posture"

    if angle > 65:
        description = "Increased lumbar lordosis (excessive arch)"
        recommendation = "Strengthen core, stretch hip flexors"
    elif angle < 35:
        description = "Reduced lumbar lordosis (flat lower back)"
        recommendation = "Stretch hamstrings, mobility exercises"

    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=LUMBAR_NORMAL_RANGE,
        severity=severity,
        description=description,
        recommendation=recommendation,
    )


def analyze_extended_metrics(landmarks: PostureLandmarks) -> ExtendedMetrics:
    """Run all four extended analyzers."""
    return ExtendedMetrics(
        ankle_alignment=analyze_ankle_alignment(landmarks),
        cervical_lordosis=analyze_cervical_lordosis(landmarks),
        thoracic_kyphosis=analyze_thoracic_kyphosis(landmarks),
        lumbar_lordosis=analyze_lumbar_lordosis(landmarks),
    )
