# =============================================================================
# POSTURELAB BACKEND - DOMAIN MODELS
# =============================================================================
"""
Pydantic models for landmarks, metrics, analyses and assessments.
Used by the analysis engine, the history store and the API for validation
and JSON serialization.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


# =============================================================================
# LANDMARK MODELS
# =============================================================================

class Landmark(BaseModel):
    """A single detected anatomical point in image pixel space."""
    x: float
    y: float
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    name: str

    class Config:
        frozen = True


class PostureLandmarks(BaseModel):
    """
    The five side-view landmarks consumed by the engine.

    Any field may be None when the detector could not see the joint.
    ASIS/PSIS pelvic markers are reserved and always None.
    """
    ear: Optional[Landmark] = None
    shoulder: Optional[Landmark] = None
    hip: Optional[Landmark] = None
    knee: Optional[Landmark] = None
    ankle: Optional[Landmark] = None
    asis: None = None
    psis: None = None

    class Config:
        frozen = True


# =============================================================================
# METRIC MODELS
# =============================================================================

class Severity(str, Enum):
    """Severity levels, ordered by clinical concern."""
    NORMAL = "normal"
    MILD = "mild"
    MEDIUM = "medium"
    SEVERE = "severe"


class PostureMetric(BaseModel):
    """One classified angular measurement."""
    name: str
    angle: float = Field(..., description="Signed angle in degrees")
    normal_range: tuple[float, float]
    severity: Severity
    description: str
    recommendation: str
    detected: bool = Field(
        default=True,
        description="False when required landmarks were missing"
    )

    class Config:
        frozen = True


class ExtendedMetrics(BaseModel):
    """Supplementary spinal-curvature estimates."""
    ankle_alignment: PostureMetric
    cervical_lordosis: PostureMetric
    thoracic_kyphosis: PostureMetric
    lumbar_lordosis: PostureMetric


# =============================================================================
# MUSCLE IMBALANCE MODELS
# =============================================================================

class MuscleGroup(BaseModel):
    """A muscle group inferred to be tight or weak."""
    name: str
    status: Literal["tight", "weak"]
    severity: Severity
    related_metrics: list[str]


class MuscleImbalance(BaseModel):
    """Tight/weak muscle pattern with an overall balance score."""
    tight_muscles: list[MuscleGroup] = []
    weak_muscles: list[MuscleGroup] = []
    overall_balance: int = Field(default=100, ge=0, le=100)


# =============================================================================
# EXERCISE MODELS
# =============================================================================

class Exercise(BaseModel):
    """Static exercise catalog entry."""
    id: str
    name: str
    category: Literal["stretch", "strengthen", "mobility"]
    target_muscles: tuple[str, ...]
    duration: str
    reps: str
    description: str
    instructions: tuple[str, ...]
    difficulty: Literal["beginner", "intermediate", "advanced"]
    icon: str

    class Config:
        frozen = True


class ExerciseRecommendation(BaseModel):
    """An exercise selected for one assessment."""
    priority: Literal["high", "medium", "low"]
    exercise: Exercise
    reason: str


# =============================================================================
# ANALYSIS MODELS
# =============================================================================

class PostureAnalysis(BaseModel):
    """Complete output of the analysis engine."""
    head_position: PostureMetric
    shoulder_alignment: PostureMetric
    pelvic_tilt: PostureMetric
    trunk_tilt: PostureMetric
    knee_alignment: PostureMetric
    extended_metrics: Optional[ExtendedMetrics] = None
    muscle_imbalance: Optional[MuscleImbalance] = None
    exercise_recommendations: Optional[list[ExerciseRecommendation]] = None
    overall_score: int = Field(..., ge=0, le=100)
    timestamp: datetime

    def primary_metrics(self) -> list[PostureMetric]:
        """The five primary metrics in canonical order."""
        return [
            self.head_position,
            self.shoulder_alignment,
            self.pelvic_tilt,
            self.trunk_tilt,
            self.knee_alignment,
        ]


class Assessment(BaseModel):
    """One persisted analysis run."""
    id: str
    image_reference: Optional[str] = None
    landmarks: PostureLandmarks
    analysis: PostureAnalysis
    created_at: datetime

    class Config:
        frozen = True


class AnalyzeRequest(BaseModel):
    """Analysis request carrying pre-computed landmarks."""
    landmarks: PostureLandmarks
    image_reference: Optional[str] = Field(
        default=None,
        description="Opaque reference to the source image, if any"
    )


# =============================================================================
# PROGRESS MODELS
# =============================================================================

class ProgressPoint(BaseModel):
    """Per-assessment deviations used for trend charts."""
    assessment_id: str
    date: datetime
    overall_score: int
    head_position: float
    shoulder_alignment: float
    pelvic_tilt: float
    trunk_tilt: float
    knee_alignment: float


class ProgressReport(BaseModel):
    """Progress summary over the assessment history."""
    has_enough_data: bool
    total: int
    latest_score: int = 0
    previous_score: int = 0
    score_change: int = 0
    average_score: int = 0
    best_score: int = 0
    points: list[ProgressPoint] = []
