# =============================================================================
# POSTURELAB BACKEND - EXERCISE RECOMMENDATION ENGINE
# =============================================================================
"""
Maps detected posture issues onto a fixed exercise catalog.

The catalog is a module-level tuple of frozen models shared by every
analysis; recommendations reference catalog entries and are built fresh
per call.
"""

import logging
from typing import NamedTuple, Optional

from posturelab.models import Exercise, ExerciseRecommendation, PostureAnalysis, Severity

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 8

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


# =============================================================================
# EXERCISE CATALOG
# =============================================================================

EXERCISE_DATABASE: tuple[Exercise, ...] = (
    # Stretches
    Exercise(
        id="chin-tuck",
        name="Chin Tucks",
        category="stretch",
        target_muscles=("Suboccipitals", "Upper Trapezius"),
        duration="30 seconds",
        reps="10 reps, 3 sets",
        description="Retract your chin straight back to correct forward head posture.",
        instructions=(
            "Sit or stand with good posture",
            "Keep your eyes looking forward",
            "Gently draw your chin straight back (like making a double chin)",
            "Hold for 5 seconds, then relax",
            "Keep your head level - don't tilt up or down",
        ),
        difficulty="beginner",
        icon="🎯",
    ),
    Exercise(
        id="neck-stretch",
        name="Levator Scapulae Stretch",
        category="stretch",
        target_muscles=("Levator Scapulae", "Upper Trapezius"),
        duration="30 seconds each side",
        reps="3 times each side",
        description="Stretch the muscles connecting your neck to shoulder blade.",
        instructions=(
            "Sit with good posture, hold the seat with your right hand",
            "Turn your head 45 degrees to the left",
            "Gently tilt your head down, looking toward your left armpit",
            "Use your left hand to gently increase the stretch",
            "Hold 30 seconds, then switch sides",
        ),
        difficulty="beginner",
        icon="🔄",
    ),
    Exercise(
        id="doorway-stretch",
        name="Doorway Pec Stretch",
        category="stretch",
        target_muscles=("Pectoralis Major", "Pectoralis Minor"),
        duration="30 seconds",
        reps="3 times",
        description="Open up the chest to counteract rounded shoulders.",
        instructions=(
            "Stand in a doorway with arms at 90 degrees",
            "Place forearms on the door frame",
            "Step one foot forward through the doorway",
            "Lean forward until you feel a stretch in your chest",
            "Keep your core engaged and don't arch your lower back",
        ),
        difficulty="beginner",
        icon="🚪",
    ),
    Exercise(
        id="hip-flexor-stretch",
        name="Kneeling Hip Flexor Stretch",
        category="stretch",
        target_muscles=("Hip Flexors (Iliopsoas)", "Rectus Femoris"),
        duration="30 seconds each side",
        reps="3 times each side",
        description="Stretch tight hip flexors that contribute to anterior pelvic tilt.",
        instructions=(
            "Kneel on your right knee with left foot in front",
            "Keep your torso upright and engage your core",
            "Tuck your pelvis under (posterior tilt)",
            "Shift your weight forward until you feel a stretch",
            "Raise your right arm overhead for a deeper stretch",
        ),
        difficulty="beginner",
        icon="🧘",
    ),
    Exercise(
        id="hamstring-stretch",
        name="Supine Hamstring Stretch",
        category="stretch",
        target_muscles=("Hamstrings",),
        duration="30 seconds each leg",
        reps="3 times each leg",
        description="Stretch hamstrings to improve pelvic alignment.",
        instructions=(
            "Lie on your back with both legs extended",
            "Lift one leg up toward the ceiling",
            "Keep your knee straight or slightly bent",
            "Use a strap or towel around your foot if needed",
            "Keep your lower back pressed into the floor",
        ),
        difficulty="beginner",
        icon="🦵",
    ),
    # Strengthening
    Exercise(
        id="deep-neck-flexor",
        name="Deep Neck Flexor Activation",
        category="strengthen",
        target_muscles=("Deep Neck Flexors",),
        duration="10 seconds hold",
        reps="10 reps, 3 sets",
        description="Strengthen the deep neck muscles that support proper head position.",
        instructions=(
            "Lie on your back with knees bent",
            'Gently nod your head as if saying "yes"',
            "Imagine lengthening the back of your neck",
            "Hold for 10 seconds while breathing normally",
            "Progress to lifting your head slightly off the floor",
        ),
        difficulty="beginner",
        icon="💪",
    ),
    Exercise(
        id="wall-angels",
        name="Wall Angels",
        category="strengthen",
        target_muscles=("Lower Trapezius", "Rhomboids", "Serratus Anterior"),
        duration="5 seconds per rep",
        reps="10 reps, 3 sets",
        description="Strengthen upper back muscles to improve shoulder posture.",
        instructions=(
            "Stand with back against wall, feet 6 inches from wall",
            "Press lower back, upper back, and head into the wall",
            "Place arms at 90 degrees like goalposts against wall",
            "Slowly slide arms up while keeping contact with wall",
            "Return to starting position",
        ),
        difficulty="intermediate",
        icon="👼",
    ),
    Exercise(
        id="dead-bug",
        name="Dead Bug",
        category="strengthen",
        target_muscles=("Core Abdominals", "Transverse Abdominis"),
        duration="3 seconds per rep",
        reps="10 reps each side, 3 sets",
        description="Core strengthening exercise that promotes neutral spine.",
        instructions=(
            "Lie on back with arms extended toward ceiling",
            "Lift legs with hips and knees at 90 degrees",
            "Press lower back into the floor",
            "Slowly lower opposite arm and leg toward floor",
            "Return and repeat on other side",
        ),
        difficulty="intermediate",
        icon="🐛",
    ),
    Exercise(
        id="glute-bridge",
        name="Glute Bridge",
        category="strengthen",
        target_muscles=("Gluteus Maximus", "Gluteus Medius", "Core Abdominals"),
        duration="5 seconds hold",
        reps="15 reps, 3 sets",
        description="Strengthen glutes to improve pelvic stability.",
        instructions=(
            "Lie on back with knees bent, feet flat on floor",
            "Engage your core and squeeze your glutes",
            "Lift hips until body forms straight line from knees to shoulders",
            "Hold at the top for 5 seconds",
            "Lower slowly and repeat",
        ),
        difficulty="beginner",
        icon="🌉",
    ),
    Exercise(
        id="bird-dog",
        name="Bird Dog",
        category="strengthen",
        target_muscles=("Core Abdominals", "Erector Spinae", "Gluteus Maximus"),
        duration="5 seconds hold",
        reps="10 reps each side, 3 sets",
        description="Improve core stability and spinal alignment.",
        instructions=(
            "Start on hands and knees in tabletop position",
            "Keep spine neutral and core engaged",
            "Extend right arm forward and left leg back",
            "Hold for 5 seconds without rotating hips",
            "Return to start and switch sides",
        ),
        difficulty="intermediate",
        icon="🐕",
    ),
    # Mobility
    Exercise(
        id="cat-cow",
        name="Cat-Cow Stretch",
        category="mobility",
        target_muscles=("Erector Spinae", "Core Abdominals"),
        duration="5 seconds each position",
        reps="10 cycles",
        description="Improve spinal mobility and body awareness.",
        instructions=(
            "Start on hands and knees in tabletop position",
            "Cow: Drop belly, lift chest and tailbone, look up",
            "Cat: Round spine toward ceiling, tuck chin",
            "Move slowly between positions",
            "Breathe in for cow, breathe out for cat",
        ),
        difficulty="beginner",
        icon="🐱",
    ),
    Exercise(
        id="thoracic-rotation",
        name="Thoracic Spine Rotation",
        category="mobility",
        target_muscles=("Thoracic Spine", "Obliques"),
        duration="30 seconds each side",
        reps="10 reps each side",
        description="Improve upper back mobility and reduce stiffness.",
        instructions=(
            "Start on hands and knees or in child's pose",
            "Place one hand behind your head",
            "Rotate your upper back, bringing elbow toward ceiling",
            "Follow your elbow with your eyes",
            "Return and repeat, then switch sides",
        ),
        difficulty="beginner",
        icon="🔃",
    ),
    Exercise(
        id="ankle-circles",
        name="Ankle Mobility Circles",
        category="mobility",
        target_muscles=("Gastrocnemius", "Tibialis Anterior"),
        duration="30 seconds each direction",
        reps="10 circles each way, each foot",
        description="Improve ankle mobility for better standing posture.",
        instructions=(
            "Sit or stand on one leg (hold support if needed)",
            "Lift one foot off the ground",
            "Draw large circles with your toes",
            "Move slowly through full range of motion",
            "Switch directions, then switch feet",
        ),
        difficulty="beginner",
        icon="⭕",
    ),
)


class IssueTarget(NamedTuple):
    """Which muscles to train when a primary metric is out of range."""
    metric: str
    issue: str
    muscles: tuple[str, ...]


ISSUE_TARGETS: tuple[IssueTarget, ...] = (
    IssueTarget("head_position", "forward head posture",
                ("Suboccipitals", "Deep Neck Flexors", "Upper Trapezius")),
    IssueTarget("shoulder_alignment", "shoulder alignment",
                ("Pectoralis", "Rhomboids", "Lower Trapezius")),
    IssueTarget("pelvic_tilt", "pelvic tilt",
                ("Hip Flexors", "Gluteus", "Core")),
    IssueTarget("trunk_tilt", "trunk alignment",
                ("Core", "Erector Spinae")),
    IssueTarget("knee_alignment", "knee alignment",
                ("Quadriceps", "Hamstrings", "Gastrocnemius")),
)


def get_exercises_for_muscle(muscle: str) -> list[Exercise]:
    """Catalog exercises whose targets contain, or are contained in, the keyword."""
    keyword = muscle.lower()
    return [
        exercise for exercise in EXERCISE_DATABASE
        if any(
            keyword in target.lower() or target.lower() in keyword
            for target in exercise.target_muscles
        )
    ]


def get_priority(severity: Severity) -> str:
    """Recommendation priority for a metric severity."""
    if severity in (Severity.SEVERE, Severity.MEDIUM):
        return "high"
    if severity == Severity.MILD:
        return "medium"
    return "low"


def get_exercise_recommendations(
    analysis: PostureAnalysis,
    limit: int = MAX_RECOMMENDATIONS
) -> list[ExerciseRecommendation]:
    """
    Build the prioritized exercise list for an analysis.

    Each exercise appears at most once, attributed to the first issue that
    selected it. The list is stably sorted high -> medium -> low and cut to
    `limit` entries.
    """
    recommendations: list[ExerciseRecommendation] = []
    added: set[str] = set()

    for target in ISSUE_TARGETS:
        metric = getattr(analysis, target.metric)
        if metric.severity == Severity.NORMAL:
            continue

        for muscle in target.muscles:
            for exercise in get_exercises_for_muscle(muscle):
                if exercise.id in added:
                    continue
                added.add(exercise.id)
                recommendations.append(ExerciseRecommendation(
                    priority=get_priority(metric.severity),
                    exercise=exercise,
                    reason=f"Recommended to address {target.issue} ({metric.severity.value})",
                ))

    recommendations.sort(key=lambda r: PRIORITY_ORDER[r.priority])

    if len(recommendations) > limit:
        logger.debug(f"Truncating {len(recommendations)} recommendations to {limit}")

    return recommendations[:limit]


def get_all_exercises() -> tuple[Exercise, ...]:
    """The full exercise catalog."""
    return EXERCISE_DATABASE


def get_exercise(exercise_id: str) -> Optional[Exercise]:
    """Look up a catalog entry by id."""
    for exercise in EXERCISE_DATABASE:
        if exercise.id == exercise_id:
            return exercise
    return None
