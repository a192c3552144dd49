# =============================================================================
# POSTURELAB BACKEND - EXERCISE ROUTES
# =============================================================================
"""API routes exposing the exercise catalog."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from posturelab.models import Exercise
from posturelab.services.exercise_recommendations import get_all_exercises, get_exercise

router = APIRouter()


@router.get("/exercises", response_model=list[Exercise])
async def list_exercises(
    category: Optional[str] = Query(default=None, pattern="^(stretch|strengthen|mobility)$")
):
    """List catalog exercises, optionally filtered by category."""
    exercises = get_all_exercises()
    if category:
        return [exercise for exercise in exercises if exercise.category == category]
    return list(exercises)


@router.get("/exercises/{exercise_id}", response_model=Exercise)
async def get_exercise_by_id(exercise_id: str):
    """Retrieve a catalog exercise by ID."""
    exercise = get_exercise(exercise_id)

    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")

    return exercise
