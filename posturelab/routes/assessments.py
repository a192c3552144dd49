# =============================================================================
# POSTURELAB BACKEND - ASSESSMENT ROUTES
# =============================================================================
"""
API routes for the assessment history.
Handles listing, retrieval and deletion of stored assessments.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from posturelab.database.history import AssessmentHistoryStore, get_history_store
from posturelab.models import Assessment

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/assessments")
async def list_assessments(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    store: AssessmentHistoryStore = Depends(get_history_store)
):
    """
    Get the assessment history, newest first.
    """
    assessments = await store.list()

    return {
        "total": len(assessments),
        "limit": limit,
        "offset": offset,
        "assessments": assessments[offset:offset + limit]
    }


@router.get("/assessments/{assessment_id}", response_model=Assessment)
async def get_assessment(
    assessment_id: str,
    store: AssessmentHistoryStore = Depends(get_history_store)
):
    """Retrieve a specific assessment by ID."""
    assessment = await store.get_by_id(assessment_id)

    if assessment is None:
        raise HTTPException(status_code=404, detail="Assessment not found")

    return assessment


@router.delete("/assessments/{assessment_id}")
async def delete_assessment(
    assessment_id: str,
    store: AssessmentHistoryStore = Depends(get_history_store)
):
    """Delete an assessment from history."""
    if not await store.delete(assessment_id):
        raise HTTPException(status_code=404, detail="Assessment not found")

    return {"deleted": assessment_id}
