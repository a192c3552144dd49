# =============================================================================
# POSTURELAB BACKEND - ANALYSIS ROUTES
# =============================================================================
"""
API routes for posture analysis.
Runs the analysis engine on landmarks (or on an uploaded image through the
landmark detector) and records each run in the assessment history.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from posturelab.config import get_settings
from posturelab.database.history import AssessmentHistoryStore, get_history_store
from posturelab.exceptions import DetectionError
from posturelab.models import AnalyzeRequest, Assessment, PostureLandmarks, ProgressReport
from posturelab.services.detector_client import DetectorClient
from posturelab.services.posture_analysis import analyze_posture
from posturelab.services.progress import build_progress_report

logger = logging.getLogger(__name__)
router = APIRouter()

ALLOWED_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".bmp"}


def get_detector_client() -> DetectorClient:
    """Dependency injection for the landmark detector client."""
    return DetectorClient()


async def _record_assessment(
    store: AssessmentHistoryStore,
    landmarks: PostureLandmarks,
    image_reference: Optional[str] = None,
    assessment_id: Optional[str] = None
) -> Assessment:
    """Analyze landmarks and persist the resulting assessment."""
    settings = get_settings()
    analysis = analyze_posture(
        landmarks,
        max_recommendations=settings.max_recommendations
    )

    assessment = Assessment(
        id=assessment_id or store.generate_id(),
        image_reference=image_reference,
        landmarks=landmarks,
        analysis=analysis,
        created_at=datetime.now(timezone.utc),
    )
    await store.save(assessment)

    return assessment


@router.post("/analyze", response_model=Assessment)
async def analyze_landmarks(
    request: AnalyzeRequest,
    store: AssessmentHistoryStore = Depends(get_history_store)
):
    """
    Analyze pre-computed landmarks.

    1. Computes primary and extended metrics
    2. Scores, infers muscle imbalances, selects exercises
    3. Stores the assessment in history
    """
    assessment = await _record_assessment(
        store,
        request.landmarks,
        image_reference=request.image_reference
    )

    logger.info(
        f"Analysis completed for {assessment.id}: "
        f"score={assessment.analysis.overall_score}"
    )

    return assessment


@router.post("/analyze/image", response_model=Assessment)
async def analyze_image(
    file: UploadFile = File(...),
    store: AssessmentHistoryStore = Depends(get_history_store),
    detector: DetectorClient = Depends(get_detector_client)
):
    """
    Analyze an uploaded side-view photograph.

    The image is sent to the landmark detector; detection failures are
    returned as 422 with the detector's message.
    """
    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty image file")

    filename = file.filename or "image.jpg"

    try:
        landmarks = await detector.detect(
            contents,
            filename=filename,
            content_type=file.content_type or "image/jpeg"
        )
    except DetectionError as e:
        logger.warning(f"Detection failed for {filename}: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    # Keep the source image next to the history for later review
    settings = get_settings()
    suffix = Path(filename).suffix.lower()
    if suffix not in ALLOWED_IMAGE_SUFFIXES:
        suffix = ".jpg"

    assessment_id = store.generate_id()
    image_dir = settings.image_path
    image_dir.mkdir(parents=True, exist_ok=True)
    image_path = image_dir / f"{assessment_id}{suffix}"
    image_path.write_bytes(contents)

    assessment = await _record_assessment(
        store,
        landmarks,
        image_reference=str(image_path),
        assessment_id=assessment_id
    )

    logger.info(
        f"Image analysis completed for {assessment.id}: "
        f"score={assessment.analysis.overall_score}"
    )

    return assessment


@router.get("/progress", response_model=ProgressReport)
async def get_progress(
    store: AssessmentHistoryStore = Depends(get_history_store)
):
    """Score trend and metric deviations across the stored history."""
    return build_progress_report(await store.list())


@router.get("/detector/health")
async def check_detector_health(
    detector: DetectorClient = Depends(get_detector_client)
):
    """Check whether the landmark detector is reachable."""
    healthy = await detector.health_check()

    return {
        "status": "ok" if healthy else "unavailable",
        "detector_url": detector.base_url
    }
