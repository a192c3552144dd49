# =============================================================================
# POSTURELAB BACKEND - LANDMARK DETECTOR CLIENT
# =============================================================================
"""
Async HTTP client for the external pose landmark detector.

The detector returns the 33 BlazePose landmarks in normalized coordinates.
The client keeps the more visible side of each joint, converts it to image
pixel space and drops low-confidence points. Detection is one-shot: failures
raise DetectionError and are never retried.
"""

import logging
from typing import Any, Optional

import cv2
import httpx
import numpy as np

from posturelab.config import get_settings
from posturelab.exceptions import DetectionError
from posturelab.models import Landmark, PostureLandmarks

logger = logging.getLogger(__name__)

NO_POSE_MESSAGE = "No pose detected in the image. Please ensure the full body is visible."

# BlazePose (left, right) indices per joint
JOINT_INDICES: dict[str, tuple[int, int]] = {
    "ear": (7, 8),
    "shoulder": (11, 12),
    "hip": (23, 24),
    "knee": (25, 26),
    "ankle": (27, 28),
}


def decode_image_size(image_bytes: bytes) -> tuple[int, int]:
    """
    Decode an image and return its (width, height).

    Raises:
        DetectionError: if the bytes are not a readable image
    """
    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None

    if image is None:
        raise DetectionError("Invalid image file")

    height, width = image.shape[:2]
    return width, height


def landmarks_from_pose(
    pose_landmarks: list[dict[str, Any]],
    width: int,
    height: int,
    min_confidence: float = 0.3
) -> PostureLandmarks:
    """
    Convert BlazePose landmarks into PostureLandmarks.

    Args:
        pose_landmarks: Detector landmarks with index, x, y and visibility
        width: Source image width in pixels
        height: Source image height in pixels
        min_confidence: Visibility below which a joint counts as missing

    Returns:
        PostureLandmarks in pixel space; ASIS/PSIS stay None
    """
    by_index = {int(lm.get("index", i)): lm for i, lm in enumerate(pose_landmarks)}

    def visibility(idx: int) -> float:
        lm = by_index.get(idx)
        return float(lm.get("visibility") or 0.0) if lm else 0.0

    joints: dict[str, Optional[Landmark]] = {}
    for name, (left, right) in JOINT_INDICES.items():
        idx = left if visibility(left) >= visibility(right) else right
        point = by_index.get(idx)
        score = visibility(idx)

        if point is None or score < min_confidence:
            joints[name] = None
            continue

        joints[name] = Landmark(
            name=name,
            x=float(point["x"]) * width,
            y=float(point["y"]) * height,
            confidence=min(score, 1.0),
        )

    return PostureLandmarks(**joints)


class DetectorClient:
    """
    Async client for the landmark detector service.

    Endpoints used:
    - POST /landmarks: image upload -> pose landmarks
    - GET /health: liveness
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = get_settings()
        self.base_url = self.settings.detector_url.rstrip("/")
        self.timeout = self.settings.detector_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    @staticmethod
    def _malformed(url: str) -> DetectionError:
        error = f"Malformed response from landmark detector at {url}"
        logger.warning(error)
        return DetectionError(error)

    async def detect(
        self,
        image_bytes: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg"
    ) -> PostureLandmarks:
        """
        Detect the five posture landmarks in an image.

        Raises:
            DetectionError: with a human-readable message on any failure
        """
        width, height = decode_image_size(image_bytes)
        url = f"{self.base_url}/landmarks"

        try:
            async with self._client(self.timeout) as client:
                response = await client.post(
                    url,
                    files={"file": (filename, image_bytes, content_type)}
                )
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException:
            error = f"Timeout connecting to landmark detector at {url}"
            logger.warning(error)
            raise DetectionError(error)

        except httpx.ConnectError:
            error = f"Cannot connect to landmark detector at {url}"
            logger.warning(error)
            raise DetectionError(error)

        except httpx.HTTPStatusError as e:
            error = f"HTTP error from {url}: {e.response.status_code}"
            logger.warning(error)
            raise DetectionError(error)

        except ValueError:
            raise self._malformed(url)

        except httpx.HTTPError as e:
            error = f"Request to landmark detector at {url} failed: {e}"
            logger.warning(error)
            raise DetectionError(error)

        if not isinstance(payload, dict):
            raise self._malformed(url)

        if not payload.get("landmarks_detected") or not payload.get("landmarks"):
            raise DetectionError(NO_POSE_MESSAGE)

        try:
            landmarks = landmarks_from_pose(
                payload["landmarks"],
                width,
                height,
                self.settings.min_landmark_confidence
            )
        except (KeyError, TypeError, AttributeError, ValueError):
            raise self._malformed(url)

        detected = [
            name for name in JOINT_INDICES
            if getattr(landmarks, name) is not None
        ]
        logger.info(f"Landmarks detected ({width}x{height}): {', '.join(detected) or 'none'}")

        return landmarks

    async def health_check(self) -> bool:
        """Check whether the detector service answers its health endpoint."""
        try:
            async with self._client(2.0) as client:
                response = await client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
