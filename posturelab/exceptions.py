# =============================================================================
# POSTURELAB BACKEND - EXCEPTIONS
# =============================================================================
"""Errors surfaced to API callers."""


class PostureLabError(Exception):
    """Base class for application errors."""


class DetectionError(PostureLabError):
    """The external landmark detector could not produce landmarks."""
