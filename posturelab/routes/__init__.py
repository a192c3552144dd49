# =============================================================================
# POSTURELAB BACKEND - ROUTES PACKAGE
# =============================================================================
"""API router modules."""

from . import analysis, assessments, exercises

__all__ = ["analysis", "assessments", "exercises"]
