# =============================================================================
# POSTURELAB BACKEND
# =============================================================================
"""Side-view posture analysis and exercise recommendation service."""

__version__ = "1.0.0"
