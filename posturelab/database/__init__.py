# =============================================================================
# POSTURELAB BACKEND - DATABASE PACKAGE
# =============================================================================
"""Database module exports."""

from .connection import init_database, close_database
from .history import (
    AssessmentHistoryStore,
    generate_assessment_id,
    get_history_store,
    reset_history_store,
)

__all__ = [
    "init_database",
    "close_database",
    "AssessmentHistoryStore",
    "generate_assessment_id",
    "get_history_store",
    "reset_history_store",
]
