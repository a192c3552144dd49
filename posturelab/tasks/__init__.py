# =============================================================================
# POSTURELAB BACKEND - TASKS PACKAGE
# =============================================================================
"""Background tasks module exports."""

from .janitor import start_scheduler, shutdown_scheduler, run_janitor_cleanup

__all__ = ["start_scheduler", "shutdown_scheduler", "run_janitor_cleanup"]
