# =============================================================================
# POSTURELAB BACKEND - JANITOR BACKGROUND TASK
# =============================================================================
"""
Janitor task for cleanup of orphaned source images.
Runs daily to delete uploaded images that no assessment references any more
(trimmed by the history cap or deleted by the user) once they are older
than the retention period.
"""

import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from posturelab.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: BackgroundScheduler | None = None


def get_scheduler() -> BackgroundScheduler:
    """Get or create the background scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler()
    return _scheduler


def start_scheduler() -> None:
    """
    Start the background scheduler with Janitor task.

    Janitor runs daily at the configured hour (default: 2:00 AM).
    """
    settings = get_settings()
    scheduler = get_scheduler()

    scheduler.add_job(
        run_janitor_cleanup,
        trigger=CronTrigger(hour=settings.janitor_schedule_hour, minute=0),
        id="janitor_cleanup",
        name="Orphaned Image Cleanup",
        replace_existing=True
    )

    scheduler.start()
    logger.info(
        f"Janitor scheduled to run daily at {settings.janitor_schedule_hour:02d}:00 "
        f"(retention: {settings.image_retention_days} days)"
    )


def shutdown_scheduler() -> None:
    """Gracefully shutdown the background scheduler."""
    global _scheduler
    if _scheduler:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Background scheduler shutdown complete")


def _referenced_images(db_path: Path) -> set[Path]:
    """Resolved paths of every image referenced by a stored assessment."""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT json_extract(record, '$.image_reference') FROM assessments"
        )
        return {
            Path(row[0]).resolve()
            for row in cursor.fetchall()
            if row[0]
        }
    finally:
        conn.close()


def run_janitor_cleanup(settings: Optional[Settings] = None) -> dict:
    """
    Run the Janitor cleanup task.

    Operations:
    1. Collect image references from the assessment history
    2. Delete unreferenced images older than the retention period
    3. Log cleanup statistics

    Returns:
        Dict with cleanup statistics
    """
    settings = settings or get_settings()
    retention_days = settings.image_retention_days
    image_dir = settings.image_path

    logger.info(f"Janitor starting cleanup (retention: {retention_days} days)")

    stats = {
        "files_deleted": 0,
        "bytes_freed": 0,
        "files_kept": 0,
        "errors": []
    }

    if not image_dir.is_dir():
        logger.info("Janitor: No image directory, nothing to clean up")
        return stats

    try:
        referenced = _referenced_images(settings.database_path)
    except sqlite3.Error as e:
        # Without the history we cannot tell orphans apart; skip this run
        error_msg = f"Janitor cleanup failed: {e}"
        logger.error(error_msg)
        stats["errors"].append(error_msg)
        return stats

    cutoff = time.time() - retention_days * 86400

    for path in image_dir.iterdir():
        if not path.is_file():
            continue

        try:
            file_stat = path.stat()
            if path.resolve() in referenced or file_stat.st_mtime > cutoff:
                stats["files_kept"] += 1
                continue

            path.unlink()
            stats["files_deleted"] += 1
            stats["bytes_freed"] += file_stat.st_size
            logger.debug(f"Deleted: {path}")

        except OSError as e:
            error_msg = f"Failed to delete {path}: {e}"
            logger.warning(error_msg)
            stats["errors"].append(error_msg)

    mb_freed = stats["bytes_freed"] / (1024 * 1024)
    logger.info(
        f"Janitor cleanup complete: {stats['files_deleted']} files deleted, "
        f"{mb_freed:.2f} MB freed, {stats['files_kept']} kept"
    )

    if stats["errors"]:
        logger.warning(f"Janitor encountered {len(stats['errors'])} errors")

    return stats
