# =============================================================================
# POSTURELAB BACKEND - ASSESSMENT HISTORY STORE
# =============================================================================
"""
Capped, newest-first assessment history persisted in SQLite.

Each assessment is stored as its JSON serialization (datetimes as ISO-8601
strings) and rebuilt into models on read. Unreadable storage degrades to an
empty history instead of failing. save() and delete() are the only mutators
and run one at a time per store.
"""

import asyncio
import logging
import secrets
import sqlite3
import time
from typing import Optional

import aiosqlite

from posturelab.config import get_settings
from posturelab.database.connection import get_connection
from posturelab.models import Assessment

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

ID_PREFIX = "PA"
SUFFIX_LENGTH = 6
_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_assessment_id() -> str:
    """
    Generate an assessment id such as "PA-MGV3K2Q1-7HZC4D".

    The middle part is the creation time in base-36 milliseconds, so ids
    sort by creation order; the suffix is random.
    """
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(SUFFIX_LENGTH))
    return f"{ID_PREFIX}-{timestamp}-{suffix}"


class AssessmentHistoryStore:
    """
    Assessment history store.

    - save(): prepend, then trim to `limit` entries (oldest dropped)
    - list(): all entries, newest first
    - get_by_id() / delete(): lookup and removal by id
    """

    def __init__(self, db: aiosqlite.Connection, limit: int = DEFAULT_HISTORY_LIMIT):
        self.db = db
        self.limit = limit
        self._lock = asyncio.Lock()

    @staticmethod
    def generate_id() -> str:
        """Collision-resistant, creation-sortable assessment id."""
        return generate_assessment_id()

    async def save(self, assessment: Assessment) -> None:
        """Prepend an assessment and discard entries beyond the cap."""
        async with self._lock:
            try:
                await self.db.execute(
                    "INSERT OR REPLACE INTO assessments (id, created_at, record) VALUES (?, ?, ?)",
                    (
                        assessment.id,
                        assessment.created_at.isoformat(),
                        assessment.model_dump_json()
                    )
                )
                cursor = await self.db.execute(
                    """DELETE FROM assessments WHERE seq NOT IN (
                           SELECT seq FROM assessments ORDER BY seq DESC LIMIT ?
                       )""",
                    (self.limit,)
                )
                trimmed = cursor.rowcount
                await self.db.commit()
            except sqlite3.Error:
                # Drop the uncommitted insert along with the failed trim
                await self.db.rollback()
                raise

        logger.info(f"Saved assessment {assessment.id} (score={assessment.analysis.overall_score})")
        if trimmed > 0:
            logger.debug(f"Trimmed {trimmed} assessment(s) beyond the {self.limit}-entry cap")

    async def list(self) -> list[Assessment]:
        """
        All assessments, newest first.

        Returns an empty list when the stored history cannot be read.
        """
        try:
            cursor = await self.db.execute(
                "SELECT record FROM assessments ORDER BY seq DESC"
            )
            rows = await cursor.fetchall()
            return [Assessment.model_validate_json(row[0]) for row in rows]
        except (sqlite3.Error, ValueError) as e:
            logger.warning(f"Assessment history unreadable, treating as empty: {e}")
            return []

    async def get_by_id(self, assessment_id: str) -> Optional[Assessment]:
        """Find an assessment by id."""
        for assessment in await self.list():
            if assessment.id == assessment_id:
                return assessment
        return None

    async def delete(self, assessment_id: str) -> bool:
        """
        Remove an assessment by id.

        Returns:
            True if an entry was removed, False if the id was unknown
        """
        async with self._lock:
            cursor = await self.db.execute(
                "DELETE FROM assessments WHERE id = ?",
                (assessment_id,)
            )
            removed = cursor.rowcount > 0
            await self.db.commit()

        if removed:
            logger.info(f"Deleted assessment {assessment_id}")
        return removed


# Global store reference
_store: AssessmentHistoryStore | None = None


async def get_history_store() -> AssessmentHistoryStore:
    """
    Dependency injection for the shared history store.
    Usage: store: AssessmentHistoryStore = Depends(get_history_store)
    """
    global _store
    if _store is None:
        conn = await get_connection()
        _store = AssessmentHistoryStore(conn, limit=get_settings().history_limit)
    return _store


def reset_history_store() -> None:
    """Drop the shared store (on shutdown, before the connection closes)."""
    global _store
    _store = None
