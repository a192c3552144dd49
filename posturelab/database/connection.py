# =============================================================================
# POSTURELAB BACKEND - DATABASE CONNECTION
# =============================================================================
"""
Async SQLite database connection management using aiosqlite.
"""

from typing import Optional

import aiosqlite

from posturelab.config import get_settings

# Global connection reference
_connection: aiosqlite.Connection | None = None


async def get_connection() -> aiosqlite.Connection:
    """Get or create database connection."""
    global _connection
    if _connection is None:
        database_path = get_settings().database_path
        # Ensure data directory exists
        database_path.parent.mkdir(parents=True, exist_ok=True)
        _connection = await aiosqlite.connect(database_path)
        _connection.row_factory = aiosqlite.Row
    return _connection


async def init_database(conn: Optional[aiosqlite.Connection] = None) -> None:
    """
    Initialize database schema.
    Creates all tables if they don't exist.
    """
    if conn is None:
        conn = await get_connection()

    # Assessment history, one JSON record per assessment.
    # seq preserves insertion order (newest = highest).
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS assessments (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            created_at TIMESTAMP NOT NULL,
            record TEXT NOT NULL
        )
    """)

    await conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_assessments_created ON assessments(created_at)"
    )

    await conn.commit()


async def close_database() -> None:
    """Close database connection."""
    global _connection
    if _connection:
        await _connection.close()
        _connection = None
