import os
import time

import aiosqlite

from posturelab.config import Settings
from posturelab.database.connection import init_database
from posturelab.database.history import AssessmentHistoryStore
from posturelab.tasks.janitor import run_janitor_cleanup

from test_history import make_assessment

TWO_DAYS = 2 * 86400


def make_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'janitor.db'}",
        IMAGE_DIR=str(tmp_path / "images"),
        IMAGE_RETENTION_DAYS=1,
    )


def write_image(directory, name, age_seconds=0):
    path = directory / name
    path.write_bytes(b"\x89PNG fake image")
    if age_seconds:
        old = time.time() - age_seconds
        os.utime(path, (old, old))
    return path


async def test_deletes_only_old_orphans(tmp_path):
    settings = make_settings(tmp_path)
    image_dir = settings.image_path
    image_dir.mkdir()

    referenced = write_image(image_dir, "kept.jpg", age_seconds=TWO_DAYS)
    old_orphan = write_image(image_dir, "orphan.jpg", age_seconds=TWO_DAYS)
    fresh_orphan = write_image(image_dir, "fresh.jpg")

    async with aiosqlite.connect(settings.database_path) as conn:
        await init_database(conn)
        store = AssessmentHistoryStore(conn)
        await store.save(make_assessment(0, image_reference=str(referenced)))

    stats = run_janitor_cleanup(settings)

    assert stats["files_deleted"] == 1
    assert stats["files_kept"] == 2
    assert stats["errors"] == []
    assert not old_orphan.exists()
    assert referenced.exists()
    assert fresh_orphan.exists()


def test_unreadable_history_deletes_nothing(tmp_path):
    settings = make_settings(tmp_path)
    settings.image_path.mkdir()
    orphan = write_image(settings.image_path, "orphan.jpg", age_seconds=TWO_DAYS)

    stats = run_janitor_cleanup(settings)

    assert stats["files_deleted"] == 0
    assert len(stats["errors"]) == 1
    assert orphan.exists()


def test_missing_image_dir(tmp_path):
    stats = run_janitor_cleanup(make_settings(tmp_path))
    assert stats["files_deleted"] == 0
    assert stats["errors"] == []
