import pytest
import aiosqlite
from fastapi.testclient import TestClient

from posturelab.config import get_settings
from posturelab.database.connection import init_database
from posturelab.database.history import AssessmentHistoryStore
from posturelab.models import (
    Landmark,
    PostureAnalysis,
    PostureLandmarks,
    PostureMetric,
    Severity,
)


def lm(name, x, y, confidence=0.9):
    return Landmark(name=name, x=x, y=y, confidence=confidence)


def make_landmarks(**points):
    """PostureLandmarks from name=(x, y) keyword pairs; omitted joints are None."""
    return PostureLandmarks(**{
        name: lm(name, *xy) for name, xy in points.items() if xy is not None
    })


UPRIGHT = {
    "ear": (100, 50),
    "shoulder": (102, 150),
    "hip": (100, 300),
    "knee": (101, 450),
    "ankle": (100, 600),
}


def upright(**overrides):
    points = dict(UPRIGHT)
    points.update(overrides)
    return make_landmarks(**points)


def metric(angle=0.0, severity=Severity.NORMAL, name="Metric", normal_range=(0.0, 5.0)):
    return PostureMetric(
        name=name,
        angle=angle,
        normal_range=normal_range,
        severity=severity,
        description="test",
        recommendation="test",
    )


def make_analysis(**metrics):
    """PostureAnalysis with all-normal primary metrics unless overridden."""
    from datetime import datetime, timezone

    fields = {
        "head_position": metric(),
        "shoulder_alignment": metric(),
        "pelvic_tilt": metric(angle=9.0),
        "trunk_tilt": metric(),
        "knee_alignment": metric(angle=178.0),
    }
    fields.update(metrics)
    return PostureAnalysis(
        **fields,
        overall_score=100,
        timestamp=datetime.now(timezone.utc),
    )


@pytest.fixture
def upright_landmarks():
    return upright()


@pytest.fixture
async def db(tmp_path):
    conn = await aiosqlite.connect(tmp_path / "history.db")
    await init_database(conn)
    yield conn
    await conn.close()


@pytest.fixture
async def store(db):
    return AssessmentHistoryStore(db, limit=50)


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("IMAGE_DIR", str(tmp_path / "images"))
    monkeypatch.setenv("JANITOR_ENABLED", "false")
    get_settings.cache_clear()

    from posturelab.main import app

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
