"""
Pytest configuration and fixtures for the roadmap editor tests.

This module provides:
- A single offscreen QApplication for the whole run
- Sample course summaries
- In-memory stores and a ready-to-use session factory
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from roadmapper.controller import RoadmapController
from roadmapper.courses import CourseSummary, StaticCourseDirectory
from roadmapper.model import RoadmapModel
from roadmapper.persistence import MemoryRoadmapStore
from roadmapper.session import RoadmapSession
from roadmapper.transform import CanvasTransform


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def courses():
    return [
        CourseSummary(
            id="python-basics",
            title="Python Basics",
            completion_percentage=40.0,
            total_videos=10,
            completed_videos=4,
            instructor="Ada",
        ),
        CourseSummary(
            id="data-structures",
            title="Data Structures",
            completion_percentage=100.0,
            total_videos=8,
            completed_videos=8,
        ),
        CourseSummary(id="algorithms", title="Algorithms"),
    ]


@pytest.fixture
def model(qapp):
    return RoadmapModel()


@pytest.fixture
def transform(qapp):
    return CanvasTransform()


@pytest.fixture
def controller(model, transform):
    return RoadmapController(model, transform)


@pytest.fixture
def store():
    return MemoryRoadmapStore()


@pytest.fixture
def make_session(qapp, courses, store):
    """Build a session over the in-memory store, loaded synchronously."""
    created = []

    def _make(*, roadmaps=None, last_active_id=None, delay_ms=1000, directory=None, target=None):
        target = target or store
        for roadmap in roadmaps or []:
            target.put_roadmap(roadmap)
        if last_active_id is not None:
            target.set_last_active_id(last_active_id)
        session = RoadmapSession(
            target,
            directory or StaticCourseDirectory(courses),
            autosave_delay_ms=delay_ms,
        )
        session.start(background=False)
        created.append(session)
        return session

    yield _make

    for session in created:
        session.autosave.cancel()
        session.shutdown()
