from __future__ import annotations

import logging
from dataclasses import dataclass, field

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from .constants import AUTOSAVE_DELAY_MS
from .controller import RoadmapController
from .courses import CourseDirectory, CourseSummary
from .model import Roadmap, RoadmapModel
from .persistence import RoadmapStore
from .scheduler import AutosaveScheduler
from .transform import CanvasTransform

logger = logging.getLogger(__name__)


@dataclass
class InitialState:
    courses: list[CourseSummary] = field(default_factory=list)
    roadmaps: list[Roadmap] = field(default_factory=list)
    last_active_id: str | None = None


def load_initial_state(directory: CourseDirectory, store: RoadmapStore) -> InitialState:
    """Fetch courses and roadmaps; each failure degrades to an empty result."""
    state = InitialState()
    try:
        state.courses = directory.list_courses()
    except Exception:
        logger.exception("Failed to load courses")
    try:
        state.roadmaps = store.list_roadmaps()
        state.last_active_id = store.last_active_id()
    except Exception:
        logger.exception("Failed to load roadmaps")
        state.roadmaps = []
        state.last_active_id = None
    return state


class InitialLoadWorker(QObject):
    finished = pyqtSignal(object)

    def __init__(self, directory: CourseDirectory, store: RoadmapStore) -> None:
        super().__init__()
        self._directory = directory
        self._store = store

    def run(self) -> None:
        self.finished.emit(load_initial_state(self._directory, self._store))


class RoadmapSession(QObject):
    loading_changed = pyqtSignal(bool)
    courses_changed = pyqtSignal()
    roadmaps_changed = pyqtSignal()
    active_roadmap_changed = pyqtSignal()
    save_failed = pyqtSignal(str)

    def __init__(
        self,
        store: RoadmapStore,
        directory: CourseDirectory,
        autosave_delay_ms: int = AUTOSAVE_DELAY_MS,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.store = store
        self.directory = directory
        self.model = RoadmapModel()
        self.transform = CanvasTransform()
        self.controller = RoadmapController(self.model, self.transform)
        self.autosave = AutosaveScheduler(self._autosave, autosave_delay_ms, self)
        self.courses: list[CourseSummary] = []
        self.courses_by_id: dict[str, CourseSummary] = {}
        self.roadmaps: list[Roadmap] = []
        self.active: Roadmap | None = None
        self.is_loading = False
        self._suppress_changes = False
        self._load_thread: QThread | None = None
        self._load_worker: InitialLoadWorker | None = None

        self.model.nodes_changed.connect(self._on_roadmap_changed)
        self.model.connections_changed.connect(self._on_roadmap_changed)
        self.transform.view_changed.connect(self._on_roadmap_changed)

    def start(self, background: bool = True) -> None:
        self._set_loading(True)
        if not background:
            self._apply_initial_state(load_initial_state(self.directory, self.store))
            return
        thread = QThread(self)
        worker = InitialLoadWorker(self.directory, self.store)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self._apply_initial_state)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._load_thread = thread
        self._load_worker = worker
        thread.start()

    def shutdown(self) -> None:
        self.autosave.flush()
        self.controller.interaction.teardown()
        thread = self._load_thread
        if thread is not None:
            try:
                if thread.isRunning():
                    thread.quit()
                    thread.wait()
            except RuntimeError:
                # already deleted by deleteLater
                pass
        self._load_thread = None
        self._load_worker = None

    def course(self, course_id: str) -> CourseSummary | None:
        return self.courses_by_id.get(course_id)

    def list_roadmaps(self) -> list[Roadmap]:
        return list(self.roadmaps)

    def create_roadmap(self, title: str) -> Roadmap | None:
        title = (title or "").strip()
        if not title:
            return None
        self.autosave.flush()
        roadmap = Roadmap.create(title)
        self._put(roadmap)
        self.roadmaps.append(roadmap)
        self.roadmaps_changed.emit()
        self._activate(roadmap)
        return roadmap

    def delete_roadmap(self, roadmap_id: str) -> None:
        if not any(r.id == roadmap_id for r in self.roadmaps):
            return
        was_active = self.active is not None and self.active.id == roadmap_id
        if was_active:
            self.autosave.cancel()
        try:
            self.store.delete_roadmap(roadmap_id)
        except Exception as exc:
            logger.exception("Failed to delete roadmap %s", roadmap_id)
            self.save_failed.emit(f"Could not delete roadmap: {exc}")
        self.roadmaps = [r for r in self.roadmaps if r.id != roadmap_id]
        self.roadmaps_changed.emit()
        if was_active:
            self._activate(self.roadmaps[0] if self.roadmaps else None)

    def load_roadmap(self, roadmap_id: str) -> Roadmap | None:
        if self.active is not None and self.active.id == roadmap_id:
            return self.active
        self.autosave.flush()
        roadmap = next((r for r in self.roadmaps if r.id == roadmap_id), None)
        if roadmap is None:
            return None
        self._activate(roadmap)
        return roadmap

    def save_roadmap(self, snapshot: Roadmap | None = None) -> bool:
        if snapshot is None:
            if self.active is None:
                return False
            snapshot = self.model.snapshot(self.active, self.transform.pan, self.transform.zoom)
        if not self._put(snapshot):
            return False
        if self.active is not None and self.active.id == snapshot.id:
            self.active = snapshot
        self.roadmaps = [snapshot if r.id == snapshot.id else r for r in self.roadmaps]
        return True

    def _put(self, roadmap: Roadmap) -> bool:
        try:
            self.store.put_roadmap(roadmap)
        except Exception as exc:
            logger.exception("Failed to save roadmap %s", roadmap.id)
            self.save_failed.emit(f"Could not save roadmap: {exc}")
            return False
        logger.debug("Saved roadmap %s (%s)", roadmap.id, roadmap.title)
        return True

    def _autosave(self) -> None:
        if self.active is None:
            return
        if self.model.is_empty():
            logger.debug("Skipping autosave of empty roadmap %s", self.active.id)
            return
        self.save_roadmap()

    def _on_roadmap_changed(self) -> None:
        if self._suppress_changes or self.active is None:
            return
        self.autosave.schedule()

    def _activate(self, roadmap: Roadmap | None) -> None:
        self.controller.interaction.teardown()
        self._suppress_changes = True
        try:
            if roadmap is None:
                self.model.clear()
                self.transform.reset_view()
            else:
                self.model.load(roadmap.nodes, roadmap.connections)
                self.transform.set_view(roadmap.pan, roadmap.zoom)
        finally:
            self._suppress_changes = False
        self.active = roadmap
        if roadmap is not None:
            try:
                self.store.set_last_active_id(roadmap.id)
            except Exception:
                logger.exception("Failed to record last active roadmap")
        self.active_roadmap_changed.emit()

    def _apply_initial_state(self, state: InitialState) -> None:
        self.courses = list(state.courses)
        self.courses_by_id = {course.id: course for course in self.courses}
        self.roadmaps = list(state.roadmaps)
        self.courses_changed.emit()
        self.roadmaps_changed.emit()
        active = next((r for r in self.roadmaps if r.id == state.last_active_id), None)
        if active is None and self.roadmaps:
            active = self.roadmaps[0]
        self._activate(active)
        self._set_loading(False)

    def _set_loading(self, loading: bool) -> None:
        if self.is_loading == loading:
            return
        self.is_loading = loading
        self.loading_changed.emit(loading)
