from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from PyQt6.QtCore import QSettings, QSignalBlocker, QStandardPaths, Qt, QUrl, pyqtSignal
from PyQt6.QtGui import QAction, QDesktopServices
from PyQt6.QtWidgets import (
    QApplication,
    QComboBox,
    QDockWidget,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from .config import EditorConfig, load_editor_config
from .constants import ZOOM_STEP
from .courses import JsonCourseDirectory
from .persistence import JsonRoadmapStore
from .session import RoadmapSession
from .view import RoadmapCanvas

logger = logging.getLogger(__name__)

APP_NAME = "Roadmapper"
STATUS_TIMEOUT_MS = 5000
COURSE_ID_ROLE = Qt.ItemDataRole.UserRole


def app_data_dir() -> Path:
    location = QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.AppDataLocation
    )
    if not location:
        location = str(Path.home() / ".roadmapper")
    return Path(location)


class CoursePanel(QWidget):
    """Lists every course; double-click places it on the canvas."""

    add_requested = pyqtSignal(str)

    def __init__(self, session: RoadmapSession, parent=None) -> None:
        super().__init__(parent)
        self.session = session
        self.list = QListWidget(self)
        self.list.setObjectName("course_list")
        self.list.itemActivated.connect(self._on_item_activated)
        self.empty_label = QLabel("No courses found. Import courses into the library first.", self)
        self.empty_label.setWordWrap(True)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.addWidget(self.empty_label)
        layout.addWidget(self.list)

        session.courses_changed.connect(self.refresh)
        session.active_roadmap_changed.connect(self.refresh)
        session.model.model_reset.connect(self.refresh)
        session.model.nodes_changed.connect(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        placed = self.session.controller.courses_on_canvas()
        has_roadmap = self.session.active is not None
        with QSignalBlocker(self.list):
            self.list.clear()
            for course in self.session.courses:
                added = course.id in placed
                label = f"{course.title}  ({course.percentage_label()})"
                if added:
                    label += "  [Added]"
                item = QListWidgetItem(label)
                item.setData(COURSE_ID_ROLE, course.id)
                item.setToolTip(course.progress_label())
                if added or not has_roadmap:
                    item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEnabled)
                self.list.addItem(item)
        self.empty_label.setVisible(not self.session.courses and not self.session.is_loading)

    def selected_course_id(self) -> str | None:
        item = self.list.currentItem()
        if item is None or not item.flags() & Qt.ItemFlag.ItemIsEnabled:
            return None
        return item.data(COURSE_ID_ROLE)

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        if item.flags() & Qt.ItemFlag.ItemIsEnabled:
            self.add_requested.emit(item.data(COURSE_ID_ROLE))


class MainWindow(QMainWindow):
    def __init__(self, config: EditorConfig, session: RoadmapSession | None = None) -> None:
        super().__init__()
        self.settings = QSettings(APP_NAME, APP_NAME)
        self.config = config
        if session is None:
            session = RoadmapSession(
                JsonRoadmapStore(config.roadmap_store_path),
                JsonCourseDirectory(config.course_library_path),
                config.autosave_delay_ms,
                self,
            )
        self.session = session

        self.canvas = RoadmapCanvas(self.session, self)
        self.canvas.course_open_requested.connect(self.open_course)
        self.setCentralWidget(self.canvas)

        self.course_panel = CoursePanel(self.session)
        self.course_panel.add_requested.connect(self.add_course)
        self.course_dock = QDockWidget("Courses", self)
        self.course_dock.setObjectName("courses_dock")
        self.course_dock.setWidget(self.course_panel)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.course_dock)

        self.zoom_label = QLabel(self)
        self.statusBar().addPermanentWidget(self.zoom_label)

        self._setup_actions()
        self._connect_session_signals()
        self._refresh_roadmaps()
        self._update_zoom_label()
        self._update_title()
        self._restore_window_settings()

    def _setup_actions(self) -> None:
        roadmap_menu = self.menuBar().addMenu("Roadmap")
        edit_menu = self.menuBar().addMenu("Edit")
        view_menu = self.menuBar().addMenu("View")

        toolbar = QToolBar("Roadmap", self)
        toolbar.setObjectName("roadmap_toolbar")
        self.addToolBar(toolbar)

        self.roadmap_combo = QComboBox(self)
        self.roadmap_combo.setMinimumWidth(220)
        self.roadmap_combo.setPlaceholderText("No roadmap selected")
        self.roadmap_combo.currentIndexChanged.connect(self._on_roadmap_selected)
        toolbar.addWidget(self.roadmap_combo)

        self.new_action = QAction("New Roadmap", self)
        self.new_action.setShortcut("Ctrl+N")
        self.new_action.triggered.connect(self.new_roadmap)
        roadmap_menu.addAction(self.new_action)
        toolbar.addAction(self.new_action)

        self.delete_roadmap_action = QAction("Delete Roadmap", self)
        self.delete_roadmap_action.triggered.connect(self.delete_roadmap)
        roadmap_menu.addAction(self.delete_roadmap_action)
        toolbar.addAction(self.delete_roadmap_action)

        self.save_action = QAction("Save", self)
        self.save_action.setShortcut("Ctrl+S")
        self.save_action.triggered.connect(self.save_roadmap)
        roadmap_menu.addAction(self.save_action)

        roadmap_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        roadmap_menu.addAction(quit_action)

        self.add_course_action = QAction("Add Selected Course", self)
        self.add_course_action.setShortcut("Ctrl+Return")
        self.add_course_action.triggered.connect(self._add_selected_course)
        edit_menu.addAction(self.add_course_action)

        self.delete_node_action = QAction("Remove Selected Course", self)
        self.delete_node_action.triggered.connect(self.session.controller.remove_selected)
        edit_menu.addAction(self.delete_node_action)

        self.cancel_connect_action = QAction("Cancel Connection", self)
        self.cancel_connect_action.triggered.connect(
            self.session.controller.interaction.cancel_connect
        )
        edit_menu.addAction(self.cancel_connect_action)

        toolbar.addSeparator()
        zoom_out_action = QAction("Zoom Out", self)
        zoom_out_action.setShortcut("Ctrl+-")
        zoom_out_action.triggered.connect(self.zoom_out)
        view_menu.addAction(zoom_out_action)
        toolbar.addAction(zoom_out_action)

        zoom_in_action = QAction("Zoom In", self)
        zoom_in_action.setShortcut("Ctrl+=")
        zoom_in_action.triggered.connect(self.zoom_in)
        view_menu.addAction(zoom_in_action)
        toolbar.addAction(zoom_in_action)

        reset_view_action = QAction("Reset View", self)
        reset_view_action.setShortcut("Ctrl+0")
        reset_view_action.triggered.connect(self.session.transform.reset_view)
        view_menu.addAction(reset_view_action)
        toolbar.addAction(reset_view_action)

        view_menu.addSeparator()
        self.course_panel_action = self.course_dock.toggleViewAction()
        self.course_panel_action.setText("Course Panel")
        view_menu.addAction(self.course_panel_action)

    def _connect_session_signals(self) -> None:
        self.session.roadmaps_changed.connect(self._refresh_roadmaps)
        self.session.active_roadmap_changed.connect(self._refresh_roadmaps)
        self.session.active_roadmap_changed.connect(self._update_title)
        self.session.loading_changed.connect(self._on_loading_changed)
        self.session.save_failed.connect(self._show_status)
        self.session.transform.view_changed.connect(self._update_zoom_label)

    def _refresh_roadmaps(self) -> None:
        active = self.session.active
        with QSignalBlocker(self.roadmap_combo):
            self.roadmap_combo.clear()
            for roadmap in self.session.list_roadmaps():
                self.roadmap_combo.addItem(roadmap.title, roadmap.id)
            index = self.roadmap_combo.findData(active.id) if active is not None else -1
            self.roadmap_combo.setCurrentIndex(index)
        has_roadmap = active is not None
        self.delete_roadmap_action.setEnabled(has_roadmap)
        self.save_action.setEnabled(has_roadmap)
        self.add_course_action.setEnabled(has_roadmap)

    def _on_roadmap_selected(self, index: int) -> None:
        if index < 0:
            return
        roadmap_id = self.roadmap_combo.itemData(index)
        if roadmap_id:
            self.session.load_roadmap(roadmap_id)

    def _on_loading_changed(self, loading: bool) -> None:
        self.roadmap_combo.setEnabled(not loading)
        self.new_action.setEnabled(not loading)
        if loading:
            self.statusBar().showMessage("Loading roadmaps...")
        else:
            self.statusBar().clearMessage()
            self._refresh_roadmaps()
            self.course_panel.refresh()

    def _update_title(self) -> None:
        active = self.session.active
        if active is None:
            self.setWindowTitle(APP_NAME)
        else:
            self.setWindowTitle(f"{active.title} - {APP_NAME}")

    def _update_zoom_label(self) -> None:
        self.zoom_label.setText(f"{round(self.session.transform.zoom * 100)}%")

    def _show_status(self, message: str) -> None:
        self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def new_roadmap(self) -> None:
        title, ok = QInputDialog.getText(self, "New Roadmap", "Roadmap name:")
        if not ok:
            return
        roadmap = self.session.create_roadmap(title)
        if roadmap is None:
            self._show_status("A roadmap needs a name.")

    def delete_roadmap(self) -> None:
        active = self.session.active
        if active is None:
            return
        if (
            QMessageBox.question(
                self,
                "Confirm Delete Roadmap",
                f"Delete roadmap '{active.title}'? This cannot be undone.",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                QMessageBox.StandardButton.No,
            )
            != QMessageBox.StandardButton.Yes
        ):
            return
        self.session.delete_roadmap(active.id)

    def save_roadmap(self) -> None:
        self.session.autosave.cancel()
        if self.session.save_roadmap():
            self._show_status("Roadmap saved.")

    def add_course(self, course_id: str) -> None:
        if self.session.active is None:
            return
        node = self.session.controller.add_node(course_id, self.canvas.viewport_center())
        if node is None:
            self._show_status("That course is already on the roadmap.")

    def _add_selected_course(self) -> None:
        course_id = self.course_panel.selected_course_id()
        if course_id is not None:
            self.add_course(course_id)

    def open_course(self, course_id: str) -> None:
        course = self.session.course(course_id)
        title = course.title if course is not None else course_id
        url = self.config.course_url(course_id)
        if url is None:
            self._show_status(f"No player configured to open '{title}'.")
            return
        logger.info("Opening course %s at %s", course_id, url)
        if not QDesktopServices.openUrl(QUrl(url)):
            self._show_status(f"Could not open '{title}'.")

    def zoom_in(self) -> None:
        self.session.transform.set_zoom_delta(ZOOM_STEP)

    def zoom_out(self) -> None:
        self.session.transform.set_zoom_delta(-ZOOM_STEP)

    def closeEvent(self, event) -> None:
        self.canvas.teardown()
        self.session.shutdown()
        self._save_window_settings()
        event.accept()

    def _restore_window_settings(self) -> None:
        geometry = self.settings.value("window/geometry")
        if geometry:
            self.restoreGeometry(geometry)
        else:
            self.resize(1200, 800)
        state = self.settings.value("window/state")
        if state:
            self.restoreState(state)
        visible = self.settings.value("view/show_course_panel", True)
        if not isinstance(visible, bool):
            visible = str(visible).lower() in ("1", "true", "yes")
        self.course_dock.setVisible(visible)

    def _save_window_settings(self) -> None:
        self.settings.setValue("window/geometry", self.saveGeometry())
        self.settings.setValue("window/state", self.saveState())
        self.settings.setValue("view/show_course_panel", self.course_dock.isVisible())
        self.settings.sync()


def run() -> int:
    logging.basicConfig(
        level=os.environ.get("ROADMAPPER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)
    config = load_editor_config(app_data_dir())
    logger.info("Using roadmap store %s", config.roadmap_store_path)
    window = MainWindow(config)
    window.show()
    window.session.start()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
