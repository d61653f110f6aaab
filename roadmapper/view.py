from __future__ import annotations

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QPainter
from PyQt6.QtWidgets import QWidget

from .constants import (
    CANVAS_BACKGROUND_COLOR,
    CONNECTION_HIT_TOLERANCE,
    SUCCESS_COLOR,
    TEXT_SECONDARY_COLOR,
    ZOOM_STEP,
)
from .geometry import EdgePath, connection_path, distance_to_curve
from .items import (
    AFFORDANCE_CONNECT,
    AFFORDANCE_OPEN,
    AFFORDANCE_REMOVE,
    affordance_at,
    draw_connection,
    draw_grid,
    draw_node,
)
from .thumbnails import ThumbnailCache

WHEEL_ZOOM_STEP = ZOOM_STEP / 2.0
HINT_MARGIN = 16


class RoadmapCanvas(QWidget):
    course_open_requested = pyqtSignal(str)

    def __init__(self, session, parent=None) -> None:
        super().__init__(parent)
        self.session = session
        self.model = session.model
        self.transform = session.transform
        self.controller = session.controller
        self.interaction = session.controller.interaction
        self.thumbnails = ThumbnailCache(parent=self)
        self._hover_connection_id: str | None = None
        self._has_grab = False

        self.model.model_reset.connect(self.update)
        self.model.nodes_changed.connect(self.update)
        self.model.connections_changed.connect(self._on_connections_changed)
        self.model.selection_changed.connect(self.update)
        self.transform.view_changed.connect(self.update)
        self.interaction.connect_mode_changed.connect(self.update)
        self.interaction.mode_changed.connect(self._reset_cursor)
        self.interaction.capture_started.connect(self._grab_pointer)
        self.interaction.capture_released.connect(self._release_pointer)
        self.session.loading_changed.connect(self._on_loading_changed)
        self.session.courses_changed.connect(self._on_courses_changed)
        self.session.active_roadmap_changed.connect(self.update)
        self.thumbnails.thumbnail_loaded.connect(self._on_thumbnail_loaded)

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(400, 300)
        self._reset_cursor()

    def viewport_center(self) -> tuple[float, float]:
        return (self.width() / 2.0, self.height() / 2.0)

    def teardown(self) -> None:
        self.interaction.teardown()
        self._release_pointer()
        self.thumbnails.shutdown()

    def node_at(self, point: tuple[float, float]):
        pos = QPointF(point[0], point[1])
        for node in reversed(list(self.model.nodes.values())):
            if self.session.course(node.course_id) is None:
                continue
            if QRectF(node.x, node.y, node.width, node.height).contains(pos):
                return node
        return None

    def connection_at(self, point: tuple[float, float]) -> str | None:
        tolerance = CONNECTION_HIT_TOLERANCE / max(0.01, self.transform.zoom)
        best_id = None
        best_distance = tolerance
        for connection_id, path in self._connection_paths():
            dist = distance_to_curve(point, path)
            if dist <= best_distance:
                best_id = connection_id
                best_distance = dist
        return best_id

    def _connection_paths(self) -> list[tuple[str, EdgePath]]:
        paths = []
        for connection in self.model.connections.values():
            source = self.model.get_node(connection.from_node_id)
            target = self.model.get_node(connection.to_node_id)
            if source is None or target is None:
                continue
            paths.append((connection.id, connection_path(source, target)))
        return paths

    def _on_courses_changed(self) -> None:
        self.thumbnails.clear()
        self.update()

    def _on_loading_changed(self, _loading: bool) -> None:
        self.update()

    def _on_thumbnail_loaded(self, _course_id: str) -> None:
        self.update()

    def _on_connections_changed(self) -> None:
        if self._hover_connection_id not in self.model.connections:
            self._hover_connection_id = None
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(CANVAS_BACKGROUND_COLOR))
        if self.session.is_loading:
            self._draw_message(painter, "Loading roadmap...", "")
            painter.end()
            return

        zoom = self.transform.zoom
        pan_x, pan_y = self.transform.pan
        left, top = self.transform.screen_to_canvas((0.0, 0.0))
        visible = QRectF(left, top, self.width() / zoom, self.height() / zoom)

        painter.save()
        painter.translate(pan_x, pan_y)
        painter.scale(zoom, zoom)
        draw_grid(painter, visible)
        for connection_id, path in self._connection_paths():
            draw_connection(painter, path, hovered=connection_id == self._hover_connection_id)
        pending = self.interaction.pending_source
        for node in self.model.nodes.values():
            course = self.session.course(node.course_id)
            if course is None:
                continue
            draw_node(
                painter,
                node,
                course,
                selected=node.id == self.model.selected_node_id,
                connecting=node.id == pending,
                thumbnail=self.thumbnails.image(course),
            )
        painter.restore()

        if self.session.active is None:
            self._draw_message(
                painter, "No roadmap selected", "Create a roadmap from the Roadmap menu"
            )
        elif not self.model.nodes:
            self._draw_message(
                painter,
                "Start building your roadmap",
                "Add courses from the course panel to place them here",
            )
        if pending is not None:
            self._draw_hint(painter, "Click another course node to create a connection")
        painter.end()

    def _draw_message(self, painter: QPainter, title: str, detail: str) -> None:
        painter.save()
        font = QFont(self.font())
        font.setPointSizeF(font.pointSizeF() * 1.4)
        font.setWeight(QFont.Weight.DemiBold)
        painter.setFont(font)
        painter.setPen(QColor(TEXT_SECONDARY_COLOR))
        rect = QRectF(self.rect())
        painter.drawText(rect.adjusted(0, -24, 0, -24), Qt.AlignmentFlag.AlignCenter, title)
        if detail:
            painter.setFont(self.font())
            painter.drawText(rect.adjusted(0, 24, 0, 24), Qt.AlignmentFlag.AlignCenter, detail)
        painter.restore()

    def _draw_hint(self, painter: QPainter, text: str) -> None:
        painter.save()
        metrics = painter.fontMetrics()
        width = metrics.horizontalAdvance(text) + 32
        height = metrics.height() + 16
        rect = QRectF(
            (self.width() - width) / 2.0, self.height() - height - HINT_MARGIN, width, height
        )
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(SUCCESS_COLOR))
        painter.drawRoundedRect(rect, 8, 8)
        painter.setPen(QColor("#FFFFFF"))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)
        painter.restore()

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.MouseButton.LeftButton or self.session.active is None:
            super().mousePressEvent(event)
            return
        pos = event.position()
        pointer = (pos.x(), pos.y())
        canvas_point = self.transform.screen_to_canvas(pointer)
        node = self.node_at(canvas_point)
        if node is not None:
            affordance = affordance_at(node, canvas_point)
            if affordance == AFFORDANCE_CONNECT:
                self.controller.toggle_connect_from(node.id)
            elif affordance == AFFORDANCE_REMOVE:
                self.controller.remove_node(node.id)
            elif affordance == AFFORDANCE_OPEN:
                self.course_open_requested.emit(node.course_id)
            else:
                self.interaction.pointer_down_on_node(node.id, pointer)
            event.accept()
            return
        connection_id = self.connection_at(canvas_point)
        if connection_id is not None:
            self.controller.remove_connection(connection_id)
            event.accept()
            return
        self.interaction.pointer_down_on_background(pointer)
        event.accept()

    def mouseDoubleClickEvent(self, event) -> None:
        # the preceding press was already handled
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        pos = event.position()
        pointer = (pos.x(), pos.y())
        if self.interaction.pointer_move(pointer):
            event.accept()
            return
        if self.session.active is not None and not self.session.is_loading:
            canvas_point = self.transform.screen_to_canvas(pointer)
            hovered = None if self.node_at(canvas_point) else self.connection_at(canvas_point)
            if hovered != self._hover_connection_id:
                self._hover_connection_id = hovered
                self.update()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self.interaction.pointer_up():
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:
        delta = event.angleDelta()
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            if delta.y():
                self.transform.set_zoom_delta(WHEEL_ZOOM_STEP if delta.y() > 0 else -WHEEL_ZOOM_STEP)
            event.accept()
            return
        if self.session.active is not None and self.interaction.session is None:
            pan_x, pan_y = self.transform.pan
            self.transform.set_pan(pan_x + (delta.x() / 2.0), pan_y + (delta.y() / 2.0))
            event.accept()
            return
        super().wheelEvent(event)

    def keyPressEvent(self, event) -> None:
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.controller.remove_selected()
            event.accept()
            return
        if event.key() == Qt.Key.Key_Escape and self.interaction.pending_source is not None:
            self.interaction.cancel_connect()
            event.accept()
            return
        super().keyPressEvent(event)

    def hideEvent(self, event) -> None:
        self.interaction.pointer_up()
        super().hideEvent(event)

    def _grab_pointer(self) -> None:
        if not self._has_grab and self.isVisible():
            self.grabMouse()
            self._has_grab = True
        self._reset_cursor()

    def _release_pointer(self) -> None:
        if self._has_grab:
            self.releaseMouse()
            self._has_grab = False

    def _reset_cursor(self) -> None:
        if self.interaction.session is not None:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        else:
            self.setCursor(Qt.CursorShape.OpenHandCursor)
