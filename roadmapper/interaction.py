"""Pointer interaction for the roadmap canvas.

Two independent state variables are tracked:

* the pointer mode (``Idle``, ``DraggingNode`` or ``PanningCanvas``), driven by
  press / move / release events, and
* the connect mode (``ConnectIdle`` or ``PendingFrom``), driven by the
  "connect" affordance on each node.

A drag or pan is held in a ``DragSession`` object for exactly as long as the
pointer is down.  ``capture_started`` / ``capture_released`` tell the widget
when to grab and release the mouse.
"""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import QObject, pyqtSignal

from .model import Connection, RoadmapModel
from .transform import CanvasTransform

Point = tuple[float, float]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class DraggingNode:
    node_id: str


@dataclass(frozen=True)
class PanningCanvas:
    pass


@dataclass(frozen=True)
class ConnectIdle:
    pass


@dataclass(frozen=True)
class PendingFrom:
    node_id: str


PointerMode = Idle | DraggingNode | PanningCanvas
ConnectMode = ConnectIdle | PendingFrom

IDLE = Idle()
CONNECT_IDLE = ConnectIdle()


@dataclass
class DragSession:
    mode: DraggingNode | PanningCanvas
    anchor: Point
    active: bool = True

    def position_for(self, pointer: Point, zoom: float) -> Point:
        if isinstance(self.mode, DraggingNode):
            return (
                (pointer[0] - self.anchor[0]) / zoom,
                (pointer[1] - self.anchor[1]) / zoom,
            )
        return (pointer[0] - self.anchor[0], pointer[1] - self.anchor[1])


class InteractionStateMachine(QObject):
    mode_changed = pyqtSignal()
    connect_mode_changed = pyqtSignal()
    capture_started = pyqtSignal()
    capture_released = pyqtSignal()

    def __init__(self, model: RoadmapModel, transform: CanvasTransform) -> None:
        super().__init__()
        self.model = model
        self.transform = transform
        self.session: DragSession | None = None
        self.connect_mode: ConnectMode = CONNECT_IDLE

    @property
    def mode(self) -> PointerMode:
        if self.session is None:
            return IDLE
        return self.session.mode

    @property
    def pending_source(self) -> str | None:
        if isinstance(self.connect_mode, PendingFrom):
            return self.connect_mode.node_id
        return None

    def pointer_down_on_node(self, node_id: str, pointer: Point) -> bool:
        if self.session is not None:
            return False
        node = self.model.get_node(node_id)
        if node is None:
            return False
        zoom = self.transform.zoom
        anchor = (pointer[0] - (node.x * zoom), pointer[1] - (node.y * zoom))
        self._begin(DragSession(DraggingNode(node_id), anchor))
        self.model.set_selected(node_id)
        return True

    def pointer_down_on_background(self, pointer: Point) -> bool:
        if self.session is not None:
            return False
        pan_x, pan_y = self.transform.pan
        self._begin(DragSession(PanningCanvas(), (pointer[0] - pan_x, pointer[1] - pan_y)))
        self.model.set_selected(None)
        self.cancel_connect()
        return True

    def pointer_move(self, pointer: Point) -> bool:
        session = self.session
        if session is None or not session.active:
            return False
        x, y = session.position_for(pointer, self.transform.zoom)
        if isinstance(session.mode, DraggingNode):
            self.model.move_node(session.mode.node_id, x, y)
        else:
            self.transform.set_pan(x, y)
        return True

    def pointer_up(self) -> bool:
        return self._end()

    def click_connect(self, node_id: str) -> Connection | None:
        mode = self.connect_mode
        if isinstance(mode, ConnectIdle):
            if node_id in self.model.nodes:
                self._set_connect_mode(PendingFrom(node_id))
            return None
        if mode.node_id == node_id:
            self.cancel_connect()
            return None
        connection = self.model.add_connection(mode.node_id, node_id)
        self.cancel_connect()
        return connection

    def cancel_connect(self) -> None:
        self._set_connect_mode(CONNECT_IDLE)

    def forget_node(self, node_id: str) -> None:
        if self.pending_source == node_id:
            self.cancel_connect()
        session = self.session
        if session is not None and session.mode == DraggingNode(node_id):
            self._end()

    def teardown(self) -> None:
        self._end()
        self.cancel_connect()

    def _begin(self, session: DragSession) -> None:
        self.session = session
        self.capture_started.emit()
        self.mode_changed.emit()

    def _end(self) -> bool:
        session = self.session
        if session is None:
            return False
        session.active = False
        self.session = None
        self.capture_released.emit()
        self.mode_changed.emit()
        return True

    def _set_connect_mode(self, mode: ConnectMode) -> None:
        if mode == self.connect_mode:
            return
        self.connect_mode = mode
        self.connect_mode_changed.emit()
