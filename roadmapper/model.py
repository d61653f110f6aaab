from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
import logging
import uuid

from PyQt6.QtCore import QObject, pyqtSignal

from .constants import DEFAULT_ZOOM, NODE_DEFAULT_HEIGHT, NODE_DEFAULT_WIDTH
from .transform import clamp_zoom

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Node:
    id: str
    course_id: str
    x: float
    y: float
    width: float = NODE_DEFAULT_WIDTH
    height: float = NODE_DEFAULT_HEIGHT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @staticmethod
    def from_dict(data: dict) -> "Node":
        return Node(
            id=str(data["id"]),
            course_id=str(data["courseId"]),
            x=_float(data.get("x"), 0.0),
            y=_float(data.get("y"), 0.0),
            width=_float(data.get("width"), NODE_DEFAULT_WIDTH),
            height=_float(data.get("height"), NODE_DEFAULT_HEIGHT),
        )


@dataclass(frozen=True)
class Connection:
    id: str
    from_node_id: str
    to_node_id: str

    def to_dict(self) -> dict:
        return {"id": self.id, "fromNodeId": self.from_node_id, "toNodeId": self.to_node_id}

    @staticmethod
    def from_dict(data: dict) -> "Connection":
        return Connection(
            id=str(data["id"]),
            from_node_id=str(data["fromNodeId"]),
            to_node_id=str(data["toNodeId"]),
        )


def valid_connections(nodes: list[Node], connections: list[Connection]) -> list[Connection]:
    """Drop self loops, duplicate ordered pairs and dangling endpoints."""
    node_ids = {node.id for node in nodes}
    seen: set[tuple[str, str]] = set()
    kept: list[Connection] = []
    for connection in connections:
        pair = (connection.from_node_id, connection.to_node_id)
        if connection.from_node_id == connection.to_node_id or pair in seen:
            continue
        if connection.from_node_id not in node_ids or connection.to_node_id not in node_ids:
            continue
        seen.add(pair)
        kept.append(connection)
    return kept


@dataclass
class Roadmap:
    id: str
    title: str
    nodes: list[Node] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    pan: tuple[float, float] = (0.0, 0.0)
    zoom: float = DEFAULT_ZOOM
    created_at: str = ""
    updated_at: str = ""

    @staticmethod
    def create(title: str) -> "Roadmap":
        now = utc_timestamp()
        return Roadmap(id=new_id(), title=title, created_at=now, updated_at=now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "nodes": [node.to_dict() for node in self.nodes],
            "connections": [connection.to_dict() for connection in self.connections],
            "pan": {"x": self.pan[0], "y": self.pan[1]},
            "zoom": self.zoom,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @staticmethod
    def from_dict(data: dict) -> "Roadmap":
        nodes: list[Node] = []
        seen_courses: set[str] = set()
        for raw in data.get("nodes") or []:
            try:
                node = Node.from_dict(raw)
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed node in roadmap %s: %s", data.get("id"), exc)
                continue
            if node.course_id in seen_courses:
                continue
            seen_courses.add(node.course_id)
            nodes.append(node)
        connections = []
        for raw in data.get("connections") or []:
            try:
                connections.append(Connection.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning(
                    "Skipping malformed connection in roadmap %s: %s", data.get("id"), exc
                )
        pan = data.get("pan") or {}
        zoom = _float(data.get("zoom"), 0.0) or DEFAULT_ZOOM
        return Roadmap(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            nodes=nodes,
            connections=valid_connections(nodes, connections),
            pan=(_float(pan.get("x"), 0.0), _float(pan.get("y"), 0.0)),
            zoom=clamp_zoom(zoom),
            created_at=str(data.get("createdAt", "")),
            updated_at=str(data.get("updatedAt", "")),
        )


class RoadmapModel(QObject):
    """Nodes and connections of the active roadmap."""

    model_reset = pyqtSignal()
    nodes_changed = pyqtSignal()
    connections_changed = pyqtSignal()
    selection_changed = pyqtSignal()

    def __init__(self) -> None:
        super().__init__()
        self.nodes: dict[str, Node] = {}
        self.connections: dict[str, Connection] = {}
        self.selected_node_id: str | None = None

    def load(self, nodes: list[Node], connections: list[Connection]) -> None:
        self.nodes = {node.id: replace(node) for node in nodes}
        self.connections = {
            connection.id: connection
            for connection in valid_connections(list(self.nodes.values()), connections)
        }
        self.selected_node_id = None
        self.model_reset.emit()

    def clear(self) -> None:
        self.load([], [])

    def is_empty(self) -> bool:
        return not self.nodes and not self.connections

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def node_for_course(self, course_id: str) -> Node | None:
        for node in self.nodes.values():
            if node.course_id == course_id:
                return node
        return None

    def insert_node(self, node: Node) -> None:
        self.nodes[node.id] = node
        self.nodes_changed.emit()

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.nodes.get(node_id)
        if node is None:
            return
        self.nodes[node_id] = replace(node, x=float(x), y=float(y))
        self.nodes_changed.emit()

    def remove_node(self, node_id: str) -> tuple[Node, list[Connection]] | None:
        node = self.nodes.pop(node_id, None)
        if node is None:
            return None
        removed = [
            connection
            for connection in self.connections.values()
            if node_id in (connection.from_node_id, connection.to_node_id)
        ]
        for connection in removed:
            del self.connections[connection.id]
        if self.selected_node_id == node_id:
            self.set_selected(None)
        self.nodes_changed.emit()
        if removed:
            self.connections_changed.emit()
        return node, removed

    def has_connection(self, from_id: str, to_id: str) -> bool:
        return any(
            connection.from_node_id == from_id and connection.to_node_id == to_id
            for connection in self.connections.values()
        )

    def add_connection(self, from_id: str, to_id: str) -> Connection | None:
        if from_id == to_id or self.has_connection(from_id, to_id):
            return None
        if from_id not in self.nodes or to_id not in self.nodes:
            return None
        connection = Connection(id=new_id(), from_node_id=from_id, to_node_id=to_id)
        self.connections[connection.id] = connection
        self.connections_changed.emit()
        return connection

    def remove_connection(self, connection_id: str) -> Connection | None:
        connection = self.connections.pop(connection_id, None)
        if connection is not None:
            self.connections_changed.emit()
        return connection

    def set_selected(self, node_id: str | None) -> None:
        if node_id is not None and node_id not in self.nodes:
            node_id = None
        if node_id == self.selected_node_id:
            return
        self.selected_node_id = node_id
        self.selection_changed.emit()

    def snapshot(self, roadmap: Roadmap, pan: tuple[float, float], zoom: float) -> Roadmap:
        return replace(
            roadmap,
            nodes=[replace(node) for node in self.nodes.values()],
            connections=list(self.connections.values()),
            pan=(float(pan[0]), float(pan[1])),
            zoom=float(zoom),
            updated_at=utc_timestamp(),
        )
