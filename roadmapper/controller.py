from __future__ import annotations

from .constants import NODE_DEFAULT_HEIGHT, NODE_DEFAULT_WIDTH, NODE_STACK_OFFSET
from .interaction import InteractionStateMachine
from .model import Connection, Node, RoadmapModel, new_id
from .transform import CanvasTransform


class RoadmapController:
    def __init__(self, model: RoadmapModel, transform: CanvasTransform) -> None:
        self.model = model
        self.transform = transform
        self.interaction = InteractionStateMachine(model, transform)

    def courses_on_canvas(self) -> set[str]:
        return {node.course_id for node in self.model.nodes.values()}

    def add_node(self, course_id: str, viewport_center: tuple[float, float]) -> Node | None:
        if self.model.node_for_course(course_id) is not None:
            return None
        center_x, center_y = self.transform.screen_to_canvas(viewport_center)
        offset = NODE_STACK_OFFSET * len(self.model.nodes)
        node = Node(
            id=new_id(),
            course_id=course_id,
            x=center_x + offset,
            y=center_y + offset,
            width=NODE_DEFAULT_WIDTH,
            height=NODE_DEFAULT_HEIGHT,
        )
        self.model.insert_node(node)
        return node

    def remove_node(self, node_id: str) -> None:
        if node_id not in self.model.nodes:
            return
        self.interaction.forget_node(node_id)
        self.model.remove_node(node_id)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self.model.move_node(node_id, x, y)

    def select_node(self, node_id: str | None) -> None:
        self.model.set_selected(node_id)

    def remove_selected(self) -> None:
        if self.model.selected_node_id is not None:
            self.remove_node(self.model.selected_node_id)

    def toggle_connect_from(self, node_id: str) -> Connection | None:
        return self.interaction.click_connect(node_id)

    def add_connection(self, from_id: str, to_id: str) -> Connection | None:
        return self.model.add_connection(from_id, to_id)

    def remove_connection(self, connection_id: str) -> None:
        self.model.remove_connection(connection_id)
