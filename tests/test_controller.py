import pytest

from roadmapper.constants import NODE_DEFAULT_HEIGHT, NODE_DEFAULT_WIDTH, NODE_STACK_OFFSET


def test_add_remove_cascade(controller, model):
    x = controller.add_node("X", (0.0, 0.0))
    y = controller.add_node("Y", (0.0, 0.0))
    assert controller.add_connection(x.id, y.id) is not None

    controller.remove_node(x.id)

    assert [node.course_id for node in model.nodes.values()] == ["Y"]
    assert model.connections == {}


def test_course_can_only_be_placed_once(controller, model):
    first = controller.add_node("X", (400.0, 300.0))
    second = controller.add_node("X", (10.0, 10.0))

    assert first is not None
    assert second is None
    assert [node.course_id for node in model.nodes.values()] == ["X"]
    assert controller.courses_on_canvas() == {"X"}


def test_new_nodes_are_stacked_at_viewport_center(controller, transform):
    transform.set_view((100.0, 50.0), 2.0)

    first = controller.add_node("a", (500.0, 450.0))
    second = controller.add_node("b", (500.0, 450.0))

    assert (first.x, first.y) == pytest.approx((200.0, 200.0))
    assert (second.x, second.y) == pytest.approx((200.0 + NODE_STACK_OFFSET, 200.0 + NODE_STACK_OFFSET))
    assert (first.width, first.height) == (NODE_DEFAULT_WIDTH, NODE_DEFAULT_HEIGHT)


def test_remove_selected(controller, model):
    node = controller.add_node("a", (0.0, 0.0))
    controller.select_node(node.id)

    controller.remove_selected()

    assert model.nodes == {}
    assert model.selected_node_id is None


def test_remove_selected_without_selection_is_noop(controller, model):
    controller.add_node("a", (0.0, 0.0))
    controller.remove_selected()
    assert len(model.nodes) == 1


def test_removing_pending_source_cancels_connect(controller):
    a = controller.add_node("a", (0.0, 0.0))
    controller.toggle_connect_from(a.id)
    assert controller.interaction.pending_source == a.id

    controller.remove_node(a.id)

    assert controller.interaction.pending_source is None


def test_removing_dragged_node_ends_drag(controller):
    a = controller.add_node("a", (0.0, 0.0))
    controller.interaction.pointer_down_on_node(a.id, (10.0, 10.0))

    controller.remove_node(a.id)

    assert controller.interaction.session is None
    assert controller.interaction.pointer_move((50.0, 50.0)) is False


def test_move_node(controller, model):
    node = controller.add_node("a", (0.0, 0.0))
    controller.move_node(node.id, 42.0, 7.0)
    assert (model.nodes[node.id].x, model.nodes[node.id].y) == (42.0, 7.0)
