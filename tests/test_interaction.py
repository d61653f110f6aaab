import pytest

from roadmapper.interaction import (
    CONNECT_IDLE,
    IDLE,
    DraggingNode,
    PanningCanvas,
    PendingFrom,
)
from roadmapper.model import Node


@pytest.fixture
def interaction(controller, model):
    model.load(
        [
            Node(id="a", course_id="x", x=100.0, y=50.0),
            Node(id="b", course_id="y", x=600.0, y=50.0),
        ],
        [],
    )
    return controller.interaction


def test_drag_keeps_grab_offset(interaction, model, transform):
    transform.set_view((0.0, 0.0), 2.0)
    # node (100, 50) is drawn at (200, 100); grab it 10px inside
    assert interaction.pointer_down_on_node("a", (210.0, 110.0))
    assert interaction.mode == DraggingNode("a")
    assert model.selected_node_id == "a"

    interaction.pointer_move((310.0, 160.0))

    assert (model.nodes["a"].x, model.nodes["a"].y) == pytest.approx((150.0, 75.0))

    assert interaction.pointer_up()
    assert interaction.mode == IDLE
    interaction.pointer_move((900.0, 900.0))
    assert model.nodes["a"].x == pytest.approx(150.0)


def test_pan_follows_pointer(interaction, transform):
    transform.set_pan(30.0, 40.0)

    interaction.pointer_down_on_background((100.0, 100.0))
    assert interaction.mode == PanningCanvas()
    interaction.pointer_move((160.0, 80.0))

    assert transform.pan == (90.0, 20.0)
    assert interaction.pointer_up()
    assert transform.pan == (90.0, 20.0)


def test_background_press_clears_selection(interaction, model):
    model.set_selected("a")
    interaction.pointer_down_on_background((0.0, 0.0))
    assert model.selected_node_id is None


def test_second_press_during_session_is_ignored(interaction):
    interaction.pointer_down_on_node("a", (0.0, 0.0))
    assert not interaction.pointer_down_on_background((5.0, 5.0))
    assert interaction.mode == DraggingNode("a")


def test_pointer_up_without_session(interaction):
    assert interaction.pointer_up() is False


def test_capture_signals_pair_up(interaction):
    events = []
    interaction.capture_started.connect(lambda: events.append("start"))
    interaction.capture_released.connect(lambda: events.append("release"))

    interaction.pointer_down_on_background((0.0, 0.0))
    interaction.pointer_up()
    interaction.pointer_down_on_node("b", (0.0, 0.0))
    interaction.teardown()
    interaction.teardown()

    assert events == ["start", "release", "start", "release"]


def test_connect_two_nodes(interaction, model):
    assert interaction.click_connect("a") is None
    assert interaction.connect_mode == PendingFrom("a")

    connection = interaction.click_connect("b")

    assert connection is not None
    assert (connection.from_node_id, connection.to_node_id) == ("a", "b")
    assert interaction.connect_mode == CONNECT_IDLE


def test_connect_same_node_twice_cancels(interaction, model):
    interaction.click_connect("a")
    assert interaction.click_connect("a") is None

    assert model.connections == {}
    assert interaction.connect_mode == CONNECT_IDLE


def test_duplicate_connect_clears_pending(interaction, model):
    model.add_connection("a", "b")
    interaction.click_connect("a")

    assert interaction.click_connect("b") is None
    assert len(model.connections) == 1
    assert interaction.pending_source is None


def test_background_press_cancels_pending_connect(interaction):
    interaction.click_connect("a")
    interaction.pointer_down_on_background((0.0, 0.0))
    assert interaction.pending_source is None


def test_dragging_does_not_cancel_pending_connect(interaction):
    interaction.click_connect("a")
    interaction.pointer_down_on_node("b", (0.0, 0.0))
    interaction.pointer_up()
    assert interaction.pending_source == "a"
