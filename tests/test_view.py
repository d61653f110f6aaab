import pytest
from PyQt6.QtCore import QPoint, Qt
from PyQt6.QtTest import QTest

from roadmapper.items import AFFORDANCE_CONNECT, AFFORDANCE_OPEN, AFFORDANCE_REMOVE, affordance_at
from roadmapper.model import Node, Roadmap
from roadmapper.view import RoadmapCanvas

# card at (100, 100) with the default 280x160 size
OPEN_POINT = QPoint(200, 231)
CONNECT_POINT = QPoint(310, 231)
REMOVE_POINT = QPoint(351, 231)
BODY_POINT = QPoint(200, 150)


def _click(widget, point):
    QTest.mouseClick(widget, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, point)


@pytest.fixture
def canvas(make_session):
    roadmap = Roadmap.create("Canvas")
    roadmap.nodes = [
        Node("a", "python-basics", 100.0, 100.0),
        Node("b", "data-structures", 600.0, 100.0),
    ]
    session = make_session(roadmaps=[roadmap])
    widget = RoadmapCanvas(session)
    widget.resize(1000, 700)
    widget.show()
    yield widget
    widget.teardown()
    widget.close()


def test_affordance_layout():
    node = Node("a", "x", 100.0, 100.0)
    assert affordance_at(node, (200.0, 231.0)) == AFFORDANCE_OPEN
    assert affordance_at(node, (310.0, 231.0)) == AFFORDANCE_CONNECT
    assert affordance_at(node, (351.0, 231.0)) == AFFORDANCE_REMOVE
    assert affordance_at(node, (200.0, 150.0)) is None


def test_connect_affordance_links_two_nodes(canvas):
    model = canvas.session.model
    _click(canvas, CONNECT_POINT)
    assert canvas.interaction.pending_source == "a"

    _click(canvas, CONNECT_POINT + QPoint(500, 0))

    assert [(c.from_node_id, c.to_node_id) for c in model.connections.values()] == [("a", "b")]
    assert canvas.interaction.pending_source is None


def test_clicking_a_connection_removes_it(canvas):
    model = canvas.session.model
    model.add_connection("a", "b")

    # midway between the right edge of a and the left edge of b
    _click(canvas, QPoint(490, 180))

    assert model.connections == {}
    assert set(model.nodes) == {"a", "b"}


def test_remove_affordance(canvas):
    _click(canvas, REMOVE_POINT)
    assert list(canvas.session.model.nodes) == ["b"]


def test_open_affordance_requests_course(canvas):
    requested = []
    canvas.course_open_requested.connect(requested.append)

    _click(canvas, OPEN_POINT)

    assert requested == ["python-basics"]
    assert canvas.session.model.selected_node_id is None


def test_pressing_a_card_selects_and_releases(canvas):
    _click(canvas, BODY_POINT)

    assert canvas.session.model.selected_node_id == "a"
    assert canvas.interaction.session is None


def test_background_press_pans(canvas):
    canvas.interaction.pointer_down_on_background((10.0, 10.0))
    canvas.interaction.pointer_move((40.0, 25.0))
    canvas.interaction.pointer_up()
    assert canvas.transform.pan == (30.0, 15.0)


def test_delete_key_removes_selected_node(canvas):
    canvas.session.model.set_selected("b")
    QTest.keyClick(canvas, Qt.Key.Key_Delete)
    assert list(canvas.session.model.nodes) == ["a"]


def test_escape_cancels_pending_connect(canvas):
    canvas.controller.toggle_connect_from("a")
    QTest.keyClick(canvas, Qt.Key.Key_Escape)
    assert canvas.interaction.pending_source is None


def test_node_without_course_is_not_hit(canvas):
    canvas.session.model.insert_node(Node("ghost", "deleted-course", 100.0, 400.0))
    assert canvas.node_at((150.0, 450.0)) is None


def test_paint_in_every_state(canvas):
    canvas.controller.toggle_connect_from("a")
    canvas.session.model.add_connection("a", "b")
    assert not canvas.grab().isNull()

    canvas.session.delete_roadmap(canvas.session.active.id)
    assert not canvas.grab().isNull()
