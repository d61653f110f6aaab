"""Painting of roadmap nodes, connections and the canvas background.

Everything here draws in canvas coordinates; the caller sets up the painter
with the pan/zoom transform first.
"""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QImage,
    QPainter,
    QPainterPath,
    QPen,
    QPolygonF,
)

from .constants import (
    COMPLETE_PERCENTAGE,
    CONNECTION_LINE_WIDTH,
    ERROR_COLOR,
    GRID_DOT_COLOR,
    GRID_DOT_RADIUS,
    GRID_SPACING,
    NODE_BACKGROUND_COLOR,
    NODE_BORDER_COLOR,
    NODE_BUTTON_HEIGHT,
    NODE_BUTTON_SPACING,
    NODE_CORNER_RADIUS,
    NODE_PADDING,
    NODE_SURFACE_COLOR,
    NODE_THUMBNAIL_HEIGHT,
    NODE_THUMBNAIL_WIDTH,
    PRIMARY_COLOR,
    PRIMARY_DARK_COLOR,
    SUCCESS_COLOR,
    TEXT_PRIMARY_COLOR,
    TEXT_SECONDARY_COLOR,
)
from .geometry import EdgePath

AFFORDANCE_OPEN = "open"
AFFORDANCE_CONNECT = "connect"
AFFORDANCE_REMOVE = "remove"
CONNECT_BUTTON_WIDTH = 40.0
BADGE_RADIUS = 12.0


@dataclass(frozen=True)
class NodeLayout:
    rect: QRectF
    thumbnail: QRectF
    title: QRectF
    subtitle: QRectF
    progress_text: QRectF
    progress_bar: QRectF
    open_button: QRectF
    connect_button: QRectF
    remove_button: QRectF


def node_layout(node) -> NodeLayout:
    rect = QRectF(node.x, node.y, node.width, node.height)
    left = rect.left() + NODE_PADDING
    top = rect.top() + NODE_PADDING
    inner_width = max(1.0, rect.width() - (2 * NODE_PADDING))
    thumbnail = QRectF(left, top, NODE_THUMBNAIL_WIDTH, NODE_THUMBNAIL_HEIGHT)
    text_left = thumbnail.right() + 12.0
    text_width = max(1.0, rect.right() - NODE_PADDING - text_left)
    title = QRectF(text_left, top, text_width, 20.0)
    subtitle = QRectF(text_left, top + 20.0, text_width, 18.0)
    progress_top = thumbnail.bottom() + 12.0
    progress_text = QRectF(left, progress_top, inner_width, 16.0)
    progress_bar = QRectF(left, progress_top + 20.0, inner_width, 8.0)
    button_top = rect.bottom() - NODE_PADDING - NODE_BUTTON_HEIGHT
    remove_button = QRectF(
        rect.right() - NODE_PADDING - NODE_BUTTON_HEIGHT,
        button_top,
        NODE_BUTTON_HEIGHT,
        NODE_BUTTON_HEIGHT,
    )
    connect_button = QRectF(
        remove_button.left() - NODE_BUTTON_SPACING - CONNECT_BUTTON_WIDTH,
        button_top,
        CONNECT_BUTTON_WIDTH,
        NODE_BUTTON_HEIGHT,
    )
    open_button = QRectF(
        left,
        button_top,
        max(1.0, connect_button.left() - NODE_BUTTON_SPACING - left),
        NODE_BUTTON_HEIGHT,
    )
    return NodeLayout(
        rect=rect,
        thumbnail=thumbnail,
        title=title,
        subtitle=subtitle,
        progress_text=progress_text,
        progress_bar=progress_bar,
        open_button=open_button,
        connect_button=connect_button,
        remove_button=remove_button,
    )


def affordance_at(node, point: tuple[float, float]) -> str | None:
    layout = node_layout(node)
    pos = QPointF(point[0], point[1])
    if layout.open_button.contains(pos):
        return AFFORDANCE_OPEN
    if layout.connect_button.contains(pos):
        return AFFORDANCE_CONNECT
    if layout.remove_button.contains(pos):
        return AFFORDANCE_REMOVE
    return None


def draw_grid(painter: QPainter, visible: QRectF) -> None:
    painter.save()
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(GRID_DOT_COLOR))
    start_x = int(visible.left() // GRID_SPACING)
    end_x = int(visible.right() // GRID_SPACING) + 1
    start_y = int(visible.top() // GRID_SPACING)
    end_y = int(visible.bottom() // GRID_SPACING) + 1
    # too dense to be useful when zoomed far out
    step = 1 if (end_x - start_x) * (end_y - start_y) < 40000 else 4
    for column in range(start_x, end_x + 1, step):
        for row in range(start_y, end_y + 1, step):
            painter.drawEllipse(
                QPointF(column * GRID_SPACING, row * GRID_SPACING), GRID_DOT_RADIUS, GRID_DOT_RADIUS
            )
    painter.restore()


def _draw_arrowhead(painter: QPainter, vertices, color: QColor) -> None:
    painter.save()
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(color)
    painter.drawPolygon(QPolygonF([QPointF(x, y) for x, y in vertices]))
    painter.restore()


def edge_painter_path(path: EdgePath) -> QPainterPath:
    painter_path = QPainterPath(QPointF(*path.start))
    painter_path.cubicTo(QPointF(*path.cp1), QPointF(*path.cp2), QPointF(*path.end))
    return painter_path


def draw_connection(painter: QPainter, path: EdgePath, *, hovered: bool = False) -> None:
    color = QColor(ERROR_COLOR if hovered else PRIMARY_COLOR)
    painter.save()
    pen = QPen(color)
    pen.setWidth(CONNECTION_LINE_WIDTH)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawPath(edge_painter_path(path))
    painter.restore()
    _draw_arrowhead(painter, path.arrowhead, color)


def _elided(painter: QPainter, text: str, width: float) -> str:
    metrics = QFontMetricsF(painter.font())
    return metrics.elidedText(text, Qt.TextElideMode.ElideRight, width)


def _draw_button(painter: QPainter, rect: QRectF, label: str, background: QColor, foreground: QColor) -> None:
    painter.save()
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(background)
    painter.drawRoundedRect(rect, 8, 8)
    painter.setPen(foreground)
    painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, label)
    painter.restore()


def draw_node(
    painter: QPainter,
    node,
    course,
    *,
    selected: bool = False,
    connecting: bool = False,
    thumbnail: QImage | None = None,
) -> None:
    layout = node_layout(node)
    painter.save()

    if selected:
        border = QPen(QColor(PRIMARY_COLOR), 2)
    elif connecting:
        border = QPen(QColor(SUCCESS_COLOR), 2)
    else:
        border = QPen(QColor(NODE_BORDER_COLOR), 2)
    painter.setPen(border)
    painter.setBrush(QColor(NODE_BACKGROUND_COLOR))
    painter.drawRoundedRect(layout.rect, NODE_CORNER_RADIUS, NODE_CORNER_RADIUS)

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(NODE_SURFACE_COLOR))
    painter.drawRoundedRect(layout.thumbnail, 4, 4)
    if thumbnail is not None and not thumbnail.isNull():
        painter.drawImage(layout.thumbnail, thumbnail)
    else:
        painter.setPen(QColor(TEXT_SECONDARY_COLOR))
        painter.drawText(layout.thumbnail, Qt.AlignmentFlag.AlignCenter, "▶")

    font = QFont(painter.font())
    font.setPixelSize(13)
    font.setWeight(QFont.Weight.DemiBold)
    painter.setFont(font)
    painter.setPen(QColor(TEXT_PRIMARY_COLOR))
    painter.drawText(
        layout.title,
        Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
        _elided(painter, course.title, layout.title.width()),
    )
    font.setPixelSize(11)
    font.setWeight(QFont.Weight.Normal)
    painter.setFont(font)
    painter.setPen(QColor(TEXT_SECONDARY_COLOR))
    if course.instructor:
        painter.drawText(
            layout.subtitle,
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            _elided(painter, course.instructor, layout.subtitle.width()),
        )

    painter.drawText(
        layout.progress_text,
        Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
        course.progress_label(),
    )
    painter.setPen(QColor(SUCCESS_COLOR if course.is_complete else PRIMARY_COLOR))
    painter.drawText(
        layout.progress_text,
        Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
        course.percentage_label(),
    )

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(NODE_SURFACE_COLOR))
    painter.drawRoundedRect(layout.progress_bar, 4, 4)
    fill_width = layout.progress_bar.width() * (course.completion_percentage / COMPLETE_PERCENTAGE)
    if fill_width > 0:
        fill = QRectF(layout.progress_bar)
        fill.setWidth(fill_width)
        painter.setBrush(QBrush(QColor(SUCCESS_COLOR if course.is_complete else PRIMARY_DARK_COLOR)))
        painter.drawRoundedRect(fill, 4, 4)

    primary = QColor(PRIMARY_COLOR)
    tint = QColor(primary)
    tint.setAlpha(30)
    _draw_button(painter, layout.open_button, "▶ Open", tint, primary)
    if connecting:
        _draw_button(
            painter, layout.connect_button, "→", QColor(SUCCESS_COLOR), QColor("#FFFFFF")
        )
    else:
        _draw_button(
            painter, layout.connect_button, "→", QColor(NODE_SURFACE_COLOR), QColor(TEXT_PRIMARY_COLOR)
        )
    _draw_button(
        painter, layout.remove_button, "✕", QColor(NODE_BACKGROUND_COLOR), QColor(TEXT_SECONDARY_COLOR)
    )

    if course.is_complete:
        center = QPointF(layout.rect.right(), layout.rect.top())
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(SUCCESS_COLOR))
        painter.drawEllipse(center, BADGE_RADIUS, BADGE_RADIUS)
        painter.setPen(QColor("#FFFFFF"))
        painter.drawText(
            QRectF(center.x() - BADGE_RADIUS, center.y() - BADGE_RADIUS, 2 * BADGE_RADIUS, 2 * BADGE_RADIUS),
            Qt.AlignmentFlag.AlignCenter,
            "✓",
        )
    painter.restore()
