from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal

from .constants import DEFAULT_ZOOM, MAX_ZOOM, MIN_ZOOM


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))


class CanvasTransform(QObject):
    """Pan offset and zoom factor mapping screen pixels to canvas space."""

    view_changed = pyqtSignal()

    def __init__(self, pan: tuple[float, float] = (0.0, 0.0), zoom: float = DEFAULT_ZOOM) -> None:
        super().__init__()
        self.pan_x = float(pan[0])
        self.pan_y = float(pan[1])
        self.zoom = clamp_zoom(zoom)

    @property
    def pan(self) -> tuple[float, float]:
        return (self.pan_x, self.pan_y)

    def screen_to_canvas(self, point: tuple[float, float]) -> tuple[float, float]:
        return (
            (point[0] - self.pan_x) / self.zoom,
            (point[1] - self.pan_y) / self.zoom,
        )

    def canvas_to_screen(self, point: tuple[float, float]) -> tuple[float, float]:
        return (
            (point[0] * self.zoom) + self.pan_x,
            (point[1] * self.zoom) + self.pan_y,
        )

    def set_zoom_delta(self, delta: float) -> float:
        self._apply(self.pan_x, self.pan_y, clamp_zoom(self.zoom + delta))
        return self.zoom

    def set_pan(self, x: float, y: float) -> None:
        self._apply(float(x), float(y), self.zoom)

    def set_view(self, pan: tuple[float, float], zoom: float) -> None:
        self._apply(float(pan[0]), float(pan[1]), clamp_zoom(zoom))

    def reset_view(self) -> None:
        self._apply(0.0, 0.0, DEFAULT_ZOOM)

    def _apply(self, pan_x: float, pan_y: float, zoom: float) -> None:
        if pan_x == self.pan_x and pan_y == self.pan_y and zoom == self.zoom:
            return
        self.pan_x = pan_x
        self.pan_y = pan_y
        self.zoom = zoom
        self.view_changed.emit()
