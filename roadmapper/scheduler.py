from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import QObject, QTimer

from .constants import AUTOSAVE_DELAY_MS


class AutosaveScheduler(QObject):
    """Debounces save requests onto one single-shot timer.

    Every ``schedule()`` cancels the outstanding request and hands out a new
    token; only the request holding the current token may fire.  The callback
    reads live state when it runs, nothing is captured at schedule time.
    """

    def __init__(self, callback: Callable[[], None], delay_ms: int = AUTOSAVE_DELAY_MS, parent=None) -> None:
        super().__init__(parent)
        self._callback = callback
        self._token = 0
        self._pending_token: int | None = None
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(delay_ms)))
        self._timer.timeout.connect(self._on_timeout)

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @property
    def is_pending(self) -> bool:
        return self._pending_token is not None

    def schedule(self) -> int:
        self._timer.stop()
        self._token += 1
        self._pending_token = self._token
        self._timer.start()
        return self._token

    def cancel(self) -> None:
        self._timer.stop()
        self._pending_token = None

    def flush(self) -> bool:
        if self._pending_token is None:
            return False
        self._fire(self._pending_token)
        return True

    def _on_timeout(self) -> None:
        if self._pending_token is not None:
            self._fire(self._pending_token)

    def _fire(self, token: int) -> None:
        if token != self._pending_token:
            return
        self._timer.stop()
        self._pending_token = None
        self._callback()
