from __future__ import annotations

import logging
from typing import Callable

import requests
from PyQt6.QtCore import QObject, QThread, pyqtSignal
from PyQt6.QtGui import QImage

from .constants import THUMBNAIL_FETCH_TIMEOUT_SECONDS, THUMBNAIL_USER_AGENT
from .courses import CourseSummary

logger = logging.getLogger(__name__)


class ThumbnailFetchError(RuntimeError):
    pass


def fetch_thumbnail(url: str) -> bytes:
    headers = {"User-Agent": THUMBNAIL_USER_AGENT}
    try:
        response = requests.get(url, headers=headers, timeout=THUMBNAIL_FETCH_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise ThumbnailFetchError(f"Could not fetch {url}: {exc}") from exc
    if response.status_code != 200:
        raise ThumbnailFetchError(f"Could not fetch {url} (HTTP {response.status_code})")
    return response.content


class ThumbnailFetchWorker(QObject):
    finished = pyqtSignal(str, object, str)

    def __init__(self, course_id: str, url: str, fetch: Callable[[str], bytes]) -> None:
        super().__init__()
        self._course_id = course_id
        self._url = url
        self._fetch = fetch

    def run(self) -> None:
        try:
            data = self._fetch(self._url)
        except ThumbnailFetchError as exc:
            self.finished.emit(self._course_id, None, str(exc))
            return
        self.finished.emit(self._course_id, data, "")


def _decode(data: bytes | None) -> QImage | None:
    if not data:
        return None
    image = QImage.fromData(data)
    return None if image.isNull() else image


class ThumbnailCache(QObject):
    """Decoded course thumbnails keyed by course id.

    Inline thumbnails are decoded on first use. Remote ones are fetched once on
    a worker thread; ``thumbnail_loaded`` fires when a fetch completes.
    """

    thumbnail_loaded = pyqtSignal(str)

    def __init__(self, fetch: Callable[[str], bytes] = fetch_thumbnail, parent=None) -> None:
        super().__init__(parent)
        self._fetch = fetch
        self._images: dict[str, QImage | None] = {}
        self._pending: dict[str, tuple[QThread, ThumbnailFetchWorker]] = {}

    def image(self, course: CourseSummary) -> QImage | None:
        if course.id in self._images:
            return self._images[course.id]
        url = course.thumbnail_url
        if url is None:
            self._images[course.id] = _decode(course.thumbnail_bytes())
            return self._images[course.id]
        if course.id not in self._pending:
            self._start_fetch(course.id, url)
        return None

    def clear(self) -> None:
        self._images.clear()

    def shutdown(self) -> None:
        for thread, _worker in self._pending.values():
            try:
                if thread.isRunning():
                    thread.quit()
                    thread.wait()
            except RuntimeError:
                # already deleted by deleteLater
                pass
        self._pending.clear()

    def _start_fetch(self, course_id: str, url: str) -> None:
        logger.debug("Fetching thumbnail for %s from %s", course_id, url)
        thread = QThread(self)
        worker = ThumbnailFetchWorker(course_id, url, self._fetch)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self._handle_fetched)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._pending[course_id] = (thread, worker)
        thread.start()

    def _handle_fetched(self, course_id: str, data, error: str) -> None:
        self._pending.pop(course_id, None)
        if error:
            logger.warning("Thumbnail for %s unavailable: %s", course_id, error)
        image = _decode(data)
        if data and image is None:
            logger.warning("Thumbnail for %s is not a readable image", course_id)
        self._images[course_id] = image
        self.thumbnail_loaded.emit(course_id)
