from __future__ import annotations

import base64
import binascii
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote_to_bytes

from .constants import COMPLETE_PERCENTAGE

logger = logging.getLogger(__name__)

REMOTE_THUMBNAIL_SCHEMES = ("http://", "https://")


def _float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class CourseSummary:
    id: str
    title: str
    thumbnail_data: str | None = None
    completion_percentage: float = 0.0
    total_videos: int = 0
    completed_videos: int = 0
    instructor: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.completion_percentage >= COMPLETE_PERCENTAGE

    def progress_label(self) -> str:
        return f"{self.completed_videos}/{self.total_videos} videos"

    def percentage_label(self) -> str:
        return f"{round(self.completion_percentage)}%"

    @property
    def thumbnail_url(self) -> str | None:
        data = (self.thumbnail_data or "").strip()
        if data.lower().startswith(REMOTE_THUMBNAIL_SCHEMES):
            return data
        return None

    def thumbnail_bytes(self) -> bytes | None:
        """Inline image bytes from a data URL or raw base64; remote URLs give None."""
        data = (self.thumbnail_data or "").strip()
        if not data or self.thumbnail_url is not None:
            return None
        if data.startswith("data:"):
            header, _sep, data = data.partition(",")
            if not header.endswith(";base64"):
                return unquote_to_bytes(data) or None
        try:
            return base64.b64decode("".join(data.split()), validate=True) or None
        except (binascii.Error, ValueError):
            return None

    @staticmethod
    def from_dict(data: dict) -> "CourseSummary":
        percentage = max(0.0, min(COMPLETE_PERCENTAGE, _float(data.get("completionPercentage"))))
        return CourseSummary(
            id=str(data["id"]),
            title=str(data.get("title") or "Untitled course"),
            thumbnail_data=data.get("thumbnailData") or None,
            completion_percentage=percentage,
            total_videos=_int(data.get("totalVideos")),
            completed_videos=_int(data.get("completedVideos")),
            instructor=data.get("instructor") or None,
        )


class CourseDirectory(ABC):
    """Read-only source of course summaries."""

    @abstractmethod
    def list_courses(self) -> list[CourseSummary]:
        ...


class StaticCourseDirectory(CourseDirectory):
    def __init__(self, courses: list[CourseSummary] | None = None) -> None:
        self._courses = list(courses or [])

    def list_courses(self) -> list[CourseSummary]:
        return list(self._courses)


class JsonCourseDirectory(CourseDirectory):
    """Course library export: a JSON list, or an object with a ``courses`` list."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def list_courses(self) -> list[CourseSummary]:
        if not self.path.exists():
            logger.info("Course library %s does not exist", self.path)
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("courses", [])
        if not isinstance(data, list):
            raise ValueError(f"Course library {self.path} is malformed")
        courses = []
        for raw in data:
            try:
                courses.append(CourseSummary.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed course in %s: %s", self.path, exc)
        return courses
