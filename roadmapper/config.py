from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .constants import AUTOSAVE_DELAY_MS

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "roadmapper_config.json"
DEFAULT_STORE_NAME = "roadmaps.json"
DEFAULT_COURSE_LIBRARY_NAME = "courses.json"

DEFAULT_CONFIG = {
    "course_library_path": DEFAULT_COURSE_LIBRARY_NAME,
    "roadmap_store_path": DEFAULT_STORE_NAME,
    "autosave_delay_ms": AUTOSAVE_DELAY_MS,
    "course_url_template": "",
}


@dataclass
class EditorConfig:
    course_library_path: Path
    roadmap_store_path: Path
    autosave_delay_ms: int
    course_url_template: str
    path: Path

    def course_url(self, course_id: str) -> str | None:
        if not self.course_url_template:
            return None
        try:
            return self.course_url_template.format(course_id=course_id)
        except (KeyError, IndexError, ValueError):
            logger.warning("Invalid course_url_template %r", self.course_url_template)
            return None


def _resolve(base_dir: Path, value: object, default: str) -> Path:
    text = str(value or "").strip() or default
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def default_config(base_dir: Path) -> EditorConfig:
    return EditorConfig(
        course_library_path=base_dir / DEFAULT_COURSE_LIBRARY_NAME,
        roadmap_store_path=base_dir / DEFAULT_STORE_NAME,
        autosave_delay_ms=AUTOSAVE_DELAY_MS,
        course_url_template="",
        path=base_dir / CONFIG_FILE_NAME,
    )


def load_editor_config(base_dir: str | Path) -> EditorConfig:
    """Read the config file in ``base_dir``, creating it with defaults if missing.

    Relative paths in the file are resolved against ``base_dir``.
    """
    base_dir = Path(base_dir)
    config_path = base_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
            config_path.write_text(json.dumps(DEFAULT_CONFIG, indent=2), encoding="utf-8")
            logger.info("Created default configuration at %s", config_path)
        except OSError as exc:
            logger.warning("Could not create %s: %s", config_path, exc)
        return default_config(base_dir)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("%s is malformed, using defaults: %s", config_path, exc)
        return default_config(base_dir)
    if not isinstance(raw, dict):
        logger.warning("%s is malformed, using defaults", config_path)
        return default_config(base_dir)
    delay = raw.get("autosave_delay_ms", AUTOSAVE_DELAY_MS)
    try:
        delay = int(delay)
    except (TypeError, ValueError):
        delay = AUTOSAVE_DELAY_MS
    if delay < 0:
        delay = AUTOSAVE_DELAY_MS
    return EditorConfig(
        course_library_path=_resolve(
            base_dir, raw.get("course_library_path"), DEFAULT_COURSE_LIBRARY_NAME
        ),
        roadmap_store_path=_resolve(base_dir, raw.get("roadmap_store_path"), DEFAULT_STORE_NAME),
        autosave_delay_ms=delay,
        course_url_template=str(raw.get("course_url_template", "") or "").strip(),
        path=config_path,
    )
