import json

from roadmapper.config import CONFIG_FILE_NAME, DEFAULT_CONFIG, load_editor_config
from roadmapper.constants import AUTOSAVE_DELAY_MS


def test_first_run_writes_defaults(tmp_path):
    config = load_editor_config(tmp_path)

    assert json.loads((tmp_path / CONFIG_FILE_NAME).read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert config.roadmap_store_path == tmp_path / "roadmaps.json"
    assert config.course_library_path == tmp_path / "courses.json"
    assert config.autosave_delay_ms == AUTOSAVE_DELAY_MS
    assert config.course_url("x") is None


def test_reads_existing_file(tmp_path):
    absolute = tmp_path / "elsewhere" / "store.json"
    (tmp_path / CONFIG_FILE_NAME).write_text(
        json.dumps(
            {
                "course_library_path": "library/courses.json",
                "roadmap_store_path": str(absolute),
                "autosave_delay_ms": "250",
                "course_url_template": "https://learn.example.com/player/{course_id}",
            }
        ),
        encoding="utf-8",
    )

    config = load_editor_config(tmp_path)

    assert config.course_library_path == tmp_path / "library" / "courses.json"
    assert config.roadmap_store_path == absolute
    assert config.autosave_delay_ms == 250
    assert config.course_url("abc") == "https://learn.example.com/player/abc"


def test_invalid_values_are_normalized(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text(
        json.dumps({"autosave_delay_ms": -3, "course_url_template": "{missing}"}),
        encoding="utf-8",
    )
    config = load_editor_config(tmp_path)

    assert config.autosave_delay_ms == AUTOSAVE_DELAY_MS
    assert config.course_url("abc") is None


def test_malformed_file_falls_back_to_defaults(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text("not json", encoding="utf-8")
    config = load_editor_config(tmp_path)
    assert config.roadmap_store_path == tmp_path / "roadmaps.json"
