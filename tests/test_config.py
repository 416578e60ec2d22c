import json

from core.config import MAX_QUEUE_SIZE, Settings, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "nope.json")
    assert settings == Settings()
    assert settings.max_queue_size == MAX_QUEUE_SIZE
    assert settings.output_suffix == "_encoded"


def test_save_then_load(tmp_path):
    path = tmp_path / "sub" / "settings.json"
    save_settings(Settings(output_suffix="_web", max_queue_size=10), path)
    loaded = load_settings(path)
    assert loaded.output_suffix == "_web"
    assert loaded.max_queue_size == 10


def test_unknown_and_mistyped_keys_are_dropped(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "output_suffix": "_small",
        "max_queue_size": "lots",
        "notify_on_complete": "yes",
        "window_geometry": [1, 2, 3],
    }))
    loaded = load_settings(path)
    assert loaded.output_suffix == "_small"
    assert loaded.max_queue_size == MAX_QUEUE_SIZE
    assert loaded.notify_on_complete is True


def test_non_positive_queue_size_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"max_queue_size": 0}))
    assert load_settings(path).max_queue_size == MAX_QUEUE_SIZE


def test_malformed_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path) == Settings()

    path.write_text("[1, 2]")
    assert load_settings(path) == Settings()
