import json
from datetime import datetime

import pytest

from calculator import config_manager
from calculator import error as E
from calculator import storage_manager
from calculator.ScientificEngine import AngleMode


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config_manager, "config_json", path)
    monkeypatch.setattr(config_manager, "ui_strings", tmp_path / "ui_strings.json")
    return path


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setattr(storage_manager, "storage_dir", tmp_path)
    return tmp_path


# --- Settings store ---

def test_missing_config_gives_defaults(config_file):
    assert config_manager.load_setting_value("all") == config_manager.DEFAULT_SETTINGS
    assert config_manager.load_setting_value("sound_volume") == 0.3
    assert config_manager.load_angle_mode() is AngleMode.DEGREES
    assert config_manager.load_setting_description("all") == {}


def test_corrupt_config_gives_defaults(config_file):
    config_file.write_text("{not json", encoding="utf-8")
    assert config_manager.load_setting_value("angle_mode") == "deg"


def test_save_and_load(config_file):
    settings = config_manager.load_setting_value("all")
    settings["darkmode"] = True
    settings["sound_volume"] = "0.8"
    saved = config_manager.save_setting(settings)

    assert saved["sound_volume"] == 0.8
    assert json.loads(config_file.read_text(encoding="utf-8"))["darkmode"] is True
    assert config_manager.load_setting_value("darkmode") is True


def test_invalid_settings_are_not_written(config_file):
    settings = config_manager.load_setting_value("all")
    settings["sound_volume"] = 3
    assert config_manager.save_setting(settings) == {}
    assert not config_file.exists()


@pytest.mark.parametrize("key, value, code", [
    ("angle_mode", "grad", "5001"),
    ("sound_volume", "loud", "5002"),
    ("sound_volume", -0.1, "5002"),
    ("darkmode", "yes", "5003"),
    ("colour", "red", "5000"),
])
def test_validate_setting_rejects(key, value, code):
    with pytest.raises(E.ConfigurationError) as excinfo:
        config_manager.validate_setting(key, value)
    assert excinfo.value.code == code
    assert excinfo.value.key == key


def test_validate_setting_normalizes():
    assert config_manager.validate_setting("angle_mode", "RAD") == "rad"
    assert config_manager.validate_setting("angle_mode", AngleMode.DEGREES) == "deg"
    assert config_manager.validate_setting("sound_volume", "1") == 1.0
    assert config_manager.validate_setting("debug", False) is False


def test_angle_mode_round_trip(config_file):
    config_manager.save_angle_mode(AngleMode.RADIANS)
    assert config_manager.load_angle_mode() is AngleMode.RADIANS


def test_unusable_angle_mode_falls_back_to_degrees(config_file):
    config_file.write_text(json.dumps({"angle_mode": "turns"}), encoding="utf-8")
    assert config_manager.load_angle_mode() is AngleMode.DEGREES


# --- History store ---

def test_empty_history(store):
    assert storage_manager.get_history() == []


def test_new_history_item():
    item = storage_manager.new_history_item("2+2", 4.0, note="homework")
    assert item.expression == "2+2"
    assert item.result == 4.0
    assert item.note == "homework"
    assert item.id.isdigit()
    assert datetime.fromisoformat(item.timestamp).tzinfo is not None


def test_history_is_newest_first_and_capped(store):
    for n in range(storage_manager.MAX_HISTORY_ITEMS + 5):
        item = storage_manager.HistoryItem(str(n), f"{n}+0", float(n), "2026-01-01T00:00:00+00:00")
        storage_manager.save_to_history(item)

    history = storage_manager.get_history()
    assert len(history) == storage_manager.MAX_HISTORY_ITEMS
    assert history[0].id == str(storage_manager.MAX_HISTORY_ITEMS + 4)
    assert history[-1].id == "5"


def test_remove_and_clear_history(store):
    for n in range(3):
        storage_manager.save_to_history(
            storage_manager.HistoryItem(str(n), "1", 1.0, "2026-01-01T00:00:00+00:00")
        )
    remaining = storage_manager.remove_history_item("1")
    assert [item.id for item in remaining] == ["2", "0"]
    assert [item.id for item in storage_manager.get_history()] == ["2", "0"]

    storage_manager.clear_history()
    assert storage_manager.get_history() == []


def test_broken_history_file(store):
    (store / storage_manager.HISTORY_FILE).write_text("[{\"id\": 1}, 5", encoding="utf-8")
    assert storage_manager.get_history() == []

    (store / storage_manager.HISTORY_FILE).write_text(
        json.dumps([{"id": 1}, {"id": 2, "expression": "1", "result": 1, "timestamp": "t"}]),
        encoding="utf-8",
    )
    assert [item.id for item in storage_manager.get_history()] == ["2"]


# --- Memory store ---

def test_memory_defaults(store):
    assert storage_manager.get_memory() == {"M1": 0.0, "M2": 0.0, "M3": 0.0, "M4": 0.0}


def test_memory_operations():
    memory = storage_manager.empty_memory()
    memory = storage_manager.apply_memory_operation(memory, "M+", "M2", 5)
    memory = storage_manager.apply_memory_operation(memory, "M+", "M2", 2.5)
    memory = storage_manager.apply_memory_operation(memory, "M-", "M3", 1)
    assert memory["M2"] == 7.5
    assert memory["M3"] == -1
    assert storage_manager.recall_memory(memory, "M2") == 7.5

    unchanged = storage_manager.apply_memory_operation(memory, "MR", "M2")
    assert unchanged == memory

    cleared = storage_manager.apply_memory_operation(memory, "MC", "M2")
    assert cleared["M2"] == 0
    assert memory["M2"] == 7.5


def test_memory_operation_errors():
    memory = storage_manager.empty_memory()
    with pytest.raises(ValueError):
        storage_manager.apply_memory_operation(memory, "M*", "M1", 1)
    with pytest.raises(ValueError):
        storage_manager.apply_memory_operation(memory, "M+", "M9", 1)
    with pytest.raises(ValueError):
        storage_manager.recall_memory(memory, "M5")


def test_memory_persistence(store):
    memory = storage_manager.apply_memory_operation(storage_manager.empty_memory(), "M+", "M4", 42)
    storage_manager.save_memory(memory)
    assert storage_manager.get_memory()["M4"] == 42

    storage_manager.clear_memory()
    assert storage_manager.get_memory()["M4"] == 0


# --- Notes ---

def test_notes(store):
    assert storage_manager.get_notes() == {}
    storage_manager.save_note("123", "tax")
    storage_manager.save_note("456", "tip")
    assert storage_manager.get_note("123") == "tax"

    storage_manager.remove_note("123")
    storage_manager.remove_note("missing")
    assert storage_manager.get_notes() == {"456": "tip"}
    assert storage_manager.get_note("123") is None


def test_blank_note_removes_it(store):
    storage_manager.save_note("123", "  rent  ")
    assert storage_manager.get_note("123") == "rent"

    storage_manager.save_note("123", "   ")
    assert storage_manager.get_notes() == {}


def test_note_given_with_the_history_item_is_stored(store):
    item = storage_manager.new_history_item("2+2", 4.0, note="homework")
    storage_manager.save_to_history(item)
    assert storage_manager.get_note(item.id) == "homework"


def test_removing_an_entry_drops_its_note(store):
    for n in range(2):
        storage_manager.save_to_history(
            storage_manager.HistoryItem(str(n), "1", 1.0, "2026-01-01T00:00:00+00:00")
        )
    storage_manager.save_note("0", "first")
    storage_manager.save_note("1", "second")

    storage_manager.remove_history_item("0")
    assert storage_manager.get_notes() == {"1": "second"}

    storage_manager.clear_history()
    assert storage_manager.get_notes() == {}
