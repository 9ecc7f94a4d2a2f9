# storage_manager.py
"""""
History, memory and notes stores.

Plain JSON files next to config.json. The engine only produces the numbers;
the UI decides what ends up in here. Read/write problems are logged and the
caller gets an empty default instead of an exception.
"""""

import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

storage_dir = Path(__file__).resolve().parent.parent

HISTORY_FILE = "history.json"
MEMORY_FILE = "memory.json"
NOTES_FILE = "notes.json"

MAX_HISTORY_ITEMS = 50
MEMORY_SLOTS = ["M1", "M2", "M3", "M4"]
MEMORY_OPERATIONS = ["M+", "M-", "MR", "MC"]


@dataclass
class HistoryItem:
    id: str
    expression: str
    result: float
    timestamp: str
    note: str = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data["id"]),
            expression=data["expression"],
            result=float(data["result"]),
            timestamp=data["timestamp"],
            note=data.get("note"),
        )


def new_history_item(expression, result, note=None):
    """Stamp a result with a millisecond id and an ISO-8601 UTC timestamp."""
    return HistoryItem(
        id=str(time.time_ns() // 1_000_000),
        expression=expression,
        result=result,
        timestamp=datetime.now(timezone.utc).isoformat(),
        note=note,
    )


def _read(file_name, default):
    path = storage_dir / file_name
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return default


def _write(file_name, data):
    path = storage_dir / file_name
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        return True
    except OSError as e:
        logger.warning("Could not write %s: %s", path, e)
        return False


# -----------------------------
# History
# -----------------------------

def get_history():
    history = []
    for entry in _read(HISTORY_FILE, []):
        try:
            history.append(HistoryItem.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping broken history entry %r: %s", entry, e)
    return history


def _save_history(history):
    return _write(HISTORY_FILE, [asdict(item) for item in history[:MAX_HISTORY_ITEMS]])


def save_to_history(item):
    """Prepend an item; only the newest MAX_HISTORY_ITEMS are kept."""
    history = get_history()
    history.insert(0, item)
    _save_history(history)
    if item.note:
        save_note(item.id, item.note)
    return history[:MAX_HISTORY_ITEMS]


def remove_history_item(item_id):
    """Drop one entry and its note."""
    history = [item for item in get_history() if item.id != item_id]
    _save_history(history)
    remove_note(item_id)
    return history


def clear_history():
    _write(NOTES_FILE, {})
    return _write(HISTORY_FILE, [])


# -----------------------------
# Memory (four named slots)
# -----------------------------

def empty_memory():
    return {slot: 0.0 for slot in MEMORY_SLOTS}


def get_memory():
    memory = empty_memory()
    stored = _read(MEMORY_FILE, {})
    for slot in MEMORY_SLOTS:
        try:
            memory[slot] = float(stored.get(slot, 0.0))
        except (TypeError, ValueError, AttributeError):
            logger.warning("Ignoring invalid memory slot %s", slot)
    return memory


def save_memory(memory):
    return _write(MEMORY_FILE, {slot: memory.get(slot, 0.0) for slot in MEMORY_SLOTS})


def clear_memory():
    return save_memory(empty_memory())


def apply_memory_operation(memory, operation, slot="M1", value=0.0):
    """Return a new memory dict after M+, M- or MC on `slot`.

    MR does not change memory; use recall_memory for it.
    """
    if slot not in MEMORY_SLOTS:
        raise ValueError(f"Unknown memory slot: {slot!r}")

    updated = dict(memory)
    if operation == "M+":
        updated[slot] = updated.get(slot, 0.0) + value
    elif operation == "M-":
        updated[slot] = updated.get(slot, 0.0) - value
    elif operation == "MC":
        updated[slot] = 0.0
    elif operation != "MR":
        raise ValueError(f"Unknown memory operation: {operation!r}")
    return updated


def recall_memory(memory, slot="M1"):
    if slot not in MEMORY_SLOTS:
        raise ValueError(f"Unknown memory slot: {slot!r}")
    return memory.get(slot, 0.0)


# -----------------------------
# Notes (keyed by history id)
# -----------------------------

def get_notes():
    notes = _read(NOTES_FILE, {})
    return notes if isinstance(notes, dict) else {}


def get_note(operation_id):
    return get_notes().get(operation_id)


def save_note(operation_id, note):
    """Attach a note to a history entry. A blank note removes it."""
    note = (note or "").strip()
    if not note:
        return remove_note(operation_id)
    notes = get_notes()
    notes[operation_id] = note
    _write(NOTES_FILE, notes)
    return notes


def remove_note(operation_id):
    notes = get_notes()
    notes.pop(operation_id, None)
    _write(NOTES_FILE, notes)
    return notes
