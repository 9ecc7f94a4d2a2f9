# config_manager.py
"""""
Settings store: reads and writes config.json / ui_strings.json at the project root.

The engine never reads settings itself; the UI loads the angle mode here and
passes it to MathEngine on every call.
"""""

import json
import logging
from pathlib import Path

from . import error as E
from .ScientificEngine import AngleMode

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent.parent / "config.json"
ui_strings = Path(__file__).resolve().parent.parent / "ui_strings.json"

DEFAULT_SETTINGS = {
    "angle_mode": "deg",
    "sound_enabled": True,
    "sound_volume": 0.3,
    "darkmode": False,
    "shift_to_copy": True,
    "debug": False,
}

BOOLEAN_SETTINGS = ["sound_enabled", "darkmode", "shift_to_copy", "debug"]


def _read_json(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {}


def load_setting_value(key_value):
    settings_dict = dict(DEFAULT_SETTINGS)
    settings_dict.update(_read_json(config_json))

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def load_setting_description(key_value):
    settings_dict = _read_json(ui_strings)

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def validate_setting(key_value, value):
    """Return the value in its stored form, or raise E.ConfigurationError."""
    if key_value == "angle_mode":
        try:
            return AngleMode.parse(value).value
        except ValueError:
            raise E.ConfigurationError(E.ERROR_MESSAGES["5001"] + str(value), code="5001", key=key_value)

    elif key_value == "sound_volume":
        try:
            volume = float(value)
        except (TypeError, ValueError):
            raise E.ConfigurationError(E.ERROR_MESSAGES["5002"] + str(value), code="5002", key=key_value)
        if not 0.0 <= volume <= 1.0:
            raise E.ConfigurationError(E.ERROR_MESSAGES["5002"] + str(value), code="5002", key=key_value)
        return volume

    elif key_value in BOOLEAN_SETTINGS:
        if not isinstance(value, bool):
            raise E.ConfigurationError(E.ERROR_MESSAGES["5003"] + key_value, code="5003", key=key_value)
        return value

    raise E.ConfigurationError(E.ERROR_MESSAGES["5000"] + str(key_value), code="5000", key=key_value)


def save_setting(settings_dict):
    try:
        validated = {key: validate_setting(key, value) for key, value in settings_dict.items()}
    except E.ConfigurationError as e:
        logger.warning("Setting '%s' not saved: %s", e.key, e.message)
        return {}

    try:
        with open(config_json, 'w', encoding='utf-8') as f:
            json.dump(validated, f, indent=4)
            return validated

    except OSError as e:
        logger.warning("Could not write %s: %s", config_json, e)
        return {}


def load_angle_mode():
    """Persisted angle mode; falls back to degrees if the stored value is unusable."""
    try:
        return AngleMode.parse(load_setting_value("angle_mode"))
    except ValueError:
        return AngleMode.DEGREES


def save_angle_mode(angle_mode):
    all_settings = load_setting_value("all")
    all_settings["angle_mode"] = AngleMode.parse(angle_mode).value
    return save_setting(all_settings)
