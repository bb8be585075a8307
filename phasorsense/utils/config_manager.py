# phasorsense/utils/config_manager.py
import json
import logging
import os

logger = logging.getLogger(__name__)

# Settings live in the user's home so no install directory has to be writable
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".phasorsense")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


def get_default_settings():
    """Return a settings dict containing every known key."""
    return {
        'default_load_path': '',
        'default_save_path': '',
        'default_x_unit': 'nm',
        'csv_delimiter': ',',
        'default_harmonic': [1, 1],
        'default_component_count': 2,
        'log_level': 'INFO',
        'export': {
            'format': 'xlsx',
            'float_format': '%.8f',
        },
    }


def load_settings():
    """Load settings from the JSON file, falling back to defaults when it is missing or broken."""
    defaults = get_default_settings()
    if not os.path.exists(CONFIG_FILE):
        return defaults

    try:
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            settings = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning("Could not read %s, using defaults: %s", CONFIG_FILE, e)
        return defaults

    if not isinstance(settings, dict):
        logger.warning("Ignoring %s: top level is not an object", CONFIG_FILE)
        return defaults

    # Older files may lack keys, including nested ones
    for key, value in defaults.items():
        settings.setdefault(key, value)
        if isinstance(value, dict) and isinstance(settings[key], dict):
            for sub_key, sub_value in value.items():
                settings[key].setdefault(sub_key, sub_value)
    return settings


def save_settings(settings):
    """Write the settings dict to the JSON file."""
    try:
        os.makedirs(CONFIG_DIR, exist_ok=True)
        with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=4)
    except IOError as e:
        logger.error("Could not save settings to %s: %s", CONFIG_FILE, e)
        return False
    return True
