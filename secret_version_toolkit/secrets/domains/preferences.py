"""Persistent user preferences for secret-version-toolkit.

Stored as JSON in ~/.config/secret-version-toolkit/preferences.json. The only
preference in use today is ``config_path``.
"""
import json
from pathlib import Path
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


def preferences_file() -> Path:
    """Preferences location, resolved against the current home directory."""
    return Path.home() / ".config" / "secret-version-toolkit" / "preferences.json"


def _load_preferences() -> Dict[str, Any]:
    """
    Read the preferences file.

    Returns:
        Dictionary of preferences, or empty dict if the file is missing or unreadable
    """
    path = preferences_file()
    if not path.exists():
        return {}

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read preferences file {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {path}: expected a JSON object")
        return {}
    return data


def _save_preferences(preferences: Dict[str, Any]) -> None:
    path = preferences_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(preferences, f, indent=2)


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for ``key``, or None."""
    return _load_preferences().get(key)


def set_preference(key: str, value: str) -> None:
    """Store ``value`` under ``key``, creating the preferences file if needed."""
    preferences = _load_preferences()
    preferences[key] = value
    _save_preferences(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove ``key`` from the preferences. Missing keys are ignored."""
    preferences = _load_preferences()
    if key not in preferences:
        logger.debug(f"Preference '{key}' not found, nothing to clear")
        return
    del preferences[key]
    _save_preferences(preferences)
    logger.info(f"Preference '{key}' cleared")
