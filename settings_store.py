import copy
import json
import logging
import os


logger = logging.getLogger(__name__)

SETTINGS_FILE = os.getenv("USER_SETTINGS_FILE", "user_settings.json")

LANGUAGES = {
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ru": "Русский",
    "ja": "日本語",
    "ko": "한국어",
    "zh": "中文",
}
THEMES = ("light", "dark", "system")
PROFILE_VISIBILITY = ("public", "private")
MIN_SESSION_TIMEOUT = 5
MAX_SESSION_TIMEOUT = 120


DEFAULT_SETTINGS = {
    "notifications": {
        "email": True,
        "push": True,
        "qr_expiry": True,
    },
    "privacy": {
        "profile_visibility": "private",
        "share_history": False,
    },
    "security": {
        "two_factor": False,
        "session_timeout": 30,
    },
    "language": "en",
    "theme": "system",
}


def default_settings():
    return copy.deepcopy(DEFAULT_SETTINGS)


def normalize_settings(data):
    """Merge *data* over the defaults, dropping unknown keys and bad values."""
    settings = default_settings()
    if not isinstance(data, dict):
        return settings

    for group in ("notifications", "privacy", "security"):
        values = data.get(group)
        if isinstance(values, dict):
            for key in settings[group]:
                if key in values:
                    settings[group][key] = values[key]

    for key in ("email", "push", "qr_expiry"):
        settings["notifications"][key] = bool(settings["notifications"][key])
    settings["privacy"]["share_history"] = bool(settings["privacy"]["share_history"])
    settings["security"]["two_factor"] = bool(settings["security"]["two_factor"])
    if settings["privacy"]["profile_visibility"] not in PROFILE_VISIBILITY:
        settings["privacy"]["profile_visibility"] = DEFAULT_SETTINGS["privacy"]["profile_visibility"]

    try:
        timeout = int(settings["security"]["session_timeout"])
    except (TypeError, ValueError):
        timeout = DEFAULT_SETTINGS["security"]["session_timeout"]
    settings["security"]["session_timeout"] = min(max(timeout, MIN_SESSION_TIMEOUT), MAX_SESSION_TIMEOUT)

    if data.get("language") in LANGUAGES:
        settings["language"] = data["language"]
    if data.get("theme") in THEMES:
        settings["theme"] = data["theme"]
    return settings


def _read_all(path):
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as file_obj:
            data = json.load(file_obj)
    except (OSError, ValueError) as exc:
        # Fall back to defaults if settings file is invalid.
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(user_id, path=None):
    path = path or SETTINGS_FILE
    return normalize_settings(_read_all(path).get(str(user_id)))


def save_settings(user_id, settings, path=None):
    path = path or SETTINGS_FILE
    merged = normalize_settings(settings)
    data = _read_all(path)
    data[str(user_id)] = merged
    with open(path, "w", encoding="utf-8") as file_obj:
        json.dump(data, file_obj, indent=2, ensure_ascii=False)
    return merged
