# sticky_plan/config.py
# Description: Configuration management for the sticky_plan application.
#
# Imports
import copy
import os
import sys
if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
#
# Third-Party Imports
from loguru import logger
#
#######################################################################################################################
#
# Functions:

CONFIG_ENV_VAR = "STICKY_PLAN_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "sticky_plan" / "config.toml"

CONFIG_TOML_CONTENT = """
# Configuration for sticky_plan
# This file is created on first run; edit freely, missing keys fall back to defaults.

[general]
data_dir = "~/.local/share/sticky_plan"
store_file = "sticky_plan_store.json"

[ipc]
# The store-owning process listens here; note and home windows connect to it.
host = "127.0.0.1"
port = 47615
request_timeout = 10.0

[sync]
poll_interval_seconds = 2.0
close_delay_seconds = 1.0
toast_timeout_seconds = 2.0
celebration_timeout_seconds = 3.0

[timer]
default_duration_minutes = 25
tick_interval_seconds = 1.0

[windows]
default_width = 320
default_height = 400
# Command prefix used to give each note window its own terminal.
launcher = ["x-terminal-emulator", "-e"]
# Optional command run to raise an existing window; the group id is appended.
focus_command = []

[notes]
move_separator = "\\n\\n"

[logging]
log_level = "INFO"
# Empty means no log file.
log_file = ""
rotation = "10 MB"
retention = "7 days"
"""

DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)


def deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Recursively merges update_dict into base_dict."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _get_typed_value(data_dict: Dict, key: str, default: Any, target_type: type = str) -> Any:
    """Helper to get value from dict and cast to type, with logging for type errors."""
    value = data_dict.get(key, default)
    if value is default and default is not None:
        return value
    if value is None:
        return None

    try:
        if target_type == bool:
            if isinstance(value, bool):
                return value
            return str(value).lower() in ['true', '1', 't', 'y', 'yes']
        if target_type == Path:
            return Path(value).expanduser() if value else default
        if target_type == list:
            return list(value) if isinstance(value, (list, tuple)) else default
        return target_type(value)
    except (ValueError, TypeError) as e:
        logger.warning(f"Config key '{key}' has value '{value}' which could not be converted to {target_type}. Using default: '{default}'. Error: {e}")
        return default


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


# --- Primary Configuration Loading Logic ---
_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def load_cli_config_and_ensure_existence(force_reload: bool = False) -> Dict[str, Any]:
    """
    Loads settings from the config file (``STICKY_PLAN_CONFIG`` or ~/.config/sticky_plan/config.toml).
    If the file doesn't exist, it's created with default values from CONFIG_TOML_CONTENT.
    The user's file is merged on top of those defaults; a malformed file leaves the defaults in place.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    config_path = get_config_path()
    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)

    if not config_path.exists():
        logger.info(f"Config file not found at {config_path}. Creating it with default values.")
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
            logger.info(f"Created default config file at {config_path}")
        except OSError as e:
            logger.error(f"Could not create default config file {config_path}: {e}. Using internal defaults.")
    else:
        logger.debug(f"Loading config from: {config_path}")
        try:
            with open(config_path, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML config file {config_path}: {e}. Using internal defaults.")
        except OSError as e:
            logger.error(f"Could not read config file {config_path}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    return _CONFIG_CACHE


def get_cli_setting(section: str, key: str, default: Any = None) -> Any:
    """Helper to get a specific setting from the loaded configuration."""
    config = load_cli_config_and_ensure_existence()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def get_typed_setting(section: str, key: str, default: Any, target_type: type = str) -> Any:
    section_data = load_cli_config_and_ensure_existence().get(section)
    if not isinstance(section_data, dict):
        return default
    return _get_typed_value(section_data, key, default, target_type)


# --- Derived settings ---

def get_data_dir() -> Path:
    data_dir = get_typed_setting("general", "data_dir", Path("~/.local/share/sticky_plan").expanduser(), Path)
    return data_dir.expanduser()


def get_store_path() -> Path:
    store_file = get_typed_setting("general", "store_file", "sticky_plan_store.json", str)
    return get_data_dir() / store_file


def get_store_url(host: Optional[str] = None, port: Optional[int] = None) -> str:
    host = host or get_typed_setting("ipc", "host", "127.0.0.1", str)
    port = port or get_typed_setting("ipc", "port", 47615, int)
    return f"http://{host}:{port}"


def get_request_timeout() -> float:
    return get_typed_setting("ipc", "request_timeout", 10.0, float)


def get_poll_interval() -> float:
    return get_typed_setting("sync", "poll_interval_seconds", 2.0, float)


def get_close_delay() -> float:
    return get_typed_setting("sync", "close_delay_seconds", 1.0, float)


def get_toast_timeout() -> float:
    return get_typed_setting("sync", "toast_timeout_seconds", 2.0, float)


def get_celebration_timeout() -> float:
    return get_typed_setting("sync", "celebration_timeout_seconds", 3.0, float)


def get_default_timer_minutes() -> int:
    return max(1, get_typed_setting("timer", "default_duration_minutes", 25, int))


def get_tick_interval() -> float:
    return get_typed_setting("timer", "tick_interval_seconds", 1.0, float)


def get_move_separator() -> str:
    return get_typed_setting("notes", "move_separator", "\n\n", str)


def get_window_launcher() -> List[str]:
    return get_typed_setting("windows", "launcher", ["x-terminal-emulator", "-e"], list)


def get_focus_command() -> List[str]:
    return get_typed_setting("windows", "focus_command", [], list)


def get_logging_settings() -> Dict[str, Any]:
    section = load_cli_config_and_ensure_existence().get("logging") or {}
    return {
        "log_level": _get_typed_value(section, "log_level", "INFO", str),
        "log_file": _get_typed_value(section, "log_file", "", str),
        "rotation": _get_typed_value(section, "rotation", "10 MB", str),
        "retention": _get_typed_value(section, "retention", "7 days", str),
    }

#
# End of config.py
#######################################################################################################################
