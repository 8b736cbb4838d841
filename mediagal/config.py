# file: mediagal/config.py
#
# Settings file loading. Same shape as the settings.json the gallery has
# always read:
#
#   {"config": {"server": {"port": 8080, "host": ""},
#               "icon_command": null, "alias_command": null,
#               "max_image_size": 2000, "ffmpeg": "ffmpeg", "log_level": "INFO"},
#    "folders": ["/data/media"],
#    "ignores": ["*.tmp"]}

# ===== MG:BEGIN_IMPORTS =====
import json
import logging
from typing import NamedTuple, Optional

from mediagal.errors import ConfigError
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)

# ===== MG:BEGIN_CONSTANTS =====
PORT = 8080
MAX_IMAGE_SIZE = 2000
MOVIE_EXTS = {'.mkv', '.mov', '.avi', '.webm', '.mp4', '.wmv', '.flv'}
MARKDOWN_EXTS = {'.md', '.markdown'}
DEFAULT_SETTINGS_FILE = 'settings.json'
# ===== MG:END_CONSTANTS =====


class Settings(NamedTuple):
    folders: tuple
    ignores: tuple = ()
    port: int = PORT
    host: str = ''
    icon_command: Optional[str] = None
    alias_command: Optional[str] = None
    max_image_size: int = MAX_IMAGE_SIZE
    ffmpeg: str = 'ffmpeg'
    log_level: str = 'INFO'


def _str_list(raw, key):
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(raw)


def _opt_str(section, key):
    value = section.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"'config.{key}' must be a string")
    return value or None


def _int(value, key, default):
    if value is None:
        return default
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer")
    return value


def parse_settings(data) -> Settings:
    """Validate an already-decoded settings document."""
    if not isinstance(data, dict):
        raise ConfigError("settings must be a JSON object")
    section = data.get('config')
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigError("'config' must be an object")
    server = section.get('server')
    if server is None:
        server = {}
    if not isinstance(server, dict):
        raise ConfigError("'config.server' must be an object")

    folders = _str_list(data.get('folders'), 'folders')
    if not folders:
        raise ConfigError("'folders' must name at least one directory")

    port = _int(server.get('port'), 'config.server.port', PORT)
    if not 0 <= port <= 65535:
        raise ConfigError(f"port out of range: {port}")
    max_size = _int(section.get('max_image_size'), 'config.max_image_size', MAX_IMAGE_SIZE)
    if max_size < 0:
        raise ConfigError("'config.max_image_size' must not be negative")

    return Settings(
        folders=folders,
        ignores=_str_list(data.get('ignores'), 'ignores'),
        port=port,
        host=_opt_str(server, 'host') or '',
        icon_command=_opt_str(section, 'icon_command'),
        alias_command=_opt_str(section, 'alias_command'),
        max_image_size=max_size,
        ffmpeg=_opt_str(section, 'ffmpeg') or 'ffmpeg',
        log_level=(_opt_str(section, 'log_level') or 'INFO').upper(),
    )


def load_settings(path=DEFAULT_SETTINGS_FILE) -> Settings:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read settings file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"settings file {path} is not valid JSON: {e}") from e
    settings = parse_settings(data)
    log.debug("settings loaded from %s: %d folders, %d ignore patterns",
              path, len(settings.folders), len(settings.ignores))
    return settings
