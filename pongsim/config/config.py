"""
Layered configuration for PongSim.

Values are looked up with dot-separated keys ("board.width"). Sources are
applied in this order, later ones winning:

1. Built-in defaults
2. The user file, ``~/.pongsim/config.json``
3. The file passed to ``Config``, or ``./config.json`` when none is passed
4. ``PONGSIM_<SECTION>_<KEY>`` environment variables
5. ``Config.set`` calls at runtime
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.logging import get_logger

ENV_PREFIX = "PONGSIM_"

# Keys are single words so that PONGSIM_SECTION_KEY splits unambiguously.
DEFAULTS: Dict[str, Any] = {
    "app": {
        "name": "PongSim",
        "version": "0.1.0",
        "debug": False,
        "loglevel": "INFO",
        "fps": 60,
    },
    "board": {
        "width": 500,
        "height": 300,
    },
    "ball": {
        "radius": 8.0,
        "speedx": 0.3,   # pixels per millisecond
        "speedy": 0.2,
    },
    "paddle": {
        "width": 5.0,
        "height": 80.0,
        "speed": 0.3,
        "margin": 20.0,  # gap between a paddle and its side of the board
    },
    "input": {
        "left": {"up": "w", "down": "s"},
        "right": {"up": "up", "down": "down"},
    },
    "simulation": {
        "maxdelta": 100.0,  # milliseconds
        "headlessdelta": 16.0,
    },
    "rendering": {
        "background": "#000000",
        "foreground": "#ffffff",
        "centerline": True,
    },
}


def _merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Recursively merge ``source`` into ``target``; non-dict values replace."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _set_path(data: Dict[str, Any], path: List[str], value: Any) -> None:
    """Set ``data[path[0]][path[1]]... = value``, replacing non-dicts on the way."""
    *parents, leaf = path
    for key in parents:
        if not isinstance(data.get(key), dict):
            data[key] = {}
        data = data[key]
    data[leaf] = value


def _is_setting(path: List[str]) -> bool:
    """True when ``path`` names a single value in ``DEFAULTS``, not a section."""
    node: Any = DEFAULTS
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return False
        node = node[key]
    return not isinstance(node, dict)


def parse_env_value(raw: str) -> Any:
    """
    Interpret an environment variable.

    JSON literals (numbers, true/false, quoted strings, lists) are decoded;
    yes/no/on/off become booleans; anything else stays a string.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    lowered = raw.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    return raw


class Config:
    """Dictionary of settings assembled from defaults, files and the environment."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Args:
            config_file: File layered over the user file, ``./config.json`` when None
        """
        self.logger = get_logger("config")
        self._config_file = Path(config_file) if config_file else None
        self._config: Dict[str, Any] = {}
        self._load_configuration()

    def _get_user_config_path(self) -> Path:
        return Path.home() / ".pongsim" / "config.json"

    def _load_configuration(self) -> None:
        self._config = copy.deepcopy(DEFAULTS)

        user_file = self._get_user_config_path()
        if user_file.exists():
            self._load_file(user_file)

        if self._config_file is None:
            if Path("config.json").exists():
                self._load_file(Path("config.json"))
        elif self._config_file.exists():
            self._load_file(self._config_file)
        else:
            self.logger.warning("Config file not found", extra={"path": str(self._config_file)})

        self._load_environment()

    def _load_file(self, path: Path) -> None:
        """Merge a JSON file; unreadable or malformed files are logged and skipped."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("Could not load config file", extra={
                "path": str(path),
                "error": str(e),
            })
            return

        if not isinstance(data, dict):
            self.logger.warning("Config file is not a JSON object, skipped", extra={"path": str(path)})
            return

        _merge(self._config, data)
        self.logger.debug("Loaded config file", extra={"path": str(path)})

    def _load_environment(self) -> None:
        for name, raw in os.environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            # PONGSIM_INPUT_LEFT_UP -> input.left.up
            path = name[len(ENV_PREFIX):].lower().split('_')
            if not _is_setting(path):
                self.logger.warning("Ignoring unknown environment setting", extra={"variable": name})
                continue
            _set_path(self._config, path, parse_env_value(raw))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dot-separated key.

        Returns:
            The value, or ``default`` when any part of the path is missing
        """
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dot-separated key, creating sections as needed."""
        _set_path(self._config, key.split('.'), value)

    def save(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """Write the current values as JSON, to the user file when no path is given."""
        target = Path(file_path) if file_path else self._get_user_config_path()
        target.parent.mkdir(parents=True, exist_ok=True)

        with open(target, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)

        self.logger.info("Configuration saved", extra={"path": str(target)})

    def reload(self) -> None:
        """Re-read every source, dropping runtime ``set`` calls."""
        self._load_configuration()

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def reset_to_defaults(self) -> None:
        self._config = copy.deepcopy(DEFAULTS)

    @property
    def debug(self) -> bool:
        return bool(self.get("app.debug", False))

    @property
    def board_size(self) -> tuple:
        return (self.get("board.width", 500), self.get("board.height", 300))


_config_instance: Optional[Config] = None


def get_config() -> Config:
    """The process-wide configuration, loaded on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def set_config(config: Config) -> None:
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    global _config_instance
    _config_instance = None
