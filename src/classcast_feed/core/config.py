"""Configuration management for the YAML config file."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .paths import get_data_dir

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = get_data_dir() / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

DEFAULT_ORDERING: Dict[str, Any] = {
    "prioritize_unresolved": True,
    "variety_factor": 0.1,
    "cost_awareness": True,
    "dedupe_window": 5,
    "pinned_first": True,
    "recency_max_bonus": 20.0,
    "recency_decay_per_day": 1.0,
    "seed": None,
}

DEFAULT_WINDOWING: Dict[str, Any] = {
    "item_height": 600,
    "overscan": 2,
    "container_height": 1000,
}

_DEFAULT_CONFIG_TEMPLATE = """# Auto-generated default configuration for classcast-feed
ordering:
  prioritize_unresolved: true
  variety_factor: 0.1
  cost_awareness: true
  dedupe_window: 5
  pinned_first: true
  recency_max_bonus: 20
  recency_decay_per_day: 1
  seed: null

windowing:
  item_height: 600
  overscan: 2
  container_height: 1000
"""

_BOOL_KEYS = ("prioritize_unresolved", "cost_awareness", "pinned_first")


def _write_template(path: Path, content: str) -> None:
    """Write templated YAML content to disk with a trailing newline."""
    path.write_text(content.strip() + "\n", encoding="utf-8")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigManager:
    """Manages loading and validation of the YAML configuration file."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the manager and ensure a baseline config file exists."""
        path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        if not path.is_absolute():
            path = path.resolve()
        self.config_path = str(path)
        self.base_dir = str(path.parent)
        self._config = None
        self._ensure_default_config()

    def load_config(self) -> Dict[str, Any]:
        """Load the main configuration file."""
        if self._config is None:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info(f"Loaded configuration from {self.config_path}")
            except Exception as e:
                logger.error(f"Failed to load config from {self.config_path}: {e}")
                raise

        return self._config

    def _ensure_default_config(self) -> None:
        """Create the default configuration file if it is missing."""
        config_file = Path(self.config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        if not config_file.exists():
            _write_template(config_file, _DEFAULT_CONFIG_TEMPLATE)
            logger.info("Created default config.yaml at %s", config_file)

    def _section(self, name: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
        config = self.load_config()
        section = config.get(name) if isinstance(config, dict) else None
        merged = dict(defaults)
        if isinstance(section, dict):
            merged.update({k: v for k, v in section.items() if k in defaults})
        return merged

    def get_ordering_options(self) -> Dict[str, Any]:
        """Return the ``ordering`` section merged over the built-in defaults."""
        return self._section("ordering", DEFAULT_ORDERING)

    def get_windowing_options(self) -> Dict[str, Any]:
        """Return the ``windowing`` section merged over the built-in defaults."""
        return self._section("windowing", DEFAULT_WINDOWING)

    def validate_config(self) -> bool:
        """Validate the configuration file."""
        try:
            config = self.load_config()
            if not isinstance(config, dict):
                logger.error("Config root must be a mapping")
                return False

            for section in ("ordering", "windowing"):
                value = config.get(section)
                if value is not None and not isinstance(value, dict):
                    logger.error(f"Section '{section}' must be a mapping")
                    return False

            ordering = self.get_ordering_options()
            for key in _BOOL_KEYS:
                if not isinstance(ordering[key], bool):
                    logger.error(f"ordering.{key} must be true or false")
                    return False

            variety = ordering["variety_factor"]
            if not _is_number(variety) or not 0.0 <= float(variety) <= 1.0:
                logger.error("ordering.variety_factor must be a number between 0 and 1")
                return False

            window = ordering["dedupe_window"]
            if not isinstance(window, int) or isinstance(window, bool) or window < 0:
                logger.error("ordering.dedupe_window must be a non-negative integer")
                return False

            for key in ("recency_max_bonus", "recency_decay_per_day"):
                if not _is_number(ordering[key]) or ordering[key] < 0:
                    logger.error(f"ordering.{key} must be a non-negative number")
                    return False

            seed = ordering["seed"]
            if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
                logger.error("ordering.seed must be an integer or null")
                return False

            windowing = self.get_windowing_options()
            for key in ("item_height", "container_height"):
                if not _is_number(windowing[key]) or windowing[key] <= 0:
                    logger.error(f"windowing.{key} must be a positive number")
                    return False
            overscan = windowing["overscan"]
            if not isinstance(overscan, int) or isinstance(overscan, bool) or overscan < 0:
                logger.error("windowing.overscan must be a non-negative integer")
                return False

            logger.info("Configuration validation passed")
            return True

        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            return False


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_ORDERING",
    "DEFAULT_WINDOWING",
]
