"""Application configuration — where instances live and where the game is.

Config layout:
  ~/.config/instance-catalog/config.json        — {game_dir, instances_dir}
  ~/.local/share/instance-catalog/instances/    — default instances directory
"""

import json
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing_extensions import Self

from .errors import DeserializationError, IoError
from .logging_config import get_logger

logger = get_logger(__name__)

CONFIG_DIR = Path(os.path.expanduser("~/.config/instance-catalog"))
CONFIG_FILE = CONFIG_DIR / "config.json"
DATA_BASE_DIR = Path(os.path.expanduser("~/.local/share/instance-catalog"))
LOG_DIR = DATA_BASE_DIR / "logs"


def default_instances_dir() -> Path:
    return DATA_BASE_DIR / "instances"


@dataclass
class AppConfig:
    """Persisted application settings."""

    instances_dir: Path = field(default_factory=default_instances_dir)
    game_dir: Path | None = None

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def to_dict(self) -> dict:
        return {
            "game_dir": str(self.game_dir) if self.game_dir is not None else None,
            "instances_dir": str(self.instances_dir),
        }

    @classmethod
    def from_json(cls, data: str) -> Self:
        return cls.from_dict(json.loads(data))

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create from dict; a missing instances_dir falls back to the default."""
        if not isinstance(data, dict):
            raise ValueError("config document must be a JSON object")
        instances_dir = data.get("instances_dir")
        game_dir = data.get("game_dir")
        return cls(
            instances_dir=Path(instances_dir) if instances_dir else default_instances_dir(),
            game_dir=Path(game_dir) if game_dir else None,
        )

    @classmethod
    def load(cls, path: Path) -> Self:
        """Load config from a JSON file, or defaults if it doesn't exist."""
        if not path.exists():
            logger.info("No config at %s, using defaults", path)
            return cls()
        try:
            return cls.from_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise IoError(f"Failed to read config file {path}: {e}") from e
        except (ValueError, TypeError) as e:
            raise DeserializationError(f"Malformed config file {path}: {e}") from e

    def save(self, path: Path) -> None:
        """Save config to a JSON file."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.to_json() + "\n", encoding="utf-8")
        except OSError as e:
            raise IoError(f"Failed to write config file {path}: {e}") from e


class ConfigProvider:
    """Process-wide config behind its own lock.

    Operations read what they need and release the lock before touching the
    index or the cache, so this lock is never held together with the cache's.
    """

    def __init__(self, config: AppConfig, path: Path | None = None):
        self._lock = threading.Lock()
        self._config = config
        self.path = path

    def instances_dir(self) -> Path:
        with self._lock:
            return self._config.instances_dir

    def game_dir(self) -> Path | None:
        with self._lock:
            return self._config.game_dir

    def snapshot(self) -> AppConfig:
        with self._lock:
            return replace(self._config)

    def set_instances_dir(self, path: Path) -> None:
        """Point at a different instances directory. Existing data is not moved."""
        self._update(instances_dir=Path(path))
        logger.info("Instances directory set to %s", path)

    def set_game_dir(self, path: Path | None) -> None:
        self._update(game_dir=Path(path) if path is not None else None)
        logger.info("Game directory set to %s", path)

    def _update(self, **changes) -> None:
        with self._lock:
            updated = replace(self._config, **changes)
            if self.path is not None:
                updated.save(self.path)
            self._config = updated
