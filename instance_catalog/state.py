"""Process state — config, index cache and id generator, built once at startup.

The state is an explicit handle passed to every manager operation rather
than module globals, so each test can build its own.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .cache import InstanceIndexCache
from .config import CONFIG_FILE, AppConfig, ConfigProvider
from .logging_config import get_logger
from .store import InstanceStore
from .types import InstanceIndex

logger = get_logger(__name__)


@dataclass
class AppState:
    config: ConfigProvider
    cache: InstanceIndexCache = field(default_factory=InstanceIndexCache)
    new_id: Callable[[], uuid.UUID] = uuid.uuid4

    def store(self) -> InstanceStore:
        """Store rooted at the currently configured instances directory."""
        return InstanceStore(self.config.instances_dir())

    @classmethod
    def bootstrap(
        cls,
        config_path: Path | None = CONFIG_FILE,
        instances_dir: Path | None = None,
        new_id: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> "AppState":
        """Load config and index from disk, creating defaults where missing.

        The config file is always written back so a fresh install ends up
        with one. An existing but malformed index raises
        DeserializationError instead of being replaced.
        """
        app_config = AppConfig.load(config_path) if config_path is not None else AppConfig()
        if config_path is not None:
            app_config.save(config_path)
        # Overrides apply to this process only and are not persisted
        if instances_dir is not None:
            app_config.instances_dir = Path(instances_dir)

        store = InstanceStore(app_config.instances_dir)
        index = InstanceIndex() if store.ensure_index() else store.load_index()
        logger.info("Loaded %d instance(s) from %s", len(index.instances), store.index_path)

        return cls(
            config=ConfigProvider(app_config, path=config_path),
            cache=InstanceIndexCache(index),
            new_id=new_id,
        )
