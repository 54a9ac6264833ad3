"""Shared fixtures for instance catalog tests."""

import itertools
import uuid
from pathlib import Path

import pytest

from instance_catalog.cache import InstanceIndexCache
from instance_catalog.config import CONFIG_FILE, AppConfig, ConfigProvider
from instance_catalog.state import AppState
from instance_catalog.store import InstanceStore


# Snapshot the real config file so we can detect accidental writes.
_REAL_CONFIG_SNAPSHOT: bytes | None = CONFIG_FILE.read_bytes() if CONFIG_FILE.exists() else None
_REAL_CONFIG_EXISTED = CONFIG_FILE.exists()


@pytest.fixture(autouse=True)
def _guard_real_config():
    """Fail the test if it accidentally wrote to the real config file."""
    yield
    now_exists = CONFIG_FILE.exists()
    if not _REAL_CONFIG_EXISTED and now_exists:
        pytest.fail(f"Test created the real config file: {CONFIG_FILE}")
    if _REAL_CONFIG_EXISTED and now_exists and CONFIG_FILE.read_bytes() != _REAL_CONFIG_SNAPSHOT:
        pytest.fail(f"Test modified the real config file: {CONFIG_FILE}")


class SequentialIds:
    """Deterministic id generator: UUIDs with int values 1, 2, 3..."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.issued: list[uuid.UUID] = []

    def __call__(self) -> uuid.UUID:
        new = uuid.UUID(int=next(self._counter))
        self.issued.append(new)
        return new


@pytest.fixture
def instances_dir(tmp_path) -> Path:
    """An instances directory holding an empty index file."""
    d = tmp_path / "instances"
    InstanceStore(d).ensure_index()
    return d


@pytest.fixture
def store(instances_dir) -> InstanceStore:
    return InstanceStore(instances_dir)


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def state(tmp_path, instances_dir, ids) -> AppState:
    """Isolated process state over a temp instances directory."""
    config = ConfigProvider(AppConfig(instances_dir=instances_dir), path=tmp_path / "config.json")
    return AppState(config=config, cache=InstanceIndexCache(), new_id=ids)


@pytest.fixture
def png_image(tmp_path) -> Path:
    path = tmp_path / "cover.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(256)))
    return path
