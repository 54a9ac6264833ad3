"""Tests for config module."""

import json
import threading
from pathlib import Path

import pytest

from instance_catalog.config import AppConfig, ConfigProvider, default_instances_dir
from instance_catalog.errors import DeserializationError


class TestAppConfig:
    def test_defaults(self):
        c = AppConfig()
        assert c.instances_dir == default_instances_dir()
        assert c.game_dir is None

    def test_roundtrip(self, tmp_path):
        c = AppConfig(instances_dir=tmp_path / "inst", game_dir=tmp_path / "game")
        assert AppConfig.from_json(c.to_json()) == c

    def test_missing_fields_default(self):
        c = AppConfig.from_dict({"game_dir": "/games/bg3"})
        assert c.game_dir == Path("/games/bg3")
        assert c.instances_dir == default_instances_dir()

    def test_load_nonexistent(self, tmp_path):
        assert AppConfig.load(tmp_path / "nope.json") == AppConfig()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        original = AppConfig(instances_dir=tmp_path / "inst")
        original.save(path)
        assert json.loads(path.read_text())["game_dir"] is None
        assert AppConfig.load(path) == original

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_load_malformed(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        with pytest.raises(DeserializationError):
            AppConfig.load(path)


class TestConfigProvider:
    def test_getters(self, tmp_path):
        p = ConfigProvider(AppConfig(instances_dir=tmp_path, game_dir=tmp_path / "g"))
        assert p.instances_dir() == tmp_path
        assert p.game_dir() == tmp_path / "g"

    def test_setters_persist(self, tmp_path):
        path = tmp_path / "config.json"
        p = ConfigProvider(AppConfig(instances_dir=tmp_path / "a"), path=path)
        p.set_instances_dir(tmp_path / "b")
        p.set_game_dir(tmp_path / "game")
        loaded = AppConfig.load(path)
        assert loaded.instances_dir == tmp_path / "b"
        assert loaded.game_dir == tmp_path / "game"

    def test_setters_without_path(self, tmp_path):
        p = ConfigProvider(AppConfig(instances_dir=tmp_path / "a"))
        p.set_instances_dir(tmp_path / "b")
        assert p.instances_dir() == tmp_path / "b"
        assert list(tmp_path.iterdir()) == []

    def test_clear_game_dir(self, tmp_path):
        p = ConfigProvider(AppConfig(instances_dir=tmp_path, game_dir=tmp_path / "g"))
        p.set_game_dir(None)
        assert p.game_dir() is None

    def test_snapshot_is_copy(self, tmp_path):
        p = ConfigProvider(AppConfig(instances_dir=tmp_path / "a"))
        snap = p.snapshot()
        snap.instances_dir = tmp_path / "changed"
        assert p.instances_dir() == tmp_path / "a"

    def test_concurrent_setters(self, tmp_path):
        p = ConfigProvider(AppConfig(instances_dir=tmp_path / "start"), path=tmp_path / "config.json")
        targets = [tmp_path / f"d{i}" for i in range(8)]
        threads = [threading.Thread(target=p.set_instances_dir, args=(t,)) for t in targets]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        # Last write wins, and memory and file agree
        assert p.instances_dir() in targets
        assert AppConfig.load(tmp_path / "config.json").instances_dir == p.instances_dir()
