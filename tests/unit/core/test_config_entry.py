"""Tests for ConfigEntry and register_config_entries."""

from __future__ import annotations

import json

import pytest

from entrykit.config.locale import Environment
from entrykit.core.config_entry import CONFIG_ENTRY_TYPE, ConfigEntry, register_config_entries
from entrykit.core.errors import ConfigParseError
from entrykit.core.models.boot import ConfigSection


class TestConfigEntry:
    def test_load_yaml(self, tmp_path):
        cfg = tmp_path / "app.yaml"
        cfg.write_text("db:\n  host: pg\n  ports: [5432, 6432]\n")
        entry = ConfigEntry(name="app", path=str(cfg))
        entry.load()
        assert entry.type == CONFIG_ENTRY_TYPE
        assert entry.get("db.host") == "pg"
        assert entry.get("db.ports.1") == 6432
        assert entry.get("db.missing", "dflt") == "dflt"
        assert entry.get("db.ports.9") is None
        assert entry.as_dict() == {"db": {"host": "pg", "ports": [5432, 6432]}}

    def test_load_json(self, tmp_path):
        cfg = tmp_path / "app.json"
        cfg.write_text(json.dumps({"feature": {"enabled": True}}))
        entry = ConfigEntry(name="app", path=str(cfg))
        entry.load()
        assert entry.get("feature.enabled") is True

    def test_relative_path_joins_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "rel.yaml").write_text("a: 1\n")
        monkeypatch.chdir(tmp_path)
        entry = ConfigEntry(name="app", path="rel.yaml")
        assert entry.path == tmp_path / "rel.yaml"
        entry.load()
        assert entry.get("a") == 1

    def test_missing_file_is_empty(self, tmp_path):
        entry = ConfigEntry(name="app", path=str(tmp_path / "absent.yaml"))
        entry.load()
        assert entry.as_dict() == {}

    def test_malformed_file(self, tmp_path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("a: [1, 2\n")
        with pytest.raises(ConfigParseError):
            ConfigEntry(name="app", path=str(cfg)).load()

    def test_non_mapping_file(self, tmp_path):
        cfg = tmp_path / "list.yaml"
        cfg.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigParseError, match="mapping"):
            ConfigEntry(name="app", path=str(cfg)).load()

    def test_unnamed_gets_random_name(self):
        entry = ConfigEntry()
        assert entry.name.startswith("config-")
        assert len(entry.name) == len("config-") + 4

    def test_bootstrap_loads_lazily(self, tmp_path, ctx):
        cfg = tmp_path / "app.yaml"
        cfg.write_text("a: 1\n")
        entry = ConfigEntry(name="app", path=str(cfg))
        entry.bootstrap(ctx)
        assert entry.get("a") == 1

    def test_as_dict_is_a_copy(self, tmp_path):
        cfg = tmp_path / "app.yaml"
        cfg.write_text("a: 1\n")
        entry = ConfigEntry(name="app", path=str(cfg))
        entry.load()
        entry.as_dict()["a"] = 2
        assert entry.get("a") == 1


class TestRegisterConfigEntries:
    def test_locale_scoped(self, registry, tmp_path):
        prod = tmp_path / "prod.yaml"
        prod.write_text("env: prod\n")
        generic = tmp_path / "generic.yaml"
        generic.write_text("env: generic\n")
        sections = [
            ConfigSection(name="app", path=str(generic)),
            ConfigSection(name="app", path=str(prod), locale="*::*::*::prod"),
        ]
        created = register_config_entries(sections, registry, env=Environment(domain="prod"))
        assert created["app"].get("env") == "prod"
        assert registry.get_config_entry("app") is created["app"]

    def test_malformed_file_fails_registration(self, registry, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("{unclosed\n")
        with pytest.raises(ConfigParseError):
            register_config_entries([ConfigSection(name="app", path=str(bad))], registry, env=Environment())
