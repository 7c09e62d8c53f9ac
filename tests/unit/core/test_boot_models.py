"""Tests for the boot configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entrykit.config.locale import DEFAULT_LOCALE
from entrykit.core.models.boot import (
    BootConfig,
    CertSection,
    ConfigSection,
    CredSection,
    ProviderKind,
)


class TestProviderKind:
    @pytest.mark.parametrize("raw", ["localFs", "localfs", "LOCALFS"])
    def test_case_insensitive(self, raw):
        assert ProviderKind(raw) is ProviderKind.LOCAL_FS

    def test_unknown_rejected(self):
        with pytest.raises(ValueError):
            ProviderKind("vault")


class TestCredSection:
    def test_defaults(self):
        section = CredSection()
        assert section.name == ""
        assert section.locale == DEFAULT_LOCALE
        assert section.provider is None
        assert section.paths == []

    def test_lower_cased_aliases(self):
        section = CredSection.model_validate(
            {"name": "c", "provider": "consul", "basicauth": "u:p", "datacenter": "dc1"}
        )
        assert section.provider is ProviderKind.CONSUL
        assert section.basic_auth == "u:p"
        assert section.datacenter == "dc1"

    def test_populate_by_field_name(self):
        section = CredSection(name="c", basic_auth="u:p")
        assert section.basic_auth == "u:p"

    def test_empty_locale_is_wildcard(self):
        assert CredSection(locale="").locale == DEFAULT_LOCALE
        assert CredSection.model_validate({"locale": None}).locale == DEFAULT_LOCALE

    def test_single_path_string(self):
        assert CredSection.model_validate({"paths": "only"}).paths == ["only"]
        assert CredSection.model_validate({"paths": None}).paths == []

    def test_credentials_not_in_repr(self):
        section = CredSection(name="c", basic_auth="u:hunter2", token="tok")
        assert "hunter2" not in repr(section)
        assert "tok" not in repr(section)

    def test_unknown_keys_ignored(self):
        section = CredSection.model_validate({"name": "c", "futurefield": 1})
        assert not hasattr(section, "futurefield")


class TestCertSection:
    def test_flat_form(self):
        section = CertSection.model_validate(
            {"name": "t", "provider": "remoteFs", "endpoint": "files:8080", "servercertpath": "s.pem"}
        )
        assert section.provider is ProviderKind.REMOTE_FS
        assert section.slot_paths() == {"server_cert": "s.pem"}

    @pytest.mark.parametrize(
        "block, kind",
        [
            ("local", ProviderKind.LOCAL_FS),
            ("etcd", ProviderKind.ETCD),
            ("consul", ProviderKind.CONSUL),
            ("remotefilestore", ProviderKind.REMOTE_FS),
        ],
    )
    def test_block_form(self, block, kind):
        section = CertSection.model_validate(
            {"name": "t", block: {"endpoint": "host:1", "clientcertpath": "c.pem", "clientkeypath": "c.key"}}
        )
        assert section.provider is kind
        assert section.endpoint == "host:1"
        assert section.slot_paths() == {"client_cert": "c.pem", "client_key": "c.key"}

    def test_two_blocks_rejected(self):
        with pytest.raises(ValidationError, match="several provider blocks"):
            CertSection.model_validate({"name": "t", "local": {}, "consul": {}})

    def test_block_conflicting_with_provider(self):
        with pytest.raises(ValidationError):
            CertSection.model_validate({"name": "t", "provider": "etcd", "local": {}})

    def test_block_matching_provider_accepted(self):
        section = CertSection.model_validate({"name": "t", "provider": "etcd", "etcd": {"endpoint": "e:1"}})
        assert section.provider is ProviderKind.ETCD
        assert section.endpoint == "e:1"


class TestBootConfig:
    def test_empty(self):
        cfg = BootConfig.model_validate({})
        assert cfg.cred == [] and cfg.cert == [] and cfg.config == []

    def test_null_sections(self):
        cfg = BootConfig.model_validate({"cred": None, "cert": None, "config": None})
        assert cfg.cred == []

    def test_config_section(self):
        cfg = BootConfig.model_validate({"config": [{"name": "app", "path": "app.yaml"}]})
        assert cfg.config == [ConfigSection(name="app", path="app.yaml")]
