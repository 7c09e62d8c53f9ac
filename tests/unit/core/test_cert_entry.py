"""Tests for CertEntry and register_cert_entries."""

from __future__ import annotations

import json

import pytest

from entrykit.config.locale import Environment
from entrykit.core.cert_entry import CERT_ENTRY_TYPE, CertEntry, register_cert_entries
from entrykit.core.models.boot import CertSection
from entrykit.core.store import StoreFrozenError
from entrykit.providers.retriever import CertRetriever
from tests.helpers.fakes import FakeProvider


class TestCertEntry:
    def test_bootstrap_fills_slots(self, ctx):
        provider = FakeProvider({"s.pem": b"CERT", "s.key": b"KEY"})
        entry = CertEntry(
            name="tls",
            retrievers=[CertRetriever(provider, {"server_cert": "s.pem", "server_key": "s.key"})],
        )
        entry.bootstrap(ctx)
        assert entry.type == CERT_ENTRY_TYPE
        assert entry.store.server_cert == b"CERT"
        assert entry.store.server_key == b"KEY"
        assert entry.store.client_cert is None
        assert entry.store.requested() == ["server_cert", "server_key"]

    def test_shared_path_fetched_once(self, ctx):
        provider = FakeProvider({"bundle.pem": b"BOTH"})
        entry = CertEntry(
            name="tls",
            retrievers=[CertRetriever(provider, {"server_cert": "bundle.pem", "server_key": "bundle.pem"})],
        )
        entry.bootstrap(ctx)
        assert provider.fetched == ["bundle.pem"]
        assert entry.store.server_cert == entry.store.server_key == b"BOTH"

    def test_missing_slot_is_none(self, ctx):
        provider = FakeProvider({})
        entry = CertEntry(name="tls", retrievers=[CertRetriever(provider, {"client_cert": "c.pem"})])
        entry.bootstrap(ctx)
        assert entry.store.client_cert is None
        assert entry.store.marshal_safe() == {"client_cert": False}

    def test_unreachable_provider_requests_nothing(self, ctx):
        provider = FakeProvider({"c.pem": b"C"}, fail_open=True)
        entry = CertEntry(name="tls", retrievers=[CertRetriever(provider, {"client_cert": "c.pem"})])
        entry.bootstrap(ctx)
        assert entry.store.client_cert is None
        assert entry.store.marshal_safe() == {}

    def test_first_retriever_wins(self, ctx):
        first = FakeProvider({"a": b"one"})
        second = FakeProvider({"b": b"two"})
        entry = CertEntry(
            name="tls",
            retrievers=[
                CertRetriever(first, {"server_cert": "a"}),
                CertRetriever(second, {"server_cert": "b"}),
            ],
        )
        entry.bootstrap(ctx)
        assert entry.store.server_cert == b"one"

    def test_store_frozen_after_bootstrap(self, ctx):
        entry = CertEntry(name="tls")
        entry.bootstrap(ctx)
        with pytest.raises(StoreFrozenError):
            entry.store.put("server_cert", b"late")

    def test_to_dict_is_safe(self, ctx):
        provider = FakeProvider({"k": b"-----PRIVATE-----"})
        entry = CertEntry(name="tls", retrievers=[CertRetriever(provider, {"server_key": "k"})])
        entry.bootstrap(ctx)
        info = json.loads(str(entry))
        assert info["store"] == {"server_key": True}
        assert info["retrievers"][0]["server_key_path"] == "k"
        assert "PRIVATE" not in str(entry)


class TestCertRetriever:
    def test_unknown_slot_rejected(self):
        with pytest.raises(KeyError):
            CertRetriever(FakeProvider(), {"ca_cert": "ca.pem"})

    def test_path_properties(self):
        retriever = CertRetriever(FakeProvider(), {"client_cert": "c.pem", "server_key": ""})
        assert retriever.client_cert_path == "c.pem"
        assert retriever.server_key_path == ""
        assert retriever.server_cert_path == ""


class TestRegisterCertEntries:
    def test_block_form_registers_local_provider(self, registry, tmp_path):
        section = CertSection.model_validate(
            {"name": "tls", "local": {"servercertpath": str(tmp_path / "s.pem")}}
        )
        created = register_cert_entries([section], registry, env=Environment())
        retriever = created["tls"].retrievers[0]
        assert retriever.provider == "localFs"
        assert retriever.server_cert_path == str(tmp_path / "s.pem")
        assert registry.get_cert_entry("tls") is created["tls"]

    def test_reads_local_files(self, registry, tmp_path, ctx):
        (tmp_path / "s.pem").write_bytes(b"PEM")
        section = CertSection.model_validate(
            {"name": "tls", "local": {"servercertpath": str(tmp_path / "s.pem")}}
        )
        created = register_cert_entries([section], registry, env=Environment())
        created["tls"].bootstrap(ctx)
        assert created["tls"].store.server_cert == b"PEM"
