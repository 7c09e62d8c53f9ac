"""Retrievers: the capability entries call to fill their stores.

A retriever pairs one :class:`Provider` with the logical keys an entry
wants.  :class:`SecretRetriever` takes a free list of paths,
:class:`CertRetriever` maps the four certificate slots to paths.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Generic, TypeVar

from entrykit.core.context import BootContext
from entrykit.core.store import CERT_SLOTS, CertStore, SecretStore
from entrykit.providers.base import Provider

S = TypeVar("S")


class Retriever(ABC, Generic[S]):
    """Common surface of secret and certificate retrievers."""

    def __init__(self, provider: Provider) -> None:
        self._provider = provider

    @property
    def provider(self) -> str:
        return self._provider.provider

    @property
    def endpoint(self) -> str:
        return self._provider.endpoint

    @property
    def locale(self) -> str:
        return self._provider.locale

    @property
    def backend(self) -> Provider:
        return self._provider

    @abstractmethod
    def retrieve(self, ctx: BootContext) -> S:
        """Fetch every configured key once and return a new store."""

    def describe(self) -> dict[str, object]:
        return dict(self._provider.describe())


class SecretRetriever(Retriever[SecretStore]):
    def __init__(self, provider: Provider, paths: Iterable[str]) -> None:
        super().__init__(provider)
        self._paths = list(paths)

    def list_paths(self) -> list[str]:
        return list(self._paths)

    def retrieve(self, ctx: BootContext) -> SecretStore:
        return SecretStore(self._provider.fetch_all(self._paths, ctx))

    def describe(self) -> dict[str, object]:
        info = super().describe()
        info["paths"] = self.list_paths()
        return info


class CertRetriever(Retriever[CertStore]):
    """Fetches up to four certificate slots (``server_cert`` … ``client_key``)."""

    def __init__(self, provider: Provider, slot_paths: Mapping[str, str]) -> None:
        super().__init__(provider)
        unknown = set(slot_paths) - set(CERT_SLOTS)
        if unknown:
            raise KeyError(f"unknown certificate slots: {sorted(unknown)}")
        self._slot_paths = {slot: slot_paths[slot] for slot in CERT_SLOTS if slot_paths.get(slot)}

    @property
    def server_cert_path(self) -> str:
        return self._slot_paths.get("server_cert", "")

    @property
    def server_key_path(self) -> str:
        return self._slot_paths.get("server_key", "")

    @property
    def client_cert_path(self) -> str:
        return self._slot_paths.get("client_cert", "")

    @property
    def client_key_path(self) -> str:
        return self._slot_paths.get("client_key", "")

    def retrieve(self, ctx: BootContext) -> CertStore:
        # Two slots may share a path; fetch each distinct path once.
        unique_paths = list(dict.fromkeys(self._slot_paths.values()))
        fetched = self._provider.fetch_all(unique_paths, ctx)
        store = CertStore()
        for slot, path in self._slot_paths.items():
            if path in fetched:
                store.put(slot, fetched[path])
        return store

    def describe(self) -> dict[str, object]:
        info = super().describe()
        info.update({f"{slot}_path": path for slot, path in self._slot_paths.items()})
        return info
