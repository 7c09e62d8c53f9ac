"""CertEntry: TLS material fetched into four fixed slots at bootstrap."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from entrykit.config.locale import Environment, select_fragments
from entrykit.core.context import BootContext
from entrykit.core.interfaces.entry import Entry
from entrykit.core.models.boot import CertSection
from entrykit.core.registry import EntryRegistry
from entrykit.core.store import CertStore
from entrykit.providers.base import DEFAULT_TIMEOUT
from entrykit.providers.factory import create_provider
from entrykit.providers.retriever import CertRetriever, Retriever

_log = logging.getLogger(__name__)

CERT_ENTRY_NAME = "CertDefault"
CERT_ENTRY_TYPE = "CertEntry"
CERT_ENTRY_DESCRIPTION = "Entry which retrieves certificates from localFs, remoteFs, etcd or consul."


class CertEntry(Entry):
    """Owns a :class:`CertStore`; the first retriever to fill a slot wins."""

    def __init__(
        self,
        name: str = CERT_ENTRY_NAME,
        description: str = CERT_ENTRY_DESCRIPTION,
        retrievers: Iterable[Retriever[CertStore]] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._name = name or CERT_ENTRY_NAME
        self._description = description or CERT_ENTRY_DESCRIPTION
        self._retrievers: list[Retriever[CertStore]] = list(retrievers)
        self._log = logger or _log
        self._store = CertStore()
        self._bootstrapped = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return CERT_ENTRY_TYPE

    @property
    def description(self) -> str:
        return self._description

    @property
    def store(self) -> CertStore:
        return self._store

    @property
    def retrievers(self) -> list[Retriever[CertStore]]:
        return list(self._retrievers)

    def add_retriever(self, retriever: Retriever[CertStore]) -> None:
        if self._bootstrapped:
            raise RuntimeError(f"{self._name}: cannot add a retriever after bootstrap")
        self._retrievers.append(retriever)

    def bootstrap(self, ctx: BootContext) -> None:
        if self._bootstrapped:
            return
        for retriever in self._retrievers:
            result = retriever.retrieve(ctx)
            for slot in result.requested():
                self._store.put(slot, getattr(result, slot))
        self._store.freeze()
        self._bootstrapped = True

        missing = [slot for slot in self._store.requested() if getattr(self._store, slot) is None]
        if missing:
            self._log.warning("%s: certificate slot(s) unavailable: %s", self._name, ", ".join(missing))
        else:
            self._log.info("%s: %d certificate slot(s) loaded", self._name, len(self._store.requested()))

    def to_dict(self) -> dict[str, Any]:
        info = super().to_dict()
        info["store"] = self._store.marshal_safe()
        info["retrievers"] = [retriever.describe() for retriever in self._retrievers]
        return info


def register_cert_entries(
    sections: Iterable[CertSection],
    registry: EntryRegistry,
    *,
    env: Environment | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> dict[str, CertEntry]:
    """Create a :class:`CertEntry` for every section that applies to *env*."""
    created: dict[str, CertEntry] = {}
    for section in select_fragments(sections, env):
        provider = create_provider(
            section.provider,
            section.locale,
            section,
            section=f"cert[{section.name}]",
            timeout=timeout,
            logger=logger,
        )
        entry = CertEntry(
            name=section.name,
            description=section.description,
            retrievers=[CertRetriever(provider, section.slot_paths())],
            logger=logger,
        )
        registry.add(entry)
        created[entry.name] = entry
    return created

