"""CredEntry: credentials fetched from one or more providers at bootstrap."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from entrykit.config.locale import Environment, select_fragments
from entrykit.core.context import BootContext
from entrykit.core.interfaces.entry import Entry
from entrykit.core.models.boot import CredSection
from entrykit.core.registry import EntryRegistry
from entrykit.core.store import SecretStore
from entrykit.providers.base import DEFAULT_TIMEOUT
from entrykit.providers.factory import create_provider
from entrykit.providers.retriever import Retriever, SecretRetriever

_log = logging.getLogger(__name__)

CRED_ENTRY_NAME = "CredDefault"
CRED_ENTRY_TYPE = "CredEntry"
CRED_ENTRY_DESCRIPTION = "Entry which retrieves credentials from localFs, remoteFs, etcd or consul."


class CredEntry(Entry):
    """Owns a :class:`SecretStore` filled by its retrievers.

    Args:
        name: Entry name.
        description: Free text shown in diagnostics.
        retrievers: Invoked once each, in order, by :meth:`bootstrap`.
        logger: Logger for lifecycle messages.
    """

    def __init__(
        self,
        name: str = CRED_ENTRY_NAME,
        description: str = CRED_ENTRY_DESCRIPTION,
        retrievers: Iterable[Retriever[SecretStore]] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._name = name or CRED_ENTRY_NAME
        self._description = description or CRED_ENTRY_DESCRIPTION
        self._retrievers: list[Retriever[SecretStore]] = list(retrievers)
        self._log = logger or _log
        self._store = SecretStore()
        self._bootstrapped = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return CRED_ENTRY_TYPE

    @property
    def description(self) -> str:
        return self._description

    @property
    def store(self) -> SecretStore:
        return self._store

    @property
    def retrievers(self) -> list[Retriever[SecretStore]]:
        return list(self._retrievers)

    def add_retriever(self, retriever: Retriever[SecretStore]) -> None:
        if self._bootstrapped:
            raise RuntimeError(f"{self._name}: cannot add a retriever after bootstrap")
        self._retrievers.append(retriever)

    def bootstrap(self, ctx: BootContext) -> None:
        """Run every retriever once and freeze the store.  Repeat calls are no-ops."""
        if self._bootstrapped:
            return
        for retriever in self._retrievers:
            result = retriever.retrieve(ctx)
            self._store.update(result.as_mapping())
        self._store.freeze()
        self._bootstrapped = True

        missing = self._store.missing()
        if missing:
            self._log.warning("%s: %d credential(s) unavailable: %s", self._name, len(missing), ", ".join(missing))
        else:
            self._log.info("%s: %d credential(s) loaded", self._name, len(self._store))

    def get_secret(self, key: str) -> bytes | None:
        return self._store.get_secret(key)

    def to_dict(self) -> dict[str, Any]:
        info = super().to_dict()
        info["store"] = self._store.marshal_safe()
        info["retrievers"] = [retriever.describe() for retriever in self._retrievers]
        return info


def register_cred_entries(
    sections: Iterable[CredSection],
    registry: EntryRegistry,
    *,
    env: Environment | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> dict[str, CredEntry]:
    """Create a :class:`CredEntry` for every section that applies to *env*.

    Raises:
        ConfigParseError: When a selected section has no usable provider.
    """
    created: dict[str, CredEntry] = {}
    for section in select_fragments(sections, env):
        provider = create_provider(
            section.provider,
            section.locale,
            section,
            section=f"cred[{section.name}]",
            timeout=timeout,
            logger=logger,
        )
        entry = CredEntry(
            name=section.name,
            description=section.description,
            retrievers=[SecretRetriever(provider, section.paths)],
            logger=logger,
        )
        registry.add(entry)
        created[entry.name] = entry
    return created
