"""EntryRegistry: the set of live entries owned by one bootstrap run."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, TypeVar

from entrykit.core.interfaces.entry import Entry

if TYPE_CHECKING:
    from entrykit.core.cert_entry import CertEntry
    from entrykit.core.config_entry import ConfigEntry
    from entrykit.core.cred_entry import CredEntry

_log = logging.getLogger(__name__)

E = TypeVar("E", bound=Entry)


class EntryRegistry:
    """Entries keyed by ``(type, name)`` in registration order.

    Created by the :class:`~entrykit.core.bootstrapper.Bootstrapper` and
    passed explicitly to whatever needs to look entries up.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], Entry] = {}

    def add(self, entry: Entry) -> None:
        """Register *entry*; an existing entry with the same type and name is replaced."""
        key = (entry.type, entry.name)
        if key in self._entries:
            _log.warning("Replacing %s %r", entry.type, entry.name)
            del self._entries[key]
        self._entries[key] = entry

    def remove(self, entry_type: str, name: str) -> Entry | None:
        return self._entries.pop((entry_type, name), None)

    def get(self, entry_type: str, name: str) -> Entry | None:
        return self._entries.get((entry_type, name))

    def list_entries(self, entry_type: str | None = None) -> list[Entry]:
        return [
            entry for (kind, _), entry in self._entries.items()
            if entry_type is None or kind == entry_type
        ]

    def _typed(self, entry_type: str, name: str, cls: type[E]) -> E | None:
        entry = self.get(entry_type, name)
        return entry if isinstance(entry, cls) else None

    # -- typed helpers ---------------------------------------------------------

    def get_cred_entry(self, name: str) -> CredEntry | None:
        from entrykit.core.cred_entry import CRED_ENTRY_TYPE, CredEntry

        return self._typed(CRED_ENTRY_TYPE, name, CredEntry)

    def get_cert_entry(self, name: str) -> CertEntry | None:
        from entrykit.core.cert_entry import CERT_ENTRY_TYPE, CertEntry

        return self._typed(CERT_ENTRY_TYPE, name, CertEntry)

    def get_config_entry(self, name: str) -> ConfigEntry | None:
        from entrykit.core.config_entry import CONFIG_ENTRY_TYPE, ConfigEntry

        return self._typed(CONFIG_ENTRY_TYPE, name, ConfigEntry)

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
