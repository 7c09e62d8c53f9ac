"""ConfigEntry: a locale-scoped application config file (YAML or JSON)."""

from __future__ import annotations

import logging
import os
import random
import string
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from entrykit.config.locale import DEFAULT_LOCALE, Environment, select_fragments
from entrykit.core.context import BootContext
from entrykit.core.errors import ConfigParseError
from entrykit.core.interfaces.entry import Entry
from entrykit.core.models.boot import ConfigSection
from entrykit.core.registry import EntryRegistry

_log = logging.getLogger(__name__)

CONFIG_ENTRY_TYPE = "ConfigEntry"
CONFIG_ENTRY_DESCRIPTION = "Entry which reads a user config file into a dict."


def _random_name() -> str:
    return "config-" + "".join(random.choices(string.ascii_lowercase + string.digits, k=4))


def _lookup(data: Any, dotted: str) -> Any:
    """Walk *data* along ``a.b.0.c``; raises ``KeyError`` when a step is missing."""
    node = data
    for part in dotted.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            raise KeyError(dotted)
    return node


class ConfigEntry(Entry):
    """Holds the parsed contents of one config file.

    The file is read by :meth:`load`, which registration calls eagerly so
    that malformed files are reported before any provider is contacted.
    A missing file yields an empty config.
    """

    def __init__(
        self,
        name: str = "",
        path: str = "",
        description: str = CONFIG_ENTRY_DESCRIPTION,
        locale: str = DEFAULT_LOCALE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._name = name or _random_name()
        self._path = path
        self._description = description or CONFIG_ENTRY_DESCRIPTION
        self._locale = locale or DEFAULT_LOCALE
        self._log = logger or _log
        self._data: dict[str, Any] = {}
        self._loaded = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return CONFIG_ENTRY_TYPE

    @property
    def description(self) -> str:
        return self._description

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def path(self) -> Path | None:
        """Absolute path of the config file, or ``None`` when none is configured."""
        if not self._path:
            return None
        p = Path(self._path)
        return p if p.is_absolute() else Path(os.getcwd()) / p

    def load(self) -> None:
        """(Re)read the config file.

        Raises:
            ConfigParseError: If the file exists but is not valid YAML/JSON or
                its top level is not a mapping.
        """
        path = self.path
        self._loaded = True
        if path is None or not path.is_file():
            self._log.debug("%s: no config file at %s, using empty config", self._name, path)
            self._data = {}
            return

        try:
            # JSON is a subset of YAML, one loader serves both.
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigParseError(f"malformed config file: {exc}", source=str(path)) from exc
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigParseError(
                f"top level must be a mapping, got {type(raw).__name__}", source=str(path)
            )
        self._data = raw
        self._log.info("%s: loaded %d top-level key(s) from %s", self._name, len(raw), path)

    def bootstrap(self, ctx: BootContext) -> None:
        if not self._loaded:
            self.load()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at dotted *key* (``db.hosts.0``), or *default*."""
        try:
            return _lookup(self._data, key)
        except KeyError:
            return default

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def to_dict(self) -> dict[str, Any]:
        info = super().to_dict()
        info["locale"] = self._locale
        info["path"] = str(self.path) if self.path else ""
        info["keys"] = sorted(str(key) for key in self._data)
        return info


def register_config_entries(
    sections: Iterable[ConfigSection],
    registry: EntryRegistry,
    *,
    env: Environment | None = None,
    logger: logging.Logger | None = None,
) -> dict[str, ConfigEntry]:
    """Create and load a :class:`ConfigEntry` for every section that applies to *env*.

    Raises:
        ConfigParseError: If a selected config file is malformed.
    """
    created: dict[str, ConfigEntry] = {}
    for section in select_fragments(sections, env):
        entry = ConfigEntry(
            name=section.name,
            path=section.path,
            description=section.description,
            locale=section.locale,
            logger=logger,
        )
        entry.load()
        registry.add(entry)
        created[entry.name] = entry
    return created
