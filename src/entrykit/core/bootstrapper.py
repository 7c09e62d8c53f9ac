"""Bootstrapper: boot config → registry → bootstrap → interrupt."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from entrykit.config.boot_loader import load_boot_config
from entrykit.config.locale import Environment
from entrykit.core.cert_entry import register_cert_entries
from entrykit.core.config_entry import register_config_entries
from entrykit.core.context import BootContext
from entrykit.core.cred_entry import register_cred_entries
from entrykit.core.models.boot import BootConfig
from entrykit.core.registry import EntryRegistry
from entrykit.providers.base import DEFAULT_TIMEOUT

_log = logging.getLogger(__name__)


class Bootstrapper:
    """Sequences registration and lifecycle calls for every boot entry.

    All real work lives in the entries and providers; this class only
    decides the order.

    Args:
        boot: Validated boot configuration, or ``None`` to :meth:`load` later.
        registry: Registry to fill; a new one is created when omitted.
        env: Locale environment; re-read from ``os.environ`` when omitted.
        timeout: Per-request provider timeout in seconds.
        logger: Logger handed to entries and providers.
    """

    def __init__(
        self,
        boot: BootConfig | None = None,
        registry: EntryRegistry | None = None,
        env: Environment | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._boot = boot
        self._registry = registry if registry is not None else EntryRegistry()
        self._env = env
        self._timeout = timeout
        self._log = logger or _log
        self._registered = False
        self._bootstrapped = False

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def registry(self) -> EntryRegistry:
        return self._registry

    @property
    def boot(self) -> BootConfig | None:
        return self._boot

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def load(
        self,
        boot_path: Path | str | None = None,
        *,
        text: str | None = None,
        environ: Mapping[str, str] | None = None,
        flag_overrides: Iterable[str] = (),
    ) -> BootConfig:
        """Read and validate the boot configuration (see :func:`load_boot_config`)."""
        self._boot = load_boot_config(
            boot_path, text=text, environ=environ, flag_overrides=flag_overrides
        )
        if self._env is None and environ is not None:
            self._env = Environment.current(environ)
        return self._boot

    def register(self) -> EntryRegistry:
        """Create entries for every section that applies here: config → cred → cert.

        Raises:
            ConfigParseError: If a selected section is unusable.
        """
        if self._registered:
            return self._registry
        boot = self._boot if self._boot is not None else BootConfig()

        configs = register_config_entries(boot.config, self._registry, env=self._env, logger=self._log)
        creds = register_cred_entries(
            boot.cred, self._registry, env=self._env, timeout=self._timeout, logger=self._log
        )
        certs = register_cert_entries(
            boot.cert, self._registry, env=self._env, timeout=self._timeout, logger=self._log
        )
        self._registered = True
        _log.info(
            "Registered %d config, %d cred and %d cert entries",
            len(configs), len(creds), len(certs),
        )
        return self._registry

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def bootstrap(self, ctx: BootContext | None = None) -> EntryRegistry:
        """Bootstrap every entry once, in registration order."""
        if not self._registered:
            self.register()
        if self._bootstrapped:
            return self._registry
        ctx = ctx or BootContext.background()

        _log.info("Bootstrapping %d entries …", len(self._registry))
        for entry in self._registry:
            _log.debug("Bootstrapping %s %r", entry.type, entry.name)
            entry.bootstrap(ctx)
        self._bootstrapped = True
        _log.info("Bootstrap complete")
        return self._registry

    def interrupt(self, ctx: BootContext | None = None) -> None:
        """Interrupt entries in reverse registration order.

        A failing entry is logged and does not stop the others.
        """
        if not self._bootstrapped:
            return
        ctx = ctx or BootContext.background()
        for entry in reversed(list(self._registry)):
            try:
                entry.interrupt(ctx)
            except Exception:
                _log.exception("Error interrupting %s %r", entry.type, entry.name)
        self._bootstrapped = False
        _log.info("Interrupt complete")

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def summary(self) -> list[dict[str, Any]]:
        """Safe per-entry summaries; never contains secret bytes."""
        return [entry.to_dict() for entry in self._registry]

    def describe(self) -> str:
        return json.dumps(self.summary(), indent=2, sort_keys=True)
