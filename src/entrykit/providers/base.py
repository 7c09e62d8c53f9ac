"""Provider abstraction: one backing store, one client per batch of keys.

Every provider follows the same shape:

1. :meth:`Provider.open` builds a client for the batch.  Failure raises
   :class:`ProviderConstructionError`, which ends the batch with no keys.
2. :meth:`Provider.fetch` reads one key.  Failure raises
   :class:`RetrieveError`; the key is recorded as ``None`` and the next key
   is attempted.
3. The client is closed once every key has been attempted.

Keys are fetched sequentially in declaration order.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Any, ClassVar

from entrykit.core.context import BootContext
from entrykit.core.errors import ProviderConstructionError, RetrieveError
from entrykit.core.models.boot import ProviderKind
from entrykit.log_config.logger import ContextualLogger

_log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0  # seconds, per request


def split_basic_auth(basic_auth: str) -> tuple[str, str]:
    """Split ``user:pass``; both parts are empty when there is no colon."""
    if ":" not in basic_auth:
        return "", ""
    user, _, password = basic_auth.partition(":")
    return user, password


def ensure_scheme(endpoint: str, default: str = "http") -> str:
    """Prefix *endpoint* with ``http://`` unless it already carries a scheme."""
    if "://" in endpoint:
        return endpoint.rstrip("/")
    return f"{default}://{endpoint}".rstrip("/")


class Provider(ABC):
    """Base class for the four retrieval backends.

    Args:
        locale: Locale string of the section that created the provider.
        timeout: Per-request timeout in seconds.
        logger: Logger to report through; defaults to this module's logger.
    """

    kind: ClassVar[ProviderKind]

    def __init__(
        self,
        locale: str,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.locale = locale
        self.timeout = timeout
        self._logger = logger or _log

    @property
    def provider(self) -> str:
        return self.kind.value

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Where the provider reads from (``"local"`` for the filesystem)."""

    @property
    def log(self) -> ContextualLogger:
        return ContextualLogger(
            self._logger,
            provider=self.provider,
            endpoint=self.endpoint,
            locale=self.locale,
        )

    @abstractmethod
    def open(self, ctx: BootContext) -> AbstractContextManager[Any]:
        """Return a context manager yielding the client for one batch."""

    @abstractmethod
    def fetch(self, client: Any, key: str, ctx: BootContext) -> bytes:
        """Fetch *key* with *client*; raise :class:`RetrieveError` on failure."""

    def request_timeout(self, key: str, ctx: BootContext) -> float:
        """Per-request timeout bounded by the ambient deadline."""
        if ctx.expired():
            raise RetrieveError(key, "bootstrap deadline exceeded")
        return ctx.request_timeout(self.timeout)

    def fetch_all(self, keys: Iterable[str], ctx: BootContext) -> dict[str, bytes | None]:
        """Fetch every key in order; see the module docstring for failure rules."""
        wanted = [key for key in keys if key]
        result: dict[str, bytes | None] = {}
        if not wanted:
            return result

        try:
            with self.open(ctx) as client:
                for key in wanted:
                    try:
                        result[key] = self.fetch(client, key, ctx)
                        self.log.bind(key=key).debug("Retrieved value")
                    except RetrieveError as exc:
                        self.log.bind(key=key).warning("Failed to retrieve value: %s", exc.reason)
                        result[key] = None
        except ProviderConstructionError as exc:
            self.log.warning("Failed to create %s client: %s", self.provider, exc)
            return {}

        return result

    def describe(self) -> dict[str, str]:
        """Safe summary for diagnostics (no credentials)."""
        return {"provider": self.provider, "endpoint": self.endpoint, "locale": self.locale}
