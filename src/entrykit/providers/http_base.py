"""Shared plumbing for the HTTP-backed providers (etcd, Consul, remote file store).

Each batch gets its own :class:`requests.Session`, closed when the batch
ends.  ``requests`` exceptions are summarised into short, credential-free
reasons before they reach the log.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import requests

from entrykit.core.context import BootContext
from entrykit.core.errors import RetrieveError
from entrykit.providers.base import DEFAULT_TIMEOUT, Provider, ensure_scheme, split_basic_auth

USER_AGENT = "entrykit/3.0"


def summarize_error(err: Exception, max_len: int = 120) -> str:
    """Return a concise human-readable summary for a network exception."""
    if isinstance(err, requests.exceptions.ConnectTimeout):
        msg = "Connect timeout"
    elif isinstance(err, requests.exceptions.ReadTimeout):
        msg = "Read timeout"
    elif isinstance(err, requests.exceptions.Timeout):
        msg = "Timeout"
    elif isinstance(err, requests.exceptions.SSLError):
        msg = "TLS/SSL error"
    elif isinstance(err, requests.exceptions.HTTPError):
        resp = getattr(err, "response", None)
        if resp is not None:
            reason = getattr(resp, "reason", "") or ""
            msg = f"HTTP {resp.status_code} {reason}".strip()
        else:
            msg = "HTTP error"
    elif isinstance(err, requests.exceptions.ConnectionError):
        raw = str(err)
        if "Name or service not known" in raw or "Temporary failure" in raw:
            msg = "DNS failure"
        elif "Connection refused" in raw:
            msg = "Connection refused"
        elif "Failed to establish" in raw or "NewConnectionError" in raw:
            msg = "Connection failed"
        else:
            msg = "Connection error"
    else:
        msg = str(err) or err.__class__.__name__

    if len(msg) > max_len:
        msg = msg[: max_len - 3] + "..."
    return msg


class HttpProvider(Provider):
    """Base for providers reached over HTTP.

    Args:
        locale: Locale of the owning section.
        endpoint: ``host:port`` or URL; ``http://`` is assumed without a scheme.
        basic_auth: ``user:pass`` or empty.
    """

    def __init__(
        self,
        locale: str,
        endpoint: str,
        basic_auth: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(locale, timeout, logger)
        self._raw_endpoint = endpoint
        self.base_url = ensure_scheme(endpoint)
        self.username, self.password = split_basic_auth(basic_auth)

    @property
    def endpoint(self) -> str:
        return self._raw_endpoint

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": USER_AGENT})
        if self.username and self.password:
            session.auth = (self.username, self.password)
        return session

    def _prepare(self, session: requests.Session, ctx: BootContext) -> None:
        """Hook for per-batch setup such as authentication."""

    @contextmanager
    def open(self, ctx: BootContext) -> Iterator[requests.Session]:
        session = self._new_session()
        try:
            self._prepare(session, ctx)
            yield session
        finally:
            session.close()

    def _request(
        self,
        session: requests.Session,
        method: str,
        url: str,
        key: str,
        ctx: BootContext,
        **kwargs: Any,
    ) -> requests.Response:
        """Issue one bounded request; map transport failures to RetrieveError."""
        timeout = self.request_timeout(key, ctx)
        try:
            resp = session.request(method, url, timeout=timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise RetrieveError(key, summarize_error(exc)) from exc
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response, key: str) -> None:
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise RetrieveError(key, summarize_error(exc)) from exc
