"""Provider reading secrets from the Consul KV store (HTTP API v1)."""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from entrykit.core.context import BootContext
from entrykit.core.errors import RetrieveError
from entrykit.core.models.boot import ProviderKind
from entrykit.providers.base import DEFAULT_TIMEOUT
from entrykit.providers.http_base import HttpProvider


class ConsulProvider(HttpProvider):
    """One ``GET /v1/kv/<key>?raw`` per key.

    Args:
        datacenter: Sent as ``dc`` when non-empty.
        token: Sent as ``X-Consul-Token`` when non-empty.
    """

    kind = ProviderKind.CONSUL

    def __init__(
        self,
        locale: str,
        endpoint: str,
        basic_auth: str = "",
        datacenter: str = "",
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(locale, endpoint, basic_auth, timeout, logger)
        self.datacenter = datacenter
        self.token = token

    def _new_session(self) -> requests.Session:
        session = super()._new_session()
        if self.token:
            session.headers["X-Consul-Token"] = self.token
        return session

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/v1/kv/{quote(key.lstrip('/'), safe='/')}"

    def fetch(self, client: requests.Session, key: str, ctx: BootContext) -> bytes:
        params: dict[str, str] = {"raw": ""}
        if self.datacenter:
            params["dc"] = self.datacenter
        resp = self._request(client, "GET", self.url_for(key), key, ctx, params=params)
        if resp.status_code == 404:
            raise RetrieveError(key, "key not found")
        self._raise_for_status(resp, key)
        return resp.content

    def describe(self) -> dict[str, str]:
        info = super().describe()
        info["datacenter"] = self.datacenter
        return info
