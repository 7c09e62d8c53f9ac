"""Provider reading secrets from a remote file store over plain HTTP GET."""

from __future__ import annotations

import requests

from entrykit.core.context import BootContext
from entrykit.core.models.boot import ProviderKind
from entrykit.providers.http_base import HttpProvider


class RemoteFsProvider(HttpProvider):
    """``GET <endpoint>/<key>``, optionally with basic auth; non-2xx is a failure."""

    kind = ProviderKind.REMOTE_FS

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key.lstrip('/')}"

    def fetch(self, client: requests.Session, key: str, ctx: BootContext) -> bytes:
        resp = self._request(client, "GET", self.url_for(key), key, ctx)
        self._raise_for_status(resp, key)
        return resp.content
