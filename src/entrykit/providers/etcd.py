"""Provider reading secrets from etcd through its v3 JSON gateway.

Keys and values travel base64-encoded.  With ``basicAuth`` configured the
batch starts with ``/v3/auth/authenticate`` and every range request carries
the returned token; if that handshake fails the whole batch is abandoned.
"""

from __future__ import annotations

import base64
import binascii

import requests

from entrykit.core.context import BootContext
from entrykit.core.errors import ProviderConstructionError, RetrieveError
from entrykit.core.models.boot import ProviderKind
from entrykit.providers.http_base import USER_AGENT, HttpProvider, summarize_error

_RANGE_PATH = "/v3/kv/range"
_AUTH_PATH = "/v3/auth/authenticate"


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class EtcdProvider(HttpProvider):
    """One range request per key."""

    kind = ProviderKind.ETCD

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": USER_AGENT})
        return session

    def _prepare(self, session: requests.Session, ctx: BootContext) -> None:
        if not self.username:
            return
        timeout = ctx.request_timeout(self.timeout)
        try:
            resp = session.post(
                self.base_url + _AUTH_PATH,
                json={"name": self.username, "password": self.password},
                timeout=timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.exceptions.RequestException as exc:
            raise ProviderConstructionError(f"authentication failed: {summarize_error(exc)}") from exc
        except ValueError as exc:
            raise ProviderConstructionError("authentication returned invalid JSON") from exc
        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise ProviderConstructionError("authentication returned no token")
        session.headers["Authorization"] = token

    def fetch(self, client: requests.Session, key: str, ctx: BootContext) -> bytes:
        resp = self._request(client, "POST", self.base_url + _RANGE_PATH, key, ctx, json={"key": _b64(key)})
        self._raise_for_status(resp, key)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise RetrieveError(key, "invalid JSON response") from exc
        if not isinstance(payload, dict):
            raise RetrieveError(key, "unexpected response shape")
        kvs = payload.get("kvs") or []
        if not kvs:
            raise RetrieveError(key, "key not found")
        if not isinstance(kvs, list) or not isinstance(kvs[0], dict):
            raise RetrieveError(key, "unexpected response shape")
        try:
            return base64.b64decode(kvs[0].get("value", ""), validate=True)
        except (binascii.Error, TypeError, ValueError) as exc:
            raise RetrieveError(key, "value is not valid base64") from exc
