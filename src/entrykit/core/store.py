"""Write-once, read-many containers for retrieved secrets and certificates.

Both stores distinguish three states per logical key:

* never requested          – key absent from :meth:`keys`
* requested but unavailable – key present, value ``None``
* retrieved                 – key present, value ``bytes``

Surfacing a store externally goes through :meth:`marshal_safe`, which only
reports presence flags and never the secret bytes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from types import MappingProxyType
from typing import Mapping

from cryptography import x509

_log = logging.getLogger(__name__)


class StoreFrozenError(RuntimeError):
    """Raised when writing to a store after bootstrap completed."""


class SecretStore:
    """Logical key → secret bytes (or ``None`` when retrieval failed)."""

    def __init__(self, values: Mapping[str, bytes | None] | None = None) -> None:
        self._values: dict[str, bytes | None] = dict(values or {})
        self._frozen = False

    # ------------------------------------------------------------------
    # Write side (bootstrap only)
    # ------------------------------------------------------------------

    def put(self, key: str, value: bytes | None) -> None:
        """Record *value* for *key*.

        A key that already holds bytes keeps them; ``None`` never overwrites
        a retrieved value.
        """
        if self._frozen:
            raise StoreFrozenError(f"store is read-only, cannot write {key!r}")
        if self._values.get(key) is not None:
            _log.debug("Keeping first retrieved value for %r", key)
            return
        self._values[key] = value

    def update(self, values: Mapping[str, bytes | None]) -> None:
        for key, value in values.items():
            self.put(key, value)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_secret(self, key: str) -> bytes | None:
        """Return the bytes for *key*, or ``None`` when absent or unavailable."""
        return self._values.get(key)

    def has_key(self, key: str) -> bool:
        """``True`` when *key* was requested, whether or not it was retrieved."""
        return key in self._values

    def keys(self) -> list[str]:
        return list(self._values)

    def missing(self) -> list[str]:
        """Requested keys whose retrieval failed."""
        return [key for key, value in self._values.items() if value is None]

    def as_mapping(self) -> Mapping[str, bytes | None]:
        return MappingProxyType(self._values)

    def marshal_safe(self) -> dict[str, bool]:
        """Presence flags only, safe to log or expose."""
        return {key: value is not None for key, value in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SecretStore({self.marshal_safe()!r})"


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------

CERT_SLOTS: tuple[str, ...] = ("server_cert", "server_key", "client_cert", "client_key")


def describe_certificate(pem: bytes | None) -> str:
    """Return a one-line summary of a PEM certificate, or ``""`` if unusable."""
    if not pem:
        return ""
    try:
        cert = x509.load_pem_x509_certificate(pem.strip())
    except ValueError:
        return ""
    return (
        f"subject={cert.subject.rfc4514_string()} "
        f"issuer={cert.issuer.rfc4514_string()} "
        f"serial={cert.serial_number:x} "
        f"not_before={cert.not_valid_before_utc.isoformat()} "
        f"not_after={cert.not_valid_after_utc.isoformat()}"
    )


class CertStore:
    """Four fixed certificate slots, each bytes or ``None``."""

    def __init__(
        self,
        server_cert: bytes | None = None,
        server_key: bytes | None = None,
        client_cert: bytes | None = None,
        client_key: bytes | None = None,
    ) -> None:
        self.server_cert = server_cert
        self.server_key = server_key
        self.client_cert = client_cert
        self.client_key = client_key
        self._requested: set[str] = {
            slot for slot in CERT_SLOTS if getattr(self, slot) is not None
        }
        self._frozen = False

    def put(self, slot: str, value: bytes | None) -> None:
        """Fill *slot*; the first retrieved value wins."""
        if slot not in CERT_SLOTS:
            raise KeyError(f"unknown certificate slot {slot!r}")
        if self._frozen:
            raise StoreFrozenError(f"store is read-only, cannot write {slot!r}")
        self._requested.add(slot)
        if getattr(self, slot) is None:
            setattr(self, slot, value)

    def freeze(self) -> None:
        self._frozen = True

    def __setattr__(self, name: str, value: object) -> None:
        if name in CERT_SLOTS and getattr(self, "_frozen", False):
            raise StoreFrozenError(f"store is read-only, cannot write {name!r}")
        super().__setattr__(name, value)

    def requested(self) -> list[str]:
        return [slot for slot in CERT_SLOTS if slot in self._requested]

    def server_cert_string(self) -> str:
        return describe_certificate(self.server_cert)

    def client_cert_string(self) -> str:
        return describe_certificate(self.client_cert)

    def marshal_safe(self) -> dict[str, bool]:
        return {slot: getattr(self, slot) is not None for slot in self.requested()}

    def __repr__(self) -> str:
        return f"CertStore({self.marshal_safe()!r})"
