"""Boot configuration Pydantic models: BootConfig and its cred/cert/config sections.

Keys reach these models lower-cased (see :mod:`entrykit.config.boot_loader`),
so every field is aliased to its name without underscores:
``basic_auth`` reads ``basicauth`` (written ``basicAuth`` in YAML).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from entrykit.config.locale import DEFAULT_LOCALE


def _alias(name: str) -> str:
    return name.replace("_", "")


class ProviderKind(str, Enum):
    """Backing store a section's secrets or certificates are fetched from."""

    LOCAL_FS = "localFs"
    ETCD = "etcd"
    CONSUL = "consul"
    REMOTE_FS = "remoteFs"

    @classmethod
    def _missing_(cls, value: object) -> ProviderKind | None:
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class _BootModel(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=_alias, populate_by_name=True)


class _Section(_BootModel):
    name: str = Field(default="", description="Entry name; sections without one are dropped")
    description: str = Field(default="")
    locale: str = Field(default=DEFAULT_LOCALE, description="<realm>::<region>::<az>::<domain>")

    @field_validator("locale", mode="before")
    @classmethod
    def _default_locale(cls, value: Any) -> Any:
        return value or DEFAULT_LOCALE

    @field_validator("name", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ConnectionParams(_BootModel):
    """Where and how to reach a provider.  Unused fields are ignored per kind."""

    endpoint: str = Field(default="", description="host:port or URL")
    basic_auth: str = Field(default="", description="<user>:<pass>", repr=False)
    datacenter: str = Field(default="", description="Consul datacenter")
    token: str = Field(default="", description="Consul ACL token", repr=False)


class CredSection(_Section, ConnectionParams):
    """One ``cred:`` list element."""

    provider: ProviderKind | None = Field(default=None)
    paths: list[str] = Field(default_factory=list, description="Logical keys to fetch")

    @field_validator("paths", mode="before")
    @classmethod
    def _paths_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class CertPaths(_BootModel):
    server_cert_path: str = Field(default="")
    server_key_path: str = Field(default="")
    client_cert_path: str = Field(default="")
    client_key_path: str = Field(default="")


class ProviderBlock(ConnectionParams, CertPaths):
    """Provider-specific block inside a ``cert:`` section."""


# YAML block name (lower-cased) → provider kind.
_CERT_BLOCKS: dict[str, ProviderKind] = {
    "local": ProviderKind.LOCAL_FS,
    "etcd": ProviderKind.ETCD,
    "consul": ProviderKind.CONSUL,
    "remote_file_store": ProviderKind.REMOTE_FS,
}


class CertSection(_Section, ConnectionParams, CertPaths):
    """One ``cert:`` list element.

    The provider is either named directly (``provider: etcd`` with flat
    connection fields) or selected by exactly one provider block
    (``local``, ``etcd``, ``consul``, ``remoteFileStore``).
    """

    provider: ProviderKind | None = Field(default=None)
    local: ProviderBlock | None = None
    etcd: ProviderBlock | None = None
    consul: ProviderBlock | None = None
    remote_file_store: ProviderBlock | None = None

    @model_validator(mode="after")
    def _apply_block(self) -> CertSection:
        present = [(field, kind) for field, kind in _CERT_BLOCKS.items() if getattr(self, field) is not None]
        if len(present) > 1:
            names = ", ".join(field for field, _ in present)
            raise ValueError(f"cert section {self.name!r} declares several provider blocks: {names}")
        if not present:
            return self

        field, kind = present[0]
        if self.provider is not None and self.provider is not kind:
            raise ValueError(
                f"cert section {self.name!r} names provider {self.provider.value!r} "
                f"but carries a {field!r} block"
            )
        self.provider = kind
        block: ProviderBlock = getattr(self, field)
        for name in ProviderBlock.model_fields:
            value = getattr(block, name)
            if value:
                setattr(self, name, value)
        return self

    def slot_paths(self) -> dict[str, str]:
        """Certificate slot → logical key, for slots that were configured."""
        slots = {
            "server_cert": self.server_cert_path,
            "server_key": self.server_key_path,
            "client_cert": self.client_cert_path,
            "client_key": self.client_key_path,
        }
        return {slot: path for slot, path in slots.items() if path}


class ConfigSection(_Section):
    """One ``config:`` list element: an application config file to load."""

    path: str = Field(default="", description="Relative paths join the working directory")


class BootConfig(_BootModel):
    """Top-level boot document.  Unknown sections belong to other entries."""

    cred: list[CredSection] = Field(default_factory=list)
    cert: list[CertSection] = Field(default_factory=list)
    config: list[ConfigSection] = Field(default_factory=list)

    @field_validator("cred", "cert", "config", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value
