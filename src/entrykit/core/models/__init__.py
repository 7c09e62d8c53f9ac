"""Pydantic models for boot configuration."""
from entrykit.core.models.boot import (
    BootConfig,
    CertSection,
    ConfigSection,
    ConnectionParams,
    CredSection,
    ProviderBlock,
    ProviderKind,
)

__all__ = [
    "BootConfig",
    "CertSection",
    "ConfigSection",
    "ConnectionParams",
    "CredSection",
    "ProviderBlock",
    "ProviderKind",
]
