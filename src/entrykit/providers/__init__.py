"""Retrieval backends for secrets and certificates."""

from entrykit.providers.base import DEFAULT_TIMEOUT, Provider
from entrykit.providers.consul import ConsulProvider
from entrykit.providers.etcd import EtcdProvider
from entrykit.providers.factory import create_provider
from entrykit.providers.local_fs import LocalFsProvider
from entrykit.providers.remote_fs import RemoteFsProvider
from entrykit.providers.retriever import CertRetriever, Retriever, SecretRetriever

__all__ = [
    "DEFAULT_TIMEOUT",
    "Provider",
    "LocalFsProvider",
    "EtcdProvider",
    "ConsulProvider",
    "RemoteFsProvider",
    "create_provider",
    "Retriever",
    "SecretRetriever",
    "CertRetriever",
]
