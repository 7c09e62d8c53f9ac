"""Provider factory: map a configured :class:`ProviderKind` to its backend."""

from __future__ import annotations

import logging
from typing import NoReturn

from entrykit.core.errors import ConfigParseError
from entrykit.core.models.boot import ConnectionParams, ProviderKind
from entrykit.providers.base import DEFAULT_TIMEOUT, Provider
from entrykit.providers.consul import ConsulProvider
from entrykit.providers.etcd import EtcdProvider
from entrykit.providers.local_fs import LocalFsProvider
from entrykit.providers.remote_fs import RemoteFsProvider

_log = logging.getLogger(__name__)


def _assert_never(kind: NoReturn) -> NoReturn:
    raise ConfigParseError(f"unsupported provider {kind!r}")


def create_provider(
    kind: ProviderKind | None,
    locale: str,
    params: ConnectionParams,
    *,
    section: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> Provider:
    """Build the provider for *kind*.

    Every :class:`ProviderKind` member must be handled below; a type checker
    flags a missing branch through :func:`_assert_never`.

    Raises:
        ConfigParseError: When *kind* is missing, or an HTTP provider has no
            endpoint.
    """
    if kind is None:
        raise ConfigParseError("no provider configured", source=section or None)

    if kind is not ProviderKind.LOCAL_FS and not params.endpoint:
        raise ConfigParseError(f"provider {kind.value!r} requires an endpoint", source=section or None)

    if kind is ProviderKind.LOCAL_FS:
        provider: Provider = LocalFsProvider(locale, timeout=timeout, logger=logger)
    elif kind is ProviderKind.ETCD:
        provider = EtcdProvider(locale, params.endpoint, params.basic_auth, timeout=timeout, logger=logger)
    elif kind is ProviderKind.CONSUL:
        provider = ConsulProvider(
            locale,
            params.endpoint,
            params.basic_auth,
            datacenter=params.datacenter,
            token=params.token,
            timeout=timeout,
            logger=logger,
        )
    elif kind is ProviderKind.REMOTE_FS:
        provider = RemoteFsProvider(locale, params.endpoint, params.basic_auth, timeout=timeout, logger=logger)
    else:
        _assert_never(kind)

    _log.debug("Created %s provider for %s (endpoint=%s)", kind.value, section or "<code>", provider.endpoint)
    return provider
