"""Provider reading secrets from the local filesystem."""

from __future__ import annotations

import os
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Any

from entrykit.core.context import BootContext
from entrykit.core.errors import ProviderConstructionError, RetrieveError
from entrykit.core.models.boot import ProviderKind
from entrykit.providers.base import Provider


class LocalFsProvider(Provider):
    """Reads each key as a file path; relative paths join the working directory.

    The "client" is the working directory captured when the batch starts.
    """

    kind = ProviderKind.LOCAL_FS

    @property
    def endpoint(self) -> str:
        return "local"

    def open(self, ctx: BootContext) -> AbstractContextManager[Any]:
        try:
            return nullcontext(Path(os.getcwd()))
        except OSError as exc:
            raise ProviderConstructionError(f"cannot determine working directory: {exc}") from exc

    def fetch(self, client: Path, key: str, ctx: BootContext) -> bytes:
        path = Path(key)
        if not path.is_absolute():
            path = client / path
        try:
            return path.read_bytes()
        except OSError as exc:
            raise RetrieveError(key, f"cannot read {path}: {exc.strerror or exc}") from exc
        except ValueError as exc:
            raise RetrieveError(key, f"invalid path {key!r}: {exc}") from exc
