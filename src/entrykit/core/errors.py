"""Error taxonomy for boot configuration and secret retrieval.

Only :class:`ConfigParseError` is allowed to stop the process; the other
errors are caught inside the retrieval layer and turned into log lines plus
absent store values.
"""

from __future__ import annotations


class EntrykitError(Exception):
    """Base class for all entrykit errors."""


class ConfigParseError(EntrykitError):
    """Boot configuration or an override string could not be understood."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class ProviderConstructionError(EntrykitError):
    """A provider could not open its backing client."""


class RetrieveError(EntrykitError):
    """A single key could not be fetched from a provider."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"failed to retrieve {key!r}: {reason}")
