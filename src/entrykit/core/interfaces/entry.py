"""Entry interface (ABC) shared by every bootable component."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from entrykit.core.context import BootContext


class Entry(ABC):
    """A named component that is registered from boot configuration and
    receives ``bootstrap`` / ``interrupt`` lifecycle calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name within the entry's type."""

    @property
    @abstractmethod
    def type(self) -> str:
        """Entry type, e.g. ``"CredEntry"``."""

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def bootstrap(self, ctx: BootContext) -> None:
        """Acquire whatever the entry provides.  Called once at startup."""

    def interrupt(self, ctx: BootContext) -> None:
        """Release resources.  Default: nothing to release."""

    def to_dict(self) -> dict[str, Any]:
        """Safe, JSON-serialisable view; never contains secret material."""
        return {"name": self.name, "type": self.type, "description": self.description}

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
