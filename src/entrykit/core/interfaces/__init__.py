"""Abstract interfaces."""

from entrykit.core.interfaces.entry import Entry

__all__ = ["Entry"]
