"""entrykit: locale-scoped boot configuration and secret/certificate retrieval."""

__version__ = "3.0.0"
