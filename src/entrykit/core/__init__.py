"""Core services: entries, stores, registry and bootstrap orchestration."""
