"""Shared pytest fixtures for entrykit tests."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from entrykit.config.locale import ENV_KEYS
from entrykit.core.context import BootContext
from entrykit.core.registry import EntryRegistry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Every test starts with no locale or ENTRYKIT_* variables set."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    for key in list(os.environ):
        if key.startswith("ENTRYKIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def ctx() -> BootContext:
    """Unbounded bootstrap context."""
    return BootContext.background()


@pytest.fixture
def registry() -> EntryRegistry:
    return EntryRegistry()


@pytest.fixture
def set_locale(monkeypatch):
    """Set REALM/REGION/AZ/DOMAIN for the duration of a test."""

    def _set(realm: str = "", region: str = "", az: str = "", domain: str = "") -> None:
        for key, value in zip(ENV_KEYS, (realm, region, az, domain)):
            if value:
                monkeypatch.setenv(key, value)
            else:
                monkeypatch.delenv(key, raising=False)

    return _set


@pytest.fixture
def restore_root_logger():
    """Drop handlers installed by setup_logging() and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
