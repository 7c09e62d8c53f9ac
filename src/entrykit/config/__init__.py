"""Configuration: locale matching, value trees and override parsing.

The boot loader lives in :mod:`entrykit.config.boot_loader`; it depends on
the core models and is not re-exported here.
"""

from entrykit.config.locale import (
    DEFAULT_LOCALE,
    Environment,
    LocaleSpec,
    is_locale_valid,
    matches,
    select_fragments,
)
from entrykit.config.strvals import parse_env_overrides, parse_flat_overrides
from entrykit.config.values import merge, merge_native

__all__ = [
    "DEFAULT_LOCALE",
    "Environment",
    "LocaleSpec",
    "is_locale_valid",
    "matches",
    "select_fragments",
    "parse_flat_overrides",
    "parse_env_overrides",
    "merge",
    "merge_native",
]
