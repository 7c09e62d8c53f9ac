"""Locale matching: decide which configuration fragments apply here.

A locale is written ``<realm>::<region>::<az>::<domain>``.  Each component
is either ``*`` or a literal compared against the ``REALM``, ``REGION``,
``AZ`` and ``DOMAIN`` environment variables (absent variables read as the
empty string).  The environment is re-read on every match so changes made
before bootstrap are observed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol, TypeVar

_log = logging.getLogger(__name__)

WILDCARD = "*"
SEPARATOR = "::"
DEFAULT_LOCALE = "*::*::*::*"

ENV_KEYS: tuple[str, str, str, str] = ("REALM", "REGION", "AZ", "DOMAIN")


@dataclass(frozen=True)
class LocaleSpec:
    """Parsed ``realm::region::az::domain`` selector."""

    realm: str
    region: str
    az: str
    domain: str

    @classmethod
    def parse(cls, text: str) -> LocaleSpec | None:
        """Parse *text*; return ``None`` unless it has exactly four components."""
        parts = text.split(SEPARATOR)
        if len(parts) != 4:
            return None
        return cls(*parts)

    @property
    def components(self) -> tuple[str, str, str, str]:
        return (self.realm, self.region, self.az, self.domain)

    @property
    def is_wildcard(self) -> bool:
        return all(part == WILDCARD for part in self.components)

    def __str__(self) -> str:
        return SEPARATOR.join(self.components)


@dataclass(frozen=True)
class Environment:
    """Snapshot of the four locale environment variables."""

    realm: str = ""
    region: str = ""
    az: str = ""
    domain: str = ""

    @classmethod
    def current(cls, environ: Mapping[str, str] | None = None) -> Environment:
        source = os.environ if environ is None else environ
        return cls(*(source.get(key, "") for key in ENV_KEYS))

    @property
    def components(self) -> tuple[str, str, str, str]:
        return (self.realm, self.region, self.az, self.domain)


def _component_matches(expected: str, actual: str) -> bool:
    # An empty component only matches an empty environment value.
    return expected == WILDCARD or expected == actual


def matches(spec: LocaleSpec | str | None, env: Environment | None = None) -> bool:
    """Return ``True`` when *spec* applies to *env* (default: live environment).

    Malformed specs (anything other than four ``::``-separated components)
    never match.
    """
    if spec is None:
        return False
    if isinstance(spec, str):
        parsed = LocaleSpec.parse(spec)
        if parsed is None:
            return False
        spec = parsed
    if env is None:
        env = Environment.current()
    return all(
        _component_matches(expected, actual)
        for expected, actual in zip(spec.components, env.components)
    )


def is_locale_valid(locale: str) -> bool:
    """Shorthand for :func:`matches` against the live process environment."""
    return matches(locale)


def normalize_locale(locale: str | None) -> str:
    """Return *locale*, or the all-wildcard locale when it is empty."""
    return locale if locale else DEFAULT_LOCALE


# ---------------------------------------------------------------------------
# Fragment selection
# ---------------------------------------------------------------------------

class Fragment(Protocol):
    name: str
    locale: str


F = TypeVar("F", bound=Fragment)


def _is_wildcard(locale: str) -> bool:
    parsed = LocaleSpec.parse(locale)
    return parsed is not None and parsed.is_wildcard


def select_fragments(fragments: Iterable[F], env: Environment | None = None) -> list[F]:
    """Filter *fragments* down to those applicable to *env*, one per name.

    * Fragments without a name are discarded silently.
    * Fragments whose locale does not match are skipped (DEBUG log only).
    * When several fragments with the same name match, a non-wildcard locale
      replaces a wildcard one.  Between two equally specific matches the
      first one declared is kept and a warning is logged, since that is a
      configuration error rather than a resolvable choice.

    The result preserves the declaration order of the first fragment seen
    for each name.
    """
    if env is None:
        env = Environment.current()

    chosen: dict[str, F] = {}
    for fragment in fragments:
        if not fragment.name:
            continue
        locale = normalize_locale(fragment.locale)
        if not matches(locale, env):
            _log.debug("Skipping fragment %r: locale %s does not match", fragment.name, locale)
            continue

        current = chosen.get(fragment.name)
        if current is None:
            chosen[fragment.name] = fragment
            continue

        current_wild = _is_wildcard(normalize_locale(current.locale))
        incoming_wild = _is_wildcard(locale)
        if current_wild and not incoming_wild:
            chosen[fragment.name] = fragment
        elif current_wild == incoming_wild:
            _log.warning(
                "Fragment %r matches twice with equal specificity (%s, %s); keeping the first",
                fragment.name,
                normalize_locale(current.locale),
                locale,
            )

    return list(chosen.values())
