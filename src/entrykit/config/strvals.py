"""Parser for flat override strings such as ``a=1,b.c=x,list[0]=y``.

Grammar (comma separated ``key=value`` pairs):

* ``name=value``        scalar under *name*
* ``outer.inner=value`` nested mapping
* ``name[i]=value``     element *i* of a sequence; missing positions are ``None``
* ``name[i].field=v``   mapping inside a sequence element
* ``name={a,b}``        list value

Values are typed like YAML scalars would be: ``true``/``false``, ``null``,
``0`` and integers without a leading zero become Python objects, everything
else stays a string.  ``\\`` escapes the following character.  Only one
level of bracket indexing is accepted.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Mapping
from typing import Any

from entrykit.core.errors import ConfigParseError

_log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?\d+")


def typed_value(text: str, as_string: bool = False) -> Any:
    """Convert a raw value into bool / None / int where it looks like one."""
    if as_string:
        return text
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if text == "0":
        return 0
    if text and text[0] != "0" and _INT_RE.fullmatch(text):
        return int(text)
    return text


class _Reader:
    """Character cursor over the override string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def peek(self) -> str | None:
        if self._pos >= len(self._text):
            return None
        return self._text[self._pos]

    def next(self) -> str | None:
        ch = self.peek()
        if ch is not None:
            self._pos += 1
        return ch

    def until(self, stops: str) -> tuple[str, str | None]:
        """Read up to one of *stops*; return ``(text, stop)`` with ``stop=None`` at EOF."""
        out: list[str] = []
        while True:
            ch = self.next()
            if ch is None:
                return "".join(out), None
            if ch == "\\":
                escaped = self.next()
                if escaped is None:
                    return "".join(out), None
                out.append(escaped)
                continue
            if ch in stops:
                return "".join(out), ch
            out.append(ch)


class _Parser:
    def __init__(self, text: str, as_string: bool) -> None:
        self._reader = _Reader(text)
        self._as_string = as_string
        self._source = text

    def error(self, message: str) -> ConfigParseError:
        return ConfigParseError(message, source=f"override {self._source!r}")

    def parse(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        while self._key(data):
            pass
        return data

    # -- keys -----------------------------------------------------------------

    def _key(self, data: dict[str, Any]) -> bool:
        """Parse one ``key...=value`` pair into *data*; ``False`` at clean EOF."""
        name, stop = self._reader.until("=[,.")
        if stop is None:
            if not name:
                return False
            raise self.error(f"key {name!r} has no value")
        if not name:
            raise self.error("empty key")

        if stop == "=":
            data[name] = self._value()
            return True

        if stop == ",":
            raise self.error(f"key {name!r} has no value (cannot end with ,)")

        if stop == ".":
            inner = data.get(name, {})
            if not isinstance(inner, dict):
                raise self.error(f"key {name!r} is both a value and a map")
            inner = dict(inner)
            self._key(inner)
            if not inner:
                raise self.error(f"key map {name!r} has no value")
            data[name] = inner
            return True

        # stop == "["
        index = self._index()
        existing = data.get(name, [])
        if not isinstance(existing, list):
            raise self.error(f"key {name!r} is both a value and a list")
        data[name] = self._list_item(list(existing), index, name)
        return True

    def _index(self) -> int:
        raw, stop = self._reader.until("]")
        if stop is None:
            raise self.error("unterminated index, expected ']'")
        if not _INT_RE.fullmatch(raw):
            raise self.error(f"error parsing index: {raw!r} is not a number")
        index = int(raw)
        if index < 0:
            raise self.error(f"negative index {index} is not allowed")
        return index

    def _list_item(self, items: list[Any], index: int, name: str) -> list[Any]:
        rest, stop = self._reader.until("[.=")
        if rest:
            raise self.error(f"unexpected data at end of array index: {rest!r}")
        if stop is None:
            raise self.error(f"key {name}[{index}] has no value")
        if stop == "[":
            raise self.error(f"nested index on {name!r} is not supported")

        if len(items) <= index:
            items.extend([None] * (index + 1 - len(items)))

        if stop == "=":
            items[index] = self._value()
            return items

        # stop == "."
        inner = items[index] if isinstance(items[index], dict) else {}
        inner = dict(inner)
        self._key(inner)
        if not inner:
            raise self.error(f"key map {name}[{index}] has no value")
        items[index] = inner
        return items

    # -- values ---------------------------------------------------------------

    def _value(self) -> Any:
        first = self._reader.peek()
        if first is None:
            return ""
        if first == "{":
            self._reader.next()
            return self._value_list()
        raw, _ = self._reader.until(",")
        return typed_value(raw, self._as_string)

    def _value_list(self) -> list[Any]:
        values: list[Any] = []
        while True:
            raw, stop = self._reader.until(",}")
            if stop is None:
                raise self.error("list must terminate with '}'")
            values.append(typed_value(raw, self._as_string))
            if stop == "}":
                if self._reader.peek() == ",":
                    self._reader.next()
                return values


def parse_flat_overrides(text: str, as_string: bool = False) -> dict[str, Any]:
    """Parse ``key1=value1,key2=value2,slice[0]=value0`` into a nested dict.

    Raises:
        ConfigParseError: On a key without value, a non-numeric or nested
            index, or an unterminated list.
    """
    if not text or not text.strip():
        return {}
    return _Parser(text, as_string).parse()


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------

def env_key_to_path(key: str) -> str:
    """Turn ``GIN_0_PORT`` into ``gin[0].port``.

    Numeric segments become indices of the preceding segment; a leading
    numeric segment has nothing to index and is dropped.
    """
    tokens: list[str] = []
    for token in key.lower().split("_"):
        if token.isdigit():
            if tokens:
                tokens[-1] = f"{tokens[-1]}[{int(token)}]"
            continue
        if token:
            tokens.append(token)
    return ".".join(tokens)


def _escape(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace(",", "\\,")
    if escaped.startswith("{"):
        escaped = "\\" + escaped
    return escaped


def parse_env_overrides(
    prefix: str,
    environ: Mapping[str, str] | None = None,
    exclude: Iterable[str] = (),
) -> dict[str, Any]:
    """Collect ``<PREFIX>_*`` variables as a nested override mapping.

    ``ENTRYKIT_CRED_0_ENDPOINT=kv:2379`` yields
    ``{"cred": [{"endpoint": "kv:2379"}]}``.
    """
    source = os.environ if environ is None else environ
    marker = prefix.upper() + "_"
    skipped = {name.upper() for name in exclude}

    pairs: list[str] = []
    for name in sorted(source):
        if not name.startswith(marker) or name.upper() in skipped:
            continue
        path = env_key_to_path(name[len(marker):])
        if not path:
            continue
        pairs.append(f"{path}={_escape(source[name])}")
        _log.debug("Env override: %s -> %s", name, path)

    return parse_flat_overrides(",".join(pairs))
