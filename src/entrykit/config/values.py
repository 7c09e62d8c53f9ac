"""Configuration value trees and the deep-merge used for layered overrides.

A parsed document is converted once into a closed set of node shapes:

* :class:`Scalar`   – str / int / float / bool / None leaf
* :class:`Sequence` – positional list of nodes (``None`` marks a gap)
* :class:`Mapping`  – string-keyed nodes
* :class:`Record`   – fixed-shape structured value (a pydantic model)

:func:`merge` combines a default tree with an override tree and returns a
new tree; neither input is mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scalar:
    value: Any = None


@dataclass(frozen=True)
class Sequence:
    items: tuple[Value | None, ...] = ()


@dataclass(frozen=True)
class Mapping:
    entries: dict[str, Value] = field(default_factory=dict)


@dataclass(frozen=True)
class Record:
    """Structured record; ``kind`` is the model class used to rebuild it."""

    kind: type[BaseModel]
    fields: dict[str, Value] = field(default_factory=dict)


Value = Union[Scalar, Sequence, Mapping, Record]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def from_native(obj: Any) -> Value:
    """Build a :data:`Value` tree from plain Python data or a pydantic model."""
    if isinstance(obj, BaseModel):
        return Record(
            kind=type(obj),
            fields={name: from_native(getattr(obj, name)) for name in type(obj).model_fields},
        )
    if isinstance(obj, dict):
        return Mapping({str(key): from_native(val) for key, val in obj.items()})
    if isinstance(obj, (list, tuple)):
        return Sequence(tuple(None if item is None else from_native(item) for item in obj))
    return Scalar(obj)


def to_native(value: Value | None) -> Any:
    """Inverse of :func:`from_native`."""
    if value is None:
        return None
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, Sequence):
        return [to_native(item) for item in value.items]
    if isinstance(value, Mapping):
        return {key: to_native(val) for key, val in value.entries.items()}
    if isinstance(value, Record):
        return value.kind.model_validate(
            {name: to_native(val) for name, val in value.fields.items()}
        )
    raise TypeError(f"not a config value: {value!r}")


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def merge(base: Value, override: Value | None, *, path: str = "") -> Value:
    """Deep-merge *override* onto *base*.

    * ``override is None`` (or a null scalar) returns *base* unchanged, at
      every depth.
    * Scalars: *override* wins.
    * Mappings: base-only keys kept, shared keys merged recursively (a shape
      change on a key takes the override node), override-only keys added.
    * Sequences: position-wise; an override element replaces the base
      element only when both have the same shape, gaps (``None``) keep the
      base element, and elements past the end of *base* are dropped.
    * Records: field-wise with the same shape rule; unknown fields dropped.

    A shape mismatch inside a sequence or record is logged and the base
    element is kept.  For scalars there the shape is the Python type of the
    value, so ``[1]`` merged with ``["x"]`` keeps ``1``; a null base element
    accepts any scalar.
    """
    if _is_null(override):
        return base

    if isinstance(base, Mapping) and isinstance(override, Mapping):
        return _merge_mapping(base, override, path)
    if isinstance(base, Sequence) and isinstance(override, Sequence):
        return _merge_sequence(base, override, path)
    if isinstance(base, Record) and isinstance(override, (Record, Mapping)):
        return _merge_record(base, override, path)
    return override


def _child(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else key


def _shape_name(value: Value) -> str:
    if isinstance(value, Scalar):
        return type(value.value).__name__
    return type(value).__name__


def _is_null(value: Value | None) -> bool:
    return value is None or (isinstance(value, Scalar) and value.value is None)


def _same_shape(left: Value, right: Value) -> bool:
    if isinstance(left, Record):
        return isinstance(right, (Record, Mapping))
    if isinstance(left, Scalar) and isinstance(right, Scalar):
        return left.value is None or type(left.value) is type(right.value)
    return type(left) is type(right)


def _merge_mapping(base: Mapping, override: Mapping, path: str) -> Mapping:
    merged = dict(base.entries)
    for key, incoming in override.entries.items():
        existing = merged.get(key)
        if existing is None:
            merged[key] = incoming
        elif _is_null(incoming):
            continue
        else:
            merged[key] = merge(existing, incoming, path=_child(path, key))
    return Mapping(merged)


def _merge_sequence(base: Sequence, override: Sequence, path: str) -> Sequence:
    items = list(base.items)
    for index, incoming in enumerate(override.items):
        if _is_null(incoming):
            continue
        if index >= len(items):
            _log.debug("Dropping override %s: no such element in base", _child(path, index))
            continue
        existing = items[index]
        if existing is None:
            items[index] = incoming
        elif _same_shape(existing, incoming):
            items[index] = merge(existing, incoming, path=_child(path, index))
        else:
            _log.warning(
                "Ignoring override %s: expected %s, got %s",
                _child(path, index),
                _shape_name(existing),
                _shape_name(incoming),
            )
    return Sequence(tuple(items))


def _merge_record(base: Record, override: Record | Mapping, path: str) -> Record:
    incoming_fields = override.fields if isinstance(override, Record) else override.entries
    fields = dict(base.fields)
    for name, incoming in incoming_fields.items():
        if name not in fields:
            _log.warning("Ignoring override %s: %s has no such field", _child(path, name), base.kind.__name__)
            continue
        existing = fields[name]
        if _is_null(incoming):
            continue
        if _same_shape(existing, incoming):
            fields[name] = merge(existing, incoming, path=_child(path, name))
        else:
            _log.warning(
                "Ignoring override %s: expected %s, got %s",
                _child(path, name),
                _shape_name(existing),
                _shape_name(incoming),
            )
    return Record(kind=base.kind, fields=fields)


def merge_native(base: Any, override: Any) -> Any:
    """Convenience wrapper: merge two plain-Python trees and return plain data."""
    if override is None:
        return base
    return to_native(merge(from_native(base), from_native(override)))
