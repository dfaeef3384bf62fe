"""Packing enum variants as MessagePack values.

A variant is written as a two-item array: its index followed by an array
holding its fields. A unit variant has an empty field array.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from msgvalue.value import Value

_U32_MAX = 0xFFFFFFFF


def _index_value(index: int) -> Value:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"variant index must be an int, got {type(index).__name__}")
    if not 0 <= index <= _U32_MAX:
        raise ValueError(f"variant index {index} is outside 0..{_U32_MAX}")
    return Value.integer(index)


def _pack(index: int, fields: Iterable[Any]) -> Value:
    header = _index_value(index)
    return Value.array((header, Value.array(Value.of(item) for item in fields)))


def unit_variant(index: int) -> Value:
    """Return the value of a variant without fields: ``[index, []]``."""
    return _pack(index, ())


def newtype_variant(index: int, value: Any) -> Value:
    """Return the value of a variant wrapping one value: ``[index, [value]]``."""
    return _pack(index, (value,))


def tuple_variant(index: int, fields: Iterable[Any]) -> Value:
    """Return the value of a variant with positional fields: ``[index, [fields...]]``."""
    return _pack(index, fields)


def struct_variant(index: int, fields: Mapping[str, Any] | Iterable[Any]) -> Value:
    """Return the value of a variant with named fields: ``[index, [values...]]``.

    Field names are dropped; only the values are written, in order.
    """
    if isinstance(fields, Mapping):
        return _pack(index, fields.values())
    return _pack(index, fields)