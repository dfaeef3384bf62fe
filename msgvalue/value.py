"""The MessagePack value tree and its conversions."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from msgvalue.scalars import Integer, Utf8String, _debug_bytes


class Kind(Enum):
    """The type of a MessagePack value."""

    NIL = "nil"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    F32 = "f32"
    F64 = "f64"
    STRING = "string"
    BINARY = "binary"
    ARRAY = "array"
    MAP = "map"
    EXT = "ext"


def _to_f32(number: float) -> float:
    """Round a float to the nearest single-precision value."""
    return struct.unpack(">f", struct.pack(">f", float(number)))[0]


def _plain_decimal(text: str) -> str:
    """Render a decimal literal without an exponent or trailing zeros."""
    rendered = format(Decimal(text), "f")
    if "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    return rendered


def _special_float(number: float) -> str | None:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    return None


def _display_f64(number: float) -> str:
    special = _special_float(number)
    if special is not None:
        return special
    return _plain_decimal(repr(number))


def _display_f32(number: float) -> str:
    special = _special_float(number)
    if special is not None:
        return special
    for precision in range(1, 10):
        text = f"{number:.{precision}g}"
        if _to_f32(float(text)) == number:
            return _plain_decimal(text)
    return _plain_decimal(repr(number))


class Value:
    """Any valid MessagePack value.

    Arrays and maps hold their items as tuples; a map is a tuple of
    ``(key, value)`` pairs, which keeps order and allows any key type.
    """

    __slots__ = ("_kind", "_payload")

    def __init__(self, kind: Kind, payload: Any = None) -> None:
        self._kind = kind
        self._payload = payload

    # Construction -------------------------------------------------------

    @classmethod
    def nil(cls) -> Value:
        """Return the nil value."""
        return cls(Kind.NIL)

    @classmethod
    def boolean(cls, flag: bool) -> Value:
        """Return a boolean value."""
        return cls(Kind.BOOLEAN, bool(flag))

    @classmethod
    def integer(cls, number: int | Integer) -> Value:
        """Return an integer value; raises OverflowError outside the MessagePack range."""
        if not isinstance(number, Integer):
            number = Integer(number)
        return cls(Kind.INTEGER, number)

    @classmethod
    def f32(cls, number: float) -> Value:
        """Return a single-precision float value, rounding the number to 32 bits."""
        return cls(Kind.F32, _to_f32(number))

    @classmethod
    def f64(cls, number: float) -> Value:
        """Return a double-precision float value."""
        return cls(Kind.F64, float(number))

    @classmethod
    def string(cls, text: str | Utf8String) -> Value:
        """Return a string value from text or a Utf8String."""
        if not isinstance(text, Utf8String):
            text = Utf8String(text)
        return cls(Kind.STRING, text)

    @classmethod
    def binary(cls, data: bytes | bytearray | memoryview) -> Value:
        """Return a binary value."""
        return cls(Kind.BINARY, bytes(data))

    @classmethod
    def array(cls, items: Iterable[Value]) -> Value:
        """Return an array value from values."""
        elements = tuple(items)
        for item in elements:
            if not isinstance(item, Value):
                raise TypeError(f"array items must be Value, got {type(item).__name__}")
        return cls(Kind.ARRAY, elements)

    @classmethod
    def map(cls, pairs: Iterable[tuple[Value, Value]]) -> Value:
        """Return a map value from ``(key, value)`` pairs of values."""
        entries = []
        for key, val in pairs:
            if not isinstance(key, Value) or not isinstance(val, Value):
                raise TypeError("map keys and values must be Value")
            entries.append((key, val))
        return cls(Kind.MAP, tuple(entries))

    @classmethod
    def ext(cls, tag: int, data: bytes | bytearray | memoryview) -> Value:
        """Return an extension value with a signed 8-bit type tag."""
        if isinstance(tag, bool) or not isinstance(tag, int):
            raise TypeError(f"ext tag must be an int, got {type(tag).__name__}")
        if not -128 <= tag <= 127:
            raise ValueError(f"ext tag {tag} is outside -128..127")
        return cls(Kind.EXT, (tag, bytes(data)))

    @classmethod
    def of(cls, obj: Any) -> Value:
        """Convert a plain Python object into a value.

        None, bool, int, float, str, bytes-like, lists and tuples, and
        mappings are accepted; floats become 64-bit floats.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.nil()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, (int, Integer)):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.f64(obj)
        if isinstance(obj, (str, Utf8String)):
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(obj)
        if isinstance(obj, (list, tuple)):
            return cls.array(cls.of(item) for item in obj)
        if isinstance(obj, Mapping):
            return cls.map((cls.of(k), cls.of(v)) for k, v in obj.items())
        raise TypeError(f"cannot convert {type(obj).__name__} to a MessagePack value")

    # Inspection ---------------------------------------------------------

    @property
    def kind(self) -> Kind:
        """The type of this value."""
        return self._kind

    def is_nil(self) -> bool:
        """Return True if the value is nil."""
        return self._kind is Kind.NIL

    def is_bool(self) -> bool:
        """Return True if the value is a boolean."""
        return self._kind is Kind.BOOLEAN

    def is_i64(self) -> bool:
        """Return True if the value is an integer that fits in a signed 64-bit integer."""
        return self._kind is Kind.INTEGER and self._payload.is_i64()

    def is_u64(self) -> bool:
        """Return True if the value is an integer that fits in an unsigned 64-bit integer."""
        return self._kind is Kind.INTEGER and self._payload.is_u64()

    def is_f32(self) -> bool:
        """Return True if the value is a 32-bit float."""
        return self._kind is Kind.F32

    def is_f64(self) -> bool:
        """Return True if the value is a 64-bit float."""
        return self._kind is Kind.F64

    def is_number(self) -> bool:
        """Return True if the value is an integer or a float."""
        return self._kind in (Kind.INTEGER, Kind.F32, Kind.F64)

    def is_str(self) -> bool:
        """Return True if the value is a valid UTF-8 string."""
        return self.as_str() is not None

    def is_bin(self) -> bool:
        """Return True if the value is binary or a string."""
        return self.as_slice() is not None

    def is_array(self) -> bool:
        """Return True if the value is an array."""
        return self._kind is Kind.ARRAY

    def is_map(self) -> bool:
        """Return True if the value is a map."""
        return self._kind is Kind.MAP

    def is_ext(self) -> bool:
        """Return True if the value is an extension."""
        return self._kind is Kind.EXT

    def as_bool(self) -> bool | None:
        """Return the boolean, or None if the value is not a boolean."""
        return self._payload if self._kind is Kind.BOOLEAN else None

    def as_i64(self) -> int | None:
        """Return the integer if it fits in a signed 64-bit integer, else None."""
        return self._payload.as_i64() if self._kind is Kind.INTEGER else None

    def as_u64(self) -> int | None:
        """Return the integer if it fits in an unsigned 64-bit integer, else None."""
        return self._payload.as_u64() if self._kind is Kind.INTEGER else None

    def as_f64(self) -> float | None:
        """Return any number as a float, or None if the value is not a number."""
        if self._kind is Kind.INTEGER:
            return self._payload.as_f64()
        if self._kind in (Kind.F32, Kind.F64):
            return self._payload
        return None

    def as_str(self) -> str | None:
        """Return the text of a valid UTF-8 string, else None."""
        return self._payload.as_str() if self._kind is Kind.STRING else None

    def as_slice(self) -> bytes | None:
        """Return the bytes of a binary or string value, else None."""
        if self._kind is Kind.BINARY:
            return self._payload
        if self._kind is Kind.STRING:
            return self._payload.as_bytes()
        return None

    def as_array(self) -> tuple[Value, ...] | None:
        """Return the items of an array, else None."""
        return self._payload if self._kind is Kind.ARRAY else None

    def as_map(self) -> tuple[tuple[Value, Value], ...] | None:
        """Return the ``(key, value)`` pairs of a map, else None."""
        return self._payload if self._kind is Kind.MAP else None

    def as_ext(self) -> tuple[int, bytes] | None:
        """Return the ``(tag, data)`` of an extension, else None."""
        return self._payload if self._kind is Kind.EXT else None

    @property
    def utf8(self) -> Utf8String | None:
        """The raw string of a string value, valid UTF-8 or not, else None."""
        return self._payload if self._kind is Kind.STRING else None

    # Protocols ----------------------------------------------------------

    def __getitem__(self, index: int | str) -> Value:
        """Look up an array item by position or a map entry by string key.

        Missing items, and lookups on values of another kind, give nil.
        """
        if isinstance(index, bool):
            raise TypeError("cannot index a value with a bool")
        if isinstance(index, int):
            items = self.as_array()
            if items is not None and 0 <= index < len(items):
                return items[index]
            return _NIL
        if isinstance(index, str):
            for key, val in self.as_map() or ():
                if key.as_str() == index:
                    return val
            return _NIL
        raise TypeError(f"cannot index a value with {type(index).__name__}")

    # A value is not a sequence, even though it supports indexing.
    __iter__ = None

    def __int__(self) -> int:
        if self._kind is not Kind.INTEGER:
            raise TypeError(f"{self._kind.value} value is not an integer")
        return self._payload.value

    def __float__(self) -> float:
        number = self.as_f64()
        if number is None:
            raise TypeError(f"{self._kind.value} value is not a number")
        return number

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._kind is other._kind and self._payload == other._payload

    def __hash__(self) -> int:
        return hash((self._kind, self._payload))

    def __repr__(self) -> str:
        if self._kind is Kind.NIL:
            return "Value.nil()"
        payload = self._payload
        if self._kind is Kind.INTEGER:
            payload = payload.value
        elif self._kind is Kind.STRING:
            if payload.is_str():
                payload = payload.as_str()
        elif self._kind is Kind.ARRAY:
            payload = list(payload)
        elif self._kind is Kind.MAP:
            payload = list(payload)
        elif self._kind is Kind.EXT:
            return f"Value.ext({payload[0]!r}, {payload[1]!r})"
        return f"Value.{self._kind.value}({payload!r})"

    def __str__(self) -> str:
        kind = self._kind
        payload = self._payload
        if kind is Kind.NIL:
            return "nil"
        if kind is Kind.BOOLEAN:
            return "true" if payload else "false"
        if kind is Kind.INTEGER:
            return str(payload)
        if kind is Kind.F32:
            return _display_f32(payload)
        if kind is Kind.F64:
            return _display_f64(payload)
        if kind is Kind.STRING:
            return str(payload)
        if kind is Kind.BINARY:
            return _debug_bytes(payload)
        if kind is Kind.ARRAY:
            return "[" + ", ".join(str(item) for item in payload) + "]"
        if kind is Kind.MAP:
            return "{" + ", ".join(f"{k}: {v}" for k, v in payload) + "}"
        tag, data = payload
        return f"[{tag}, {_debug_bytes(data)}]"


_NIL = Value.nil()


def from_iterable(items: Iterable[Any]) -> Value:
    """Collect items into an array value, converting each with ``Value.of``.

    An iterable of small ints becomes an array of integers, not binary.
    """
    return Value.array(Value.of(item) for item in items)