"""Writing MessagePack values in their most compact form."""

from __future__ import annotations

import struct
from collections.abc import Iterator
from itertools import chain
from typing import BinaryIO

from msgvalue.value import Kind, Value

_U32_MAX = 0xFFFFFFFF


class EncodeError(Exception):
    """Raised when a value cannot be encoded or written."""


def _check_len(length: int, what: str) -> None:
    if length > _U32_MAX:
        raise EncodeError(f"{what} length {length} exceeds {_U32_MAX}")


def _uint(number: int) -> bytes:
    if number < 0x80:
        return bytes([number])
    if number <= 0xFF:
        return b"\xcc" + struct.pack(">B", number)
    if number <= 0xFFFF:
        return b"\xcd" + struct.pack(">H", number)
    if number <= _U32_MAX:
        return b"\xce" + struct.pack(">I", number)
    return b"\xcf" + struct.pack(">Q", number)


def _sint(number: int) -> bytes:
    if number >= -32:
        return struct.pack(">b", number)
    if number >= -128:
        return b"\xd0" + struct.pack(">b", number)
    if number >= -32768:
        return b"\xd1" + struct.pack(">h", number)
    if number >= -2147483648:
        return b"\xd2" + struct.pack(">i", number)
    return b"\xd3" + struct.pack(">q", number)


def _str_header(length: int) -> bytes:
    _check_len(length, "string")
    if length < 32:
        return bytes([0xA0 | length])
    if length <= 0xFF:
        return b"\xd9" + struct.pack(">B", length)
    if length <= 0xFFFF:
        return b"\xda" + struct.pack(">H", length)
    return b"\xdb" + struct.pack(">I", length)


def _bin_header(length: int) -> bytes:
    _check_len(length, "binary")
    if length <= 0xFF:
        return b"\xc4" + struct.pack(">B", length)
    if length <= 0xFFFF:
        return b"\xc5" + struct.pack(">H", length)
    return b"\xc6" + struct.pack(">I", length)


def _array_header(length: int) -> bytes:
    _check_len(length, "array")
    if length < 16:
        return bytes([0x90 | length])
    if length <= 0xFFFF:
        return b"\xdc" + struct.pack(">H", length)
    return b"\xdd" + struct.pack(">I", length)


def _map_header(length: int) -> bytes:
    _check_len(length, "map")
    if length < 16:
        return bytes([0x80 | length])
    if length <= 0xFFFF:
        return b"\xde" + struct.pack(">H", length)
    return b"\xdf" + struct.pack(">I", length)


_FIXEXT_MARKERS = {1: 0xD4, 2: 0xD5, 4: 0xD6, 8: 0xD7, 16: 0xD8}


def _ext_header(length: int, tag: int) -> bytes:
    _check_len(length, "ext")
    tag_byte = struct.pack(">b", tag)
    if length in _FIXEXT_MARKERS:
        return bytes([_FIXEXT_MARKERS[length]]) + tag_byte
    if length <= 0xFF:
        return b"\xc7" + struct.pack(">B", length) + tag_byte
    if length <= 0xFFFF:
        return b"\xc8" + struct.pack(">H", length) + tag_byte
    return b"\xc9" + struct.pack(">I", length) + tag_byte


def _scalar(value: Value) -> bytes:
    kind = value.kind
    if kind is Kind.NIL:
        return b"\xc0"
    if kind is Kind.BOOLEAN:
        return b"\xc3" if value.as_bool() else b"\xc2"
    if kind is Kind.INTEGER:
        number = int(value)
        return _uint(number) if number >= 0 else _sint(number)
    if kind is Kind.F32:
        return b"\xca" + struct.pack(">f", value.as_f64())
    if kind is Kind.F64:
        return b"\xcb" + struct.pack(">d", value.as_f64())
    if kind is Kind.STRING:
        raw = value.utf8
        data = raw.as_bytes()
        header = _str_header(len(data)) if raw.is_str() else _bin_header(len(data))
        return header + data
    if kind is Kind.BINARY:
        data = value.as_slice()
        return _bin_header(len(data)) + data
    tag, data = value.as_ext()
    return _ext_header(len(data), tag) + data


def _chunks(value: Value) -> Iterator[bytes]:
    """Yield the encoded pieces of a value, walking nested items without recursion."""
    if not isinstance(value, Value):
        raise TypeError(f"expected a Value, got {type(value).__name__}")
    stack = [iter((value,))]
    while stack:
        item = next(stack[-1], None)
        if item is None:
            stack.pop()
            continue
        kind = item.kind
        if kind is Kind.ARRAY:
            items = item.as_array()
            yield _array_header(len(items))
            stack.append(iter(items))
        elif kind is Kind.MAP:
            pairs = item.as_map()
            yield _map_header(len(pairs))
            stack.append(chain.from_iterable(pairs))
        else:
            yield _scalar(item)


def write_value(stream: BinaryIO, value: Value) -> None:
    """Encode a value and write it to a binary stream."""
    for chunk in _chunks(value):
        try:
            stream.write(chunk)
        except OSError as err:
            raise EncodeError(str(err)) from err


def pack(value: Value) -> bytes:
    """Encode a value into bytes."""
    return b"".join(_chunks(value))