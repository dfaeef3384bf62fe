"""Reading MessagePack values from bytes and binary streams."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from msgvalue.scalars import Utf8String
from msgvalue.value import Value

MAX_DEPTH = 1024
"""The default recursion budget before DepthLimitExceeded is raised."""

_CHUNK_MAX = 64 * 1024
_EOF_REASON = "failed to fill whole buffer"

_UINT_FORMATS = {0xCC: ">B", 0xCD: ">H", 0xCE: ">I", 0xCF: ">Q"}
_SINT_FORMATS = {0xD0: ">b", 0xD1: ">h", 0xD2: ">i", 0xD3: ">q"}
_STR_LEN_FORMATS = {0xD9: ">B", 0xDA: ">H", 0xDB: ">I"}
_BIN_LEN_FORMATS = {0xC4: ">B", 0xC5: ">H", 0xC6: ">I"}
_ARRAY_LEN_FORMATS = {0xDC: ">H", 0xDD: ">I"}
_MAP_LEN_FORMATS = {0xDE: ">H", 0xDF: ">I"}
_EXT_LEN_FORMATS = {0xC7: ">B", 0xC8: ">H", 0xC9: ">I"}
_FIXEXT_LENGTHS = {0xD4: 1, 0xD5: 2, 0xD6: 4, 0xD7: 8, 0xD8: 16}


class DecodeError(Exception):
    """Base class of the errors raised while decoding a value."""


class InvalidMarkerRead(DecodeError):
    """The marker byte that starts a value could not be read."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"I/O error while reading marker byte: {reason}")
        self.reason = reason


class InvalidDataRead(DecodeError):
    """The bytes that follow a marker could not be read."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"I/O error while reading non-marker bytes: {reason}")
        self.reason = reason


class DepthLimitExceeded(DecodeError):
    """The value is nested deeper than the allowed depth."""

    def __init__(self) -> None:
        super().__init__("depth limit exceeded")


@dataclass(slots=True)
class _Frame:
    """An array or map whose items are still being read."""

    is_map: bool
    remaining: int
    child_depth: int
    items: list = field(default_factory=list)
    key: Value | None = None

    def push(self, value: Value) -> Value | None:
        """Add a decoded item; return the finished container when complete."""
        if self.is_map:
            if self.key is None:
                self.key = value
                return None
            self.items.append((self.key, value))
            self.key = None
        else:
            self.items.append(value)
        self.remaining -= 1
        if self.remaining:
            return None
        return Value.map(self.items) if self.is_map else Value.array(self.items)


def _descend(depth: int) -> int:
    if depth == 0:
        raise DepthLimitExceeded()
    return depth - 1


def _read_marker(stream: BinaryIO) -> int:
    try:
        byte = stream.read(1)
    except OSError as err:
        raise InvalidMarkerRead(str(err)) from err
    if not byte:
        raise InvalidMarkerRead(_EOF_REASON)
    return byte[0]


def _read_up_to(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        try:
            chunk = stream.read(min(remaining, _CHUNK_MAX))
        except OSError as err:
            raise InvalidDataRead(str(err)) from err
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_fixed(stream: BinaryIO, fmt: str) -> int | float:
    size = struct.calcsize(fmt)
    data = _read_up_to(stream, size)
    if len(data) != size:
        raise InvalidDataRead(_EOF_REASON)
    return struct.unpack(fmt, data)[0]


def _read_bin(stream: BinaryIO, length: int, depth: int) -> bytes:
    _descend(depth)
    data = _read_up_to(stream, length)
    if len(data) != length:
        raise InvalidDataRead(f"Expected {length} bytes, read {len(data)} bytes")
    return data


def _read_str(stream: BinaryIO, length: int, depth: int) -> Value:
    depth = _descend(depth)
    return Value.string(Utf8String.from_bytes(_read_bin(stream, length, depth)))


def _read_ext(stream: BinaryIO, length: int, depth: int) -> Value:
    depth = _descend(depth)
    tag = _read_fixed(stream, ">b")
    return Value.ext(tag, _read_bin(stream, length, depth))


def _container(is_map: bool, length: int, depth: int) -> Value | _Frame:
    child_depth = _descend(depth)
    if length == 0:
        return Value.map(()) if is_map else Value.array(())
    items = length * 2 if is_map else length
    # A map frame counts entries, so it needs `length` pushes of a value.
    del items
    return _Frame(is_map=is_map, remaining=length, child_depth=child_depth)


def _read_one(stream: BinaryIO, depth: int) -> Value | _Frame:
    depth = _descend(depth)
    marker = _read_marker(stream)
    if marker <= 0x7F:
        return Value.integer(marker)
    if marker >= 0xE0:
        return Value.integer(marker - 0x100)
    if marker <= 0x8F:
        return _container(True, marker & 0x0F, depth)
    if marker <= 0x9F:
        return _container(False, marker & 0x0F, depth)
    if marker <= 0xBF:
        return _read_str(stream, marker & 0x1F, depth)
    if marker in (0xC0, 0xC1):
        return Value.nil()
    if marker == 0xC2:
        return Value.boolean(False)
    if marker == 0xC3:
        return Value.boolean(True)
    if marker in _UINT_FORMATS:
        return Value.integer(_read_fixed(stream, _UINT_FORMATS[marker]))
    if marker in _SINT_FORMATS:
        return Value.integer(_read_fixed(stream, _SINT_FORMATS[marker]))
    if marker == 0xCA:
        return Value.f32(_read_fixed(stream, ">f"))
    if marker == 0xCB:
        return Value.f64(_read_fixed(stream, ">d"))
    if marker in _STR_LEN_FORMATS:
        length = _read_fixed(stream, _STR_LEN_FORMATS[marker])
        return _read_str(stream, length, depth)
    if marker in _BIN_LEN_FORMATS:
        length = _read_fixed(stream, _BIN_LEN_FORMATS[marker])
        return Value.binary(_read_bin(stream, length, depth))
    if marker in _ARRAY_LEN_FORMATS:
        length = _read_fixed(stream, _ARRAY_LEN_FORMATS[marker])
        return _container(False, length, depth)
    if marker in _MAP_LEN_FORMATS:
        length = _read_fixed(stream, _MAP_LEN_FORMATS[marker])
        return _container(True, length, depth)
    if marker in _FIXEXT_LENGTHS:
        return _read_ext(stream, _FIXEXT_LENGTHS[marker], depth)
    length = _read_fixed(stream, _EXT_LEN_FORMATS[marker])
    return _read_ext(stream, length, depth)


def read_value(stream: BinaryIO, max_depth: int = MAX_DEPTH) -> Value:
    """Read one complete value from a binary stream.

    Raises InvalidMarkerRead or InvalidDataRead when the stream ends early or
    fails, and DepthLimitExceeded when the nesting uses up ``max_depth``.
    """
    stack: list[_Frame] = []
    depth = max_depth
    while True:
        item = _read_one(stream, depth)
        if isinstance(item, _Frame):
            stack.append(item)
            depth = item.child_depth
            continue
        value = item
        while True:
            if not stack:
                return value
            finished = stack[-1].push(value)
            if finished is None:
                break
            stack.pop()
            value = finished
        depth = stack[-1].child_depth


def unpack(data: bytes | bytearray | memoryview, max_depth: int = MAX_DEPTH) -> Value:
    """Decode the first value held in ``data``; trailing bytes are ignored."""
    return read_value(io.BytesIO(bytes(data)), max_depth)