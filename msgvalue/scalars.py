"""Scalar building blocks of MessagePack values: integers and raw strings."""

from __future__ import annotations

from dataclasses import dataclass

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_U64_MAX = (1 << 64) - 1


@dataclass(frozen=True)
class Integer:
    """A MessagePack integer, limited to the range ``-(2**63)`` to ``2**64 - 1``."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(
                f"Integer requires an int, got {type(self.value).__name__}"
            )
        if not _I64_MIN <= self.value <= _U64_MAX:
            raise OverflowError(
                f"{self.value} is outside the MessagePack integer range"
            )

    def is_i64(self) -> bool:
        """Return True if the integer fits in a signed 64-bit integer."""
        return self.value <= _I64_MAX

    def is_u64(self) -> bool:
        """Return True if the integer fits in an unsigned 64-bit integer."""
        return self.value >= 0

    def as_i64(self) -> int | None:
        """Return the integer if it fits in a signed 64-bit integer, else None."""
        return self.value if self.is_i64() else None

    def as_u64(self) -> int | None:
        """Return the integer if it fits in an unsigned 64-bit integer, else None."""
        return self.value if self.is_u64() else None

    def as_f64(self) -> float:
        """Return the integer converted to a float."""
        return float(self.value)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


def _debug_text(text: str) -> str:
    """Render text quoted, with special characters escaped."""
    parts = ['"']
    for ch in text:
        if ch == "\\":
            parts.append("\\\\")
        elif ch == '"':
            parts.append('\\"')
        elif ch == "\n":
            parts.append("\\n")
        elif ch == "\r":
            parts.append("\\r")
        elif ch == "\t":
            parts.append("\\t")
        elif ch == "\0":
            parts.append("\\0")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


def _debug_bytes(data: bytes) -> str:
    """Render bytes as a bracketed list of decimal numbers."""
    return "[" + ", ".join(str(b) for b in data) + "]"


class Utf8String:
    """A MessagePack string that may hold bytes which are not valid UTF-8.

    A string built from text is always valid. A string built from raw bytes
    keeps those bytes, and the decoding error, when they are not valid UTF-8.
    """

    __slots__ = ("_text", "_raw", "_error")

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError(f"Utf8String requires a str, got {type(text).__name__}")
        self._text: str | None = text
        self._raw: bytes = text.encode("utf-8")
        self._error: UnicodeDecodeError | None = None

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> Utf8String:
        """Build a string from raw bytes, keeping them if they are not valid UTF-8."""
        raw = bytes(data)
        try:
            return cls(raw.decode("utf-8"))
        except UnicodeDecodeError as err:
            obj = cls.__new__(cls)
            obj._text = None
            obj._raw = raw
            obj._error = err
            return obj

    def is_str(self) -> bool:
        """Return True if the string is valid UTF-8."""
        return self._text is not None

    def is_err(self) -> bool:
        """Return True if the string holds an invalid UTF-8 sequence."""
        return self._text is None

    def as_str(self) -> str | None:
        """Return the text if it is valid UTF-8, else None."""
        return self._text

    def as_err(self) -> UnicodeDecodeError | None:
        """Return the decoding error if the bytes are not valid UTF-8, else None."""
        return self._error

    def as_bytes(self) -> bytes:
        """Return the underlying bytes, whether valid UTF-8 or not."""
        return self._raw

    def __bytes__(self) -> bytes:
        return self._raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Utf8String):
            return NotImplemented
        return self._text == other._text and self._raw == other._raw

    def __hash__(self) -> int:
        return hash((self._text, self._raw))

    def __repr__(self) -> str:
        if self._text is not None:
            return f"Utf8String({self._text!r})"
        return f"Utf8String.from_bytes({self._raw!r})"

    def __str__(self) -> str:
        if self._text is not None:
            return _debug_text(self._text)
        return _debug_bytes(self._raw)