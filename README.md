# msgvalue

A dynamic MessagePack value model for Python. `msgvalue` represents any
MessagePack item as a `Value`, encodes values to bytes in their most compact
form, and decodes bytes back into values with a limit on nesting depth.

The package has no dependencies beyond the standard library.

## Installation

```
pip install msgvalue
```

## Values

`msgvalue.value.Value` is one of ten kinds, listed by the `Kind` enum: nil,
boolean, integer, 32-bit float, 64-bit float, string, binary, array, map and
extension. Each kind has a class-method constructor:

```python
from msgvalue.value import Value

v = Value.array([Value.nil(), Value.integer(42), Value.string("le message")])
v.is_array()                          # True
v.as_array()[1].as_i64()              # 42
Value.f32(42.0).as_f64()              # 42.0
Value.ext(42, b"\x01\x02").as_ext()   # (42, b"\x01\x02")
Value.map([(Value.string("name"), Value.string("John"))])
```

- Integers may lie anywhere from -(2**63) to 2**64 - 1; outside that range
  `Value.integer` raises `OverflowError`. `as_i64` and `as_u64` return `None`
  when the number does not fit the named range.
- `Value.f32` rounds its number to single precision.
- An extension tag must be an int from -128 to 127.
- Arrays hold their items as a tuple. Maps hold an ordered tuple of
  `(key, value)` pairs, so any value can be a key and duplicates are kept.
- `as_slice` returns the bytes of a binary or a string value.

`Value.of` builds a value from a plain Python object: `None`, `bool`, `int`,
`float` (as a 64-bit float), `str`, bytes-like objects, lists and tuples
(as arrays) and mappings (as maps). Anything else raises `TypeError`.
`from_iterable(items)` collects any iterable into an array, converting each
item with `Value.of`; an iterable of small ints becomes an array of integers,
not binary.

Indexing looks up array items by position and map entries by string key:
`v[1]`, `v["name"]`. A missing item, or a lookup on a value of another kind,
gives nil rather than raising.

Values compare by kind and content, are hashable, and support `int()` and
`float()` where that makes sense. `str(value)` gives a compact text form such
as `[nil, 42, "le message"]`.

### Strings that are not valid UTF-8

`msgvalue.scalars.Utf8String` keeps the raw bytes of a string.
`Utf8String.from_bytes` accepts any bytes; if they are not valid UTF-8,
`is_err()` is true, `as_str()` is `None`, `as_err()` holds the
`UnicodeDecodeError`, and `as_bytes()` gives the original bytes back.
`Value.utf8` exposes the `Utf8String` of a string value. Such a string is
encoded as binary.

## Encoding and decoding

```python
from msgvalue.encode import pack
from msgvalue.decode import unpack

data = pack(Value.string("le message"))   # b"\xaale message"
unpack(data) == Value.string("le message")  # True
```

`msgvalue.encode.write_value(stream, value)` and
`msgvalue.decode.read_value(stream, max_depth=MAX_DEPTH)` work with binary
file-like objects. `unpack` decodes the first value in its input and ignores
any bytes after it. Neither direction uses recursion, so deeply nested values
do not exhaust the Python stack.

Decoding errors are subclasses of `DecodeError`:

- `InvalidMarkerRead` — the byte that starts a value is missing or cannot be read;
- `InvalidDataRead` — the input ends, or fails, inside a value;
- `DepthLimitExceeded` — the nesting uses up `max_depth` (default
  `MAX_DEPTH`, 1024).

The reserved marker byte `0xc1` decodes as nil. Encoding raises
`EncodeError` when a length exceeds 2**32 - 1 or the stream fails to write.

## Enum variants

`msgvalue.variant_ser` writes enum variants as `[index, [fields...]]`:

```python
from msgvalue import variant_ser

variant_ser.unit_variant(0)                           # [0, []]
variant_ser.newtype_variant(1, "John")                # [1, ["John"]]
variant_ser.tuple_variant(2, ["John", 42])            # [2, ["John", 42]]
variant_ser.struct_variant(3, {"name": "John", "age": 42})  # [3, ["John", 42]]
```

Fields are converted with `Value.of`; a struct variant keeps only the field
values, in order. The index must lie in 0..2**32 - 1.

## What it does not do

The package converts only plain Python objects (as listed under `Value.of`)
into values. It does not turn values back into typed Python objects, does not
convert dataclasses or other user classes, does not read enum variants back
from the `[index, [fields...]]` shape, and offers no typed wrapper for
extension values beyond `Value.ext` and `as_ext`.