import io

import pytest

from msgvalue.decode import (
    MAX_DEPTH,
    DecodeError,
    DepthLimitExceeded,
    InvalidDataRead,
    InvalidMarkerRead,
    read_value,
    unpack,
)
from msgvalue.value import Value

COMPLEX = bytes([
    0x94, 0x01, 0x00, 0x93, 0x91, 0x92, 0xa9, 0x31,
    0x32, 0x37, 0x2e, 0x30, 0x2e, 0x30, 0x2e, 0x31,
    0xcd, 0xe6, 0xc2, 0x01, 0x84, 0x00, 0x93, 0xa4,
    0x72, 0x65, 0x61, 0x64, 0x80, 0x82, 0x00, 0x92,
    0xa5, 0x76, 0x61, 0x6c, 0x75, 0x65, 0x80, 0x01,
    0x92, 0xa5, 0x65, 0x72, 0x72, 0x6f, 0x72, 0x80,
    0x01, 0x93, 0xa5, 0x77, 0x72, 0x69, 0x74, 0x65,
    0x80, 0x82, 0x00, 0x92, 0xa5, 0x76, 0x61, 0x6c,
    0x75, 0x65, 0x80, 0x01, 0x92, 0xa5, 0x65, 0x72,
    0x72, 0x6f, 0x72, 0x80, 0x02, 0x93, 0xa6, 0x72,
    0x65, 0x6d, 0x6f, 0x76, 0x65, 0x80, 0x82, 0x00,
    0x92, 0xa5, 0x76, 0x61, 0x6c, 0x75, 0x65, 0x80,
    0x01, 0x92, 0xa5, 0x65, 0x72, 0x72, 0x6f, 0x72,
    0x80, 0x03, 0x93, 0xa4, 0x66, 0x69, 0x6e, 0x64,
    0x80, 0x82, 0x00, 0x92, 0xa5, 0x76, 0x61, 0x6c,
    0x75, 0x65, 0x80, 0x01, 0x92, 0xa5, 0x65, 0x72,
    0x72, 0x6f, 0x72, 0x80, 0x91, 0x93, 0x50, 0x51,
    0x52,
])


def check_decode(buf, expected):
    assert unpack(buf) == expected
    assert read_value(io.BytesIO(buf)) == expected


def test_pass_null():
    check_decode(b"\xc0", Value.nil())


def test_pass_bool():
    check_decode(b"\xc3", Value.boolean(True))
    check_decode(b"\xc2", Value.boolean(False))


@pytest.mark.parametrize(
    "buf, number",
    [
        (b"\x00", 0),
        (b"\xcc\xff", 255),
        (b"\xcd\xff\xff", 65535),
        (b"\xce\xff\xff\xff\xff", 4294967295),
        (b"\xcf\xff\xff\xff\xff\xff\xff\xff\xff", 18446744073709551615),
    ],
)
def test_pass_uint(buf, number):
    check_decode(buf, Value.integer(number))


@pytest.mark.parametrize(
    "buf, number",
    [
        (b"\xd0\x80", -128),
        (b"\x7f", 127),
        (b"\xd1\x80\x00", -32768),
        (b"\xcd\x7f\xff", 32767),
        (b"\xd2\x80\x00\x00\x00", -2147483648),
        (b"\xce\x7f\xff\xff\xff", 2147483647),
        (b"\xd3\x80\x00\x00\x00\x00\x00\x00\x00", -9223372036854775808),
        (b"\xcf\x7f\xff\xff\xff\xff\xff\xff\xff", 9223372036854775807),
    ],
)
def test_pass_sint(buf, number):
    check_decode(buf, Value.integer(number))


def test_negative_fixint():
    check_decode(b"\xff", Value.integer(-1))
    check_decode(b"\xe0", Value.integer(-32))


def test_pass_f32():
    check_decode(b"\xca\x7f\x7f\xff\xff", Value.f32(3.4028234e38))


def test_pass_f64():
    check_decode(b"\xcb\x00\x00\x00\x00\x00\x00\x00\x00", Value.f64(0.0))
    check_decode(b"\xcb\x40\x45\x00\x00\x00\x00\x00\x00", Value.f64(42.0))


def test_pass_str():
    check_decode(
        bytes([0xaa, 0x6c, 0x65, 0x20, 0x6d, 0x65, 0x73, 0x73, 0x61, 0x67, 0x65]),
        Value.string("le message"),
    )


def test_pass_bin():
    check_decode(b"\xc4\x02\xcc\x80", Value.binary(b"\xcc\x80"))


def test_pass_array():
    check_decode(
        bytes([0x92, 0xa2, 0x6c, 0x65, 0xa4, 0x73, 0x68, 0x69, 0x74]),
        Value.array([Value.string("le"), Value.string("shit")]),
    )


def test_pass_value_map():
    expected = Value.map([
        (Value.integer(0), Value.string("le")),
        (Value.integer(1), Value.string("shit")),
    ])
    check_decode(
        bytes([0x82, 0x00, 0xa2, 0x6c, 0x65, 0x01, 0xa4, 0x73, 0x68, 0x69, 0x74]),
        expected,
    )


def test_pass_ext():
    check_decode(b"\xd4\x05\xaa", Value.ext(5, b"\xaa"))
    check_decode(b"\xc7\x03\xfe\x01\x02\x03", Value.ext(-2, b"\x01\x02\x03"))


def test_reserved_marker_is_nil():
    check_decode(b"\xc1", Value.nil())


def test_invalid_utf8_string_keeps_bytes():
    value = unpack(b"\xa2\xff\xfe")
    assert value.is_str() is False
    assert value.as_slice() == b"\xff\xfe"
    assert value.utf8.is_err() is True


def _method(name):
    return [name, {}, {0: ["value", {}], 1: ["error", {}]}]


def test_complex_value():
    expected = Value.of([
        1,
        0,
        [
            [["127.0.0.1", 59074]],
            1,
            {0: _method("read"), 1: _method("write"), 2: _method("remove"), 3: _method("find")},
        ],
        [[80, 81, 82]],
    ])
    check_decode(COMPLEX, expected)


def test_stack_depth_checking():
    buf = b"\x91" * MAX_DEPTH + b"\xc3"
    with pytest.raises(DepthLimitExceeded) as info:
        unpack(buf)
    assert str(info.value) == "depth limit exceeded"


def test_deep_nesting_within_limit():
    value = unpack(b"\x91" * 511 + b"\xc3")
    for _ in range(511):
        value = value[0]
    assert value == Value.boolean(True)


def test_nesting_just_past_limit():
    with pytest.raises(DepthLimitExceeded):
        unpack(b"\x91" * 512 + b"\xc3")


def test_custom_max_depth():
    assert unpack(b"\x91\xc3", max_depth=3) == Value.array([Value.boolean(True)])
    with pytest.raises(DepthLimitExceeded):
        unpack(b"\x91\xc3", max_depth=2)


def test_depth_counts_for_empty_containers_and_strings():
    assert unpack(b"\x90", max_depth=2) == Value.array(())
    with pytest.raises(DepthLimitExceeded):
        unpack(b"\x90", max_depth=1)
    assert unpack(b"\xa1a", max_depth=3) == Value.string("a")
    with pytest.raises(DepthLimitExceeded):
        unpack(b"\xa1a", max_depth=2)


def test_zero_depth_fails_before_reading():
    with pytest.raises(DepthLimitExceeded):
        unpack(b"\xc0", max_depth=0)


def test_empty_input_is_marker_error():
    with pytest.raises(InvalidMarkerRead) as info:
        unpack(b"")
    assert str(info.value).startswith("I/O error while reading marker byte")


def test_truncated_binary_is_data_error():
    with pytest.raises(InvalidDataRead) as info:
        unpack(b"\xc4\x05ab")
    assert "Expected 5 bytes, read 2 bytes" in str(info.value)


def test_truncated_integer_is_data_error():
    with pytest.raises(DecodeError):
        unpack(b"\xcd\x01")


def test_truncated_array_needs_more_markers():
    with pytest.raises(InvalidMarkerRead):
        unpack(b"\x92\x01")


def test_reads_consecutive_values_from_stream():
    stream = io.BytesIO(b"\x01\xa1x\xc0")
    assert read_value(stream) == Value.integer(1)
    assert read_value(stream) == Value.string("x")
    assert read_value(stream) == Value.nil()
    assert stream.tell() == 4


def test_unpack_ignores_trailing_bytes():
    assert unpack(b"\x2a\xff\xff") == Value.integer(42)


class _FailingReader:
    def read(self, size=-1):
        raise OSError("device gone")


def test_stream_failure_is_wrapped():
    with pytest.raises(InvalidMarkerRead) as info:
        read_value(_FailingReader())
    assert "device gone" in str(info.value)