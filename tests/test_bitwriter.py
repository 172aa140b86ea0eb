import random

import pytest

from demogobbler.bitstream import BitStream
from demogobbler.bitwriter import BitWriter
from demogobbler.coords import (
    FRAC_BITS,
    FRAC_BITS_LP,
    COORD_INT_BITS_MP,
    BitAngleVector,
    BitCellCoord,
    BitCoord,
    BitCoordMp,
    BitCoordVector,
    BitNormal,
)


def _reader(writer):
    return BitStream(writer.data, writer.bitsize)


def test_bit_round_trip():
    count = 8192
    writer = BitWriter(count)
    rng = random.Random(0)
    values = [rng.randrange(2) == 1 for _ in range(count)]
    for value in values:
        writer.write_bit(value)
    stream = BitStream(writer.data, count)
    assert [stream.read_bit() for _ in range(count)] == values


def test_bits_round_trip():
    total = 32768
    writer = BitWriter(total)
    rng = random.Random(0)
    items = []
    used = 0
    while True:
        bits = rng.randrange(8) + 1
        used += bits
        if used > total:
            break
        items.append((bits, rng.randrange(1 << bits)))
    for bits, value in items:
        writer.write_bits(value.to_bytes(8, "little"), bits)
    stream = BitStream(writer.data, total)
    assert [stream.read_uint(bits) for bits, _ in items] == [v for _, v in items]


def test_varuint_round_trip():
    rng = random.Random(0)
    values = [rng.randrange(1 << 30) for _ in range(1000)]
    writer = BitWriter(1000 * 40)
    for value in values:
        writer.write_varuint32(value)
    stream = _reader(writer)
    assert [stream.read_varuint32() for _ in values] == values


def test_varuint_encoding():
    writer = BitWriter(8)
    writer.write_varuint32(300)
    assert writer.getvalue() == b"\xac\x02"


def test_bitvector_round_trip():
    rng = random.Random(0)
    vectors = []
    used = 0
    while True:
        bits = rng.randrange(31) + 1
        used += bits * 3
        if used > 100000:
            break
        vectors.append(
            BitAngleVector(
                rng.randrange(1 << bits), rng.randrange(1 << bits), rng.randrange(1 << bits), bits
            )
        )
    writer = BitWriter(100000)
    for vec in vectors:
        writer.write_bitvector(vec)
    stream = _reader(writer)
    assert [stream.read_bitvector(v.bits) for v in vectors] == vectors


def _rng_coord(rng):
    if rng.randrange(3) == 0:
        return BitCoord()
    has_frac = rng.randrange(3) != 0
    frac = rng.randrange(32) if has_frac else 0
    has_int = rng.randrange(3) != 0
    int_value = rng.randrange(1 << 14) if has_int else 0
    return BitCoord(True, has_int, has_frac, False, int_value, frac)


def test_coordvector_round_trip_with_growth():
    rng = random.Random(0)
    vectors = [
        BitCoordVector(_rng_coord(rng), _rng_coord(rng), _rng_coord(rng)) for _ in range(100)
    ]
    writer = BitWriter(1)
    for vec in vectors:
        writer.write_coordvector(vec)
    stream = _reader(writer)
    assert [stream.read_coordvector() for _ in vectors] == vectors
    assert stream.bitoffset == writer.bitoffset


def test_bitcoord_round_trip():
    coord = BitCoord(True, True, True, True, 1234, 17)
    writer = BitWriter(1)
    writer.write_bitcoord(coord)
    stream = _reader(writer)
    assert stream.read_bitcoord() == coord
    assert stream.bitoffset == writer.bitoffset == 2 + 1 + 14 + 5


def test_uint():
    writer = BitWriter(1)
    writer.write_uint(0b10101, 5)
    assert _reader(writer).read_uint(5) == 0b10101


def test_sint():
    writer = BitWriter(1)
    writer.write_sint(-1, 5)
    assert _reader(writer).read_sint(5) == -1


def test_sint32():
    writer = BitWriter(1)
    writer.write_sint32(-1)
    assert _reader(writer).read_sint32() == -1
    assert writer.getvalue() == b"\xff\xff\xff\xff"


def test_uint32():
    writer = BitWriter(1)
    writer.write_uint32(0b101010)
    assert _reader(writer).read_uint32() == 0b101010


def test_float():
    writer = BitWriter(1)
    writer.write_float(1.5)
    assert _reader(writer).read_float() == 1.5


def test_cstring():
    text = "The quick brown fox something something something."
    writer = BitWriter(1)
    writer.write_cstring(text)
    assert _reader(writer).read_cstring(80) == text.encode()
    assert writer.bitoffset == (len(text) + 1) * 8


def test_cstring_none_writes_terminator():
    writer = BitWriter(1)
    writer.write_cstring(None)
    assert writer.getvalue() == b"\0"


def test_bitstream_copy():
    size = 1024
    data = bytes(i % 256 for i in range(size))
    stream = BitStream(data, size * 8 - 31)
    writer = BitWriter(1)
    writer.write_bitstream(stream)
    assert stream.bitoffset == 0
    assert writer.bitoffset == size * 8 - 31
    copy = BitStream(writer.data, writer.bitoffset)
    original = BitStream(data, size * 8 - 31)
    while original.bits_left() > 0:
        assert original.read_bit() == copy.read_bit()


@pytest.mark.parametrize("new_way", [True, False])
@pytest.mark.parametrize("old_index", [-1, 0, 1, 7, 100, 511, 0xFFD])
def test_field_index_round_trip(old_index, new_way):
    for new_index in range(old_index + 1, 0xFFF):
        writer = BitWriter(1)
        writer.write_field_index(new_index, old_index, new_way)
        stream = _reader(writer)
        assert stream.read_field_index(old_index, new_way) == new_index
        assert stream.bitoffset == writer.bitoffset


def test_field_index_end_marker():
    writer = BitWriter(1)
    writer.write_field_index(-1, 1, False)
    writer.write_field_index(-1, 1, True)
    stream = _reader(writer)
    assert stream.read_field_index(1, False) == -1
    assert stream.read_field_index(1, True) == -1
    assert stream.bitoffset == writer.bitoffset


def test_bitnormal_round_trip():
    for sign in (False, True):
        for frac in range(1 << 11):
            normal = BitNormal(sign, frac)
            writer = BitWriter(1)
            writer.write_bitnormal(normal)
            stream = _reader(writer)
            assert stream.read_bitnormal() == normal
            assert stream.bitoffset == writer.bitoffset


def test_ubitint_round_trip():
    rng = random.Random(0)
    values = [rng.randrange(1 << 31) for _ in range(10000)]
    writer = BitWriter(1)
    for value in values:
        writer.write_ubitint(value)
    stream = _reader(writer)
    assert [stream.read_ubitint() for _ in values] == values


def test_ubitvar_round_trip():
    rng = random.Random(0)
    values = [rng.randrange(1 << 31) for _ in range(5000)]
    values += [rng.randrange(1 << 12) for _ in range(5000)]
    writer = BitWriter(1)
    for value in values:
        writer.write_ubitvar(value)
    stream = _reader(writer)
    assert [stream.read_ubitvar() for _ in values] == values


def test_ubitvar_sizes():
    writer = BitWriter(1)
    writer.write_ubitvar(15)
    assert writer.bitoffset == 6
    writer.write_ubitvar(16)
    assert writer.bitoffset == 16
    writer.write_ubitvar(4096)
    assert writer.bitoffset == 16 + 34


def _rng_cellcoord(rng):
    is_int = rng.randrange(2) == 1
    lp = rng.randrange(2) == 1
    bits = rng.randrange(31) + 1
    int_val = rng.randrange(1 << bits)
    fract_val = 0
    if not is_int:
        fract_val = rng.randrange(1 << (FRAC_BITS_LP if lp else FRAC_BITS))
    return is_int, lp, bits, BitCellCoord(int_val, fract_val)


def test_bitcellcoord_round_trip():
    rng = random.Random(0)
    items = [_rng_cellcoord(rng) for _ in range(10000)]
    writer = BitWriter(1)
    for is_int, lp, bits, value in items:
        writer.write_bitcellcoord(value, is_int, lp, bits)
    stream = _reader(writer)
    for is_int, lp, bits, value in items:
        assert stream.read_bitcellcoord(is_int, lp, bits) == value
    assert stream.bitoffset == writer.bitoffset


def _rng_coordmp(rng):
    is_int = rng.randrange(2) == 1
    lp = rng.randrange(2) == 1
    inbounds = rng.randrange(2) == 1
    int_has_val = rng.randrange(2) == 1
    sign = False
    int_val = 0
    frac_val = 0
    int_range = 1 << (COORD_INT_BITS_MP if inbounds else 14)
    if is_int:
        if int_has_val:
            sign = rng.randrange(2) == 1
            int_val = rng.randrange(int_range)
    else:
        sign = rng.randrange(2) == 1
        if int_has_val:
            int_val = rng.randrange(int_range)
        frac_val = rng.randrange(1 << (FRAC_BITS_LP if lp else FRAC_BITS))
    return is_int, lp, BitCoordMp(inbounds, int_has_val, sign, int_val, frac_val)


def test_bitcoordmp_round_trip():
    rng = random.Random(0)
    items = [_rng_coordmp(rng) for _ in range(1000)]
    writer = BitWriter(1)
    for is_int, lp, value in items:
        writer.write_bitcoordmp(value, is_int, lp)
    stream = _reader(writer)
    for is_int, lp, value in items:
        assert stream.read_bitcoordmp(is_int, lp) == value
    assert stream.bitoffset == writer.bitoffset


@pytest.mark.parametrize("angle, expected", [(90.0, 32), (-90.0, 96), (0.0, 0)])
def test_bitangle(angle, expected):
    writer = BitWriter(8)
    writer.write_bitangle(angle, 8)
    assert _reader(writer).read_uint(8) == expected


def test_rewind_clears_higher_bits_of_byte():
    writer = BitWriter(8)
    writer.write_uint(0xFF, 8)
    writer.bitoffset = 0
    writer.write_bit(True)
    assert writer.data[0] == 0x01


def test_write_bits_rejects_short_data():
    writer = BitWriter(8)
    with pytest.raises(ValueError):
        writer.write_bits(b"\x01", 9)


def test_negative_initial_size_rejected():
    with pytest.raises(ValueError):
        BitWriter(-1)