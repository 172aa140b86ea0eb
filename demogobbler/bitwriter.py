"""Growable little-endian, least-significant-bit-first bit writer."""

from __future__ import annotations

import struct
from typing import Optional, Union

from demogobbler.bitstream import BitStream
from demogobbler.coords import (
    COORD_FRACTIONAL_BITS,
    COORD_INT_BITS_MP,
    COORD_INTEGER_BITS,
    FRAC_BITS,
    FRAC_BITS_LP,
    NORMAL_FRAC_BITS,
    BitAngleVector,
    BitCellCoord,
    BitCoord,
    BitCoordMp,
    BitCoordVector,
    BitNormal,
)

Buffer = Union[bytes, bytearray, memoryview]

_M32 = 0xFFFFFFFF
_FLOAT = struct.Struct("<f")


class BitWriter:
    """Writes bit fields into a byte buffer that grows on demand.

    ``bitoffset`` is the write position and may be moved back to overwrite
    earlier output.
    """

    def __init__(self, initial_size_bits: int = 1024) -> None:
        if initial_size_bits < 0:
            raise ValueError("initial size must not be negative")
        self.data = bytearray((initial_size_bits + 7) // 8)
        self.bitoffset = 0

    def __repr__(self) -> str:
        return f"BitWriter(bitoffset={self.bitoffset}, bitsize={self.bitsize})"

    @property
    def bitsize(self) -> int:
        """Capacity of the buffer in bits."""
        return len(self.data) * 8

    def available_bits(self) -> int:
        """Bits that can still be written without growing the buffer."""
        return max(0, self.bitsize - self.bitoffset)

    def getvalue(self) -> bytes:
        """The bytes written so far, the last one padded with zero bits."""
        return bytes(self.data[: (self.bitoffset + 7) // 8])

    def _reserve(self, bits: int) -> None:
        if self.available_bits() >= bits:
            return
        wanted = (self.bitsize + bits) // 8
        if bits % 8:
            wanted += 1
        wanted = max(len(self.data) * 2, wanted)
        self.data.extend(bytes(wanted - len(self.data)))

    def _write(self, value: int, bits: int) -> None:
        if bits < 0:
            raise ValueError("bit count must not be negative")
        if bits == 0:
            return
        self._reserve(bits)
        value &= (1 << bits) - 1
        start = self.bitoffset >> 3
        shift = self.bitoffset & 7
        end = (self.bitoffset + bits + 7) >> 3
        # Bits below the write position in the first byte are kept; bits above
        # the end in the last byte are cleared.
        kept = self.data[start] & ((1 << shift) - 1)
        chunk = kept | (value << shift)
        self.data[start:end] = chunk.to_bytes(end - start, "little")
        self.bitoffset += bits

    def write_bit(self, value: bool) -> None:
        self._write(1 if value else 0, 1)

    def write_bits(self, data: Buffer, bits: int) -> None:
        """Write the first ``bits`` bits of ``data``."""
        if bits < 0:
            raise ValueError("bit count must not be negative")
        if len(data) * 8 < bits:
            raise ValueError(f"{bits} bits requested but only {len(data) * 8} supplied")
        self._write(int.from_bytes(bytes(data[: (bits + 7) // 8]), "little"), bits)

    def write_uint(self, value: int, bits: int) -> None:
        """Write the low ``bits`` bits of ``value``."""
        self._write(value, bits)

    def write_sint(self, value: int, bits: int) -> None:
        """Write ``value`` in two's complement using ``bits`` bits."""
        self._write(value, bits)

    def write_uint32(self, value: int) -> None:
        self._write(value, 32)

    def write_sint32(self, value: int) -> None:
        self._write(value, 32)

    def write_varuint32(self, value: int) -> None:
        """Write a 7-bits-per-byte variable length integer of up to 5 bytes."""
        value &= _M32
        for _ in range(5):
            byte = value & 0x7F
            value >>= 7
            if value == 0:
                self._write(byte, 8)
                break
            self._write(byte | 0x80, 8)

    def write_float(self, value: float) -> None:
        self.write_bits(_FLOAT.pack(value), 32)

    def write_cstring(self, text: Optional[Union[str, bytes]]) -> None:
        """Write ``text`` followed by a NUL byte; ``None`` writes only the NUL."""
        if text is None:
            self._write(0, 8)
            return
        raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        raw += b"\0"
        self.write_bits(raw, len(raw) * 8)

    def write_bitcoord(self, coord: BitCoord) -> None:
        self.write_bit(coord.has_int)
        self.write_bit(coord.has_frac)
        if coord.has_int or coord.has_frac:
            self.write_bit(coord.sign)
            if coord.has_int:
                self._write(coord.int_value, COORD_INTEGER_BITS)
            if coord.has_frac:
                self._write(coord.frac_value, COORD_FRACTIONAL_BITS)

    def write_bitstream(self, stream: BitStream) -> None:
        """Copy the unread bits of ``stream`` without moving its position."""
        copy = BitStream(stream.data, stream.bitsize, stream.bitoffset)
        copy.overflow = stream.overflow
        while copy.bits_left() > 32:
            self._write(copy.read_uint32(), 32)
        remainder = copy.bits_left()
        if remainder > 0:
            self._write(copy.read_uint(remainder), remainder)

    def write_bitangle(self, value: float, bits: int) -> None:
        """Write an angle in degrees as a ``bits`` wide fraction of a turn."""
        shift = float(1 << (bits - 1))
        mask = int(shift - 1)
        ratio = value / 360.0
        d = int(ratio * shift) & mask
        self._write(d, bits)

    def write_bitvector(self, value: BitAngleVector) -> None:
        self._write(value.x, value.bits)
        self._write(value.y, value.bits)
        self._write(value.z, value.bits)

    def write_coordvector(self, vec: BitCoordVector) -> None:
        for coord in (vec.x, vec.y, vec.z):
            self.write_bit(coord.exists)
        for coord in (vec.x, vec.y, vec.z):
            if coord.exists:
                self.write_bitcoord(coord)

    def write_bitcellcoord(
        self, value: BitCellCoord, is_int: bool, lp: bool, bits: int
    ) -> None:
        self._write(value.int_val, bits)
        if not is_int:
            self._write(value.fract_val, FRAC_BITS_LP if lp else FRAC_BITS)

    def _write_mp_int(self, value: BitCoordMp) -> None:
        width = COORD_INT_BITS_MP if value.inbounds else COORD_INTEGER_BITS
        self._write(value.int_val, width)

    def write_bitcoordmp(self, value: BitCoordMp, is_int: bool, lp: bool) -> None:
        self.write_bit(value.inbounds)
        if is_int:
            self.write_bit(value.int_has_val)
            if value.int_has_val:
                self.write_bit(value.sign)
                self._write_mp_int(value)
        else:
            self.write_bit(value.int_has_val)
            self.write_bit(value.sign)
            if value.int_has_val:
                self._write_mp_int(value)
            self._write(value.frac_val, FRAC_BITS_LP if lp else FRAC_BITS)

    def write_bitnormal(self, value: BitNormal) -> None:
        self.write_bit(value.sign)
        self._write(value.frac, NORMAL_FRAC_BITS)

    def write_field_index(self, new_index: int, last_index: int, new_way: bool) -> None:
        """Write ``new_index`` relative to ``last_index``; -1 marks the end."""
        diff = 0xFFF if new_index == -1 else new_index - last_index - 1

        if new_way:
            if diff == 0:
                self.write_bit(True)
                return
            self.write_bit(False)
            if diff < 8:
                self.write_bit(True)
                self._write(diff, 3)
                return
            self.write_bit(False)

        self._write(diff & 0x1F, 5)
        if diff <= (1 << 5) - 1:
            sel, extra = 0, 0
        elif diff <= (1 << 7) - 1:
            sel, extra = 1, 2
        elif diff <= (1 << 9) - 1:
            sel, extra = 2, 4
        else:
            sel, extra = 3, 7
        self._write(sel, 2)
        if extra:
            self._write(diff >> 5, extra)

    def write_ubitint(self, value: int) -> None:
        value &= _M32
        self._write(value & 0xF, 4)
        if value <= (1 << 4) - 1:
            sel, extra = 0, 0
        elif value <= (1 << 8) - 1:
            sel, extra = 1, 4
        elif value <= (1 << 12) - 1:
            sel, extra = 2, 8
        else:
            sel, extra = 3, 28
        self._write(sel, 2)
        if extra:
            self._write(value >> 4, extra)

    def write_ubitvar(self, value: int) -> None:
        value &= _M32
        if value <= (1 << 4) - 1:
            self._write(0, 2)
            self._write(value, 4)
        elif value <= (1 << 8) - 1:
            self._write(1, 2)
            self._write(value, 8)
        elif value <= (1 << 12) - 1:
            self._write(2, 2)
            self._write(value, 12)
        else:
            self._write(3, 2)
            self._write(value, 32)