"""Little-endian, least-significant-bit-first reader over a byte buffer."""

from __future__ import annotations

import struct
from typing import Optional, Union

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
_UBITVAR_MASKS = ((1 << 4) - 1, (1 << 8) - 1, (1 << 12) - 1, _M32)
_UBITVAR_BITS = (6, 10, 14, 34)
_FIELD_INDEX_EXTRA = {1: 2, 2: 4, 3: 7}
_UBITINT_EXTRA = {1: 4, 2: 8, 3: 28}


class BitStream:
    """Reads bit fields from ``data``; reading past ``bitsize`` sets ``overflow``."""

    def __init__(
        self, data: Buffer, bitsize: Optional[int] = None, bitoffset: int = 0
    ) -> None:
        self.data = data
        self.bitsize = len(data) * 8 if bitsize is None else bitsize
        self.bitoffset = bitoffset
        self.overflow = False

    def __repr__(self) -> str:
        return (
            f"BitStream(bitoffset={self.bitoffset}, bitsize={self.bitsize}, "
            f"overflow={self.overflow})"
        )

    def bits_left(self) -> int:
        """Number of bits between the read position and the end."""
        return max(0, self.bitsize - self.bitoffset)

    def _peek(self, bits: int) -> int:
        """Bits at the read position without moving it; zero past the end."""
        if bits <= 0 or self.overflow or self.bitoffset >= self.bitsize:
            return 0
        start = self.bitoffset >> 3
        end = min((self.bitoffset + bits + 7) >> 3, (self.bitsize + 7) >> 3)
        value = int.from_bytes(bytes(self.data[start:end]), "little")
        return (value >> (self.bitoffset & 7)) & ((1 << bits) - 1)

    def advance(self, bits: int) -> None:
        """Skip ``bits`` bits, flagging overflow when running past the end."""
        self.bitoffset += bits
        if self.bitoffset > self.bitsize:
            self.bitoffset = self.bitsize
            self.overflow = True

    def fork_and_advance(self, bits: int) -> "BitStream":
        """Return a stream over the next ``bits`` bits and skip them here."""
        fork = BitStream(self.data, self.bitoffset + bits, self.bitoffset)
        fork.overflow = self.overflow
        self.advance(bits)
        return fork

    def read_bit(self) -> bool:
        if self.overflow or self.bitoffset >= self.bitsize:
            self.overflow = True
            return False
        byte = self.data[self.bitoffset >> 3]
        mask = 1 << (self.bitoffset & 7)
        self.advance(1)
        return bool(byte & mask)

    def read_uint(self, bits: int) -> int:
        """Read an unsigned integer of ``bits`` (0 to 64) bits."""
        if not 0 <= bits <= 64:
            raise ValueError("bit count must be between 0 and 64")
        if self.overflow:
            return 0
        if self.bitoffset + bits > self.bitsize:
            self.bitoffset = self.bitsize
            self.overflow = True
            return 0
        value = self._peek(bits)
        self.bitoffset += bits
        return value

    def read_sint(self, bits: int) -> int:
        """Read a two's complement signed integer of ``bits`` bits."""
        value = self.read_uint(bits)
        if bits and value & (1 << (bits - 1)):
            value -= 1 << bits
        return value

    def read_float(self) -> float:
        return _FLOAT.unpack(self.read_uint32().to_bytes(4, "little"))[0]

    def read_cstring(self, max_bytes: int) -> bytes:
        """Read a NUL-terminated string of at most ``max_bytes`` bytes, terminator included.

        The terminator is consumed but not returned. Running out of room before it
        sets ``overflow``.
        """
        out = bytearray()
        for _ in range(max_bytes):
            value = self.read_uint(8)
            if value == 0:
                return bytes(out)
            out.append(value)
        self.overflow = True
        return bytes(out)

    def read_fixed_string(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        return bytes(self.read_uint(8) for _ in range(size))

    def read_bitvector(self, bits: int) -> BitAngleVector:
        x = self.read_uint(bits)
        y = self.read_uint(bits)
        z = self.read_uint(bits)
        return BitAngleVector(x, y, z, bits)

    def read_coordvector(self) -> BitCoordVector:
        flags = [bool(self.read_uint(1)) for _ in range(3)]
        x, y, z = (self.read_bitcoord() if exists else BitCoord() for exists in flags)
        return BitCoordVector(x, y, z)

    def read_bitcoord(self) -> BitCoord:
        val = self._peek(COORD_INTEGER_BITS + COORD_FRACTIONAL_BITS + 3)
        has_int = bool(val & 0x1)
        has_frac = bool(val & 0x2)
        sign = False
        int_value = 0
        frac_value = 0
        bits_used = 2

        if has_int or has_frac:
            sign = bool(val & 0x4)
            val >>= 3
            bits_used = 3
            if has_int:
                int_value = val & ((1 << COORD_INTEGER_BITS) - 1)
                val >>= COORD_INTEGER_BITS
                bits_used += COORD_INTEGER_BITS
            if has_frac:
                frac_value = val & ((1 << COORD_FRACTIONAL_BITS) - 1)
                bits_used += COORD_FRACTIONAL_BITS

        self.advance(bits_used)
        return BitCoord(True, has_int, has_frac, sign, int_value, frac_value)

    def read_uint32(self) -> int:
        return self.read_uint(32)

    def read_varuint32(self) -> int:
        """Read a 7-bits-per-byte variable length integer of up to 5 bytes."""
        result = 0
        for i in range(5):
            byte = self.read_uint(8)
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                break
        return result & _M32

    def read_sint32(self) -> int:
        return self.read_sint(32)

    def read_ubitint(self) -> int:
        low = self.read_uint(4)
        extra = _UBITINT_EXTRA.get(self.read_uint(2), 0)
        high = self.read_uint(extra) if extra else 0
        return (low | (high << 4)) & _M32

    def read_ubitvar(self) -> int:
        if self.overflow:
            return 0
        val = self._peek(34)
        sel = val & 0x3
        output = (val >> 2) & _UBITVAR_MASKS[sel]
        self.advance(_UBITVAR_BITS[sel])
        return output

    def read_bitcellcoord(self, is_int: bool, lp: bool, bits: int) -> BitCellCoord:
        int_val = self.read_uint(bits)
        fract_val = 0
        if not is_int:
            fract_val = self.read_uint(FRAC_BITS_LP if lp else FRAC_BITS)
        return BitCellCoord(int_val, fract_val)

    def _read_mp_int(self, inbounds: bool) -> int:
        return self.read_uint(COORD_INT_BITS_MP if inbounds else COORD_INTEGER_BITS)

    def read_bitcoordmp(self, is_int: bool, lp: bool) -> BitCoordMp:
        inbounds = self.read_bit()
        sign = False
        int_val = 0
        frac_val = 0
        if is_int:
            int_has_val = self.read_bit()
            if int_has_val:
                sign = self.read_bit()
                int_val = self._read_mp_int(inbounds)
        else:
            int_has_val = self.read_bit()
            sign = self.read_bit()
            if int_has_val:
                int_val = self._read_mp_int(inbounds)
            frac_val = self.read_uint(FRAC_BITS_LP if lp else FRAC_BITS)
        return BitCoordMp(inbounds, int_has_val, sign, int_val, frac_val)

    def read_bitnormal(self) -> BitNormal:
        sign = self.read_bit()
        frac = self.read_uint(NORMAL_FRAC_BITS)
        return BitNormal(sign, frac)

    def read_field_index(self, last_index: int, new_way: bool) -> int:
        """Read the next prop index after ``last_index``; -1 marks the end."""
        if new_way and self.read_bit():
            return last_index + 1

        if new_way and self.read_bit():
            ret = self.read_uint(3)
        else:
            ret = self.read_uint(5)
            extra = _FIELD_INDEX_EXTRA.get(self.read_uint(2), 0)
            if extra:
                ret |= self.read_uint(extra) << 5

        if ret == 0xFFF:
            return -1
        return last_index + 1 + ret