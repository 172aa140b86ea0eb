"""Buffered little-endian reader over a binary stream."""

from __future__ import annotations

import io
import struct
from typing import BinaryIO

_INT32 = struct.Struct("<i")
_FLOAT = struct.Struct("<f")


class FileReader:
    """Reads a binary stream through a fixed-size chunk buffer."""

    def __init__(self, stream: BinaryIO, buffer_size: int = 4096) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer size must be positive")
        self._stream = stream
        self._buffer_size = buffer_size
        self._buffer = b""
        self._offset = 0
        self._file_offset = 0
        self.eof = False

    def _bytes_left(self) -> int:
        return max(0, len(self._buffer) - self._offset)

    def _fill(self) -> None:
        chunk = self._stream.read(self._buffer_size)
        if not chunk:
            self.eof = True
            return
        self._buffer = chunk
        self._offset = 0
        self._file_offset += len(chunk)

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer are returned only at end of stream."""
        if size < 0:
            raise ValueError("size must not be negative")
        parts = []
        remaining = size
        while True:
            take = min(remaining, self._bytes_left())
            if take > 0:
                parts.append(self._buffer[self._offset : self._offset + take])
                self._offset += take
                remaining -= take
            if remaining <= 0:
                break
            self._fill()
            if self.eof:
                break
        return b"".join(parts)

    def skip(self, count: int) -> None:
        """Move forward by ``count`` bytes."""
        if count < 0:
            raise ValueError("cannot skip backwards")
        left = self._bytes_left()
        if count < left:
            self._offset += count
            return
        self._offset = len(self._buffer)
        rest = count - left
        if rest:
            self._stream.seek(rest, io.SEEK_CUR)
            self._file_offset += rest

    def skip_to(self, offset: int) -> None:
        """Move forward to absolute position ``offset``."""
        self.skip(offset - self.position())

    def position(self) -> int:
        """Current absolute position in the stream."""
        return self._file_offset - self._bytes_left()

    def _read_exact(self, size: int) -> bytes:
        data = self.read(size)
        if len(data) < size:
            raise EOFError(f"expected {size} bytes, got {len(data)}")
        return data

    def read_int32(self) -> int:
        return _INT32.unpack(self._read_exact(4))[0]

    def read_byte(self) -> int:
        return self._read_exact(1)[0]

    def read_float(self) -> float:
        return _FLOAT.unpack(self._read_exact(4))[0]

    def read_vector(self) -> tuple[float, float, float]:
        """Read three consecutive floats as ``(x, y, z)``."""
        return (self.read_float(), self.read_float(), self.read_float())