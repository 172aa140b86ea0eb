"""In-memory byte stream that can check what is written against a reference stream."""

from __future__ import annotations

import os
from typing import Callable, Optional, Union

Buffer = Union[bytes, bytearray, memoryview]


class MemoryStream:
    """A growable byte buffer with a read/write position.

    When ``ground_truth`` is given, every write is compared with the bytes at
    the same position in that stream. The first disagreement clears
    ``agrees`` and is reported once through ``on_error``.
    """

    def __init__(
        self,
        data: Buffer = b"",
        ground_truth: Optional["MemoryStream"] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._buffer = bytearray(data)
        self.offset = 0
        self.file_size = len(self._buffer)
        self.ground_truth = ground_truth
        self.on_error = on_error
        self.agrees = True

    def __repr__(self) -> str:
        return f"MemoryStream(offset={self.offset}, file_size={self.file_size})"

    def __len__(self) -> int:
        return self.file_size

    def bytes_left(self) -> int:
        """Bytes between the position and the end of the data."""
        return max(0, self.file_size - self.offset)

    def _reserve(self, size: int) -> None:
        needed = self.offset + size
        if needed > len(self._buffer):
            grown = max(needed, len(self._buffer) * 2)
            self._buffer.extend(bytes(grown - len(self._buffer)))

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes from the position and move past them."""
        if size < 0:
            raise ValueError("size must not be negative")
        if self.offset > self.file_size:
            return b""
        count = min(self.bytes_left(), size)
        out = bytes(self._buffer[self.offset : self.offset + count])
        self.offset += count
        return out

    def seek(self, offset: int) -> int:
        """Move the position by ``offset`` bytes and return the new position."""
        self.offset += offset
        return self.offset

    def _report(self, message: str) -> None:
        self.agrees = False
        if self.on_error is not None:
            self.on_error(message)

    def _check_ground_truth(self, data: bytes) -> None:
        truth = self.ground_truth
        if truth is None or not self.agrees:
            return
        end = self.offset + len(data)
        if end > truth.file_size:
            self._report("Write out of bounds for ground truth")
        elif bytes(truth._buffer[self.offset : end]) != data:
            self._report("Did not match with ground truth")

    def write(self, data: Buffer) -> int:
        """Write ``data`` at the position and return the number of bytes written."""
        raw = bytes(data)
        self._reserve(len(raw))
        self._buffer[self.offset : self.offset + len(raw)] = raw
        self._check_ground_truth(raw)
        self.offset += len(raw)
        self.file_size += len(raw)
        return len(raw)

    def fill_with_file(self, path: Union[str, os.PathLike]) -> None:
        """Load the contents of ``path`` at the position, then rewind to the start."""
        with open(path, "rb") as handle:
            contents = handle.read()
        self._reserve(len(contents))
        self._buffer[self.offset : self.offset + len(contents)] = contents
        self.offset += len(contents)
        self.file_size = self.offset
        self.offset = 0

    def getvalue(self) -> bytes:
        """All data held by the stream."""
        return bytes(self._buffer[: self.file_size])