"""Bump-pointer arena allocator backed by a growing list of byte blocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

_UINT32_MAX = 0xFFFFFFFF


def alignment_loss(offset: int, alignment: int) -> int:
    """Return the padding needed to move ``offset`` up to a multiple of ``alignment``."""
    if alignment <= 1:
        return 0
    return -offset % alignment


@dataclass(eq=False)
class ArenaBlock:
    """One contiguous chunk of arena memory."""

    data: bytearray
    bytes_used: int = 0

    @property
    def total_bytes(self) -> int:
        return len(self.data)

    def bytes_left(self, alignment: int) -> int:
        """Bytes still available after aligning the current fill position."""
        padding = alignment_loss(self.bytes_used, alignment)
        return self.total_bytes - (self.bytes_used + padding)


@dataclass(frozen=True)
class Allocation:
    """A region of ``size`` bytes at ``offset`` inside ``block``."""

    block: ArenaBlock
    offset: int
    size: int

    def view(self) -> memoryview:
        """Writable view of the allocated bytes."""
        return memoryview(self.block.data)[self.offset : self.offset + self.size]


class Arena:
    """Allocator that hands out slices of large blocks and frees them all at once."""

    def __init__(self, first_block_size: int) -> None:
        self.first_block_size = first_block_size
        self.blocks: list[ArenaBlock] = []
        self.current_block = 0

    def __enter__(self) -> "Arena":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.free()

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    def _new_block(self, requested_size: int) -> None:
        size = self.blocks[-1].total_bytes if self.blocks else self.first_block_size
        size = max(1, size)
        while size < requested_size:
            size *= 2
        size = min(size, _UINT32_MAX)
        self.blocks.append(ArenaBlock(bytearray(size)))

    def _find_block(self, size: int, alignment: int) -> ArenaBlock:
        if not self.blocks:
            self._new_block(size)

        while self.blocks[self.current_block].bytes_left(alignment) < size:
            self.current_block += 1
            if self.current_block >= len(self.blocks):
                self._new_block(size)
                break

        return self.blocks[self.current_block]

    def allocate(self, size: int, alignment: int = 1) -> Optional[Allocation]:
        """Reserve ``size`` bytes aligned to ``alignment``; ``None`` for a zero size."""
        if size < 0:
            raise ValueError("allocation size must not be negative")
        if size == 0:
            return None

        block = self._find_block(size, alignment)
        offset = block.bytes_used + alignment_loss(block.bytes_used, alignment)
        block.bytes_used = offset + size
        return Allocation(block, offset, size)

    def reallocate(
        self,
        allocation: Optional[Allocation],
        prev_size: int,
        size: int,
        alignment: int = 1,
    ) -> Optional[Allocation]:
        """Grow an allocation, in place when it is the last one in the current block."""
        if allocation is None or not self.blocks:
            return self.allocate(size, alignment)

        block = self.blocks[self.current_block]
        is_last = (
            allocation.block is block and allocation.offset == block.bytes_used - prev_size
        )
        room = block.total_bytes - block.bytes_used + prev_size

        if is_last and room >= size:
            block.bytes_used -= prev_size
            return self.allocate(size, alignment)

        new_allocation = self.allocate(size, alignment)
        if new_allocation is not None:
            count = min(prev_size, size, allocation.size)
            new_allocation.view()[:count] = allocation.view()[:count]
        return new_allocation

    def clear(self) -> None:
        """Mark every block empty while keeping its memory for reuse."""
        for block in self.blocks:
            block.bytes_used = 0
        self.current_block = 0

    def attach(self, data: Union[bytes, bytearray]) -> Allocation:
        """Take ownership of ``data`` as a new, fully used block."""
        buffer = data if isinstance(data, bytearray) else bytearray(data)
        block = ArenaBlock(buffer, bytes_used=len(buffer))
        self.blocks.append(block)
        return Allocation(block, 0, len(buffer))

    def free(self) -> None:
        """Release every block."""
        self.blocks.clear()
        self.current_block = 0