"""Fixed-capacity open-addressing hash tables keyed by strings."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

_M32 = 0xFFFFFFFF
_P1 = 2654435761
_P2 = 2246822519
_P3 = 3266489917
_P4 = 668265263
_P5 = 374761393


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _M32


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _M32
    return (_rotl(acc, 13) * _P1) & _M32


def _xxh32(data: bytes, seed: int = 0) -> int:
    """32-bit xxHash of ``data``."""
    length = len(data)
    stripe_end = length - length % 16

    if length >= 16:
        v1 = (seed + _P1 + _P2) & _M32
        v2 = (seed + _P2) & _M32
        v3 = seed & _M32
        v4 = (seed - _P1) & _M32
        for a, b, c, d in struct.iter_unpack("<4I", data[:stripe_end]):
            v1 = _round(v1, a)
            v2 = _round(v2, b)
            v3 = _round(v3, c)
            v4 = _round(v4, d)
        h = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _M32
    else:
        stripe_end = 0
        h = (seed + _P5) & _M32

    h = (h + length) & _M32

    tail = data[stripe_end:]
    lanes_end = len(tail) - len(tail) % 4
    for (lane,) in struct.iter_unpack("<I", tail[:lanes_end]):
        h = (h + lane * _P3) & _M32
        h = (_rotl(h, 17) * _P4) & _M32
    for byte in tail[lanes_end:]:
        h = (h + byte * _P5) & _M32
        h = (_rotl(h, 11) * _P1) & _M32

    h ^= h >> 15
    h = (h * _P2) & _M32
    h ^= h >> 13
    h = (h * _P3) & _M32
    h ^= h >> 16
    return h


class HashTableFull(Exception):
    """Raised when inserting into a table that has no free slot left."""


def _capacity(max_items: int) -> int:
    capacity = 1
    while capacity - 1 < max_items:
        capacity <<= 1
    return capacity


E = TypeVar("E")


class _ProbingTable(Generic[E]):
    def __init__(self, max_items: int) -> None:
        self._mask = _capacity(max_items) - 1
        self._slots: list[Optional[E]] = [None] * (self._mask + 1)
        self._count = 0

    @property
    def capacity(self) -> int:
        """Number of slots; one of them always stays empty."""
        return self._mask + 1

    def __len__(self) -> int:
        return self._count

    def _locate(self, hash_key: str, matches: Callable[[E], bool]) -> int:
        index = _xxh32(hash_key.encode("utf-8")) & self._mask
        while (entry := self._slots[index]) is not None and not matches(entry):
            index = (index + 1) & self._mask
        return index

    def _insert(self, hash_key: str, entry: E, matches: Callable[[E], bool]) -> bool:
        if self._count == self._mask:
            raise HashTableFull(f"table holds at most {self._mask} items")
        index = self._locate(hash_key, matches)
        if self._slots[index] is not None:
            return False
        self._slots[index] = entry
        self._count += 1
        return True

    def _reset(self) -> None:
        self._slots = [None] * (self._mask + 1)
        self._count = 0


class HashTable(_ProbingTable[tuple[str, Any]]):
    """String-keyed map with a fixed capacity chosen at creation."""

    def insert(self, key: str, value: Any) -> bool:
        """Add ``key``; return False if it is already present."""
        return self._insert(key, (key, value), lambda entry: entry[0] == key)

    def get(self, key: str) -> Any:
        """Return the value stored for ``key`` or None."""
        entry = self._slots[self._locate(key, lambda e: e[0] == key)]
        return None if entry is None else entry[1]

    def clear(self) -> None:
        """Remove every entry."""
        self._reset()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._slots[self._locate(key, lambda e: e[0] == key)] is not None


@dataclass(frozen=True)
class ExcludeProp:
    """An exclusion rule: prop ``name`` of table ``exclude_name`` is left out."""

    name: str
    dtname: str
    exclude_name: str


class PropExcludeSet(_ProbingTable[ExcludeProp]):
    """Set of prop exclusions, looked up by table and prop name."""

    def insert(self, prop: ExcludeProp) -> bool:
        """Add ``prop``; return False if an exclusion with the same name and table exists."""
        return self._insert(
            prop.name,
            prop,
            lambda entry: entry.name == prop.name and entry.dtname == prop.dtname,
        )

    def has(self, table_name: str, prop_name: str) -> bool:
        """Whether prop ``prop_name`` of table ``table_name`` is excluded."""
        if self._count == 0:
            return False
        index = self._locate(
            prop_name,
            lambda entry: entry.exclude_name == table_name and entry.name == prop_name,
        )
        return self._slots[index] is not None

    def clear(self) -> None:
        """Remove every exclusion."""
        self._reset()