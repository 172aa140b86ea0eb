"""Value types for the packed coordinate, angle and normal encodings."""

from __future__ import annotations

from dataclasses import dataclass, field

COORD_INTEGER_BITS = 14
COORD_FRACTIONAL_BITS = 5
COORD_INT_BITS_MP = 11
FRAC_BITS = 5
FRAC_BITS_LP = 3
NORMAL_FRAC_BITS = 11


@dataclass(frozen=True)
class BitCoord:
    """A coordinate with optional integer and fractional parts."""

    exists: bool = False
    has_int: bool = False
    has_frac: bool = False
    sign: bool = False
    int_value: int = 0
    frac_value: int = 0


@dataclass(frozen=True)
class BitCoordVector:
    """Three coordinates, each of which may be absent."""

    x: BitCoord = field(default_factory=BitCoord)
    y: BitCoord = field(default_factory=BitCoord)
    z: BitCoord = field(default_factory=BitCoord)


@dataclass(frozen=True)
class BitAngleVector:
    """Three angles stored as unsigned integers of ``bits`` width."""

    x: int = 0
    y: int = 0
    z: int = 0
    bits: int = 0


@dataclass(frozen=True)
class BitCellCoord:
    """A cell-relative coordinate."""

    int_val: int = 0
    fract_val: int = 0


@dataclass(frozen=True)
class BitCoordMp:
    """A multiplayer-optimised coordinate."""

    inbounds: bool = False
    int_has_val: bool = False
    sign: bool = False
    int_val: int = 0
    frac_val: int = 0


@dataclass(frozen=True)
class BitNormal:
    """A normal component: a sign and an 11-bit fraction."""

    sign: bool = False
    frac: int = 0