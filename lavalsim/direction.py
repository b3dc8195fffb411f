"""Directions a core multiplexer can point to."""

from __future__ import annotations

from enum import IntEnum

_THREE_POWERS = (1, 3, 9, 27, 81, 243)


def three_pow(n: int) -> int:
    """Return 3 ** n for n in 0..5, the range that fits in a byte."""
    if not 0 <= n < len(_THREE_POWERS):
        raise IndexError(f"three_pow is defined for 0..{len(_THREE_POWERS) - 1}, got {n}")
    return _THREE_POWERS[n]


class Direction1D(IntEnum):
    """Offset along one axis of the core grid."""

    BEFORE = 0
    CURRENT = 1
    AFTER = 2


def total_core_directions() -> int:
    """Number of encodable neighbour directions in three dimensions."""
    return three_pow(Direction1D.AFTER + 1)


class SpecialDirection(IntEnum):
    """Register sources a multiplexer can point to instead of a core."""

    PC = total_core_directions()
    MEMBANK = total_core_directions() + 1


#: First raw value past every valid direction encoding.
DIRECTION_END = SpecialDirection.MEMBANK + 1

CoreDirection = tuple[Direction1D, Direction1D, Direction1D]


def decode(raw: int) -> CoreDirection | SpecialDirection:
    """Decode a multiplexer value into a neighbour offset or a special register.

    Neighbour offsets are stored in base 3, the first axis in the lowest digit.
    """
    if 0 <= raw < total_core_directions():
        axes = []
        for _ in range(3):
            raw, digit = divmod(raw, 3)
            axes.append(Direction1D(digit))
        return (axes[0], axes[1], axes[2])
    if total_core_directions() <= raw < DIRECTION_END:
        return SpecialDirection(raw)
    raise ValueError(f"Direction {raw} is out of range")