"""Storage sizes with binary units (1 KiB = 1024 bytes)."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from fractions import Fraction


class Unit(enum.IntEnum):
    """Number of bytes in one unit."""

    BYTES = 1
    KILO = 1024
    MEGA = 1024 * 1024
    GIGA = 1024 * 1024 * 1024
    TERA = 1024 * 1024 * 1024 * 1024


def space_cast(space: Space, unit: Unit) -> Space:
    """Convert ``space`` to ``unit``, truncating toward zero."""
    ratio = Fraction(int(space.unit), int(unit))
    value = space.count * ratio.numerator
    count = abs(value) // ratio.denominator
    return Space(count if value >= 0 else -count, unit)


@dataclass(frozen=True)
class Space:
    """An integer amount of storage measured in a given unit."""

    count: int = 0
    unit: Unit = Unit.BYTES

    def to(self, unit: Unit) -> Space:
        """Return this amount expressed in ``unit``."""
        return space_cast(self, unit)

    def _same_unit(self, other: Space) -> Space:
        if not isinstance(other, Space):
            return NotImplemented
        return other if other.unit == self.unit else other.to(self.unit)

    def __pos__(self) -> Space:
        return self

    def __neg__(self) -> Space:
        return Space(-self.count, self.unit)

    def __add__(self, other: Space) -> Space:
        other = self._same_unit(other)
        if other is NotImplemented:
            return NotImplemented
        return Space(self.count + other.count, self.unit)

    def __sub__(self, other: Space) -> Space:
        other = self._same_unit(other)
        if other is NotImplemented:
            return NotImplemented
        return Space(self.count - other.count, self.unit)

    def __mul__(self, factor: int) -> Space:
        if not isinstance(factor, int):
            return NotImplemented
        return Space(self.count * factor, self.unit)

    __rmul__ = __mul__

    def __floordiv__(self, divisor: int) -> Space:
        if not isinstance(divisor, int):
            return NotImplemented
        return Space(self.count // divisor, self.unit)

    def __mod__(self, divisor: int) -> Space:
        if not isinstance(divisor, int):
            return NotImplemented
        return Space(self.count % divisor, self.unit)