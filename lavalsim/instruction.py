"""Base class for instructions with packed, bounded arguments."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

from .errors import require
from .registers import Registers


def _arg_space(maxes: tuple[int, ...]) -> int:
    return math.prod(maximum + 1 for maximum in maxes)


class Instruction(ABC):
    """An instruction whose arguments fit together into one byte.

    ``ARG_MAXES`` gives the largest value of each argument. Arguments are
    packed in mixed radix, the first argument in the lowest position.
    """

    ARG_MAXES: ClassVar[tuple[int, ...]] = ()

    def __init__(self, args: Iterable[int] = ()) -> None:
        self._args: tuple[int, ...] = ()
        self.load_args(args)

    @classmethod
    def from_raw(cls, raw: int) -> Instruction:
        """Build an instruction from its packed argument value."""
        require(0 <= raw < _arg_space(cls.ARG_MAXES), "Too large arguments")

        args = []
        for maximum in cls.ARG_MAXES:
            raw, arg = divmod(raw, maximum + 1)
            args.append(arg)
        return cls(args)

    @property
    def args(self) -> tuple[int, ...]:
        return self._args

    def get_argument(self, index: int) -> int:
        if not 0 <= index < len(self._args):
            raise IndexError(f"{type(self).__name__} has no argument #{index}")
        return self._args[index]

    def dump_args(self) -> int:
        """Pack the arguments into a single value."""
        total, scale = 0, 1
        for arg, maximum in zip(self._args, self.ARG_MAXES):
            total += arg * scale
            scale *= maximum + 1
        return total

    def load_args(self, args: Iterable[int]) -> None:
        """Replace the arguments, checking their number and range."""
        values = tuple(args)
        count = len(self.ARG_MAXES)
        require(len(values) == count, f"Instruction requires {count} arguments")
        for index, (value, maximum) in enumerate(zip(values, self.ARG_MAXES)):
            require(0 <= value <= maximum, f"Out of range argument #{index}")
        self._args = values

    @abstractmethod
    def __call__(self, registers: Registers) -> bool:
        """Execute on ``registers``; return False if the pipeline must stall."""

    @staticmethod
    def _sync(registers: Registers) -> None:
        registers.status1.sync = True

    @staticmethod
    def _carries(value: int) -> bool:
        return value > 0xFF

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instruction):
            return NotImplemented
        return type(self) is type(other) and self._args == other._args

    def __hash__(self) -> int:
        return hash((type(self), self._args))

    def __repr__(self) -> str:
        if not self._args:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({list(self._args)})"