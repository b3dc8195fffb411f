"""The grid of cores and neighbour lookup."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence

from .core import Core
from .errors import CpuException, require
from .inputs import Fetchable, Input
from .memory import Memory

_MAX_CORES = (2**64 - 1) >> 1


class CoreArray:
    """Cores laid out row-major over the grid dimensions.

    Neighbours are found by linear index with no wrap-around; a core whose
    neighbour falls outside the grid reads from its input, if it has one.
    """

    def __init__(
        self,
        dimensions: Sequence[int],
        memory: Memory,
        inputs: Mapping[int, Input] | None = None,
    ) -> None:
        size = math.prod(dimensions)
        require(size <= _MAX_CORES, "Too many cores")

        self._inputs: Mapping[int, Input] = inputs if inputs is not None else {}
        self._cores = [Core(self, core_id, memory) for core_id in range(size)]
        self._strides = [math.prod(dimensions[axis:]) for axis in range(1, len(dimensions))]
        self._strides.append(1)

    def __getitem__(self, index: int | Sequence[int]) -> Core:
        """Look a core up by id or by grid coordinates."""
        if isinstance(index, int):
            return self._cores[index]

        linear = sum(coordinate * stride for coordinate, stride in zip(index, self._strides))
        if not 0 <= linear < len(self._cores):
            position = ":".join(str(coordinate) for coordinate in index)
            raise CpuException(f"No such core at index {position}")
        return self._cores[linear]

    def offset(self, core_id: int, offsets: Sequence[int]) -> Fetchable:
        """Return what core ``core_id`` sees in direction ``offsets``."""
        require(
            len(offsets) == len(self._strides),
            "Offset do not have the right number of dimensions",
        )

        index = core_id + sum(
            stride * (int(offset) - 1) for offset, stride in zip(offsets, self._strides)
        )
        if 0 <= index < len(self._cores):
            return self._cores[index]
        if core_id in self._inputs:
            return self._inputs[core_id]

        position = ":".join(str(int(offset) - 1) for offset in offsets)
        raise CpuException(f"No such core at offset {position}")

    def __len__(self) -> int:
        return len(self._cores)

    def __iter__(self) -> Iterator[Core]:
        return iter(self._cores)