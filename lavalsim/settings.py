"""Machine configuration and its binary form."""

from __future__ import annotations

import struct
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import BinaryIO

from .errors import CpuException, require

_HEADER = struct.Struct("<3HII")
_LENGTH = struct.Struct("<Q")
_WORD_SIZE = 8


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise CpuException("Truncated settings")
    return data


def _read_length(stream: BinaryIO) -> int:
    (length,) = _LENGTH.unpack(_read_exact(stream, _LENGTH.size))
    return length


def _read_words(stream: BinaryIO) -> list[int]:
    length = _read_length(stream)
    return list(struct.unpack(f"<{length}Q", _read_exact(stream, length * _WORD_SIZE)))


@dataclass
class Settings:
    """Grid size, memory layout and I/O wiring of a machine."""

    dimensions: tuple[int, int, int] = (10, 10, 10)
    bank_number: int = 16
    bank_size: int = 256
    core_to_mem: list[int] = field(default_factory=list)
    inputs: list[int] = field(default_factory=list)
    outputs: list[int] = field(default_factory=list)

    @classmethod
    def from_ast(cls, ast: Mapping[str, Sequence[int]]) -> Settings:
        """Build settings from parsed ``.name values`` directives.

        ``cores``, ``mem_number``, ``mem_size`` and ``core_to_mem`` are
        mandatory; ``in`` and ``out`` are optional.
        """
        try:
            cores = ast["cores"]
            require(len(cores) == 3, "Wrong number of dimensions")
            return cls(
                dimensions=(cores[0], cores[1], cores[2]),
                bank_number=ast["mem_number"][0],
                bank_size=ast["mem_size"][0],
                core_to_mem=[value & 0xFF for value in ast["core_to_mem"]],
                inputs=list(ast.get("in", ())),
                outputs=list(ast.get("out", ())),
            )
        except (KeyError, IndexError):
            raise CpuException("Mandatory setting missing") from None

    def to_bytes(self) -> bytes:
        """Serialise to the binary program header."""
        try:
            parts = [
                _HEADER.pack(*self.dimensions, self.bank_number, self.bank_size),
                _LENGTH.pack(len(self.core_to_mem)),
                bytes(self.core_to_mem),
            ]
            for values in (self.inputs, self.outputs):
                parts.append(_LENGTH.pack(len(values)))
                parts.append(struct.pack(f"<{len(values)}Q", *values))
        except (struct.error, ValueError) as error:
            raise CpuException(f"Setting out of range: {error}") from None
        return b"".join(parts)

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> Settings:
        """Read a header written by ``to_bytes``, leaving the stream just after it."""
        first, second, third, bank_number, bank_size = _HEADER.unpack(
            _read_exact(stream, _HEADER.size)
        )
        core_to_mem = list(_read_exact(stream, _read_length(stream)))
        inputs = _read_words(stream)
        outputs = _read_words(stream)
        return cls(
            dimensions=(first, second, third),
            bank_number=bank_number,
            bank_size=bank_size,
            core_to_mem=core_to_mem,
            inputs=inputs,
            outputs=outputs,
        )