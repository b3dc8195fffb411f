"""Mapping between instruction bytes and instruction objects."""

from __future__ import annotations

from collections.abc import Iterable

from . import opcodes
from .errors import require
from .instruction import Instruction, _arg_space

_INSTRUCTION_SPACE_LIMIT = 0xFF

# Registration order fixes the binary encoding.
_CORE_INSTRUCTIONS: tuple[type[Instruction], ...] = (
    opcodes.NOP,
    opcodes.SYN,
    opcodes.CTC,
    opcodes.CTV,
    opcodes.DBG,
    opcodes.HCF,
    opcodes.HLT,
    opcodes.MXD,
    opcodes.MXL,
    opcodes.MXA,
    opcodes.MXS,
    opcodes.MUX,
    opcodes.LCL,
    opcodes.LCH,
    opcodes.JLZ,
    opcodes.JEZ,
    opcodes.JGZ,
    opcodes.JMP,
    opcodes.LSL,
    opcodes.LSR,
    opcodes.CAD,
    opcodes.CSU,
    opcodes.CAN,
    opcodes.COR,
)


class InstructionFactory:
    """Assigns each registered instruction a contiguous range of byte values.

    An instruction occupies one value per combination of its arguments;
    the byte is the range start plus the packed arguments.
    """

    def __init__(self) -> None:
        self._table: list[tuple[type[Instruction], int]] = []
        self._offsets: dict[type[Instruction], int] = {}
        self._names: dict[str, int] = {}

    def register(self, instruction_type: type[Instruction]) -> None:
        """Append an instruction type to the encoding."""
        begin = len(self._table)
        end = begin + _arg_space(instruction_type.ARG_MAXES)
        require(end <= _INSTRUCTION_SPACE_LIMIT, "Instruction space overflow")

        self._offsets.setdefault(instruction_type, begin)
        self._names.setdefault(instruction_type.__name__[-3:], begin)
        self._table.extend((instruction_type, begin) for _ in range(begin, end))

    def create(self, value: int) -> Instruction:
        """Decode one instruction byte."""
        require(0 <= value < len(self._table), "Invalid instruction")
        instruction_type, begin = self._table[value]
        return instruction_type.from_raw(value - begin)

    def create_from_ast(self, node: tuple[str, Iterable[int]]) -> Instruction:
        """Build an instruction from its mnemonic and argument list."""
        name, args = node
        require(name in self._names, "Unknown instruction")
        instruction = self.create(self._names[name])
        instruction.load_args(args)
        return instruction

    def dump(self, instruction: Instruction) -> int:
        """Encode an instruction to its byte value."""
        try:
            offset = self._offsets[type(instruction)]
        except KeyError:
            raise KeyError(f"{type(instruction).__name__} is not registered") from None
        return offset + instruction.dump_args()

    def __len__(self) -> int:
        return len(self._table)


def default_factory() -> InstructionFactory:
    """Return a factory holding the instruction set every core understands."""
    factory = InstructionFactory()
    for instruction_type in _CORE_INSTRUCTIONS:
        factory.register(instruction_type)
    return factory