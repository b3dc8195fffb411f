"""The instruction set of a core."""

from __future__ import annotations

import sys
from typing import ClassVar

from .direction import DIRECTION_END, SpecialDirection
from .errors import Answer
from .instruction import Instruction
from .registers import Registers

_NIBBLE = 0xF


def _as_signed(value: int) -> int:
    """Interpret a byte as a two's complement value."""
    return value - 0x100 if value & 0x80 else value


def _operand(value: int, negative: bool) -> int:
    return _as_signed(value) if negative else value


def _store_result(registers: Registers, result: int, carries: bool) -> None:
    registers.status2.carry = carries
    registers.val = result & 0xFF
    registers.status2.negative = result < 0


class _ConstantInstruction(Instruction):
    """An instruction taking a single 4-bit constant."""

    ARG_MAXES: ClassVar[tuple[int, ...]] = (_NIBBLE,)

    @property
    def constant(self) -> int:
        return self.get_argument(0)


class _JumpInstruction(_ConstantInstruction):
    """Jump to the start of the memory bank given as argument when taken."""

    def _taken(self, registers: Registers) -> bool:
        raise NotImplementedError

    def __call__(self, registers: Registers) -> bool:
        if self._taken(registers):
            registers.status2.membank = self.constant
            registers.pc = 0
            return False
        return True


class NOP(Instruction):
    """Do nothing for one cycle."""

    def __call__(self, registers: Registers) -> bool:
        return True


class SYN(Instruction):
    """Offer the current value to the connected multiplexer and wait until it is read."""

    def __call__(self, registers: Registers) -> bool:
        if registers.status2.unlock:
            return True
        self._sync(registers)
        return False


class CTC(Instruction):
    """Read the carry of the pointed core instead of its value."""

    def __call__(self, registers: Registers) -> bool:
        registers.status1.ctc = True
        return True


class CTV(Instruction):
    """Read the value of the pointed core."""

    def __call__(self, registers: Registers) -> bool:
        registers.status1.ctc = False
        return True


class DBG(Instruction):
    """Write the registers to standard error."""

    def __call__(self, registers: Registers) -> bool:
        print(registers, file=sys.stderr)
        return True


class HCF(Instruction):
    """Reserved; currently behaves as a no-op."""

    def __call__(self, registers: Registers) -> bool:
        return True


class HLT(Instruction):
    """Halt the program, answering the current value."""

    def __call__(self, registers: Registers) -> bool:
        raise Answer(registers.val)


class MXD(Instruction):
    """Fetch and discard the value at the multiplexer."""

    def __call__(self, registers: Registers) -> bool:
        return registers.preload is not None


class MXL(Instruction):
    """Load the value at the multiplexer."""

    def __call__(self, registers: Registers) -> bool:
        if registers.preload is None:
            return False
        registers.val = registers.preload
        registers.status2.negative = registers.preload_negative
        registers.status2.carry = False
        return True


class MXA(Instruction):
    """Add the value at the multiplexer."""

    def __call__(self, registers: Registers) -> bool:
        if registers.preload is None:
            return False
        first = _operand(registers.val, registers.status2.negative)
        second = _operand(registers.preload, registers.preload_negative)
        result = first + second
        _store_result(registers, result, self._carries(result))
        return True


class MXS(Instruction):
    """Subtract the value at the multiplexer."""

    def __call__(self, registers: Registers) -> bool:
        if registers.preload is None:
            return False
        first = _operand(registers.val, registers.status2.negative)
        second = _operand(registers.preload, registers.preload_negative)
        result = first - second
        _store_result(registers, result, self._carries(result))
        return True


class MUX(Instruction):
    """Point the multiplexer to a neighbouring core, one offset per axis."""

    ARG_MAXES: ClassVar[tuple[int, ...]] = (2, 2, 2)

    def __call__(self, registers: Registers) -> bool:
        registers.status1.mux = self.dump_args()
        return True


class MXR(Instruction):
    """Point the multiplexer to a special register."""

    ARG_MAXES: ClassVar[tuple[int, ...]] = (int(DIRECTION_END),)

    def __call__(self, registers: Registers) -> bool:
        registers.status1.mux = self.get_argument(0) + SpecialDirection.PC
        return True


class LCL(_ConstantInstruction):
    """Load a constant into the low nibble."""

    def __call__(self, registers: Registers) -> bool:
        registers.val = (registers.val & 0xF0) | self.constant
        registers.status2.negative = False
        return True


class LCH(_ConstantInstruction):
    """Load a constant into the high nibble."""

    def __call__(self, registers: Registers) -> bool:
        registers.val = ((self.constant << 4) | (registers.val & 0x0F)) & 0xFF
        registers.status2.negative = False
        return True


class JLZ(_JumpInstruction):
    """Jump if the value is negative."""

    def _taken(self, registers: Registers) -> bool:
        return registers.status2.negative


class JEZ(_JumpInstruction):
    """Jump if the value is zero."""

    def _taken(self, registers: Registers) -> bool:
        return registers.val == 0


class JGZ(_JumpInstruction):
    """Jump if the value is strictly positive."""

    def _taken(self, registers: Registers) -> bool:
        return not registers.status2.negative and registers.val != 0


class JMP(_JumpInstruction):
    """Jump unconditionally."""

    def _taken(self, registers: Registers) -> bool:
        return True


class LSL(_ConstantInstruction):
    """Logical shift left; carry receives the bit just past the top."""

    def __call__(self, registers: Registers) -> bool:
        result = registers.val << self.constant
        registers.val = result & 0xFF
        registers.status2.carry = bool(result & 0x100)
        return True


class LSR(_ConstantInstruction):
    """Logical shift right; carry receives the last bit shifted out."""

    def __call__(self, registers: Registers) -> bool:
        shift = self.constant
        registers.status2.carry = shift > 0 and bool((registers.val >> (shift - 1)) & 1)
        registers.val >>= shift
        return True


class CAD(_ConstantInstruction):
    """Add a constant."""

    def __call__(self, registers: Registers) -> bool:
        result = _operand(registers.val, registers.status2.negative) + self.constant
        _store_result(registers, result, self._carries(result))
        return True


class CSU(_ConstantInstruction):
    """Subtract a constant."""

    def __call__(self, registers: Registers) -> bool:
        result = _operand(registers.val, registers.status2.negative) - self.constant
        _store_result(registers, result, self._carries(result))
        return True


class CAN(_ConstantInstruction):
    """Bitwise AND with a constant."""

    def __call__(self, registers: Registers) -> bool:
        registers.val &= self.constant
        return True


class COR(_ConstantInstruction):
    """Bitwise OR with a constant."""

    def __call__(self, registers: Registers) -> bool:
        registers.val |= self.constant
        return True