"""A single processing core."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from .direction import SpecialDirection, decode
from .errors import CpuException, require
from .inputs import Fetchable
from .instruction import Instruction
from .instruction_factory import InstructionFactory, default_factory
from .memory import Memory
from .opcodes import MXA, MXD, MXL, MXS
from .registers import Registers

if TYPE_CHECKING:
    from .core_array import CoreArray

_MUX_INSTRUCTIONS = (MXL, MXA, MXS, MXD)
_MAX_BANK_SIZE = 0x100


@lru_cache(maxsize=None)
def _shared_factory() -> InstructionFactory:
    return default_factory()


class Core(Fetchable):
    """One core of the grid: its registers, its program memory and its neighbours."""

    def __init__(
        self,
        cores: CoreArray | None = None,
        core_id: int = 0,
        memory: Memory | None = None,
    ) -> None:
        require(
            memory is None or memory.banks_size() <= _MAX_BANK_SIZE,
            "Too many memory banks",
        )
        self.registers = Registers(id=core_id)
        self._cores = cores
        self._memory = memory
        self._factory = _shared_factory()

    @property
    def factory(self) -> InstructionFactory:
        """The instruction encoding, shared by every core."""
        return self._factory

    def wire(self, membank: int) -> None:
        """Select the memory bank the core runs from."""
        self.registers.status2.membank = membank

    def _current_instruction(self) -> Instruction:
        registers = self.registers
        raw = self._memory[registers.status2.membank][registers.pc]
        return self._factory.create(raw)

    def preload(self, force: bool = False) -> None:
        """Latch the value offered at the multiplexer.

        A neighbour is only read when the next instruction consumes it, or
        when ``force`` is set.
        """
        registers = self.registers
        direction = decode(registers.status1.mux)

        try:
            require(self._cores is not None, "CPU have no cores")

            if isinstance(direction, SpecialDirection):
                if direction is SpecialDirection.PC:
                    registers.preload = registers.pc
                else:
                    registers.preload = registers.status2.membank
                return

            pointed = self._cores.offset(registers.id, direction)
            instruction = self._current_instruction()

            if force or isinstance(instruction, _MUX_INSTRUCTIONS):
                if isinstance(pointed, Core):
                    require(pointed != self, "A core may not fetch from itself")

                imported = pointed.get_from(registers.status1.ctc)
                if imported is None:
                    registers.preload = None
                else:
                    registers.preload_negative, registers.preload = imported
        except CpuException as exception:
            exception.add_registers(registers)
            raise

    def fetch(self) -> bool:
        """Run the instruction at the program counter.

        Returns False when the core stalled; the program counter then stays put.
        """
        if self._memory is None:
            raise RuntimeError("Memory is not linked")

        registers = self.registers
        try:
            registers.status1.sync = False
            instruction = self._current_instruction()

            advanced = instruction(registers)
            if advanced:
                registers.pc = (registers.pc + 1) % self._memory.banks_size()
            registers.status2.unlock = False
            return advanced
        except CpuException as exception:
            exception.add_registers(registers)
            raise

    def execute(self, instruction: Instruction) -> bool:
        """Run ``instruction`` directly on the registers."""
        return instruction(self.registers)

    def step(self) -> bool:
        """Preload then fetch; return False if the core stalled."""
        self.preload()
        return self.fetch()

    def get_from(self, carry: bool) -> tuple[bool, int] | None:
        """Offer the value (or carry) to a reader once the core is syncing."""
        registers = self.registers
        if not registers.status1.sync:
            return None

        registers.status2.unlock = True
        value = int(registers.status2.carry) if carry else registers.val
        return (registers.status2.negative, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Core):
            return NotImplemented
        return self.registers.id == other.registers.id

    def __hash__(self) -> int:
        return hash(self.registers.id)

    def __str__(self) -> str:
        return str(self.registers.id)