"""Exceptions raised while assembling or simulating programs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .registers import Registers

_UNREACHABLE_EXPRESSIONS = frozenset({"false", "0", "FALSE"})


class CpuException(Exception):
    """A failed check inside the simulator or the assembler.

    The report grows as context (registers, program position) is attached
    while the exception travels up the stack.
    """

    def __init__(self, message: str = "", expression: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.expression = expression
        self.registers: Registers | None = None
        self.line_infos: tuple[int, int] | None = None

        lines: list[str] = []
        if expression is not None:
            if expression in _UNREACHABLE_EXPRESSIONS:
                lines.append("Unreachable code assertion")
            else:
                lines.append(f"Assertion '{expression}'")
            if message:
                lines.append("")
        if message:
            lines.append(message)
        self._report = "\n".join(lines) + "\n" if lines else ""

    def add_registers(self, registers: Registers) -> None:
        """Attach the state of the core that failed, and its program position."""
        if self.registers is not None:
            raise RuntimeError("Registers are already attached to this exception")

        self.registers = registers.copy()
        self._report += f"\nRegisters:\n{registers}"
        self.add_line_infos(registers.status2.membank, registers.pc + 1)

    def add_line_infos(self, membank: int, instruction: int) -> None:
        """Attach the memory bank and the 1-based instruction number involved."""
        if self.line_infos is not None:
            raise RuntimeError("Line information is already attached to this exception")

        self.line_infos = (membank, instruction)
        self._report += f"\nIn membank {membank} at its instruction #{instruction}\n"

    def __str__(self) -> str:
        return self._report


class Answer(Exception):
    """Raised by a halting core to deliver the program's result."""

    def __init__(self, content: int) -> None:
        super().__init__(content)
        self.content = int(content)


def require(condition: object, message: str) -> None:
    """Raise CpuException with ``message`` unless ``condition`` holds."""
    if not condition:
        raise CpuException(message)