"""Register file of a single core."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .direction import Direction1D, three_pow

# Multiplexer value pointing at the core itself on every axis.
_CENTRE_MUX = sum(Direction1D.CURRENT * three_pow(axis) for axis in range(3))


@dataclass
class Status1:
    """Multiplexer target and synchronisation flags."""

    mux: int = _CENTRE_MUX
    ctc: bool = False
    sync: bool = False


@dataclass
class Status2:
    """Memory bank and arithmetic flags."""

    membank: int = 0
    carry: bool = False
    negative: bool = False
    overflow: bool = False
    unlock: bool = False


@dataclass(eq=False)
class Registers:
    """State of one core.

    ``id`` only identifies the core inside the simulator; it does not take
    part in equality, nor does ``preload_negative``.
    """

    id: int = 0
    val: int = 0
    preload: int | None = None
    preload_negative: bool = False
    pc: int = 0
    status1: Status1 = field(default_factory=Status1)
    status2: Status2 = field(default_factory=Status2)

    def _key(self) -> tuple:
        return (self.val, self.preload, self.pc, self.status1, self.status2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Registers):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> Registers:
        """Return an independent copy, status blocks included."""
        return replace(self, status1=replace(self.status1), status2=replace(self.status2))

    def __str__(self) -> str:
        status1, status2 = self.status1, self.status2
        mux = f"mux: 0x{status1.mux:x}"
        if self.preload is not None:
            mux += f" -> {self.preload}"
        lines = [
            f"id: 0x{self.id:x}",
            f"pc: 0x{self.pc:x}",
            f"membank: 0x{status2.membank:x}",
            f"val: 0x{self.val:x}",
            mux,
            f"sync: {int(status1.sync)}",
            f"unlock: 0x{int(status2.unlock)}",
            f"ctc: 0x{int(status1.ctc)}",
            f"negative: 0x{int(status2.negative)}",
            f"carry: 0x{int(status2.carry)}",
        ]
        return "\n".join(lines) + "\n"