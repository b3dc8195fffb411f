"""Program memory shared by all cores."""

from __future__ import annotations

from .errors import require
from .settings import Settings


class Memory:
    """A set of equally sized, zero-initialised memory banks."""

    def __init__(self, settings: Settings) -> None:
        self._banks = [bytearray(settings.bank_size) for _ in range(settings.bank_number)]

    def banks_size(self) -> int:
        """Size of each bank, or 0 when there is no bank."""
        return len(self._banks[0]) if self._banks else 0

    def banks_number(self) -> int:
        return len(self._banks)

    def __getitem__(self, index: int) -> bytearray:
        """Return bank ``index``; writes to it change the memory."""
        require(0 <= index < len(self._banks), "Memory access out of bound")
        return self._banks[index]