"""The whole machine: memory, the core grid and its inputs and outputs."""

from __future__ import annotations

import sys
import threading
import time
from typing import TextIO

from .core_array import CoreArray
from .errors import Answer, CpuException, require
from .inputs import Input
from .instruction import Instruction
from .memory import Memory
from .opcodes import DBG
from .settings import Settings

_INSTRUCTION_SPACE = 256
_REPORT_INTERVAL = 3.0


def _report_cycles(loops: int) -> None:
    print(f"Cycles simulated: {loops}", file=sys.stderr)


class Cpu:
    """Initialises the machine from its settings and runs it."""

    def __init__(self, settings: Settings, memory: Memory | None = None) -> None:
        require(len(settings.dimensions) == 3, "Incorrect number of dimensions")

        self._dimensions = list(settings.dimensions)
        self._memory = memory if memory is not None else Memory(settings)
        self._input_lock = threading.Lock()
        # Ordered by core id, which is also the order of values on an input line.
        self._inputs = {
            core_id: Input(self._input_lock) for core_id in sorted(set(settings.inputs))
        }
        self._cores = CoreArray(self._dimensions, self._memory, self._inputs)
        self._core_to_mem = list(settings.core_to_mem)
        self._outputs = list(settings.outputs)

    def link_memory(self, memory: Memory, settings: Settings) -> None:
        """Replace the program memory and the core to memory map."""
        self._memory = memory
        self._cores = CoreArray(self._dimensions, self._memory, self._inputs)
        self._core_to_mem = list(settings.core_to_mem)

    def dump(self, instruction: Instruction) -> int:
        """Encode an instruction with the machine's instruction set."""
        require(len(self._cores) > 0, "CPU have no core")
        return self._cores[0].factory.dump(instruction)

    def _handle_output(self, output: TextIO) -> bool:
        values = []
        for output_id in self._outputs:
            offered = self._cores[output_id].get_from(False)
            if offered is not None:
                values.append(str(offered[1]))

        if values:
            output.write(" ".join(values) + "\n")
            output.flush()
        return bool(values)

    def _parse_input_line(self, line: str) -> list[int]:
        values = []
        for token in line.split():
            try:
                value = int(token)
            except ValueError:
                raise CpuException("Input error") from None
            require(value <= 0xFF, "Too large input")
            require(value >= 0, "Only unsigned values are supported")
            values.append(value)
        return values

    def _read_inputs(
        self,
        stream: TextIO,
        stop: threading.Event,
        failures: list[BaseException],
    ) -> None:
        while not stop.is_set():
            try:
                line = stream.readline()
                if not line:
                    stop.set()
                    break

                values = self._parse_input_line(line)
                if not values:
                    continue
                require(
                    len(values) == len(self._inputs),
                    f"Wrong number of parameters: {len(values)}. Expected {len(self._inputs)}",
                )
                with self._input_lock:
                    for core_input, value in zip(self._inputs.values(), values):
                        core_input.put(value)
            except Exception as error:  # handed to the simulation thread
                failures.append(error)
                stop.set()

    def start(self, input_stream: TextIO, output: TextIO, period: float = 0.0) -> int:
        """Run until a core halts or the input ends while outputs are produced.

        ``period`` is the minimum duration of a cycle in seconds; 0 runs at
        full speed. Returns the halting core's value, or 0.
        """
        require(period >= 0, "Invalid period")
        require(
            len(self._cores) == len(self._core_to_mem),
            "Non-matching number of cores and number of entries in core to memory map",
        )

        for core, bank in zip(self._cores, self._core_to_mem):
            require(
                bank < self._memory.banks_number(),
                "Core to memory map contains an out of range core",
            )
            core.wire(bank)

        if period:
            print(f"starting cpu at {int(1 / period)} Hz", file=sys.stderr)
        else:
            print("starting cpu at max speed", file=sys.stderr)

        stop = threading.Event()
        failures: list[BaseException] = []
        reader = threading.Thread(
            target=self._read_inputs, args=(input_stream, stop, failures), daemon=True
        )
        reader.start()

        loops = 0
        last_report = time.perf_counter()

        try:
            while True:
                cycle_start = time.perf_counter()
                if cycle_start - last_report >= _REPORT_INTERVAL:
                    last_report = cycle_start
                    loops = 0

                if (self._handle_output(output) or failures) and stop.is_set():
                    break

                for core in self._cores:
                    core.preload()

                advanced = False
                try:
                    for core in self._cores:
                        advanced |= core.fetch()
                except Answer as answer:
                    stop.set()
                    if failures:
                        raise failures[0]
                    _report_cycles(loops)
                    return answer.content

                if period > 0:
                    for core in self._cores:
                        core.execute(DBG())
                    remaining = period - (time.perf_counter() - cycle_start)
                    if remaining > 0:
                        time.sleep(remaining)

                if advanced:
                    loops += 1
        except BaseException:
            _report_cycles(loops)
            stop.set()
            raise

        _report_cycles(loops)
        reader.join()

        if failures:
            raise failures[0]
        return 0

    def __str__(self) -> str:
        lines = [
            f"Instruction space: {len(self._cores[0].factory)}/{_INSTRUCTION_SPACE}",
            f"Cores number: {len(self._cores)}",
            f"Memory banks number: {self._memory.banks_number()}",
            f"Memory banks size: {self._memory.banks_size()}",
            "Inputs on cores: " + "".join(f"{core_id} " for core_id in self._inputs),
            "Outputs on cores: " + "".join(f"{core_id} " for core_id in self._outputs),
        ]
        return "\n".join(lines)