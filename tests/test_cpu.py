import io
import threading

import pytest

from lavalsim.cpu import Cpu
from lavalsim.errors import CpuException
from lavalsim.instruction_factory import default_factory
from lavalsim.memory import Memory
from lavalsim.opcodes import CAD, HLT, JMP, LCH, LCL, MUX, MXL, SYN
from lavalsim.settings import Settings


def _settings(**overrides):
    values = dict(
        dimensions=(1, 1, 1), bank_number=2, bank_size=4, core_to_mem=[0]
    )
    values.update(overrides)
    return Settings(**values)


def _program(settings, *instructions, bank=0):
    memory = Memory(settings)
    factory = default_factory()
    for position, instruction in enumerate(instructions):
        memory[bank][position] = factory.dump(instruction)
    return memory


class _BlockingStream:
    """An input stream that yields nothing until released."""

    def __init__(self):
        self.release = threading.Event()

    def readline(self):
        self.release.wait()
        return ""


def test_constant_program_answers():
    settings = _settings()
    cpu = Cpu(settings, _program(settings, LCL([2]), LCH([1]), HLT()))
    assert cpu.start(io.StringIO(""), io.StringIO()) == 18


def test_program_runs_from_wired_bank():
    settings = _settings(core_to_mem=[1])
    cpu = Cpu(settings, _program(settings, CAD([9]), HLT(), bank=1))
    assert cpu.start(io.StringIO(""), io.StringIO()) == 9


def test_jump_between_banks():
    settings = _settings()
    memory = _program(settings, LCL([3]), JMP([1]))
    factory = default_factory()
    memory[1][0] = factory.dump(CAD([4]))
    memory[1][1] = factory.dump(HLT())
    cpu = Cpu(settings, memory)
    assert cpu.start(io.StringIO(""), io.StringIO()) == 7


def test_dump_matches_factory():
    cpu = Cpu(_settings())
    factory = default_factory()
    for instruction in (HLT(), LCL([5]), MUX([1, 1, 2])):
        assert cpu.dump(instruction) == factory.dump(instruction)


def test_link_memory_replaces_program():
    settings = _settings()
    cpu = Cpu(settings)
    cpu.link_memory(_program(settings, LCL([6]), HLT()), settings)
    assert cpu.start(io.StringIO(""), io.StringIO()) == 6


def test_link_memory_replaces_core_map():
    settings = _settings()
    cpu = Cpu(settings)
    with pytest.raises(CpuException, match="Non-matching number of cores"):
        cpu.link_memory(_program(settings, HLT()), _settings(core_to_mem=[]))
        cpu.start(io.StringIO(""), io.StringIO())


def test_value_read_from_input():
    settings = _settings(inputs=[0])
    memory = _program(settings, MUX([1, 1, 0]), MXL(), HLT())
    cpu = Cpu(settings, memory)
    assert cpu.start(io.StringIO("7\n"), io.StringIO()) == 7


def test_output_is_written_when_core_syncs():
    settings = _settings(outputs=[0])
    cpu = Cpu(settings, _program(settings, LCL([5]), SYN(), HLT()))
    stream = _BlockingStream()
    output = io.StringIO()
    try:
        answer = cpu.start(stream, output)
    finally:
        stream.release.set()
    assert answer == 5
    assert output.getvalue() == "5\n"


def test_stops_when_output_given_and_input_ended():
    settings = _settings(outputs=[0])
    memory = _program(settings, LCL([4]), SYN(), JMP([0]))
    cpu = Cpu(settings, memory)
    output = io.StringIO()
    assert cpu.start(io.StringIO(""), output) == 0
    assert output.getvalue().splitlines()[0] == "4"


@pytest.mark.parametrize(
    "line, message",
    [
        ("300\n", "Too large input"),
        ("-1\n", "Only unsigned values are supported"),
        ("abc\n", "Input error"),
        ("1 2\n", "Wrong number of parameters: 2. Expected 1"),
    ],
)
def test_bad_input_is_reported(line, message):
    settings = _settings(inputs=[0])
    memory = _program(settings, MUX([1, 1, 0]), MXL(), HLT())
    cpu = Cpu(settings, memory)
    with pytest.raises(CpuException, match=message):
        cpu.start(io.StringIO(line), io.StringIO())


def test_core_map_size_must_match_cores():
    cpu = Cpu(_settings(core_to_mem=[0, 1]))
    with pytest.raises(CpuException, match="Non-matching number of cores"):
        cpu.start(io.StringIO(""), io.StringIO())


def test_core_map_bank_must_exist():
    cpu = Cpu(_settings(core_to_mem=[2]))
    with pytest.raises(CpuException, match="out of range core"):
        cpu.start(io.StringIO(""), io.StringIO())


def test_negative_period_is_rejected():
    cpu = Cpu(_settings())
    with pytest.raises(CpuException, match="Invalid period"):
        cpu.start(io.StringIO(""), io.StringIO(), -1)


def test_wrong_dimension_count_is_rejected():
    with pytest.raises(CpuException, match="Incorrect number of dimensions"):
        Cpu(Settings(dimensions=(1, 1), core_to_mem=[0]))


def test_description():
    settings = _settings(dimensions=(1, 1, 2), core_to_mem=[0, 0], inputs=[1], outputs=[0])
    text = str(Cpu(settings))
    assert text.splitlines() == [
        f"Instruction space: {len(default_factory())}/256",
        "Cores number: 2",
        "Memory banks number: 2",
        "Memory banks size: 4",
        "Inputs on cores: 1 ",
        "Outputs on cores: 0 ",
    ]