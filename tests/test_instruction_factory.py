import pytest

from lavalsim.errors import CpuException
from lavalsim.instruction import Instruction
from lavalsim.instruction_factory import InstructionFactory, default_factory
from lavalsim.opcodes import HLT, LCL, MUX, MXR, NOP


class Size2(Instruction):
    ARG_MAXES = (1, 1)

    def __call__(self, registers):
        return True


class Size0(Instruction):
    def __call__(self, registers):
        return True


class Size3(Instruction):
    ARG_MAXES = (3,)

    def __call__(self, registers):
        return True


@pytest.fixture
def factory():
    result = InstructionFactory()
    result.register(Size2)
    result.register(Size0)
    result.register(Size3)
    return result


@pytest.mark.parametrize(
    ("instruction", "expected"),
    [
        (Size2.from_raw(0), 0),
        (Size2.from_raw(1), 1),
        (Size0(), 4),
        (Size3.from_raw(0), 5),
        (Size3.from_raw(3), 8),
    ],
)
def test_dump(factory, instruction, expected):
    assert factory.dump(instruction) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, Size2([0, 0])),
        (1, Size2([1, 0])),
        (4, Size0()),
        (5, Size3([0])),
        (8, Size3([3])),
    ],
)
def test_create(factory, value, expected):
    instruction = factory.create(value)
    assert instruction == expected
    assert factory.dump(instruction) == value


def test_create_does_not_return_other_type(factory):
    instruction = factory.create(0)
    assert instruction == Size2([0, 0])
    assert not instruction == Size3([0])
    assert not isinstance(instruction, Size3)


def test_size(factory):
    assert len(factory) == 9


def test_create_rejects_values_past_the_end(factory):
    with pytest.raises(CpuException):
        factory.create(9)


def test_create_decodes_arguments(factory):
    assert factory.create(7).args == (2,)
    assert factory.create(3).args == (1, 1)


def test_dump_unregistered_type(factory):
    with pytest.raises(KeyError):
        factory.dump(NOP())


def test_instruction_space_overflow():
    class Wide(Instruction):
        ARG_MAXES = (15, 15)

        def __call__(self, registers):
            return True

    overflowing = InstructionFactory()
    with pytest.raises(CpuException):
        overflowing.register(Wide)
    assert len(overflowing) == 0


def test_default_factory_round_trip():
    core_factory = default_factory()
    for value in range(len(core_factory)):
        assert core_factory.dump(core_factory.create(value)) == value


def test_default_factory_fixed_codes():
    core_factory = default_factory()
    assert core_factory.dump(NOP()) == 0
    assert core_factory.dump(HLT()) == 6


def test_default_factory_does_not_know_mxr():
    with pytest.raises(KeyError):
        default_factory().dump(MXR([0]))


def test_create_from_ast():
    core_factory = default_factory()
    instruction = core_factory.create_from_ast(("MUX", [1, 2, 1]))
    assert instruction == MUX([1, 2, 1])
    assert core_factory.dump(instruction) == core_factory.dump(MUX([1, 2, 1]))


def test_create_from_ast_without_arguments():
    assert default_factory().create_from_ast(("HLT", [])) == HLT()


def test_create_from_ast_constant():
    core_factory = default_factory()
    instruction = core_factory.create_from_ast(("LCL", [2]))
    assert instruction == LCL([2])


def test_create_from_ast_unknown_name():
    with pytest.raises(CpuException):
        default_factory().create_from_ast(("XYZ", []))


def test_create_from_ast_wrong_argument_count():
    with pytest.raises(CpuException):
        default_factory().create_from_ast(("LCL", [1, 2]))


def test_create_from_ast_out_of_range_argument():
    with pytest.raises(CpuException):
        default_factory().create_from_ast(("MUX", [1, 3, 1]))