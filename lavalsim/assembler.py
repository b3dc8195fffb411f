"""Preprocessing, parsing and assembling of programs, and loading of binaries."""

from __future__ import annotations

import io
import re

from .cpu import Cpu
from .direction import Direction1D, SpecialDirection
from .errors import CpuException, require
from .instruction_factory import default_factory
from .memory import Memory
from .settings import Settings

#: An instruction mnemonic with its arguments.
Node = tuple[str, list[int]]
#: Instructions of each memory bank, in order of first appearance of the bank.
Ast = dict[int, list[Node]]
#: Values of each ``.name`` setting.
SettingMap = dict[str, list[int]]

_SYMBOLS = (
    ("BEFORE", Direction1D.BEFORE),
    ("CURRENT", Direction1D.CURRENT),
    ("AFTER", Direction1D.AFTER),
    ("PC", SpecialDirection.PC),
    ("MEMBANK", SpecialDirection.MEMBANK),
)

_SETTING = re.compile(r"\.(\w+) ([\d, ]*)\s*(?:;.*)?", re.ASCII)
_BLOCK = re.compile(r"(\d+):\s*(?:;.*)?", re.ASCII)
_INSTRUCTION = re.compile(r"(\w{3})( -?\d+(?:, ?\d+)*)?\s*(?:;.*)?", re.ASCII)
_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_WHITESPACE = " \t\n\r\f\v"

_MAX_SETTING = 0xFFFF
_ARGUMENT_LIMIT = 0xFF
_MAX_BANK_ID = 0xFF
_MAX_BANK_LENGTH = 0xFF


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _split(text: str) -> list[str]:
    parts = text.split(",")
    if parts[-1] == "":
        parts.pop()
    return parts


def _to_int(text: str, line_number: int) -> int:
    match = _LEADING_INTEGER.match(text)
    if match is None:
        raise CpuException(f"Invalid number at line {line_number}")
    return int(match.group(1))


def preprocess(text: str) -> str:
    """Replace direction names with their numeric values."""
    output = []
    for line in _lines(text):
        for name, value in _SYMBOLS:
            line = line.replace(name, str(int(value)))
        output.append(line + "\n")
    return "".join(output)


def parse(text: str) -> tuple[Ast, SettingMap]:
    """Build the program structure and settings from preprocessed assembly.

    Settings must precede the first block; instructions must follow one.
    """
    blocks: Ast = {}
    settings: SettingMap = {}
    settings_done = False
    current_block: int | None = None

    for line_number, raw_line in enumerate(_lines(text), start=1):
        line = raw_line.strip(_WHITESPACE)

        if not line or line.startswith(";"):
            continue

        if not settings_done and (match := _SETTING.fullmatch(line)):
            values = []
            for arg in _split(match.group(2)):
                value = _to_int(arg, line_number)
                require(value <= _MAX_SETTING, f"Too large setting at line {line_number}")
                values.append(value)
            settings.setdefault(match.group(1), values)
        elif current_block is not None and (match := _INSTRUCTION.fullmatch(line)):
            args = []
            for arg in _split(match.group(2) or ""):
                value = _to_int(arg, line_number)
                require(value < _ARGUMENT_LIMIT, f"Too large argument at line {line_number}")
                require(value >= 0, f"Negative argument at line {line_number}")
                args.append(value)
            blocks.setdefault(current_block, []).append((match.group(1), args))
        elif match := _BLOCK.fullmatch(line):
            settings_done = True
            current_block = int(match.group(1))
        else:
            raise CpuException(f"Unrecognized expression at line {line_number}")

    return blocks, settings


def assemble(ast: Ast, settings: SettingMap) -> bytes:
    """Encode settings and instructions into a binary program."""
    output = bytearray(Settings.from_ast(settings).to_bytes())
    factory = default_factory()

    for bank_id, instructions in ast.items():
        require(
            bank_id <= _MAX_BANK_ID,
            "This implementation supports a maximum of 256 memory banks",
        )
        output.append(bank_id)

        require(
            len(instructions) <= _MAX_BANK_LENGTH,
            "This implementation supports only a maximum of 256 instructions per bank",
        )
        output.append(len(instructions))

        for instruction_line, node in enumerate(instructions, start=1):
            try:
                output.append(factory.dump(factory.create_from_ast(node)))
            except CpuException as exception:
                exception.add_line_infos(bank_id, instruction_line)
                raise

    return bytes(output)


def load_binary(data: bytes) -> Cpu:
    """Build a machine from a binary program."""
    stream = io.BytesIO(data)
    settings = Settings.from_stream(stream)
    memory = Memory(settings)

    while bank_header := stream.read(1):
        membank_id = bank_header[0]
        length_byte = stream.read(1)
        require(length_byte, "Truncated program")
        membank_len = length_byte[0]

        require(
            memory.banks_size() >= membank_len,
            f"Using {membank_len} instructions out of a maximum of "
            f"{memory.banks_size()} in membank {membank_id}",
        )
        require(
            membank_id < memory.banks_number(),
            "More membank than specified in settings",
        )

        content = stream.read(membank_len)
        require(len(content) == membank_len, "Truncated program")
        memory[membank_id][:membank_len] = content

    return Cpu(settings, memory)