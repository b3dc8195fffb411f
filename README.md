# lavalsim

An assembler and cycle simulator for a three-dimensional grid of small 8-bit
cores. Each core runs the program in its memory bank. A core reads a value
from a neighbouring core, or from an input, through its multiplexer. Cores
wait for each other with the `SYN` instruction. The program ends when a core
executes `HLT`, and that core's value becomes the answer.

## Installation

```
pip install .
```

To also install the test dependencies, run `pip install .[test]`.

## Command line

```
lavalsim FILE [ARGUMENTS] [-E | -s] [-c] [-o OUTPUT]
```

- `-E`, `--preprocess`: preprocess the assembly, write the result and stop.
  This option cannot be combined with `-s`.
- `-c`, `--compile`: preprocess and assemble `FILE` into a binary program.
- `-s`, `--simulate`: run the program and print `answer: N` to standard output.
- `-o`, `--output`: write the preprocessed text (with `-E`) or the binary
  (with `-c`) to this file. Without it, `-E` writes to standard output.

If neither `-E` nor `-c` is given, `FILE` is read as a binary that was
assembled before. Each line of `ARGUMENTS` holds one value from 0 to 255 for
each input core, separated by whitespace, in order of core id. Empty lines are
skipped. When `ARGUMENTS` is missing or is `-`, the values are read from
standard input.

During a run, each cycle in which output cores offer a value (by syncing)
writes those values to standard output on one line. The run ends when a core
halts. It also ends once the input is exhausted and some output has been
written. A run statistic and a machine summary go to standard error. When an
assembly or simulation error occurs, the report is printed to standard error.

To assemble and run a program in one step:

```
lavalsim program.laval args.txt -c -s
```

## Assembly format

Settings come first. After them come numbered blocks, one for each memory bank.
A `;` starts a comment.

```
.cores 1, 1, 1
.mem_number 3
.mem_size 3
.core_to_mem 2

2:
    ; Comment
    LCL 2
    LCH 1
    HLT
```

- `.cores` (three dimensions), `.mem_number`, `.mem_size` and `.core_to_mem`
  (one bank per core) are required. `.in` and `.out` list the input and output
  cores. Setting values go up to 65535.
- Instruction arguments are separated by commas. Each must lie between 0 and
  254, and within the range of its instruction.
- The preprocessor replaces `BEFORE`, `CURRENT`, `AFTER` with 0, 1, 2, and
  `PC`, `MEMBANK` with 27, 28.

### Instructions

| Mnemonic | Arguments | Effect |
|---|---|---|
| `NOP` | – | do nothing |
| `SYN` | – | offer the value to readers and wait until one reads it |
| `CTC` / `CTV` | – | read the carry / the value of the pointed core |
| `DBG` | – | print the registers to standard error |
| `HCF` | – | reserved, acts as `NOP` |
| `HLT` | – | halt, the value is the answer |
| `MXD` / `MXL` / `MXA` / `MXS` | – | discard / load / add / subtract the multiplexer value |
| `MUX` | three offsets, 0–2 | point the multiplexer at a neighbour (1 = same position) |
| `LCL` / `LCH` | 0–15 | load the low / high nibble |
| `JLZ` / `JEZ` / `JGZ` / `JMP` | bank, 0–15 | jump to the start of a bank if negative / zero / positive / always |
| `LSL` / `LSR` | 0–15 | shift left / right, and set the carry |
| `CAD` / `CSU` | 0–15 | add / subtract a constant |
| `CAN` / `COR` | 0–15 | bitwise AND / OR with a constant |

## Library use

```python
import io
import sys

from lavalsim.assembler import assemble, load_binary, parse, preprocess

ast, settings = parse(preprocess(source_text))
cpu = load_binary(assemble(ast, settings))
answer = cpu.start(io.StringIO("2 3\n"), sys.stdout)
```

You can also build a machine by hand. Create `lavalsim.settings.Settings` and
`lavalsim.memory.Memory`, encode instructions from `lavalsim.opcodes` with
`Cpu.dump`, and store them with `Cpu.link_memory`. Errors are raised as
`lavalsim.errors.CpuException`.

## Limitations

- The grid does not wrap around. A core that looks past the edge reads from its
  input if it has one. Otherwise the lookup is an error.
- `lavalsim.opcodes.MXR` is defined, but it is not part of the instruction
  encoding, so programs cannot use it.