"""Command line entry point: preprocess, assemble and simulate programs."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .assembler import assemble, load_binary, parse, preprocess
from .errors import CpuException

# Assembly text is handled byte for byte.
_TEXT_ENCODING = "latin-1"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lavalsim", description="LAVAL simulator")
    parser.add_argument("file", help="Assembly or binary program")
    parser.add_argument(
        "arguments",
        nargs="?",
        default="",
        metavar="ARGUMENTS",
        help="Arguments file. With no ARGUMENTS, or when ARGUMENTS is -, read standard input",
    )
    exclusive = parser.add_mutually_exclusive_group()
    exclusive.add_argument(
        "-E",
        "--preprocess",
        action="store_true",
        help="Preprocess only, do not assemble or simulate",
    )
    parser.add_argument(
        "-c",
        "--compile",
        action="store_true",
        help="Assemble only, do not compile or simulate",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="",
        help="Place the assembled or preprocessed output into <file>",
    )
    exclusive.add_argument("-s", "--simulate", action="store_true", help="Simulate")
    return parser


def _build_binary(args: argparse.Namespace, source: bytes) -> bytes | None:
    """Preprocess and assemble ``source``; return None when only preprocessing."""
    preprocessed = preprocess(source.decode(_TEXT_ENCODING))

    if args.preprocess:
        if args.output:
            Path(args.output).write_bytes(preprocessed.encode(_TEXT_ENCODING))
        else:
            sys.stdout.write(preprocessed)
            sys.stdout.flush()
        return None

    ast, settings = parse(preprocessed)
    binary = assemble(ast, settings)
    if args.output:
        Path(args.output).write_bytes(binary)
    return binary


def _simulate(args: argparse.Namespace, binary: bytes) -> None:
    cpu = load_binary(binary)
    print(f"Program size: {len(binary)}", file=sys.stderr)
    print(cpu, file=sys.stderr)

    if not args.arguments or args.arguments == "-":
        answer = cpu.start(sys.stdin, sys.stdout)
    else:
        with open(args.arguments, encoding="utf-8") as arguments:
            answer = cpu.start(arguments, sys.stdout)

    print(f"answer: {answer}", flush=True)


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    source_path = Path(args.file)
    if not source_path.is_file():
        parser.error(f"file: File does not exist: {args.file}")

    try:
        source = source_path.read_bytes()

        if args.preprocess or args.compile:
            binary = _build_binary(args, source)
            if binary is None:
                return 0
        else:
            binary = source

        if args.simulate:
            _simulate(args, binary)
    except CpuException as exception:
        print(exception, file=sys.stderr)
    except OSError as error:
        print(error.strerror or str(error), file=sys.stderr)

    return 0