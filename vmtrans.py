#!/usr/bin/env python3
"""
vmtrans: Hack VM Translator CLI

Usage:
    python vmtrans.py <input.vm | directory> [-o output.asm] [--no-bootstrap]
                      [--entry Sys.init] [--stack-base 256] [--no-comments]
                      [--jobs N] [--verbose]

A single .vm file is written next to itself as <name>.asm.
A directory is translated as one program from every *.vm file directly
inside it (sorted by file name) into <dir>/<dirname>.asm.

Examples:
    python vmtrans.py StackTest.vm --no-bootstrap
    python vmtrans.py FibonacciElement/
    python vmtrans.py Pong/ -o build/pong.asm --jobs 4
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Tuple

from rich.logging import RichHandler

from vm_translator import __version__, translate_program
from vm_translator.codegen import DEFAULT_ENTRY_POINT, DEFAULT_STACK_BASE, MAX_CONSTANT

VM_EXTENSION = ".vm"
ASM_EXTENSION = ".asm"

log = logging.getLogger("vmtrans")


class InputError(Exception):
    """Input path is not a .vm file or a directory."""


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(show_path=False, markup=False, rich_tracebacks=True)],
        force=True,
    )


def load_sources(path: Path) -> List[Tuple[str, str]]:
    """Return (module name, source text) pairs for a .vm file or directory."""
    if path.is_file():
        if path.suffix != VM_EXTENSION:
            raise InputError(f"Input file has to be a {VM_EXTENSION} file or a directory: {path}")
        return [(path.stem, path.read_text(encoding="utf-8"))]
    if path.is_dir():
        files = sorted(p for p in path.iterdir()
                       if p.is_file() and p.suffix == VM_EXTENSION)
        if not files:
            raise InputError(f"No {VM_EXTENSION} files in directory: {path}")
        return [(p.stem, p.read_text(encoding="utf-8")) for p in files]
    raise InputError(f"Input path is neither a file nor a directory: {path}")


def default_output_path(path: Path) -> Path:
    if path.is_dir():
        return path / (path.resolve().name + ASM_EXTENSION)
    return path.with_suffix(ASM_EXTENSION)


def stack_base(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid stack base: {text!r}")
    if not 0 <= value <= MAX_CONSTANT:
        raise argparse.ArgumentTypeError(f"stack base must be in 0..{MAX_CONSTANT}: {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmtrans",
        description="Hack VM to Hack assembly translator",
    )
    parser.add_argument("input", help="Input .vm file or directory of .vm files")
    parser.add_argument("-o", "--output", help="Output assembly file")
    parser.add_argument("--no-bootstrap", action="store_true",
                        help="Do not emit the SP setup and entry-point call")
    parser.add_argument("--entry", default=DEFAULT_ENTRY_POINT,
                        help=f"Function called by the bootstrap (default: {DEFAULT_ENTRY_POINT})")
    parser.add_argument("--stack-base", type=stack_base, default=DEFAULT_STACK_BASE,
                        help=f"Initial stack pointer (default: {DEFAULT_STACK_BASE})")
    parser.add_argument("--no-comments", action="store_true",
                        help="Do not echo VM source lines as assembly comments")
    parser.add_argument("--jobs", "-j", type=int, default=1,
                        help="Generate modules on N threads (default: 1)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log pipeline details")
    parser.add_argument("--version", action="version",
                        version=f"vmtrans {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    path = Path(args.input)
    try:
        sources = load_sources(path)
    except InputError as e:
        log.error("%s", e)
        return 1
    except OSError as e:
        log.error("Error reading %s: %s", path, e)
        return 1

    log.debug("Modules: %s", ", ".join(name for name, _ in sources))

    result = translate_program(
        sources,
        bootstrap=not args.no_bootstrap,
        entry_point=args.entry,
        stack_base=args.stack_base,
        echo_source=not args.no_comments,
        workers=args.jobs,
    )

    if not result.ok:
        for diagnostic in result.diagnostics:
            print(diagnostic, file=sys.stderr)
        log.error("%d error(s), no output written", len(result.diagnostics))
        return 1

    output_path = Path(args.output) if args.output else default_output_path(path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.output, encoding="utf-8")
    except OSError as e:
        log.error("Error writing %s: %s", output_path, e)
        return 1

    log.info("Translated %s into %s", path.name or path, output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
