"""
Source cleaner and instruction parser for the Hack VM translator.

Turns module source text into Instruction records:

  - Strips `//` comments and surrounding whitespace
  - Drops lines that are empty after stripping
  - Splits each remaining line on single spaces into
    operation, arg1, arg2 (further tokens are ignored)
  - Tags each instruction with its Category

Parsing is structural only. Operation names, argument counts and
argument values are checked by the code generators, so that every
problem in a program is reported in one pass.
"""

from __future__ import annotations
from typing import List
from .instructions import Instruction, Module, OPERATION_CATEGORIES

COMMENT_MARKER = "//"


class ParseError(Exception):
    def __init__(self, message: str, module: str = "", index: int = 0, raw: str = ""):
        self.module = module
        self.index = index
        self.raw = raw
        super().__init__(f"Parse error at {module}#{index}: {message}")


def clean_source(source: str) -> List[str]:
    """Return the non-empty, comment-free lines of a module source."""
    lines = []
    for line in source.splitlines():
        text = line.split(COMMENT_MARKER, 1)[0].strip()
        if text:
            lines.append(text)
    return lines


def parse_line(line: str, index: int = 0, module: str = "") -> Instruction:
    """Parse one cleaned line into an Instruction.

    Raises ParseError if the line has no operation token.
    """
    parts = line.split(" ")
    operation = parts[0]
    if not operation:
        raise ParseError("Unable to parse empty line", module, index, line)

    return Instruction(
        operation=operation,
        arg1=parts[1] if len(parts) > 1 else None,
        arg2=parts[2] if len(parts) > 2 else None,
        raw=line,
        module=module,
        index=index,
        category=OPERATION_CATEGORIES.get(operation),
    )


def parse_module(name: str, source: str) -> Module:
    """Clean and parse a whole module."""
    module = Module(name=name)
    for i, line in enumerate(clean_source(source)):
        module.instructions.append(parse_line(line, i, name))
    return module
