"""
Instruction model for the Hack VM translator.

Defines the structured form produced by the parser and consumed by the
frame resolver and the code generators. One Instruction is built per
cleaned source line; a Module groups the instructions of one .vm unit
and a Program is the ordered set of modules translated together.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional


# Frame name for instructions that precede any `function` in their module
GLOBAL_FRAME = "global"


# ──────────────────────────────────────────────
# Instruction categories
# ──────────────────────────────────────────────

class Category(enum.Enum):
    """Instruction family. Selects the code generator."""
    MEMORY = "memory"
    ARITHMETIC = "arithmetic"
    COMPARISON = "comparison"
    BRANCHING = "branching"
    FUNCTION = "function"


OPERATION_CATEGORIES: Dict[str, Category] = {
    "push": Category.MEMORY,
    "pop": Category.MEMORY,
    "add": Category.ARITHMETIC,
    "sub": Category.ARITHMETIC,
    "and": Category.ARITHMETIC,
    "or": Category.ARITHMETIC,
    "neg": Category.ARITHMETIC,
    "not": Category.ARITHMETIC,
    "eq": Category.COMPARISON,
    "gt": Category.COMPARISON,
    "lt": Category.COMPARISON,
    "label": Category.BRANCHING,
    "goto": Category.BRANCHING,
    "if-goto": Category.BRANCHING,
    "function": Category.FUNCTION,
    "call": Category.FUNCTION,
    "return": Category.FUNCTION,
}


# ──────────────────────────────────────────────
# Memory segments
# ──────────────────────────────────────────────

class Segment(enum.Enum):
    CONSTANT = "constant"
    ARGUMENT = "argument"
    LOCAL = "local"
    THIS = "this"
    THAT = "that"
    STATIC = "static"
    TEMP = "temp"
    POINTER = "pointer"

    @classmethod
    def lookup(cls, name: str) -> Optional[Segment]:
        for seg in cls:
            if seg.value == name:
                return seg
        return None


# Segments addressed through a base pointer register
BASE_REGISTERS: Dict[Segment, str] = {
    Segment.ARGUMENT: "ARG",
    Segment.LOCAL: "LCL",
    Segment.THIS: "THIS",
    Segment.THAT: "THAT",
}

POINTER_REGISTERS = ("THIS", "THAT")

TEMP_BASE = 5
TEMP_SIZE = 8


# ──────────────────────────────────────────────
# Instruction / Module / Program
# ──────────────────────────────────────────────

@dataclass
class Instruction:
    """One parsed VM source line."""
    operation: str
    arg1: Optional[str] = None
    arg2: Optional[str] = None
    raw: str = ""
    module: str = ""
    index: int = 0
    category: Optional[Category] = None
    frame: Optional[str] = None     # set by frames.resolve_frames()

    @property
    def location(self) -> str:
        return f"{self.module}#{self.index}"


@dataclass
class Module:
    """A named .vm unit and its instructions in source order."""
    name: str
    instructions: List[Instruction] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)


@dataclass
class Program:
    """Ordered modules translated together."""
    modules: List[Module] = field(default_factory=list)

    def module_names(self) -> List[str]:
        return [m.name for m in self.modules]
