"""
Frame resolution: which function lexically encloses each instruction.

Branch labels are qualified with their frame, so the same label text
in two functions never collides. Resolution walks each module on its
own, in source order. Instruction indices restart at zero in every
module, so a lookup across the flattened program could attribute an
instruction to a function from a different module.
"""

from __future__ import annotations
from typing import Iterable
from .instructions import GLOBAL_FRAME, Module, Program


def resolve_module_frames(module: Module) -> Module:
    """Set `frame` on every instruction of one module, in place."""
    current = GLOBAL_FRAME
    for instr in module.instructions:
        if instr.operation == "function" and instr.arg1:
            current = instr.arg1
        instr.frame = current
    return module


def resolve_frames(program: Program) -> Program:
    for module in program.modules:
        resolve_module_frames(module)
    return program


def frame_names(modules: Iterable[Module]) -> set:
    """Every distinct frame seen across the given (resolved) modules."""
    names = set()
    for module in modules:
        for instr in module.instructions:
            if instr.frame is not None:
                names.add(instr.frame)
    return names
