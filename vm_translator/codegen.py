"""
Hack assembly code generator for the VM translator.

Translates resolved VM instructions into Hack assembly fragments, one
fragment per instruction, using the stencils in templates.py.

Register usage convention:
  - SP   (RAM[0]): address of the next free stack cell
  - LCL  (RAM[1]): base of the current function's local segment
  - ARG  (RAM[2]): base of the current function's argument segment
  - THIS (RAM[3]), THAT (RAM[4]): heap pointers, the `pointer` segment
  - R5..R12: the `temp` segment
  - R13, R14: scratch for pop addressing and the return sequence
  - <module>.<n>: assembler-allocated `static` cells

Calling convention:
  - Caller pushes nArgs arguments, then `call` pushes the return
    address and the caller's LCL, ARG, THIS, THAT (5 words)
  - ARG = SP - nArgs - 5, LCL = SP, jump to callee
  - Callee `function` pushes nLocals zeros
  - `return` writes the return value over argument 0, sets SP just
    above it, restores THAT, THIS, ARG, LCL and jumps to the return
    address

Boolean convention: true is -1 (all ones), false is 0.
"""

from __future__ import annotations
import re
from typing import Callable, Dict, Optional
from .instructions import (
    BASE_REGISTERS, GLOBAL_FRAME, POINTER_REGISTERS, TEMP_BASE, TEMP_SIZE,
    Category, Instruction, Segment,
)
from .diagnostics import Diagnostic, DiagnosticKind
from .labels import (
    BOOTSTRAP_HALT_LABEL, BOOTSTRAP_RETURN_LABEL, ModuleLabels, qualify_label,
)
from .templates import render

DEFAULT_ENTRY_POINT = "Sys.init"
DEFAULT_STACK_BASE = 256

MAX_CONSTANT = 0x7FFF     # largest literal an A-instruction can load
MAX_OFFSET = 0xFF         # offsets are unsigned 8-bit
SAVED_FRAME_WORDS = 5     # return address, LCL, ARG, THIS, THAT

BINARY_OPS = {
    "add": "D+M",
    "sub": "M-D",
    "and": "D&M",
    "or": "D|M",
}

UNARY_OPS = {
    "neg": "-M",
    "not": "!M",
}

COMPARE_JUMPS = {
    "eq": "JEQ",
    "gt": "JGT",
    "lt": "JLT",
}

_DIGITS = re.compile(r"^[0-9]+$")


class CodeGenError(Exception):
    def __init__(self, kind: DiagnosticKind, message: str, instruction: Instruction):
        self.kind = kind
        self.message = message
        self.instruction = instruction
        super().__init__(f"Code generation error at {instruction.location}: {message}")

    def to_diagnostic(self) -> Diagnostic:
        instr = self.instruction
        return Diagnostic(self.kind, instr.module, instr.index, instr.raw, self.message)


class CodeGenerator:
    """Generates Hack assembly from resolved instructions."""

    def __init__(self, entry_point: str = DEFAULT_ENTRY_POINT,
                 stack_base: int = DEFAULT_STACK_BASE,
                 echo_source: bool = True):
        if not 0 <= stack_base <= MAX_CONSTANT:
            raise ValueError(f"Stack base {stack_base} out of range 0..{MAX_CONSTANT}")
        self.entry_point = entry_point
        self.stack_base = stack_base
        self.echo_source = echo_source

        self._generators: Dict[Category, Callable[[Instruction, ModuleLabels], str]] = {
            Category.MEMORY: self._gen_memory,
            Category.ARITHMETIC: self._gen_arithmetic,
            Category.COMPARISON: self._gen_comparison,
            Category.BRANCHING: self._gen_branching,
            Category.FUNCTION: self._gen_function,
        }

    # ── Main entry points ─────────────────────

    def generate(self, instr: Instruction, labels: ModuleLabels) -> str:
        """Return the assembly fragment for one instruction.

        Raises CodeGenError describing the first problem found.
        """
        gen = self._generators.get(instr.category)
        if gen is None:
            raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                               f"Invalid VM instruction '{instr.operation}'", instr)
        code = gen(instr, labels).rstrip()
        if self.echo_source:
            return f"// {instr.raw}\n{code}"
        return code

    def bootstrap(self) -> str:
        """Preamble: set SP, call the entry function, then halt."""
        code = (
            render("init", stack_base=self.stack_base)
            + render("call", return_label=BOOTSTRAP_RETURN_LABEL,
                     arg_offset=SAVED_FRAME_WORDS, name=self.entry_point)
            + render("halt", label=BOOTSTRAP_HALT_LABEL)
        ).rstrip()
        if self.echo_source:
            return f"// bootstrap: SP={self.stack_base}, call {self.entry_point}\n{code}"
        return code

    # ── Argument helpers ──────────────────────

    @staticmethod
    def _require(instr: Instruction, value: Optional[str], what: str) -> str:
        if value is None:
            raise CodeGenError(DiagnosticKind.MISSING_ARGUMENT, f"Missing {what}", instr)
        return value

    @staticmethod
    def _parse_number(instr: Instruction, text: str, limit: Optional[int], what: str) -> int:
        """Parse a non-negative decimal, at most `limit` when given."""
        if not _DIGITS.match(text) or (limit is not None and int(text) > limit):
            raise CodeGenError(DiagnosticKind.INVALID_ARGUMENT,
                               f"Invalid {what} '{text}'", instr)
        return int(text)

    # ── push / pop ────────────────────────────

    def _gen_memory(self, instr: Instruction, labels: ModuleLabels) -> str:
        if instr.operation not in ("push", "pop"):
            raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                               f"Invalid memory operation instruction '{instr.operation}'", instr)
        is_push = instr.operation == "push"

        seg_name = self._require(instr, instr.arg1, "segment argument")
        segment = Segment.lookup(seg_name)
        if segment is None:
            raise CodeGenError(DiagnosticKind.INVALID_SEGMENT,
                               f"Invalid segment argument '{seg_name}'", instr)
        arg2 = self._require(instr, instr.arg2, f"2nd argument to {seg_name} segment")

        if segment is Segment.CONSTANT:
            if not is_push:
                raise CodeGenError(DiagnosticKind.INVALID_SEGMENT,
                                   "Cannot pop into the constant segment", instr)
            value = self._parse_number(instr, arg2, MAX_CONSTANT, "constant")
            return render("push_constant", value=value) + render("push_d")

        offset = self._parse_number(instr, arg2, MAX_OFFSET, f"2nd argument to {seg_name} segment")

        if segment in BASE_REGISTERS:
            base = BASE_REGISTERS[segment]
            if is_push:
                return render("push_segment", offset=offset, base=base) + render("push_d")
            return render("pop_segment", offset=offset, base=base)

        if segment is Segment.STATIC:
            symbol = f"{instr.module}.{offset}"
        elif segment is Segment.TEMP:
            if offset >= TEMP_SIZE:
                raise CodeGenError(DiagnosticKind.INVALID_ARGUMENT,
                                   f"Temp offset {offset} out of range 0..{TEMP_SIZE - 1}", instr)
            symbol = f"R{TEMP_BASE + offset}"
        else:
            if offset >= len(POINTER_REGISTERS):
                raise CodeGenError(DiagnosticKind.INVALID_ARGUMENT,
                                   f"Invalid 2nd argument '{arg2}' to pointer segment", instr)
            symbol = POINTER_REGISTERS[offset]

        if is_push:
            return render("push_direct", symbol=symbol) + render("push_d")
        return render("pop_direct", symbol=symbol)

    # ── add / sub / and / or / neg / not ──────

    def _gen_arithmetic(self, instr: Instruction, labels: ModuleLabels) -> str:
        op = instr.operation
        if op in BINARY_OPS:
            return render("binary", expr=BINARY_OPS[op])
        if op in UNARY_OPS:
            return render("unary", expr=UNARY_OPS[op])
        raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                           f"Invalid arithmetic/logical instruction '{op}'", instr)

    # ── eq / gt / lt ──────────────────────────

    def _gen_comparison(self, instr: Instruction, labels: ModuleLabels) -> str:
        jump = COMPARE_JUMPS.get(instr.operation)
        if jump is None:
            raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                               f"Invalid logical comparison instruction '{instr.operation}'", instr)
        true_label, end_label = labels.comparison()
        return render("compare", jump=jump, true_label=true_label, end_label=end_label)

    # ── label / goto / if-goto ────────────────

    def _gen_branching(self, instr: Instruction, labels: ModuleLabels) -> str:
        text = self._require(instr, instr.arg1, "label name argument")
        name = qualify_label(instr.module, instr.frame or GLOBAL_FRAME, text)
        if instr.operation == "label":
            return render("label", label=name)
        if instr.operation == "goto":
            return render("goto", label=name)
        if instr.operation == "if-goto":
            return render("if_goto", label=name)
        raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                           f"Invalid branching instruction '{instr.operation}'", instr)

    # ── function / call / return ──────────────

    def _gen_function(self, instr: Instruction, labels: ModuleLabels) -> str:
        op = instr.operation

        if op == "function":
            name = self._require(instr, instr.arg1, "function name argument")
            arg2 = self._require(instr, instr.arg2, "n_vars argument for function")
            n_vars = self._parse_number(instr, arg2, None, "n_vars argument for function")
            code = render("function", name=name)
            if n_vars:
                code += (render("function_locals_begin")
                         + render("function_local") * n_vars
                         + render("function_locals_end"))
            return code

        if op == "call":
            name = self._require(instr, instr.arg1, "function name argument to call")
            arg2 = self._require(instr, instr.arg2, "n_args argument for function call")
            n_args = self._parse_number(instr, arg2, None, "n_args argument for function call")
            return_label = labels.return_address(instr.frame or GLOBAL_FRAME)
            return render("call", return_label=return_label,
                          arg_offset=n_args + SAVED_FRAME_WORDS, name=name)

        if op == "return":
            return render("return")

        raise CodeGenError(DiagnosticKind.UNKNOWN_OPERATION,
                           f"Invalid function instruction '{op}'", instr)
