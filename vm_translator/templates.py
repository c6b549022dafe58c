"""
Hack assembly stencils used by the code generators.

Every fragment the translator emits is one of these templates filled in
with `str.format` fields. Keeping them in one table means the generated
code can be changed without touching any control flow in codegen.py.
Bump TEMPLATE_VERSION whenever the text of a template changes.

Scratch registers: R13 holds an effective address (pop) or the callee
frame pointer (return), R14 holds the return address during `return`.
"""

from __future__ import annotations
from typing import Dict

TEMPLATE_VERSION = "1.1"


TEMPLATES: Dict[str, str] = {
    # ── Stack access ──
    # Leaves the value to push in D
    "push_constant": (
        "@{value}\n"
        "D=A\n"
    ),
    "push_segment": (
        "@{offset}\n"
        "D=A\n"
        "@{base}\n"
        "A=D+M\n"
        "D=M\n"
    ),
    "push_direct": (
        "@{symbol}\n"
        "D=M\n"
    ),
    # Pushes D
    "push_d": (
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
    ),
    "pop_segment": (
        "@{offset}\n"
        "D=A\n"
        "@{base}\n"
        "D=D+M\n"
        "@R13\n"
        "M=D\n"
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "@R13\n"
        "A=M\n"
        "M=D\n"
    ),
    "pop_direct": (
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "@{symbol}\n"
        "M=D\n"
    ),

    # ── Arithmetic / logic ──
    # D = top, A -> topMinus1, SP already decremented
    "binary": (
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "A=A-1\n"
        "M={expr}\n"
    ),
    "unary": (
        "@SP\n"
        "A=M-1\n"
        "M={expr}\n"
    ),
    "compare": (
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "A=A-1\n"
        "D=M-D\n"
        "@{true_label}\n"
        "D;{jump}\n"
        "@SP\n"
        "A=M-1\n"
        "M=0\n"
        "@{end_label}\n"
        "0;JMP\n"
        "({true_label})\n"
        "@SP\n"
        "A=M-1\n"
        "M=-1\n"
        "({end_label})\n"
    ),

    # ── Branching ──
    "label": (
        "({label})\n"
    ),
    "goto": (
        "@{label}\n"
        "0;JMP\n"
    ),
    "if_goto": (
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "@{label}\n"
        "D;JNE\n"
    ),

    # ── Functions ──
    "function": (
        "({name})\n"
    ),
    # Repeated once per local, after "function"
    "function_local": (
        "M=0\n"
        "A=A+1\n"
    ),
    "function_locals_begin": (
        "@SP\n"
        "A=M\n"
    ),
    "function_locals_end": (
        "D=A\n"
        "@SP\n"
        "M=D\n"
    ),
    "call": (
        "@{return_label}\n"
        "D=A\n"
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
        "@LCL\n"
        "D=M\n"
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
        "@ARG\n"
        "D=M\n"
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
        "@THIS\n"
        "D=M\n"
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
        "@THAT\n"
        "D=M\n"
        "@SP\n"
        "A=M\n"
        "M=D\n"
        "@SP\n"
        "M=M+1\n"
        "@SP\n"
        "D=M\n"
        "@{arg_offset}\n"
        "D=D-A\n"
        "@ARG\n"
        "M=D\n"
        "@SP\n"
        "D=M\n"
        "@LCL\n"
        "M=D\n"
        "@{name}\n"
        "0;JMP\n"
        "({return_label})\n"
    ),
    "return": (
        "@LCL\n"
        "D=M\n"
        "@R13\n"
        "M=D\n"
        "@5\n"
        "A=D-A\n"
        "D=M\n"
        "@R14\n"
        "M=D\n"
        "@SP\n"
        "AM=M-1\n"
        "D=M\n"
        "@ARG\n"
        "A=M\n"
        "M=D\n"
        "@ARG\n"
        "D=M+1\n"
        "@SP\n"
        "M=D\n"
        "@R13\n"
        "AM=M-1\n"
        "D=M\n"
        "@THAT\n"
        "M=D\n"
        "@R13\n"
        "AM=M-1\n"
        "D=M\n"
        "@THIS\n"
        "M=D\n"
        "@R13\n"
        "AM=M-1\n"
        "D=M\n"
        "@ARG\n"
        "M=D\n"
        "@R13\n"
        "AM=M-1\n"
        "D=M\n"
        "@LCL\n"
        "M=D\n"
        "@R14\n"
        "A=M\n"
        "0;JMP\n"
    ),

    # ── Program start ──
    "init": (
        "@{stack_base}\n"
        "D=A\n"
        "@SP\n"
        "M=D\n"
    ),
    "halt": (
        "({label})\n"
        "@{label}\n"
        "0;JMP\n"
    ),
}


def render(template: str, **fields) -> str:
    """Fill in a named template."""
    return TEMPLATES[template].format(**fields)
