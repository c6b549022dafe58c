"""
Hack VM Translator
==================
Translates the stack-based VM intermediate language into Hack assembly.
It sits between a high-level compiler (which emits .vm modules) and the
Hack assembler.

Architecture:
    ┌───────────┐    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌────────────┐
    │ .vm text  │───>│  Parser  │───>│  Frames  │───>│  CodeGen  │───>│ Translator │
    │ (modules) │    │ (instrs) │    │ (scopes) │    │ (asm frag)│    │ (asm text) │
    └───────────┘    └──────────┘    └──────────┘    └───────────┘    └────────────┘

    - parser.py:       comment stripping, line -> Instruction with Category
    - frames.py:       per-module enclosing-function resolution
    - codegen.py:      one generator per Category, plus the bootstrap
    - templates.py:    versioned Hack assembly stencils
    - labels.py:       per-module label/return-address generator
    - translator.py:   pipeline, diagnostics, all-or-nothing output
"""

__version__ = "0.4.0"

from .instructions import (
    GLOBAL_FRAME, Category, Instruction, Module, Program, Segment,
)
from .parser import ParseError, clean_source, parse_line, parse_module
from .frames import resolve_frames, resolve_module_frames
from .labels import LabelGenerator, ModuleLabels, qualify_label
from .codegen import CodeGenError, CodeGenerator
from .templates import TEMPLATE_VERSION, TEMPLATES
from .diagnostics import Diagnostic, DiagnosticKind, TranslationError
from .translator import (
    TranslationResult, TranslationState, Translator, translate, translate_program,
)
