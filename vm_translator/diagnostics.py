"""
Diagnostics reported by the Hack VM translator.

A Diagnostic pins one problem to one source line: module, in-module
index, the raw line text and a message. Translation collects every
diagnostic in the program before giving up, and produces no output at
all when any are present.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import List, Sequence


class DiagnosticKind(enum.Enum):
    MALFORMED_INSTRUCTION = "MalformedInstruction"
    UNKNOWN_OPERATION = "UnknownOperation"
    MISSING_ARGUMENT = "MissingArgument"
    INVALID_ARGUMENT = "InvalidArgument"
    INVALID_SEGMENT = "InvalidSegment"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    module: str
    index: int
    raw: str
    message: str

    def __str__(self) -> str:
        return f"{self.module}#{self.index} '{self.raw}': {self.kind.value}: {self.message}"


class TranslationError(Exception):
    """Raised by translate() when the program produced diagnostics."""

    def __init__(self, diagnostics: Sequence[Diagnostic]):
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        count = len(self.diagnostics)
        lines = "\n".join(str(d) for d in self.diagnostics)
        super().__init__(f"{count} error{'s' if count != 1 else ''}:\n{lines}")
