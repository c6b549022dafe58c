"""
Translation orchestrator for the Hack VM translator.

Runs the whole program through the pipeline:

    PARSED ─> FRAME_RESOLVED ─> GENERATED ─┬─> SUCCEEDED (assembly text)
                                           └─> FAILED    (diagnostics)

Every instruction is attempted even after an error, so one run reports
every problem in the program. Output is all-or-nothing: any diagnostic
means no assembly is returned.
"""

from __future__ import annotations
import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .instructions import Module, Program
from .parser import ParseError, clean_source, parse_line
from .frames import frame_names, resolve_frames
from .labels import LabelGenerator
from .codegen import CodeGenError, CodeGenerator, DEFAULT_ENTRY_POINT, DEFAULT_STACK_BASE
from .diagnostics import Diagnostic, DiagnosticKind, TranslationError

log = logging.getLogger(__name__)


class TranslationState(enum.Enum):
    PENDING = "pending"
    PARSED = "parsed"
    FRAME_RESOLVED = "frame_resolved"
    GENERATED = "generated"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TranslationResult:
    output: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.output is not None and not self.diagnostics


# (fragments, diagnostics) for one module
_ModuleOutcome = Tuple[List[str], List[Diagnostic]]


class Translator:
    """Translates one program (a list of (module name, source) pairs).

    Usage:
        t = Translator(bootstrap=False)
        result = t.run([("Main", "push constant 7\\npush constant 8\\nadd")])
        if result.ok:
            print(result.output)
    """

    def __init__(self, bootstrap: bool = True,
                 entry_point: str = DEFAULT_ENTRY_POINT,
                 stack_base: int = DEFAULT_STACK_BASE,
                 echo_source: bool = True,
                 workers: int = 1):
        self.bootstrap = bootstrap
        self.workers = max(1, workers)
        self.codegen = CodeGenerator(entry_point=entry_point,
                                     stack_base=stack_base,
                                     echo_source=echo_source)
        self.state = TranslationState.PENDING
        self.program = Program()
        self._labels = LabelGenerator()

    # ── Pipeline ──────────────────────────────

    def run(self, sources: Iterable[Tuple[str, str]]) -> TranslationResult:
        self.state = TranslationState.PENDING
        self.program = Program()
        self._labels = LabelGenerator()

        diagnostics = self._parse(sources)
        self._set_state(TranslationState.PARSED)

        resolve_frames(self.program)
        self._set_state(TranslationState.FRAME_RESOLVED)
        log.debug("Resolved %d frames across %d modules",
                  len(frame_names(self.program.modules)), len(self.program.modules))

        fragments, gen_diagnostics = self._generate()
        self._set_state(TranslationState.GENERATED)

        diagnostics = _in_program_order(diagnostics + gen_diagnostics,
                                        self.program.module_names())
        if diagnostics:
            self._set_state(TranslationState.FAILED)
            log.debug("Translation failed with %d diagnostics", len(diagnostics))
            return TranslationResult(diagnostics=diagnostics)

        if self.bootstrap:
            fragments.insert(0, self.codegen.bootstrap())
        self._set_state(TranslationState.SUCCEEDED)
        return TranslationResult(output="\n\n".join(fragments) + "\n")

    def _set_state(self, state: TranslationState):
        log.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    def _parse(self, sources: Iterable[Tuple[str, str]]) -> List[Diagnostic]:
        diagnostics = []
        for name, source in sources:
            module = Module(name=name)
            for i, line in enumerate(clean_source(source)):
                try:
                    module.instructions.append(parse_line(line, i, name))
                except ParseError as e:
                    diagnostics.append(Diagnostic(
                        DiagnosticKind.MALFORMED_INSTRUCTION,
                        e.module, e.index, e.raw, "Unable to parse empty line"))
            self.program.modules.append(module)
            log.debug("Parsed module %s: %d instructions", name, len(module))
        return diagnostics

    def _generate(self) -> _ModuleOutcome:
        modules = self.program.modules
        names = self.program.module_names()
        # Modules sharing a name share label counters, so they stay on one thread
        if self.workers > 1 and len(set(names)) == len(names):
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(self._generate_module, modules))
        else:
            outcomes = [self._generate_module(m) for m in modules]

        fragments: List[str] = []
        diagnostics: List[Diagnostic] = []
        for module_fragments, module_diagnostics in outcomes:
            fragments.extend(module_fragments)
            diagnostics.extend(module_diagnostics)
        return fragments, diagnostics

    def _generate_module(self, module: Module) -> _ModuleOutcome:
        labels = self._labels.for_module(module.name)
        fragments = []
        diagnostics = []
        for instr in module.instructions:
            try:
                fragments.append(self.codegen.generate(instr, labels))
            except CodeGenError as e:
                diagnostics.append(e.to_diagnostic())
        return fragments, diagnostics


def _in_program_order(diagnostics: Sequence[Diagnostic],
                      module_names: Sequence[str]) -> List[Diagnostic]:
    """Parse and generation diagnostics merged by (module position, index)."""
    order = {}
    for name in module_names:
        order.setdefault(name, len(order))
    return sorted(diagnostics, key=lambda d: (order[d.module], d.index))


def translate_program(sources: Iterable[Tuple[str, str]], **options) -> TranslationResult:
    """Translate (module name, source) pairs; see Translator for options."""
    return Translator(**options).run(sources)


def translate(sources: Iterable[Tuple[str, str]], **options) -> str:
    """Translate and return the assembly text.

    Raises TranslationError carrying every diagnostic on failure.
    """
    result = translate_program(sources, **options)
    if not result.ok:
        raise TranslationError(result.diagnostics)
    return result.output
