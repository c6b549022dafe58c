"""
Label generation for the Hack VM translator.

Comparisons and call sites expand to code that needs its own labels.
A LabelGenerator hands out those names. It is partitioned by module:
each module gets a ModuleLabels object with private counters, and every
generated name carries the module (or a function name, which is
globally unique), so modules can be generated on separate threads
without sharing a counter.

Name shapes:
    <module>$$cmp.<n>.true / <module>$$cmp.<n>.end comparison
    <function>$$ret.<n>                             call inside a function
    <module>$$global.ret.<n>                        call before any function
    <module>.<frame>$<label>                        VM label / goto / if-goto
    bootstrap$ret                                   bootstrap call

Generated names use a `$$` separator. VM identifiers never contain `$`,
so a qualified VM label cannot contain `$$`.
"""

from __future__ import annotations
import threading
from typing import Dict, Tuple
from .instructions import GLOBAL_FRAME

BOOTSTRAP_RETURN_LABEL = "bootstrap$ret"
BOOTSTRAP_HALT_LABEL = "bootstrap$halt"


def qualify_label(module: str, frame: str, label: str) -> str:
    """Qualified name of a VM label in (module, frame)."""
    return f"{module}.{frame}${label}"


class ModuleLabels:
    """Label counters owned by one module."""

    def __init__(self, module: str):
        self.module = module
        self._comparisons = 0
        self._calls: Dict[str, int] = {}

    def comparison(self) -> Tuple[str, str]:
        """Return a fresh (true_label, end_label) pair."""
        n = self._comparisons
        self._comparisons += 1
        prefix = f"{self.module}$$cmp.{n}"
        return f"{prefix}.true", f"{prefix}.end"

    def return_address(self, frame: str) -> str:
        """Return a fresh return-address label for a call site in `frame`."""
        n = self._calls.get(frame, 0)
        self._calls[frame] = n + 1
        if frame == GLOBAL_FRAME:
            return f"{self.module}$$global.ret.{n}"
        return f"{frame}$$ret.{n}"


class LabelGenerator:
    """Hands out one ModuleLabels per module name."""

    def __init__(self):
        self._modules: Dict[str, ModuleLabels] = {}
        self._lock = threading.Lock()

    def for_module(self, module: str) -> ModuleLabels:
        with self._lock:
            labels = self._modules.get(module)
            if labels is None:
                labels = ModuleLabels(module)
                self._modules[module] = labels
            return labels
