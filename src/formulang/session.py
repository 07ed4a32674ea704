"""Session: the long-lived owner of a global scope.

Typical use::

    session = new()
    session.evaluate_all(session.parse("A := 1; B := A + 1"))
    session.calculate("B")            # FmNumber(2)
    session.run("B * 10").value       # FmNumber(20)

Parsing never touches the environment; bindings happen when statements are
evaluated. A runtime error stops the rest of a batch but keeps the bindings
made before it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from lark import Tree

from .evaluator import eval_program
from .explain import TraceNode, convert
from .parser_rd import parse_source
from .runtime import BuiltinFn, CallRecord, Frame, FmValue, register_builtin


@dataclass
class CalcResult:
    """Value of the last statement plus the calls made while computing it."""

    value: Optional[FmValue]
    values: List[FmValue] = field(default_factory=list)
    calls: List[CallRecord] = field(default_factory=list)


class Session:
    def __init__(self) -> None:
        self.frame = Frame()

    # ---------------- Core API ----------------

    def parse(self, text: str) -> List[Tree]:
        """Parse text into statements; raises LexError or ParseError."""
        return parse_source(text)

    def evaluate_all(self, nodes: List[Tree]) -> List[FmValue]:
        """Evaluate statements against the global scope, in order."""
        return eval_program(nodes, self.frame)

    def calculate(self, name: str) -> FmValue:
        """Current global binding of name; raises UndefinedVariable."""
        return self.frame.get(name)

    def convert(self, node: Tree, frame: Optional[Frame] = None) -> Tuple[FmValue, TraceNode]:
        """Explain-mode evaluation of a single statement."""
        return convert(node, frame if frame is not None else self.frame)

    def convert_from(self, text: str) -> List[Tuple[FmValue, TraceNode]]:
        """Parse text and explain each statement in order."""
        return [self.convert(node) for node in self.parse(text)]

    # ---------------- Conveniences ----------------

    def run(self, text: str) -> CalcResult:
        """Parse and evaluate text, collecting the calls it makes."""
        nodes = self.parse(text)
        root = self.frame
        outer = root.calls
        calls: List[CallRecord] = []

        root.calls = calls
        try:
            values = self.evaluate_all(nodes)
        finally:
            root.calls = outer

        return CalcResult(value=values[-1] if values else None, values=values, calls=calls)

    def register_builtin(self, name: str, fn: BuiltinFn, arity: Optional[int] = None) -> None:
        """Expose a Python callable to scripts as `name(...)`.

        fn receives the calling frame and the evaluated arguments and must
        return a formula value.
        """
        register_builtin(self.frame, name, arity=arity)(fn)

    def history(self, name: str) -> List[FmValue]:
        """Every value bound to a global name, oldest first."""
        return list(self.frame.history.get(name, []))

    def reset(self) -> None:
        """Drop every global binding, built-ins included."""
        self.frame = Frame()


def new() -> Session:
    return Session()
