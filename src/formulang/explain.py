"""Explain mode: evaluate a statement fully and record how its result came about.

Unlike the evaluator, both operands of `&&` / `||` are always evaluated so the
trace shows every sub-result. The final value still follows short-circuit
semantics. An operand the short-circuit evaluator would have skipped is marked
`skipped`; errors raised while forcing it, runaway recursion included, are
stored on its trace node instead of propagating. Errors on the path the
evaluator would also take propagate unchanged.

Forcing a skipped operand runs it for real, so calls inside it can still
rebind names.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .evaluator import _maybe_attach_location, eval_node
from .runtime import Frame, FmBool, FmValue, FormulaRuntimeError
from .tree import Node, render_expr, tree_label
from .eval.bind import assign_ident
from .eval.common import expect_ident_token, token_kind
from .eval.expr import apply_unary_operator, combine_logical, compare_values, short_circuits


@dataclass
class TraceNode:
    """One step of an explained evaluation.

    kind is one of 'and', 'or', 'not', 'compare' or 'leaf'. value is None only
    when error is set, which can only happen on skipped branches.
    """

    kind: str
    node: Node
    op: Optional[str] = None
    value: Optional[FmValue] = None
    children: List['TraceNode'] = field(default_factory=list)
    error: Optional[Exception] = None
    skipped: bool = False

    @property
    def source(self) -> str:
        return render_expr(self.node)

    def walk(self) -> Iterator['TraceNode']:
        yield self
        for child in self.children:
            yield from child.walk()

    def pretty(self, indent: str = '  ') -> str:
        """Return an indented text rendering, one node per line."""
        def _pretty(trace: TraceNode, level: int) -> str:
            outcome = f"error: {trace.error}" if trace.error is not None else repr(trace.value)
            flag = " [skipped]" if trace.skipped else ""
            lines = [f"{indent * level}{trace.kind} {trace.source} => {outcome}{flag}\n"]
            for child in trace.children:
                lines.append(_pretty(child, level + 1))
            return ''.join(lines)
        return _pretty(self, 0)


# ---------------- Public API ----------------

def convert(node: Node, frame: Frame) -> Tuple[FmValue, TraceNode]:
    """Evaluate node in explain mode, returning its value and trace tree.

    An assignment is traced through its right-hand side and still binds.
    """
    if tree_label(node) == 'assign':
        name = expect_ident_token(node.children[0], "Assignment target")
        value, trace = convert(node.children[1], frame)
        assign_ident(name, value, frame)
        return value, trace

    trace = _convert(node, frame, skipped=False)
    if trace.value is None:
        raise FormulaRuntimeError(f"No value produced for '{trace.source}'")
    return trace.value, trace


# ---------------- Converter ----------------

@contextmanager
def _capture(trace: TraceNode, skipped: bool) -> Iterator[None]:
    try:
        yield
    except (FormulaRuntimeError, RecursionError) as exc:
        if not skipped:
            if isinstance(exc, FormulaRuntimeError):
                _maybe_attach_location(exc, trace.node)
            raise
        trace.error = exc

def _convert(node: Node, frame: Frame, skipped: bool) -> TraceNode:
    label = tree_label(node)

    if label in ('and', 'or'):
        return _convert_logical(label, node, frame, skipped)
    if label == 'compare':
        return _convert_compare(node, frame, skipped)
    if label == 'unary' and token_kind(node.children[0]) == 'NEG':
        return _convert_not(node, frame, skipped)

    return _leaf(node, frame, skipped)

def _leaf(node: Node, frame: Frame, skipped: bool) -> TraceNode:
    trace = TraceNode('leaf', node, skipped=skipped)
    with _capture(trace, skipped):
        trace.value = eval_node(node, frame)
    return trace

def _convert_compare(node: Node, frame: Frame, skipped: bool) -> TraceNode:
    lhs_node, op, rhs_node = node.children
    trace = TraceNode('compare', node, op=str(op), skipped=skipped)

    lhs = _leaf(lhs_node, frame, skipped)
    rhs = _leaf(rhs_node, frame, skipped)
    trace.children = [lhs, rhs]

    if lhs.error is not None or rhs.error is not None:
        trace.error = lhs.error or rhs.error
        return trace

    with _capture(trace, skipped):
        trace.value = FmBool(compare_values(str(op), lhs.value, rhs.value))
    return trace

def _convert_not(node: Node, frame: Frame, skipped: bool) -> TraceNode:
    op, operand = node.children
    trace = TraceNode('not', node, op=str(op), skipped=skipped)

    inner = _convert(operand, frame, skipped)
    trace.children = [inner]

    if inner.error is not None:
        trace.error = inner.error
        return trace

    with _capture(trace, skipped):
        trace.value = apply_unary_operator(op, inner.value)
    return trace

def _convert_logical(kind: str, node: Node, frame: Frame, skipped: bool) -> TraceNode:
    lhs_node, rhs_node = node.children
    trace = TraceNode(kind, node, op='&&' if kind == 'and' else '||', skipped=skipped)

    lhs = _convert(lhs_node, frame, skipped)
    trace.children.append(lhs)

    decided = False
    if lhs.error is not None:
        trace.error = lhs.error
    else:
        with _capture(trace, skipped):
            decided = short_circuits(kind, lhs.value)

    if trace.error is not None:
        # the result is already lost; still show what the right side does
        trace.children.append(_convert(rhs_node, frame, True))
        return trace

    rhs = _convert(rhs_node, frame, skipped or decided)
    trace.children.append(rhs)

    if decided:
        trace.value = FmBool(kind == 'or')
        return trace

    if rhs.error is not None:
        trace.error = rhs.error
        return trace

    with _capture(trace, skipped):
        trace.value = combine_logical(kind, lhs.value, rhs.value)
    return trace
