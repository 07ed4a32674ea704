from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Dict, List

from .runtime import (
    Frame,
    FmValue,
    FormulaRuntimeError,
)
from .tree import Node, is_token, node_position

from .eval.bind import eval_assign
from .eval.common import expect_ident_token, token_number
from .eval.expr import eval_arith, eval_compare, eval_logical, eval_unary
from .eval.fn import eval_call, eval_fn_def


def _maybe_attach_location(exc: FormulaRuntimeError, node: Node) -> None:
    if getattr(exc, "_augmented", False):
        return

    line, col = node_position(node)
    if line is None:
        return

    exc.fm_meta = SimpleNamespace(line=line, column=col)
    exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

def eval_program(stmts: List[Node], frame: Frame) -> List[FmValue]:
    """Evaluate statements in order; each one's bindings are visible to the next."""
    return [eval_node(stmt, frame) for stmt in stmts]

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> FmValue:
    try:
        return _eval_node_inner(n, frame)
    except FormulaRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> FmValue:
    if is_token(n):
        raise FormulaRuntimeError(f"Cannot evaluate bare token {n!r}")

    d = n.data
    handler = _NODE_DISPATCH.get(d)
    if handler is not None:
        return handler(n, frame)

    raise FormulaRuntimeError(f"Unknown node type: {d}")

_NODE_DISPATCH: Dict[str, Callable[[Node, Frame], FmValue]] = {
    'const': lambda n, frame: token_number(n.children[0]),
    'var': lambda n, frame: frame.get(expect_ident_token(n.children[0], "Variable")),
    'unary': lambda n, frame: eval_unary(n.children[0], n.children[1], frame, eval_node),
    'arith': lambda n, frame: eval_arith(n.children, frame, eval_node),
    'compare': lambda n, frame: eval_compare(n.children, frame, eval_node),
    'and': lambda n, frame: eval_logical('and', n.children, frame, eval_node),
    'or': lambda n, frame: eval_logical('or', n.children, frame, eval_node),
    'assign': lambda n, frame: eval_assign(n.children, frame, eval_node),
    'fndef': lambda n, frame: eval_fn_def(n.children, frame),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
}
