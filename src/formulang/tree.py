"""Shared helpers for working with the lark Tree/Token nodes of the AST.

Node labels produced by the parser:

    const    [NUMBER]
    var      [IDENT]
    unary    [NEG | MINUS, operand]
    arith    [left, PLUS | MINUS | STAR | SLASH, right]
    compare  [left, GT | GTE | LT | LTE | NEQ | EQ, right]
    and      [left, right]
    or       [left, right]
    assign   [IDENT, expr]
    fndef    [IDENT, paramlist[IDENT...], body[stmt...]]
    call     [var | call, arglist[expr...]]
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from lark import Token, Tree
from typing_extensions import TypeAlias, TypeGuard

Node: TypeAlias = Tree | Token


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def child_by_label(node: Node, label: str) -> Optional[Tree]:
    for ch in tree_children(node):
        if tree_label(ch) == label:
            return ch

    return None

def iter_tokens(node: Node) -> Iterator[Token]:
    """Yield the tokens of a subtree in source order."""
    if is_token(node):
        yield node
        return

    for child in tree_children(node):
        yield from iter_tokens(child)

def node_position(node: Node) -> Tuple[Optional[int], Optional[int]]:
    """Return (line, column) of the first positioned token under node."""
    for tok in iter_tokens(node):
        line = getattr(tok, 'line', None)
        if line is not None:
            return line, getattr(tok, 'column', None)

    return None, None

def fn_name(node: Tree) -> str:
    """Name of an fndef/assign node."""
    return str(node.children[0])

def fn_params(node: Tree) -> List[str]:
    params = child_by_label(node, 'paramlist')
    return [str(tok) for tok in tree_children(params)]

def fn_body(node: Tree) -> List[Node]:
    return tree_children(child_by_label(node, 'body'))

def call_args(node: Tree) -> List[Node]:
    return tree_children(child_by_label(node, 'arglist'))

def render_expr(node: Node) -> str:
    """Render an AST node back to source-like text."""
    if is_token(node):
        return str(node.value)

    label = tree_label(node)
    kids = tree_children(node)

    match label:
        case 'const' | 'var':
            return str(kids[0])
        case 'unary':
            op, operand = kids
            return f"{op}{_wrap(operand)}"
        case 'arith' | 'compare':
            lhs, op, rhs = kids
            return f"{_wrap(lhs)} {op} {_wrap(rhs)}"
        case 'and':
            return " && ".join(_wrap(k) for k in kids)
        case 'or':
            return " || ".join(_wrap(k) for k in kids)
        case 'assign':
            return f"{kids[0]} := {render_expr(kids[1])}"
        case 'fndef':
            params = ", ".join(fn_params(node))
            body = "; ".join(render_expr(stmt) for stmt in fn_body(node))
            return f"{fn_name(node)}({params}) {{ {body} }}"
        case 'call':
            args = ", ".join(render_expr(arg) for arg in call_args(node))
            return f"{render_expr(kids[0])}({args})"

    return " ".join(render_expr(k) for k in kids)

def _wrap(node: Node) -> str:
    text = render_expr(node)
    if tree_label(node) in {'arith', 'compare', 'and', 'or'}:
        return f"({text})"
    return text
