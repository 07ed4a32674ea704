from __future__ import annotations

from typing import Callable, List

from lark import Token

from ..runtime import (
    Frame,
    FmBool,
    FmNumber,
    FmValue,
    DivisionByZero,
    FormulaRuntimeError,
)
from ..tree import Node
from .common import require_bool, require_number

EvalFunc = Callable[[Node, Frame], FmValue]

def eval_unary(op: Token, rhs_node: Node, frame: Frame, eval_func: EvalFunc) -> FmValue:
    rhs = eval_func(rhs_node, frame)
    return apply_unary_operator(op, rhs)

def apply_unary_operator(op: Token, rhs: FmValue) -> FmValue:
    match op.type:
        case 'NEG':
            return FmBool(not require_bool(rhs, f"'{op}'"))
        case 'MINUS':
            return FmNumber(-require_number(rhs, "unary '-'"))
        case _:
            raise FormulaRuntimeError(f"Unsupported unary op {op!r}")

def eval_arith(children: List[Node], frame: Frame, eval_func: EvalFunc) -> FmValue:
    lhs_node, op, rhs_node = children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)
    return apply_binary_operator(str(op), lhs, rhs)

def apply_binary_operator(op: str, lhs: FmValue, rhs: FmValue) -> FmValue:
    l = require_number(lhs, f"'{op}'")
    r = require_number(rhs, f"'{op}'")

    match op:
        case '+':
            return FmNumber(l + r)
        case '-':
            return FmNumber(l - r)
        case '*':
            return FmNumber(l * r)
        case '/':
            if r == 0:
                raise DivisionByZero()
            return FmNumber(l / r)
    raise FormulaRuntimeError(f"Unknown operator {op}")

def eval_compare(children: List[Node], frame: Frame, eval_func: EvalFunc) -> FmValue:
    lhs_node, op, rhs_node = children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)
    return FmBool(compare_values(str(op), lhs, rhs))

def compare_values(op: str, lhs: FmValue, rhs: FmValue) -> bool:
    l = require_number(lhs, f"'{op}'")
    r = require_number(rhs, f"'{op}'")

    match op:
        case '=':
            return l == r
        case '!=':
            return l != r
        case '<':
            return l < r
        case '<=':
            return l <= r
        case '>':
            return l > r
        case '>=':
            return l >= r
        case _:
            raise FormulaRuntimeError(f"Unknown comparator {op}")

def eval_logical(kind: str, children: List[Node], frame: Frame, eval_func: EvalFunc) -> FmValue:
    """Short-circuit && / ||: the right operand runs only when it decides the result."""
    lhs_node, rhs_node = children
    op = '&&' if kind == 'and' else '||'

    lhs = require_bool(eval_func(lhs_node, frame), f"left side of '{op}'")

    if kind == 'and' and not lhs:
        return FmBool(False)
    if kind == 'or' and lhs:
        return FmBool(True)

    rhs = require_bool(eval_func(rhs_node, frame), f"right side of '{op}'")
    return FmBool(rhs)

def combine_logical(kind: str, lhs: FmValue, rhs: FmValue) -> FmValue:
    """Non-short-circuit counterpart of eval_logical over evaluated operands."""
    op = '&&' if kind == 'and' else '||'
    l = require_bool(lhs, f"left side of '{op}'")
    r = require_bool(rhs, f"right side of '{op}'")
    return FmBool(l and r) if kind == 'and' else FmBool(l or r)

def short_circuits(kind: str, lhs: FmValue) -> bool:
    """True when lhs alone decides a logical node of this kind."""
    op = '&&' if kind == 'and' else '||'
    l = require_bool(lhs, f"left side of '{op}'")
    return (kind == 'and' and not l) or (kind == 'or' and l)
