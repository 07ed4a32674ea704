from __future__ import annotations

from typing import Any, Callable, List

from lark import Tree

from ..runtime import Frame, FmFn, FmValue, FormulaRuntimeError, UndefinedFunction, call_value
from ..tree import Node, tree_children, tree_label
from .common import expect_ident_token as _expect_ident_token

EvalFunc = Callable[[Node, Frame], FmValue]

def extract_param_names(params_node: Any) -> List[str]:
    if params_node is None:
        return []

    return [_expect_ident_token(p, "Parameter") for p in tree_children(params_node)]

def eval_fn_def(children: List[Any], frame: Frame) -> FmFn:
    if not children:
        raise FormulaRuntimeError("Malformed function definition")

    name = _expect_ident_token(children[0], "Function name")
    params_node = None
    body_node = None

    for node in children[1:]:
        if params_node is None and tree_label(node) == 'paramlist':
            params_node = node
        elif body_node is None and tree_label(node) == 'body':
            body_node = node

    if body_node is None or not tree_children(body_node):
        raise FormulaRuntimeError(f"Function '{name}' has an empty body")

    params = extract_param_names(params_node)
    fn_value = FmFn(name=name, params=params, body=tree_children(body_node), frame=frame)
    frame.define(name, fn_value)

    return fn_value

def resolve_callee(callee_node: Node, frame: Frame, eval_func: EvalFunc) -> FmValue:
    """Look a callee name up at call time, or evaluate a nested call."""
    if tree_label(callee_node) == 'var':
        name = _expect_ident_token(callee_node.children[0], "Callee")
        owner = frame.find(name)
        if owner is None:
            raise UndefinedFunction(name)
        return owner.vars[name]

    return eval_func(callee_node, frame)

def callee_name(callee_node: Node) -> str:
    if tree_label(callee_node) == 'var':
        return str(callee_node.children[0])

    return "<call result>"

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> FmValue:
    callee_node, arglist = n.children
    callee = resolve_callee(callee_node, frame, eval_func)
    args = [eval_func(arg, frame) for arg in tree_children(arglist)]

    return call_value(callee, args, frame, name=callee_name(callee_node))
