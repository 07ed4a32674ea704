from __future__ import annotations

from typing import Any, Callable, List

from ..runtime import Frame, FmValue
from ..tree import Node
from .common import expect_ident_token

EvalFunc = Callable[[Node, Frame], FmValue]

def assign_ident(name: str, value: FmValue, frame: Frame) -> FmValue:
    frame.assign(name, value)
    return value

def eval_assign(children: List[Any], frame: Frame, eval_func: EvalFunc) -> FmValue:
    name_node, value_node = children
    name = expect_ident_token(name_node, "Assignment target")
    value = eval_func(value_node, frame)
    return assign_ident(name, value, frame)
