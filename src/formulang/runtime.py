from __future__ import annotations

from typing import Callable, List, Optional

from .tree import Node
from .types import (
    FmNumber, FmBool, FmFn, FmBuiltin, FmValue, BuiltinFn, CallRecord, Frame,
    FormulaRuntimeError, UndefinedVariable, UndefinedFunction, ArityMismatch,
    TypeMismatch, DivisionByZero,
    is_fm_value,
)

__all__ = [
    "FmNumber", "FmBool", "FmFn", "FmBuiltin", "FmValue", "BuiltinFn", "CallRecord", "Frame",
    "FormulaRuntimeError", "UndefinedVariable", "UndefinedFunction", "ArityMismatch",
    "TypeMismatch", "DivisionByZero",
    "is_fm_value",
    "register_builtin", "call_value", "call_fmfn", "eval_body",
]

def register_builtin(frame: Frame, name: str, *, arity: Optional[int] = None):
    """Decorator binding a Python callable into frame as a script function."""
    def dec(fn: BuiltinFn):
        frame.define(name, FmBuiltin(name=name, fn=fn, arity=arity))
        return fn

    return dec

def call_value(callee: FmValue, args: List[FmValue], caller_frame: Frame, name: str = "<anonymous>") -> FmValue:
    match callee:
        case FmFn():
            return call_fmfn(callee, args, caller_frame)
        case FmBuiltin(fn=fn, arity=arity):
            if arity is not None and len(args) != arity:
                raise ArityMismatch(callee.name, arity, len(args))

            caller_frame.record_call("builtin", callee.name, args)
            result = fn(caller_frame, args)

            if not is_fm_value(result):
                raise TypeMismatch(f"Builtin '{callee.name}' returned {type(result).__name__}, not a formula value")
            return result
        case _:
            raise TypeMismatch(f"'{name}' is not a function; got {callee!r}")

def call_fmfn(fn: FmFn, positional: List[FmValue], caller_frame: Frame) -> FmValue:
    """
    Lexical call semantics:
    - arity must match len(fn.params)
    - the callee frame's parent is the closure frame, not the caller's
    - body statements run in order; the last value is the result
    """
    from .evaluator import eval_node  # local import to avoid cycle

    if len(positional) != len(fn.params):
        raise ArityMismatch(fn.name, len(fn.params), len(positional))

    caller_frame.record_call("call", fn.name, positional)
    callee_frame = Frame(parent=fn.frame)

    for name, val in zip(fn.params, positional):
        callee_frame.define(name, val)

    return eval_body(fn.body, callee_frame, eval_node)

def eval_body(stmts: List[Node], frame: Frame, eval_func: Callable[[Node, Frame], FmValue]) -> FmValue:
    result: Optional[FmValue] = None

    for stmt in stmts:
        result = eval_func(stmt, frame)

    if result is None:
        raise FormulaRuntimeError("Function body is empty")
    return result
