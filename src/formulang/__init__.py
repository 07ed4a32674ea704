"""A small formula language: variables, functions, short-circuit logic and an explain mode."""

from .explain import TraceNode, convert
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_source
from .runtime import (
    ArityMismatch,
    CallRecord,
    DivisionByZero,
    FmBool,
    FmBuiltin,
    FmFn,
    FmNumber,
    FmValue,
    FormulaRuntimeError,
    Frame,
    TypeMismatch,
    UndefinedFunction,
    UndefinedVariable,
)
from .session import CalcResult, Session, new

__all__ = [
    "ArityMismatch",
    "CalcResult",
    "CallRecord",
    "DivisionByZero",
    "FmBool",
    "FmBuiltin",
    "FmFn",
    "FmNumber",
    "FmValue",
    "FormulaRuntimeError",
    "Frame",
    "LexError",
    "ParseError",
    "Session",
    "TraceNode",
    "TypeMismatch",
    "UndefinedFunction",
    "UndefinedVariable",
    "convert",
    "new",
    "parse_source",
    "tokenize",
]
