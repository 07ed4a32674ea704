from __future__ import annotations

from typing import Any, Optional

from lark import Token

from ..runtime import FmBool, FmNumber, FmValue, FormulaRuntimeError, TypeMismatch
from ..tree import is_token

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise FormulaRuntimeError(f"{context} must be an identifier")

def token_number(node: Any) -> FmNumber:
    if token_kind(node) != 'NUMBER':
        raise FormulaRuntimeError(f"Expected a number literal, got {node!r}")

    return FmNumber(float(node.value))

def require_number(value: FmValue, context: str) -> float:
    if isinstance(value, FmNumber):
        return value.value

    raise TypeMismatch(f"{context} expects a number, got {value!r}")

def require_bool(value: FmValue, context: str) -> bool:
    if isinstance(value, FmBool):
        return value.value

    raise TypeMismatch(f"{context} expects a boolean, got {value!r}")
