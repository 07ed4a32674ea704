from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from lark import Tree

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from formulang.lexer_rd import LexError, Lexer
from formulang.parser_rd import ParseError, parse_source
from formulang.runner import run as run_program
from formulang.runtime import (
    ArityMismatch,
    DivisionByZero,
    FmBool,
    FmBuiltin,
    FmFn,
    FmNumber,
    FormulaRuntimeError,
    TypeMismatch,
    UndefinedFunction,
    UndefinedVariable,
)
from formulang.session import Session

__all__ = [
    "ArityMismatch",
    "DivisionByZero",
    "FmBool",
    "FmBuiltin",
    "FmFn",
    "FmNumber",
    "FormulaRuntimeError",
    "LexError",
    "Lexer",
    "ParseError",
    "Session",
    "TypeMismatch",
    "UndefinedFunction",
    "UndefinedVariable",
    "parse_pipeline",
    "run_program",
    "run_runtime_case",
    "verify_result",
]

RuntimeExpectation = Optional[Tuple[str, object]]


def parse_pipeline(code: str) -> List[Tree]:
    """Parse code into its statement trees."""
    return parse_source(code)


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value compatibility with the expectation."""
    match kind:
        case "number":
            assert isinstance(
                value, FmNumber
            ), f"expected number, got {type(value).__name__}"
            assert (
                abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "bool":
            assert isinstance(
                value, FmBool
            ), f"expected bool, got {type(value).__name__}"
            assert value.value is expected, f"expected {expected}, got {value.value}"
            return
        case "function":
            assert isinstance(
                value, FmFn
            ), f"expected function, got {type(value).__name__}"
            assert value.name == expected, f"expected fn {expected}, got {value.name}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind!r}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source)
        return

    result = run_program(source)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])
