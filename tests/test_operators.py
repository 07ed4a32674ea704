from __future__ import annotations

import pytest

from tests.support.harness import (
    DivisionByZero,
    TypeMismatch,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param(
        "A := 2 + 3 * 4",
        ("number", 14),
        None,
        id="precedence-mul-over-add",
    ),
    pytest.param(
        "A := 10 - 3 - 2",
        ("number", 5),
        None,
        id="associativity-sub",
    ),
    pytest.param(
        "A := 16 / 4 / 2",
        ("number", 2),
        None,
        id="associativity-div",
    ),
    pytest.param(
        "(2 + 3) * 4",
        ("number", 20),
        None,
        id="parens-override",
    ),
    pytest.param(
        "7 / 2",
        ("number", 3.5),
        None,
        id="true-division",
    ),
    pytest.param(
        "-3 + 5",
        ("number", 2),
        None,
        id="unary-minus",
    ),
    pytest.param(
        "- -3",
        ("number", 3),
        None,
        id="double-minus",
    ),
    pytest.param(
        "1.5e2 + .5",
        ("number", 150.5),
        None,
        id="float-literals",
    ),
    pytest.param(
        "3 = 3",
        ("bool", True),
        None,
        id="equality",
    ),
    pytest.param(
        "3 != 3",
        ("bool", False),
        None,
        id="inequality",
    ),
    pytest.param(
        "2 < 3",
        ("bool", True),
        None,
        id="lt",
    ),
    pytest.param(
        "3 <= 3",
        ("bool", True),
        None,
        id="lte",
    ),
    pytest.param(
        "2 > 3",
        ("bool", False),
        None,
        id="gt",
    ),
    pytest.param(
        "2 >= 3",
        ("bool", False),
        None,
        id="gte",
    ),
    pytest.param(
        "1 + 1 = 2",
        ("bool", True),
        None,
        id="compare-binds-looser-than-arith",
    ),
    pytest.param(
        "(1 < 2) && (2 < 3)",
        ("bool", True),
        None,
        id="and-true",
    ),
    pytest.param(
        "(1 > 2) || (2 < 3)",
        ("bool", True),
        None,
        id="or-true",
    ),
    pytest.param(
        "1 > 2 || 2 > 3 && 1 / 0 > 0",
        ("bool", False),
        None,
        id="and-binds-tighter-than-or",
    ),
    pytest.param(
        "!(1 > 2)",
        ("bool", True),
        None,
        id="bang-negation",
    ),
    pytest.param(
        "^(1 < 2)",
        ("bool", False),
        None,
        id="caret-negation",
    ),
    pytest.param(
        "X := 0; Y := (X != 0) && (1 / X > 0)",
        ("bool", False),
        None,
        id="and-short-circuit",
    ),
    pytest.param(
        "X := 0; Y := (X = 0) || (1 / X > 0)",
        ("bool", True),
        None,
        id="or-short-circuit",
    ),
    pytest.param(
        "X := 0; (X = 0) && (1 / X > 0)",
        None,
        DivisionByZero,
        id="and-evaluates-right-when-needed",
    ),
    pytest.param(
        "1 / 0",
        None,
        DivisionByZero,
        id="div-by-zero",
    ),
    pytest.param(
        "1 + (1 < 2)",
        None,
        TypeMismatch,
        id="arith-on-bool",
    ),
    pytest.param(
        "(1 < 2) < 3",
        None,
        TypeMismatch,
        id="compare-bool",
    ),
    pytest.param(
        "1 && (1 < 2)",
        None,
        TypeMismatch,
        id="and-on-number",
    ),
    pytest.param(
        "!1",
        None,
        TypeMismatch,
        id="negate-number",
    ),
    pytest.param(
        "-(1 < 2)",
        None,
        TypeMismatch,
        id="minus-bool",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_operator_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
