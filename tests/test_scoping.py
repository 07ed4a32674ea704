from __future__ import annotations

import pytest

from tests.support.harness import Session, UndefinedVariable, run_runtime_case

SCENARIOS = [
    pytest.param(
        "A := 1; A := A + 1; A",
        ("number", 2),
        None,
        id="rebind-global",
    ),
    pytest.param(
        "A := 1; G(x) { A := x; A }; G(5); A",
        ("number", 5),
        None,
        id="assign-updates-outer-binding",
    ),
    pytest.param(
        "G(x) { B := x; B }; G(5); B",
        None,
        UndefinedVariable,
        id="new-name-stays-local",
    ),
    pytest.param(
        "A := 1; G(A) { A := A * 10; A }; G(2); A",
        ("number", 1),
        None,
        id="param-shadows-global",
    ),
    pytest.param(
        "Z",
        None,
        UndefinedVariable,
        id="undefined-reference",
    ),
    pytest.param(
        "A := B + 1",
        None,
        UndefinedVariable,
        id="undefined-in-rhs",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_scoping_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_failed_assignment_binds_nothing(session) -> None:
    with pytest.raises(UndefinedVariable):
        session.run("A := B + 1")

    with pytest.raises(UndefinedVariable):
        session.calculate("A")


def test_fndef_inside_body_is_local(session) -> None:
    session.run("Outer() { Inner() { 1 }; Inner() }; Outer()")

    with pytest.raises(UndefinedVariable):
        session.calculate("Inner")


def test_sessions_are_independent() -> None:
    first = Session()
    second = Session()
    first.run("A := 1")

    with pytest.raises(UndefinedVariable):
        second.calculate("A")
