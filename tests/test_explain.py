from __future__ import annotations

import pytest

from tests.support.harness import DivisionByZero, FmBool, FmNumber, Session, UndefinedVariable
from formulang.explain import convert


def _explain(session, source: str, setup: str = ""):
    if setup:
        session.run(setup)
    *_, last = session.convert_from(source)
    return last


def test_and_root_records_both_operands(session) -> None:
    value, trace = _explain(session, "Y := (X != 0) && (1 / X > 0)", setup="X := 2")

    assert value == FmBool(True)
    assert trace.kind == "and"
    assert len(trace.children) == 2
    assert [child.kind for child in trace.children] == ["compare", "compare"]
    assert all(child.value == FmBool(True) for child in trace.children)


def test_skipped_operand_is_still_traced(session) -> None:
    value, trace = _explain(session, "(X = 2) || (X > 100)", setup="X := 2")

    assert value == FmBool(True)
    lhs, rhs = trace.children
    assert not lhs.skipped
    assert rhs.skipped
    assert rhs.value == FmBool(False)


def test_error_in_skipped_operand_is_recorded(session) -> None:
    value, trace = _explain(session, "(X != 0) && (1 / X > 0)", setup="X := 0")

    assert value == FmBool(False)
    rhs = trace.children[1]
    assert rhs.skipped
    assert isinstance(rhs.error, DivisionByZero)
    assert rhs.value is None


def test_error_on_taken_path_propagates(session) -> None:
    session.run("X := 0")

    with pytest.raises(DivisionByZero):
        session.convert_from("(X = 0) && (1 / X > 0)")


def test_explain_assign_binds(session) -> None:
    value, trace = _explain(session, "Y := (X != 0) && (1 / X > 0)", setup="X := 4")

    assert session.calculate("Y") == value
    assert session.history("Y") == [FmBool(True)]


def test_not_node_wraps_operand(session) -> None:
    value, trace = _explain(session, "!(A > 1) || ^(A < 0)", setup="A := 0")

    assert value == FmBool(True)
    assert trace.kind == "or"
    assert [child.kind for child in trace.children] == ["not", "not"]
    assert trace.children[0].children[0].kind == "compare"


def test_non_boolean_statement_is_a_leaf(session) -> None:
    value, trace = _explain(session, "1 + 2")

    assert value == FmNumber(3)
    assert trace.kind == "leaf"
    assert trace.children == []


def test_matches_short_circuit_value(session) -> None:
    source = "(A > 1) || (B < 1) && (A = B)"
    setup = "A := 0; B := 0"

    reference = Session()
    reference.run(setup)
    expected = reference.run(source).value

    value, _ = _explain(session, source, setup=setup)
    assert value == expected


def test_pretty_marks_skipped_branches(session) -> None:
    _, trace = _explain(session, "(X != 0) && (1 / X > 0)", setup="X := 0")
    text = trace.pretty()

    lines = text.splitlines()
    assert lines[0].startswith("and (X != 0) && ((1 / X) > 0) => false")
    assert "[skipped]" in lines[-1]
    assert "error: Division by zero" in text


def test_walk_visits_every_node(session) -> None:
    _, trace = _explain(session, "(1 < 2) && (2 < 3)")
    kinds = [node.kind for node in trace.walk()]

    assert kinds == ["and", "compare", "leaf", "leaf", "compare", "leaf", "leaf"]


def test_convert_with_explicit_frame(session) -> None:
    session.run("A := 3")
    (node,) = session.parse("A > 2")

    value, trace = convert(node, session.frame)
    assert value == FmBool(True)
    assert trace.source == "A > 2"


def test_undefined_in_taken_branch_raises(session) -> None:
    with pytest.raises(UndefinedVariable):
        session.convert_from("Q > 1")


def test_runaway_recursion_in_skipped_operand_is_recorded(session) -> None:
    value, trace = _explain(session, "(X = 0) || (R(1) > 0)", setup="R(x) { R(x) }; X := 0")

    assert value == FmBool(True)
    rhs = trace.children[1]
    assert rhs.skipped
    assert isinstance(rhs.error, RecursionError)


def test_runaway_recursion_on_taken_path_propagates(session) -> None:
    session.run("R(x) { R(x) }; X := 1")

    with pytest.raises(RecursionError):
        session.convert_from("(X = 0) || (R(1) > 0)")


def test_explain_keeps_no_call_log(session) -> None:
    session.run("F(x) { x > 0 }")
    session.convert_from("F(1) && F(2)")

    assert session.frame.calls is None
