from __future__ import annotations

import io

import pytest

from tests.support.harness import FmNumber, Session, run_program
from formulang.runner import _load_source, main
from formulang.utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled


def test_run_uses_fresh_session_by_default() -> None:
    assert run_program("A := 2; A * 3") == FmNumber(6)
    assert run_program("A := 5") == FmNumber(5)


def test_run_shares_given_session() -> None:
    session = Session()
    run_program("A := 2", session)

    assert run_program("A + 1", session) == FmNumber(3)


def test_load_source_reads_file(tmp_path) -> None:
    script = tmp_path / "calc.fm"
    script.write_text("A := 1\n", encoding="utf-8")

    assert _load_source(str(script)) == "A := 1\n"


def test_load_source_literal_fallback() -> None:
    assert _load_source("A := 1") == "A := 1"


def test_load_source_stdin(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("B := 2"))

    assert _load_source("-") == "B := 2"


def test_main_runs_scripts_in_one_session(tmp_path, capsys) -> None:
    first = tmp_path / "defs.fm"
    first.write_text("F(a,b){ c := a+b; c*2 }\nK := 10\n", encoding="utf-8")

    main([str(first), "F(1, 2) + K"])

    out = capsys.readouterr().out.splitlines()
    assert out == ["10", "16"]


def test_main_explain_prints_trace(capsys) -> None:
    main(["--explain", "X := 0; (X != 0) && (1 / X > 0)"])

    out = capsys.readouterr().out
    assert "leaf 0 => 0" in out
    assert "and (X != 0) && ((1 / X) > 0) => false" in out
    assert "[skipped]" in out


def test_main_reports_errors(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["A := 1 / 0"])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: Division by zero")
    assert "Python traceback" not in err


def test_main_prints_py_traceback_when_enabled(monkeypatch, capsys) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "1")

    with pytest.raises(SystemExit):
        main(["Nope"])

    assert "Python traceback:" in capsys.readouterr().err


def test_main_rejects_unknown_flag() -> None:
    with pytest.raises(SystemExit):
        main(["--bogus"])


@pytest.mark.parametrize(
    "value, enabled",
    [("1", True), ("true", True), ("ON", True), ("0", False), ("", False)],
)
def test_debug_py_trace_env(monkeypatch, value: str, enabled: bool) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, value)

    assert debug_py_trace_enabled() is enabled
