from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from .lexer_rd import LexError
from .parser_rd import ParseError
from .runtime import FmValue, FormulaRuntimeError
from .session import Session
from .utils import report_error

USAGE = "usage: formulang [--explain] [--repl] [SCRIPT | SOURCE | -]..."


def run(src: str, session: Optional[Session]=None) -> Optional[FmValue]:
    """Evaluate src in session (a fresh one by default); return the last value."""
    if session is None:
        session = Session()

    return session.run(src).value

def explain(src: str, session: Session) -> List[str]:
    """Explain every statement of src, returning one rendered trace per statement."""
    return [trace.pretty() for _, trace in session.convert_from(src)]

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def main(argv: Optional[List[str]]=None) -> None:
    explain_mode = False
    want_repl = False
    args: List[str] = []

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--explain":
            explain_mode = True
            continue

        if token == "--repl":
            want_repl = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return

        if token.startswith("--"):
            raise SystemExit(f"Unexpected flag: {token}\n{USAGE}")

        args.append(token)

    if not args and not want_repl:
        args = ["-"]

    session = Session()

    for arg in args:
        source = _load_source(arg)

        try:
            if explain_mode:
                for rendered in explain(source, session):
                    print(rendered, end="")
                continue

            value = run(source, session)
        except (LexError, ParseError, FormulaRuntimeError) as exc:
            report_error(exc)
            raise SystemExit(1) from None

        if value is not None:
            print(value)

    if want_repl:
        from .repl import repl

        repl(session)

if __name__ == "__main__":
    main()
