"""Interactive REPL for the formula language, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, try_tokenize
from .parser_rd import ParseError, parse_expr_fragment
from .repl_highlight import FormulaLexer
from .runtime import FormulaRuntimeError
from .session import Session
from .token_types import TT
from .utils import debug_py_trace_enabled, report_error, set_debug_py_trace

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/explain": ("Show how an expression evaluates", "<expr>"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}


def open_depth(text: str) -> int:
    """Number of unclosed `(` and `{` in text; 0 when text does not lex."""
    tokens = try_tokenize(text)
    if tokens is None:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type in (TT.LPAR, TT.LBRACE):
            depth += 1
        elif tok.type in (TT.RPAR, TT.RBRACE):
            depth = max(depth - 1, 0)

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def handle_slash(line: str, session: Session) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            set_debug_py_trace(True)
        elif arg.lower() in ("off", "0", "false", "no"):
            set_debug_py_trace(False)
        elif arg == "":
            set_debug_py_trace(not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/explain":
        if not arg:
            print("Usage: /explain <expr>", file=sys.stderr)
            return True

        try:
            _, trace = session.convert(parse_expr_fragment(arg))
        except (ParseError, LexError, FormulaRuntimeError) as exc:
            report_error(exc)
            return True

        print(trace.pretty(), end="")
        return True

    if cmd == "/reset":
        session.reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl(session: Optional[Session]=None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    if session is None:
        session = Session()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Keep reading while a function body or argument list is open.
        if not text.startswith("/") and open_depth(text) > 0:
            buf.insert_text("\n" + "    " * open_depth(text))
            return

        buf.validate_and_handle()

    prompt: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=FormulaLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("formulang repl, Ctrl-D to exit, / for commands")

    while True:
        try:
            text = prompt.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, session):
            continue

        try:
            result = session.run(text)
        except (ParseError, LexError, FormulaRuntimeError) as exc:
            report_error(exc)
            continue

        if result.value is not None:
            print(result.value)
