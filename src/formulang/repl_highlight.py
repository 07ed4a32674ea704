"""prompt_toolkit lexer for live formula syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as FmLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "number": "ansimagenta",
    "identifier": "",
    "function": "bold ansiyellow",
    "logical": "bold ansicyan",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.NUMBER: "number",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.AND: "logical",
    TT.OR: "logical",
    TT.NEG: "logical",
    TT.WALRUS: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
}

_LAYOUT = {TT.NEWLINE, TT.EOF}


def _is_call_head(tokens: list[Tok], idx: int) -> bool:
    """An identifier directly followed by `(` names a function."""
    nxt = idx + 1
    return nxt < len(tokens) and tokens[nxt].type == TT.LPAR


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = FmLexer(text).tokenize()
    except LexError as exc:
        bad = exc.pos
        return [("", text[:bad]), (GROUP_STYLE["error"], text[bad:])]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type in _LAYOUT:
            continue

        # Unstyled gap before token; comments are the only other text the lexer skips.
        if tok.pos > pos:
            result.extend(_gap_spans(text[pos:tok.pos]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and _is_call_head(tokens, i):
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok.value))
        pos = tok.pos + len(tok.value)

    if pos < len(text):
        result.extend(_gap_spans(text[pos:]))

    return result if result else [("", text)]


def _gap_spans(gap: str) -> StyleAndTextTuples:
    starts = [idx for idx in (gap.find("#"), gap.find("//")) if idx >= 0]
    if not starts:
        return [("", gap)]

    idx = min(starts)
    return [("", gap[:idx]), (GROUP_STYLE["comment"], gap[idx:])]


class FormulaLexer(Lexer):
    """prompt_toolkit Lexer that highlights formula source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
