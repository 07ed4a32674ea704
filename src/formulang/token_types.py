"""
Token Types for the formula language

Shared between lexer and parser to avoid circular dependencies.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Literals
    NUMBER = auto()
    IDENT = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Comparison
    EQ = auto()  # =
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Logical
    AND = auto()
    OR = auto()
    NEG = auto()  # ! and ^

    # Assignment
    WALRUS = auto()  # :=

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    SEMI = auto()

    # Special
    NEWLINE = auto()
    EOF = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: str
    line: int = 0
    column: int = 0
    pos: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
