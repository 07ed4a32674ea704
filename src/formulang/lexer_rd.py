"""
Lexer for the formula language - Recursive Descent Parser

Tokenizes formula source into a stream of tokens.

Features:
- Single-pass tokenization, stateless re-scan (one Lexer per source)
- Newlines separate statements, except inside parentheses
- Position tracking (offset, line, column)
- `#` and `//` line comments
"""

from typing import List, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Formula lexer.

    Newlines are significant as statement separators. Inside parentheses they
    are dropped so argument lists and grouped expressions may span lines.
    """

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        (':=', TT.WALRUS),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('&&', TT.AND),
        ('||', TT.OR),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('^', TT.NEG),
        ('!', TT.NEG),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.EQ),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.paren_depth = 0

        # Start of the token being scanned
        self.tok_pos = 0
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, '')
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (not newlines)
        if self.skip_whitespace():
            return

        self.mark()

        # Comments
        if self.peek() == '#' or (self.peek() == '/' and self.peek(1) == '/'):
            self.skip_comment()
            return

        # Newlines
        if self.peek() == '\n':
            self.scan_newline()
            return

        # Numbers
        if self.is_digit() or (self.peek() == '.' and self.is_digit(1)):
            self.scan_number()
            return

        # Identifiers
        if self.peek().isalpha() or self.peek() == '_':
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character"""
        self.advance()

        if self.paren_depth == 0:
            self.emit(TT.NEWLINE, '\n')

        self.line += 1
        self.column = 1

    def scan_number(self):
        """Scan number literal"""
        value = ''

        # Integer part
        while self.is_digit():
            value += self.advance()

        # Decimal part
        if self.peek() == '.' and self.is_digit(1):
            value += self.advance()  # .
            while self.is_digit():
                value += self.advance()

        # Scientific notation
        if self.peek() in ('e', 'E') and (
            self.is_digit(1) or (self.peek(1) in ('+', '-') and self.is_digit(2))
        ):
            value += self.advance()
            if self.peek() in ('+', '-'):
                value += self.advance()
            while self.is_digit():
                value += self.advance()

        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan identifier"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        self.emit(TT.IDENT, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)

                if op_type == TT.LPAR:
                    self.paren_depth += 1
                elif op_type == TT.RPAR and self.paren_depth > 0:
                    self.paren_depth -= 1
                return

        raise LexError(self.peek(), self.pos, self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def is_digit(self, offset: int = 0) -> bool:
        """ASCII digits only; other Unicode digits are not number characters"""
        return '0' <= self.peek(offset) <= '9'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def mark(self):
        """Remember where the next token starts"""
        self.tok_pos = self.pos
        self.tok_line = self.line
        self.tok_column = self.column

    def skip_whitespace(self) -> bool:
        """Skip whitespace (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def emit(self, token_type: TT, value: str):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            pos=self.tok_pos,
        )
        self.tokens.append(tok)


class LexError(Exception):
    """Lexical analysis error: an unrecognized character"""

    def __init__(self, char: str, pos: int, line: int, column: int):
        self.char = char
        self.pos = pos
        self.line = line
        self.column = column
        super().__init__(f"Unexpected character '{char}' at line {line}, col {column}")


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()


def try_tokenize(source: str) -> Optional[List[Tok]]:
    """Tokenize, returning None instead of raising on bad input"""
    try:
        return tokenize(source)
    except LexError:
        return None
