"""
Recursive Descent Parser for the formula language

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent, one precedence level per method
- AST: lark Tree/Token nodes, see tree.py for the node shapes

Parsing is pure: it never touches an environment. Binding names happens when
the resulting statements are evaluated.
"""

from typing import List, Optional

from lark import Token, Tree

from .token_types import TT, Tok

# ============================================================================
# Parser
# ============================================================================

COMPARE_OPS = (TT.GT, TT.GTE, TT.LT, TT.LTE, TT.NEQ, TT.EQ)
STMT_END = (TT.SEMI, TT.NEWLINE, TT.EOF)


class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None, expected: Optional[str] = None):
        self.message = message
        self.token = token
        self.expected = expected
        self.found = _describe(token) if token else None
        self.line = token.line if token else None
        self.column = token.column if token else None
        self.pos = token.pos if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )


def _describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "end of input"
    if tok.type == TT.NEWLINE:
        return "newline"
    return f"'{tok.value}'"


def _token(kind: str, tok: Tok) -> Token:
    """Build a lark Token that keeps the source position of tok"""
    return Token(kind, tok.value, start_pos=tok.pos, line=tok.line, column=tok.column)


class Parser:
    """
    Recursive descent parser for formulas.

    Expression precedence (lowest to highest):
    1. or (||)
    2. and (&&)
    3. compare (>, >=, <, <=, !=, =), non-associative
    4. add (+, -)
    5. mul (*, /)
    6. unary (!, ^, -)
    7. postfix call (f(args), f(args)(args))
    8. primary (numbers, identifiers, parens)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, '', 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1] if self.tokens else Tok(TT.EOF, '', 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current = self.tokens[self.pos]
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None, expected: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {_describe(self.current)}"
            raise ParseError(msg, self.current, expected=expected or token_type.name)
        return self.advance()

    def skip_separators(self) -> None:
        while self.match(TT.SEMI, TT.NEWLINE):
            pass

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Tree]:
        """Parse entire program into its top-level statements"""
        stmts: List[Tree] = []

        self.skip_separators()
        while not self.check(TT.EOF):
            stmts.append(self.parse_statement())
            self.end_statement(TT.EOF)
            self.skip_separators()

        return stmts

    def end_statement(self, closer: TT) -> None:
        """A statement must be followed by a separator or the enclosing closer"""
        if self.check(*STMT_END) or self.check(closer):
            return
        raise ParseError(
            f"Expected ';' or newline, got {_describe(self.current)}",
            self.current,
            expected="';' or newline",
        )

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement:
        - Assignment:  Name := Exp
        - FunctionDef: Name(Name, ...) { Statement ... }
        - Exp
        """
        if self.check(TT.IDENT) and self.peek(1).type == TT.WALRUS:
            return self.parse_assign_stmt()

        if self.check(TT.IDENT) and self.peek(1).type == TT.LPAR and self._scan_brace_after_parens(self.pos + 1):
            return self.parse_fn_stmt()

        return self.parse_expr()

    def parse_assign_stmt(self) -> Tree:
        name = self.advance()
        walrus = self.advance()

        if self.check(*STMT_END) or self.check(TT.RBRACE):
            raise ParseError(
                f"Missing expression after ':=' for '{name.value}'",
                self.current if not self.check(TT.EOF) else walrus,
                expected="expression",
            )

        value = self.parse_expr()
        return Tree('assign', [_token('IDENT', name), value])

    def _scan_brace_after_parens(self, start_pos: int) -> bool:
        """Return True when the parens opening at start_pos are followed by '{'"""
        depth = 0
        idx = start_pos

        while idx < len(self.tokens):
            tok = self.tokens[idx]
            if tok.type == TT.LPAR:
                depth += 1
            elif tok.type == TT.RPAR:
                depth -= 1
                if depth == 0:
                    break
            elif tok.type == TT.EOF:
                return False
            idx += 1
        else:
            return False

        idx += 1
        while idx < len(self.tokens) and self.tokens[idx].type == TT.NEWLINE:
            idx += 1

        return idx < len(self.tokens) and self.tokens[idx].type == TT.LBRACE

    def parse_fn_stmt(self) -> Tree:
        """
        Parse function declaration:
        name(params) { body }
        """
        name = self.expect(TT.IDENT)

        self.expect(TT.LPAR)
        params = self.parse_param_list()
        self.expect(TT.RPAR, "Unmatched '(' in parameter list", expected="')'")

        while self.match(TT.NEWLINE):
            pass

        body = self.parse_body(name)

        return Tree('fndef', [_token('IDENT', name), params, body])

    def parse_body(self, name: Tok) -> Tree:
        """Parse a braced function body; the last statement is the result"""
        open_brace = self.expect(TT.LBRACE)
        stmts: List[Tree] = []

        self.skip_separators()
        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError("Unmatched '{' in function body", open_brace, expected="'}'")

            stmts.append(self.parse_statement())
            self.end_statement(TT.RBRACE)
            self.skip_separators()

        close_brace = self.advance()

        if not stmts:
            raise ParseError(f"Empty function body for '{name.value}'", close_brace, expected="statement")

        return Tree('body', stmts)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (top level)"""
        return self.parse_or_expr()

    def parse_or_expr(self) -> Tree:
        """Parse logical OR: expr || expr"""
        left = self.parse_and_expr()

        while self.match(TT.OR):
            right = self.parse_and_expr()
            left = Tree('or', [left, right])

        return left

    def parse_and_expr(self) -> Tree:
        """Parse logical AND: expr && expr"""
        left = self.parse_compare_expr()

        while self.match(TT.AND):
            right = self.parse_compare_expr()
            left = Tree('and', [left, right])

        return left

    def parse_compare_expr(self) -> Tree:
        """Parse a single comparison: expr op expr"""
        left = self.parse_add_expr()

        if not self.check(*COMPARE_OPS):
            return left

        op = self.advance()
        right = self.parse_add_expr()

        if self.check(*COMPARE_OPS):
            raise ParseError(
                "Comparison operators cannot be chained; use '&&' or parentheses",
                self.current,
                expected="';' or newline",
            )

        return Tree('compare', [left, _token(op.type.name, op), right])

    def parse_add_expr(self) -> Tree:
        """Parse addition/subtraction: expr + expr"""
        left = self.parse_mul_expr()

        while self.check(TT.PLUS, TT.MINUS):
            op = self.advance()
            right = self.parse_mul_expr()
            left = Tree('arith', [left, _token(op.type.name, op), right])

        return left

    def parse_mul_expr(self) -> Tree:
        """Parse multiplication/division: expr * expr"""
        left = self.parse_unary_expr()

        while self.check(TT.STAR, TT.SLASH):
            op = self.advance()
            right = self.parse_unary_expr()
            left = Tree('arith', [left, _token(op.type.name, op), right])

        return left

    def parse_unary_expr(self) -> Tree:
        """Parse unary operators: !expr, ^expr, -expr"""
        if self.check(TT.NEG, TT.MINUS):
            op = self.advance()
            operand = self.parse_unary_expr()
            return Tree('unary', [_token(op.type.name, op), operand])

        return self.parse_postfix_expr()

    def parse_postfix_expr(self) -> Tree:
        """Parse calls: name(args), nested call(args)"""
        expr = self.parse_primary_expr()

        while self.check(TT.LPAR) and expr.data in ('var', 'call'):
            self.advance()
            args = self.parse_arg_list()
            self.expect(TT.RPAR, "Unmatched '(' in call arguments", expected="')'")
            expr = Tree('call', [expr, Tree('arglist', args)])

        return expr

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Numbers
        - Identifiers
        - Parenthesized expressions
        """
        if self.check(TT.NUMBER):
            tok = self.advance()
            return Tree('const', [_token('NUMBER', tok)])

        if self.check(TT.IDENT):
            tok = self.advance()
            return Tree('var', [_token('IDENT', tok)])

        if self.check(TT.LPAR):
            open_par = self.advance()
            expr = self.parse_expr()
            if not self.check(TT.RPAR):
                raise ParseError(
                    f"Unmatched '(' opened at line {open_par.line}, col {open_par.column}; got {_describe(self.current)}",
                    self.current,
                    expected="')'",
                )
            self.advance()
            return expr

        if self.check(TT.WALRUS):
            raise ParseError("':=' must follow a bare name", self.current, expected="expression")

        raise ParseError(f"Unexpected token in expression: {_describe(self.current)}", self.current, expected="expression")

    # ========================================================================
    # Helper Parsers
    # ========================================================================

    def parse_param_list(self) -> Tree:
        """Parse function parameter list: a comma must be followed by a name"""
        params = []

        if self.check(TT.RPAR, TT.EOF):
            return Tree('paramlist', params)

        while True:
            param = self.expect(TT.IDENT, f"Parameter names must be identifiers, got {_describe(self.current)}", expected="identifier")
            params.append(_token('IDENT', param))

            if not self.match(TT.COMMA):
                self.expect_list_end("parameter list")
                return Tree('paramlist', params)

    def parse_arg_list(self) -> List[Tree]:
        """Parse function call arguments: a comma must be followed by an expression"""
        args: List[Tree] = []

        if self.check(TT.RPAR, TT.EOF):
            return args

        while True:
            args.append(self.parse_expr())

            if not self.match(TT.COMMA):
                self.expect_list_end("call arguments")
                return args

    def expect_list_end(self, what: str) -> None:
        """After a list item only ',' or ')' may follow; EOF is left to the caller's unmatched '(' error"""
        if self.check(TT.RPAR, TT.EOF):
            return
        raise ParseError(
            f"Expected ',' or ')' in {what}, got {_describe(self.current)}",
            self.current,
            expected="',' or ')'",
        )

# ============================================================================
# Entry points
# ============================================================================

def parse_source(source: str) -> List[Tree]:
    """
    Parse formula source code to a list of statement ASTs.

    Raises LexError for bad characters and ParseError for bad grammar.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse()


def parse_expr_fragment(source: str) -> Tree:
    """
    Parse a standalone expression fragment.
    Used by the REPL's /explain command.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens)
    parser.skip_separators()
    expr = parser.parse_expr()
    parser.skip_separators()

    if not parser.check(TT.EOF):
        raise ParseError("Unexpected tokens after expression fragment", parser.current, expected="end of input")
    return expr
