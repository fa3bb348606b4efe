"""S-expression reader for matchbox source text.

Atoms are maximal runs of characters other than whitespace and parentheses.
A double quote starts a string atom that may contain spaces; the quotes are
kept as part of the atom text. ``;`` starts a comment running to end of line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from matchbox.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from matchbox.source import Span


class TokenKind(Enum):
    LPAREN = auto()
    RPAREN = auto()
    ATOM = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span


@dataclass(frozen=True)
class Atom:
    value: str
    span: Span | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SList:
    items: tuple[Sexp, ...]
    span: Span | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"({' '.join(str(i) for i in self.items)})"


Sexp = Atom | SList


def _error(code: str, message: str, span: Span) -> CompileError:
    return CompileError([Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=message,
        labels=[DiagnosticLabel(span=span)],
    )])


class Lexer:
    """Tokenizes s-expression source."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == ";":
                while self.pos < len(self.source) and self.source[self.pos] != "\n":
                    self._advance()
            elif ch == "(":
                self._single(TokenKind.LPAREN)
            elif ch == ")":
                self._single(TokenKind.RPAREN)
            elif ch == '"':
                self._lex_string()
            else:
                self._lex_atom()
        self.tokens.append(Token(TokenKind.EOF, "", self._span(self.line, self.col)))
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _span(self, line: int, col: int) -> Span:
        return Span(self.filename, line, col, self.line, max(self.col - 1, col))

    def _single(self, kind: TokenKind) -> None:
        line, col = self.line, self.col
        value = self._advance()
        self.tokens.append(Token(kind, value, self._span(line, col)))

    def _lex_string(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        self._advance()  # opening quote
        while True:
            if self.pos >= len(self.source):
                raise _error("E100", "unterminated string literal", self._span(line, col))
            ch = self._advance()
            if ch == "\\" and self.pos < len(self.source):
                self._advance()
            elif ch == '"':
                break
        text = self.source[start:self.pos]
        self.tokens.append(Token(TokenKind.ATOM, text, self._span(line, col)))

    def _lex_atom(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace() or ch in "();":
                break
            self._advance()
        text = self.source[start:self.pos]
        self.tokens.append(Token(TokenKind.ATOM, text, self._span(line, col)))


class Parser:
    """Builds s-expressions from a token list."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> list[Sexp]:
        """Parse every top-level s-expression."""
        result: list[Sexp] = []
        while self._peek().kind != TokenKind.EOF:
            result.append(self.parse_one())
        return result

    def parse_one(self) -> Sexp:
        tok = self._peek()
        if tok.kind == TokenKind.EOF:
            raise _error("E102", "unexpected end of input", tok.span)
        if tok.kind == TokenKind.RPAREN:
            raise _error("E101", "unexpected ')'", tok.span)
        self.pos += 1
        if tok.kind == TokenKind.ATOM:
            return Atom(tok.value, tok.span)

        items: list[Sexp] = []
        while self._peek().kind != TokenKind.RPAREN:
            if self._peek().kind == TokenKind.EOF:
                raise _error(
                    "E102", "unexpected end of input: unclosed '('", tok.span,
                )
            items.append(self.parse_one())
        close = self._peek()
        self.pos += 1
        return SList(tuple(items), tok.span.to(close.span))

    def _peek(self) -> Token:
        return self.tokens[self.pos]


def read(source: str, filename: str = "<stdin>") -> list[Sexp]:
    """Read all top-level s-expressions from ``source``."""
    return Parser(Lexer(source, filename).lex()).parse()


def read_one(source: str, filename: str = "<stdin>") -> Sexp:
    """Read exactly one s-expression; trailing input is an error."""
    parser = Parser(Lexer(source, filename).lex())
    result = parser.parse_one()
    rest = parser._peek()
    if rest.kind != TokenKind.EOF:
        raise _error("E103", f"input not completely consumed: '{rest.value}'", rest.span)
    return result
