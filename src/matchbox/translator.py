"""Translation of s-expressions into the matchbox AST.

Data declarations are tracked in program order so that constructor names
are recognized in later expressions and patterns.
"""

from __future__ import annotations

import re

from matchbox.ast_nodes import (
    App,
    Assign,
    BinaryExpr,
    BoolLit,
    Construct,
    ConstructorDecl,
    DataDecl,
    Define,
    Expr,
    Fst,
    IfExpr,
    Lambda,
    Match,
    Not,
    NumLit,
    PairExpr,
    Pattern,
    Print,
    Program,
    Snd,
    Stmt,
    Var,
)
from matchbox.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from matchbox.patterns import PAIR_HEAD, classify_binding, structured_pattern
from matchbox.reader import Atom, SList, Sexp, read
from matchbox.source import Span
from matchbox.types import BUILTINS, ArrowType, DataType, PairType, Type

_NUMBER_RE = re.compile(r"^\d+$")

# Surface operator -> BinaryExpr.op
_BINARY_FORMS: dict[str, str] = {
    "+": "plus",
    "=": "eq",
    "and": "and",
    "or": "or",
}

_UNARY_FORMS = {"not": Not, "fst": Fst, "snd": Snd}


def _error(code: str, message: str, span: Span | None) -> CompileError:
    labels = [DiagnosticLabel(span=span)] if span is not None else []
    return CompileError([Diagnostic(
        severity=Severity.ERROR, code=code, message=message, labels=labels,
    )])


def _arity(form: str, expected: int, args: tuple[Sexp, ...], span: Span | None) -> None:
    if len(args) != expected:
        plural = "argument" if expected == 1 else "arguments"
        raise _error(
            "E200",
            f"'{form}' expects {expected} {plural} but {len(args)} were given",
            span,
        )


class Translator:
    """Translates s-expressions, remembering declared data types."""

    def __init__(self) -> None:
        self.data_types: set[str] = set()
        self.constructors: dict[str, int] = {}

    @property
    def nullary_constructors(self) -> set[str]:
        return {name for name, arity in self.constructors.items() if arity == 0}

    def translate_program(self, sexps: list[Sexp]) -> Program:
        return Program(tuple(self.translate_stmt(s) for s in sexps))

    # ── Statements ──────────────────────────────────────────────

    def translate_stmt(self, e: Sexp) -> Stmt:
        if isinstance(e, Atom):
            raise _error("E202", f"an atom cannot be a statement: '{e.value}'", e.span)
        if not e.items or not isinstance(e.items[0], Atom):
            raise _error("E202", "identifier expected at head of statement", e.span)
        head = e.items[0].value
        args = e.items[1:]
        if head == "define":
            _arity("define", 2, args, e.span)
            if not isinstance(args[0], Atom):
                raise _error(
                    "E200", "'define' expects its first argument to be an identifier",
                    args[0].span,
                )
            return Define(args[0].value, self.translate_expr(args[1]), span=e.span)
        if head == "assign":
            _arity("assign", 2, args, e.span)
            return Assign(
                self.translate_expr(args[0]), self.translate_expr(args[1]), span=e.span,
            )
        if head == "print":
            _arity("print", 1, args, e.span)
            return Print(self.translate_expr(args[0]), span=e.span)
        if head == "data":
            return self._translate_data(e, args)
        raise _error("E202", f"unknown statement form '{e}'", e.span)

    def _translate_data(self, e: SList, args: tuple[Sexp, ...]) -> DataDecl:
        if not args or not isinstance(args[0], Atom):
            raise _error("E200", "'data' expects a type name", e.span)
        name = args[0].value
        # declared before its constructors so fields may refer to it
        self.data_types.add(name)
        constructors: list[ConstructorDecl] = []
        for c in args[1:]:
            if isinstance(c, Atom):
                constructors.append(ConstructorDecl(c.value, (), span=c.span))
                continue
            if not c.items or not isinstance(c.items[0], Atom):
                raise _error("E200", "constructor name expected", c.span)
            arg_types = tuple(self.translate_type(t) for t in c.items[1:])
            constructors.append(ConstructorDecl(c.items[0].value, arg_types, span=c.span))
        for c in constructors:
            self.constructors[c.name] = len(c.arg_types)
        return DataDecl(name, tuple(constructors), span=e.span)

    # ── Types ───────────────────────────────────────────────────

    def translate_type(self, e: Sexp) -> Type:
        if isinstance(e, Atom):
            if e.value in BUILTINS:
                return BUILTINS[e.value]
            if e.value in self.data_types:
                return DataType(e.value)
            raise _error("E201", f"unknown type '{e.value}'", e.span)
        head = e.items[0] if e.items else None
        args = e.items[1:]
        if isinstance(head, Atom) and head.value == "->":
            if len(args) < 2:
                raise _error(
                    "E200",
                    f"'->' expects at least 2 arguments but {len(args)} were given",
                    e.span,
                )
            types = [self.translate_type(t) for t in args]
            return ArrowType(tuple(types[:-1]), types[-1])
        if isinstance(head, Atom) and head.value == PAIR_HEAD:
            _arity("pair", 2, args, e.span)
            return PairType(self.translate_type(args[0]), self.translate_type(args[1]))
        raise _error("E201", f"unknown type '{e}'", e.span)

    # ── Patterns ────────────────────────────────────────────────

    def translate_pattern(self, e: Sexp) -> Pattern:
        if isinstance(e, Atom):
            return classify_binding(e.value, self.nullary_constructors, e.span)
        if not e.items or not isinstance(e.items[0], Atom):
            raise _error("E200", "pattern head must be a constructor or 'pair'", e.span)
        head = e.items[0].value
        subs = [self.translate_pattern(p) for p in e.items[1:]]
        if head == PAIR_HEAD:
            _arity("pair", 2, e.items[1:], e.span)
        return structured_pattern(head, subs, e.span)

    # ── Expressions ─────────────────────────────────────────────

    def translate_expr(self, e: Sexp) -> Expr:
        if isinstance(e, Atom):
            return self._translate_atom(e)
        if not e.items:
            raise _error("E200", "empty expression list encountered", e.span)
        head = e.items[0]
        args = e.items[1:]
        if isinstance(head, Atom):
            form = head.value
            if form in _BINARY_FORMS:
                _arity(form, 2, args, e.span)
                return BinaryExpr(
                    _BINARY_FORMS[form],
                    self.translate_expr(args[0]),
                    self.translate_expr(args[1]),
                    span=e.span,
                )
            if form in _UNARY_FORMS:
                _arity(form, 1, args, e.span)
                return _UNARY_FORMS[form](self.translate_expr(args[0]), span=e.span)
            if form == "if":
                _arity("if", 3, args, e.span)
                return IfExpr(*(self.translate_expr(a) for a in args), span=e.span)
            if form == "lambda":
                return self._translate_lambda(e, args)
            if form == PAIR_HEAD:
                _arity("pair", 2, args, e.span)
                return PairExpr(
                    self.translate_expr(args[0]), self.translate_expr(args[1]),
                    span=e.span,
                )
            if form == "match":
                return self._translate_match(e, args)
            if form in self.constructors:
                return Construct(
                    form, tuple(self.translate_expr(a) for a in args), span=e.span,
                )
        return App(
            self.translate_expr(head),
            tuple(self.translate_expr(a) for a in args),
            span=e.span,
        )

    def _translate_atom(self, e: Atom) -> Expr:
        if e.value == "true":
            return BoolLit(True, span=e.span)
        if e.value == "false":
            return BoolLit(False, span=e.span)
        if _NUMBER_RE.match(e.value):
            return NumLit(int(e.value), span=e.span)
        if self.constructors.get(e.value) == 0:
            return Construct(e.value, (), span=e.span)
        # any other chunk of text is a variable, quoted strings included
        return Var(e.value, span=e.span)

    def _translate_lambda(self, e: SList, args: tuple[Sexp, ...]) -> Lambda:
        _arity("lambda", 3, args, e.span)
        if not isinstance(args[0], Atom):
            raise _error(
                "E200",
                f"'lambda' expects its first argument to be an identifier "
                f"but {args[0]} was given",
                args[0].span,
            )
        return Lambda(
            args[0].value,
            self.translate_type(args[1]),
            self.translate_expr(args[2]),
            span=e.span,
        )

    def _translate_match(self, e: SList, args: tuple[Sexp, ...]) -> Match:
        _arity("match", 2, args, e.span)
        arms = args[1]
        if isinstance(arms, Atom):
            raise _error(
                "E200",
                f"'match' expects a list of patterns and expressions but {arms} was given",
                arms.span,
            )
        if len(arms.items) % 2 != 0:
            raise _error(
                "E200",
                f"'match' expects an even number of list arguments "
                f"but {len(arms.items)} were given",
                arms.span,
            )
        patterns = tuple(self.translate_pattern(p) for p in arms.items[0::2])
        branches = tuple(self.translate_expr(b) for b in arms.items[1::2])
        return Match(self.translate_expr(args[0]), patterns, branches, span=e.span)


def parse_program(source: str, filename: str = "<stdin>") -> Program:
    """Read and translate a whole program."""
    return Translator().translate_program(read(source, filename))
