"""AST node definitions for the matchbox language.

Nodes are frozen and built once by the front-end. Spans are carried for
diagnostics only and never take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from matchbox.source import Span
from matchbox.types import Type

# ── Patterns ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class WildcardPattern:
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BindingPattern:
    name: str
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class IntLiteralPattern:
    value: int
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BoolLiteralPattern:
    value: bool
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StringLiteralPattern:
    value: str  # without the surrounding quotes
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class ConstructorPattern:
    """A constructor head with one subpattern per field (none if nullary)."""

    name: str
    args: tuple[Pattern, ...] = ()
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class PairPattern:
    first: Pattern
    second: Pattern
    span: Span | None = field(default=None, compare=False)


Pattern = Union[
    WildcardPattern, BindingPattern, IntLiteralPattern, BoolLiteralPattern,
    StringLiteralPattern, ConstructorPattern, PairPattern,
]


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Var:
    """A variable reference; a quoted name doubles as a string literal."""

    name: str
    span: Span | None = field(default=None, compare=False)

    @property
    def is_quoted(self) -> bool:
        return self.name.startswith('"')


@dataclass(frozen=True)
class NumLit:
    value: int
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BoolLit:
    value: bool
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Not:
    operand: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BinaryExpr:
    """``plus``, ``eq``, ``and`` or ``or``."""

    op: str
    left: Expr
    right: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class IfExpr:
    condition: Expr
    then_branch: Expr
    else_branch: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Lambda:
    param: str
    param_type: Type
    body: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class App:
    head: Expr
    args: tuple[Expr, ...]
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class PairExpr:
    first: Expr
    second: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Fst:
    operand: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Snd:
    operand: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Construct:
    name: str
    args: tuple[Expr, ...] = ()
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Match:
    scrutinee: Expr
    patterns: tuple[Pattern, ...]
    branches: tuple[Expr, ...]
    span: Span | None = field(default=None, compare=False)


Expr = Union[
    Var, NumLit, BoolLit, Not, BinaryExpr, IfExpr, Lambda, App,
    PairExpr, Fst, Snd, Construct, Match,
]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Define:
    name: str
    value: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Assign:
    target: Expr  # must be a bare Var
    value: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Print:
    value: Expr
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class ConstructorDecl:
    name: str
    arg_types: tuple[Type, ...] = ()
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class DataDecl:
    name: str
    constructors: tuple[ConstructorDecl, ...]
    span: Span | None = field(default=None, compare=False)


Stmt = Union[Define, Assign, Print, DataDecl]


@dataclass(frozen=True)
class Program:
    statements: tuple[Stmt, ...]

    def __iter__(self):
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)
