"""AST-walking pretty-printer producing matchbox surface syntax.

Output reads back through the reader and translator to an equal AST.
"""

from __future__ import annotations

from matchbox.ast_nodes import (
    App,
    Assign,
    BinaryExpr,
    BindingPattern,
    BoolLit,
    BoolLiteralPattern,
    Construct,
    ConstructorPattern,
    DataDecl,
    Define,
    Fst,
    IfExpr,
    IntLiteralPattern,
    Lambda,
    Match,
    Not,
    NumLit,
    PairExpr,
    PairPattern,
    Print,
    Program,
    Snd,
    StringLiteralPattern,
    Var,
    WildcardPattern,
)
from matchbox.types import type_name

# Surface spelling of binary operators
_OPERATORS: dict[str, str] = {
    "plus": "+",
    "eq": "=",
    "and": "and",
    "or": "or",
}


class Formatter:
    """Format a Program back to source text, one statement per line."""

    def format(self, program: Program) -> str:
        result = "\n".join(self.format_stmt(s) for s in program)
        if not result.endswith("\n"):
            result += "\n"
        return result

    # ── Statements ─────────────────────────────────────────────

    def format_stmt(self, stmt: object) -> str:
        if isinstance(stmt, Define):
            return f"(define {stmt.name} {self.format_expr(stmt.value)})"
        if isinstance(stmt, Assign):
            return (
                f"(assign {self.format_expr(stmt.target)} "
                f"{self.format_expr(stmt.value)})"
            )
        if isinstance(stmt, Print):
            return f"(print {self.format_expr(stmt.value)})"
        if isinstance(stmt, DataDecl):
            ctors = []
            for c in stmt.constructors:
                parts = [c.name] + [type_name(t) for t in c.arg_types]
                ctors.append(f"({' '.join(parts)})")
            return f"(data {stmt.name} {' '.join(ctors)})"
        return "???"

    # ── Expressions ────────────────────────────────────────────

    def format_expr(self, expr: object) -> str:
        if isinstance(expr, Var):
            return expr.name
        if isinstance(expr, NumLit):
            return str(expr.value)
        if isinstance(expr, BoolLit):
            return "true" if expr.value else "false"
        if isinstance(expr, Not):
            return f"(not {self.format_expr(expr.operand)})"
        if isinstance(expr, BinaryExpr):
            op = _OPERATORS.get(expr.op, expr.op)
            return f"({op} {self.format_expr(expr.left)} {self.format_expr(expr.right)})"
        if isinstance(expr, IfExpr):
            return (
                f"(if {self.format_expr(expr.condition)} "
                f"{self.format_expr(expr.then_branch)} "
                f"{self.format_expr(expr.else_branch)})"
            )
        if isinstance(expr, Lambda):
            return (
                f"(lambda {expr.param} {type_name(expr.param_type)} "
                f"{self.format_expr(expr.body)})"
            )
        if isinstance(expr, App):
            parts = [self.format_expr(expr.head)]
            parts += [self.format_expr(a) for a in expr.args]
            return f"({' '.join(parts)})"
        if isinstance(expr, PairExpr):
            return f"(pair {self.format_expr(expr.first)} {self.format_expr(expr.second)})"
        if isinstance(expr, Fst):
            return f"(fst {self.format_expr(expr.operand)})"
        if isinstance(expr, Snd):
            return f"(snd {self.format_expr(expr.operand)})"
        if isinstance(expr, Construct):
            if not expr.args:
                return expr.name
            parts = [expr.name] + [self.format_expr(a) for a in expr.args]
            return f"({' '.join(parts)})"
        if isinstance(expr, Match):
            arms = []
            for pat, branch in zip(expr.patterns, expr.branches):
                arms.append(f"{self.format_pattern(pat)} {self.format_expr(branch)}")
            return f"(match {self.format_expr(expr.scrutinee)} ({' '.join(arms)}))"
        return "???"

    # ── Patterns ───────────────────────────────────────────────

    def format_pattern(self, pat: object) -> str:
        if isinstance(pat, WildcardPattern):
            return "_"
        if isinstance(pat, BindingPattern):
            return pat.name
        if isinstance(pat, IntLiteralPattern):
            return str(pat.value)
        if isinstance(pat, BoolLiteralPattern):
            return "true" if pat.value else "false"
        if isinstance(pat, StringLiteralPattern):
            return f'"{pat.value}"'
        if isinstance(pat, PairPattern):
            return (
                f"(pair {self.format_pattern(pat.first)} "
                f"{self.format_pattern(pat.second)})"
            )
        if isinstance(pat, ConstructorPattern):
            if not pat.args:
                return pat.name
            parts = [pat.name] + [self.format_pattern(p) for p in pat.args]
            return f"({' '.join(parts)})"
        return "???"


_FORMATTER = Formatter()


def format_expr(expr: object) -> str:
    return _FORMATTER.format_expr(expr)


def format_pattern(pat: object) -> str:
    return _FORMATTER.format_pattern(pat)
