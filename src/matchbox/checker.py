"""Static type checker for matchbox programs.

Types are synthesized bottom-up from literals, annotated lambda parameters
and declared constructor signatures. The first violation raises; the AST is
never mutated and no partial result is returned.
"""

from __future__ import annotations

from collections.abc import Sequence

from matchbox.ast_nodes import (
    App,
    Assign,
    BinaryExpr,
    BoolLit,
    Construct,
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
    Print,
    Program,
    Snd,
    Stmt,
    Var,
)
from matchbox.errors import (
    ArityMismatch,
    InvalidAssignTarget,
    LangError,
    Redefinition,
    TypeMismatch,
    UnboundName,
)
from matchbox.formatter import format_expr, format_pattern
from matchbox.patterns import PatternMatcher
from matchbox.scope import ConstructorInfo, Context
from matchbox.source import Span
from matchbox.types import (
    BOOL,
    NAT,
    STR,
    ArrowType,
    ConstructType,
    DataType,
    PairType,
    Type,
    owning_data,
    same_tag,
    type_name,
    types_equal,
)


def _mismatch(expected: str, found: Type, where: str, span: Span | None) -> TypeMismatch:
    return TypeMismatch(
        f"type mismatch in {where}: expected {expected}, found {type_name(found)}",
        span,
    )


class TypeMatcher(PatternMatcher[Type]):
    """Pattern engine over types: literals only check the scrutinee's type."""

    def match_int(self, scrutinee: Type, value: int) -> bool:
        return types_equal(scrutinee, NAT)

    def match_bool(self, scrutinee: Type, value: bool) -> bool:
        return types_equal(scrutinee, BOOL)

    def match_string(self, scrutinee: Type, value: str) -> bool:
        return types_equal(scrutinee, STR)

    def split_pair(self, scrutinee: Type) -> tuple[Type, Type] | None:
        if isinstance(scrutinee, PairType):
            return scrutinee.first, scrutinee.second
        return None

    def split_constructed(
        self, scrutinee: Type, info: ConstructorInfo,
    ) -> Sequence[Type] | None:
        data = owning_data(scrutinee)
        if data is None or data.name != info.data:
            return None
        return info.fields


class Checker:
    """Type checker over a caller-supplied context."""

    def __init__(self) -> None:
        self.matcher = TypeMatcher()

    # ── Public API ──────────────────────────────────────────────

    def check_program(self, ctx: Context, program: Program) -> None:
        for stmt in program:
            self.check_stmt(ctx, stmt)

    def check_stmt(self, ctx: Context, stmt: Stmt) -> None:
        try:
            if isinstance(stmt, Define):
                ctx.set(stmt.name, self.infer(ctx, stmt.value))
            elif isinstance(stmt, Assign):
                self._check_assign(ctx, stmt)
            elif isinstance(stmt, Print):
                self.infer(ctx, stmt.value)
            elif isinstance(stmt, DataDecl):
                self._register_data(ctx, stmt)
            else:
                raise TypeError(f"not a statement: {stmt!r}")
        except LangError as e:
            raise e.at(stmt.span)

    def infer(self, ctx: Context, expr: Expr) -> Type:
        """Synthesize the type of ``expr`` under ``ctx``."""
        try:
            return self._infer(ctx, expr)
        except LangError as e:
            raise e.at(expr.span)

    # ── Statements ──────────────────────────────────────────────

    def _check_assign(self, ctx: Context, stmt: Assign) -> None:
        if not isinstance(stmt.target, Var):
            raise InvalidAssignTarget(
                f"cannot assign to non-variable '{format_expr(stmt.target)}'",
                stmt.target.span,
            )
        value_type = self.infer(ctx, stmt.value)
        target_type = ctx.get(stmt.target.name)
        if not types_equal(target_type, value_type):
            raise _mismatch(
                type_name(target_type), value_type,
                f"assignment to '{stmt.target.name}'", stmt.span,
            )

    def _register_data(self, ctx: Context, decl: DataDecl) -> None:
        """Register ``Data(id)`` and a signature per constructor."""
        if ctx.resolve_data(decl.name) is not None:
            raise Redefinition(decl.name, decl.span)
        for c in decl.constructors:
            if ctx.has_local(c.name):
                raise Redefinition(c.name, c.span)
            for ty in c.arg_types:
                self._check_declared(ctx, ty, decl.name, c.span)
        ctx.declare_data(
            decl.name, [(c.name, c.arg_types) for c in decl.constructors],
        )
        data = DataType(decl.name)
        for c in decl.constructors:
            if c.arg_types:
                ctx.set(c.name, ArrowType(tuple(c.arg_types), data))
            else:
                ctx.set(c.name, data)

    def _check_declared(
        self, ctx: Context, ty: Type, own: str, span: Span | None,
    ) -> None:
        """Every data type a field mentions must be declared (or be ``own``)."""
        if isinstance(ty, DataType):
            if ty.name != own and ctx.resolve_data(ty.name) is None:
                raise UnboundName(ty.name, span)
        elif isinstance(ty, ArrowType):
            for t in (*ty.inputs, ty.output):
                self._check_declared(ctx, t, own, span)
        elif isinstance(ty, PairType):
            self._check_declared(ctx, ty.first, own, span)
            self._check_declared(ctx, ty.second, own, span)

    # ── Expressions ─────────────────────────────────────────────

    def _infer(self, ctx: Context, expr: Expr) -> Type:
        if isinstance(expr, NumLit):
            return NAT
        if isinstance(expr, BoolLit):
            return BOOL
        if isinstance(expr, Var):
            return self._infer_var(ctx, expr)
        if isinstance(expr, Not):
            operand = self.infer(ctx, expr.operand)
            if not types_equal(operand, BOOL):
                raise _mismatch("Bool", operand, "'not'", expr.span)
            return BOOL
        if isinstance(expr, BinaryExpr):
            return self._infer_binary(ctx, expr)
        if isinstance(expr, IfExpr):
            return self._infer_if(ctx, expr)
        if isinstance(expr, Lambda):
            body_ctx = ctx.extend({expr.param: expr.param_type})
            return ArrowType((expr.param_type,), self.infer(body_ctx, expr.body))
        if isinstance(expr, App):
            return self._infer_app(ctx, expr)
        if isinstance(expr, PairExpr):
            return PairType(self.infer(ctx, expr.first), self.infer(ctx, expr.second))
        if isinstance(expr, (Fst, Snd)):
            operand = self.infer(ctx, expr.operand)
            if not isinstance(operand, PairType):
                what = "'fst'" if isinstance(expr, Fst) else "'snd'"
                raise _mismatch("a pair", operand, what, expr.span)
            return operand.first if isinstance(expr, Fst) else operand.second
        if isinstance(expr, Construct):
            return self._infer_construct(ctx, expr)
        if isinstance(expr, Match):
            return self._infer_match(ctx, expr)
        raise TypeError(f"not an expression: {expr!r}")

    def _infer_var(self, ctx: Context, expr: Var) -> Type:
        if ctx.has(expr.name):
            return ctx.get(expr.name)
        if expr.is_quoted:
            return STR
        raise UnboundName(expr.name, expr.span)

    def _infer_binary(self, ctx: Context, expr: BinaryExpr) -> Type:
        left = self.infer(ctx, expr.left)
        right = self.infer(ctx, expr.right)
        # eq is restricted to booleans here; see DESIGN.md
        expected = NAT if expr.op == "plus" else BOOL
        for side in (left, right):
            if not types_equal(side, expected):
                raise _mismatch(
                    type_name(expected), side, f"'{expr.op}'", expr.span,
                )
        return expected

    def _infer_if(self, ctx: Context, expr: IfExpr) -> Type:
        cond = self.infer(ctx, expr.condition)
        then_type = self.infer(ctx, expr.then_branch)
        else_type = self.infer(ctx, expr.else_branch)
        if not types_equal(cond, BOOL):
            raise _mismatch("Bool", cond, "'if' condition", expr.condition.span)
        if not same_tag(then_type, else_type):
            raise _mismatch(
                type_name(then_type), else_type, "'if' else branch",
                expr.else_branch.span,
            )
        return else_type

    def _infer_app(self, ctx: Context, expr: App) -> Type:
        head = self.infer(ctx, expr.head)
        args = [self.infer(ctx, a) for a in expr.args]
        if not isinstance(head, ArrowType):
            raise _mismatch("a function", head, "application head", expr.head.span)
        self._check_args(
            head.inputs, args, expr.args, f"'{format_expr(expr.head)}'", expr.span,
        )
        return head.output

    def _infer_construct(self, ctx: Context, expr: Construct) -> Type:
        info = ctx.resolve_constructor(expr.name)
        if info is None:
            raise UnboundName(expr.name, expr.span)
        args = [self.infer(ctx, a) for a in expr.args]
        self._check_args(
            info.fields, args, expr.args, f"constructor '{expr.name}'", expr.span,
        )
        return ConstructType(expr.name, tuple(args), DataType(info.data))

    def _check_args(
        self,
        inputs: Sequence[Type],
        args: Sequence[Type],
        arg_exprs: Sequence[Expr],
        what: str,
        span: Span | None,
    ) -> None:
        if len(inputs) != len(args):
            raise ArityMismatch(what, len(inputs), len(args), span)
        for i, (expected, actual) in enumerate(zip(inputs, args)):
            if not types_equal(expected, actual):
                raise _mismatch(
                    type_name(expected), actual,
                    f"argument {i + 1} of {what}", arg_exprs[i].span,
                )

    def _infer_match(self, ctx: Context, expr: Match) -> Type:
        subject = self.infer(ctx, expr.scrutinee)
        if len(expr.patterns) != len(expr.branches):
            raise ArityMismatch(
                "match", len(expr.patterns), len(expr.branches), expr.span,
            )
        if not expr.patterns:
            raise TypeMismatch("match has no branches", expr.span)

        result: Type | None = None
        for pattern, branch in zip(expr.patterns, expr.branches):
            arm_ctx = ctx.extend()
            try:
                matched = self.matcher.match(subject, pattern, arm_ctx)
            except LangError as e:
                raise e.at(pattern.span)
            if not matched:
                raise TypeMismatch(
                    f"pattern '{format_pattern(pattern)}' cannot match "
                    f"a value of type {type_name(subject)}",
                    pattern.span,
                )
            branch_type = self.infer(arm_ctx, branch)
            if result is None:
                result = branch_type
            elif not types_equal(result, branch_type):
                raise _mismatch(
                    type_name(result), branch_type, "match branch", branch.span,
                )
        return result


def typecheck(ctx: Context, expr: Expr) -> Type:
    """Return the type of ``expr`` under ``ctx``, or raise a LangError."""
    return Checker().infer(ctx, expr)


def check_program(ctx: Context, program: Program) -> None:
    """Check every statement in order, extending ``ctx`` as it goes."""
    Checker().check_program(ctx, program)
