"""Tree-walking evaluator for matchbox programs."""

from __future__ import annotations

import logging
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
    NonExhaustiveMatch,
    Redefinition,
    TypeMismatch,
    UnboundName,
)
from matchbox.formatter import format_expr, format_pattern
from matchbox.patterns import PatternMatcher
from matchbox.scope import ConstructorInfo, Environment
from matchbox.values import (
    BooleanValue,
    Closure,
    Constructed,
    NumberValue,
    PairValue,
    Primitive,
    StringValue,
    Value,
    display_value,
    value_kind,
)

logger = logging.getLogger(__name__)

# The output of a program: every printed value, in order.
Output = list[str]


class ValueMatcher(PatternMatcher[Value]):
    """Pattern engine over runtime values."""

    def match_int(self, scrutinee: Value, value: int) -> bool:
        return isinstance(scrutinee, NumberValue) and scrutinee.value == value

    def match_bool(self, scrutinee: Value, value: bool) -> bool:
        return isinstance(scrutinee, BooleanValue) and scrutinee.value == value

    def match_string(self, scrutinee: Value, value: str) -> bool:
        return isinstance(scrutinee, StringValue) and scrutinee.value == value

    def split_pair(self, scrutinee: Value) -> tuple[Value, Value] | None:
        if isinstance(scrutinee, PairValue):
            return scrutinee.first, scrutinee.second
        return None

    def split_constructed(
        self, scrutinee: Value, info: ConstructorInfo,
    ) -> Sequence[Value] | None:
        if isinstance(scrutinee, Constructed) and scrutinee.name == info.name:
            return scrutinee.fields
        return None


def _constructor(name: str, arity: int) -> Primitive:
    return Primitive(name, lambda args: Constructed(name, tuple(args)), arity)


def _expect_bool(v: Value, what: str, expr: Expr) -> bool:
    if not isinstance(v, BooleanValue):
        raise TypeMismatch(
            f"{what} expects a boolean but a {value_kind(v)} was given", expr.span,
        )
    return v.value


class Interpreter:
    """Evaluates expressions and executes statements against an environment."""

    def __init__(self) -> None:
        self.matcher = ValueMatcher()

    # ── Public API ──────────────────────────────────────────────

    def execute(self, env: Environment, program: Program) -> Output:
        output: Output = []
        for stmt in program:
            self.execute_stmt(env, stmt, output)
        return output

    def execute_stmt(self, env: Environment, stmt: Stmt, output: Output) -> None:
        try:
            if isinstance(stmt, Define):
                logger.debug("define %s", stmt.name)
                env.set(stmt.name, self.evaluate(env, stmt.value))
            elif isinstance(stmt, Assign):
                self._assign(env, stmt)
            elif isinstance(stmt, Print):
                text = display_value(self.evaluate(env, stmt.value))
                logger.debug("print %s", text)
                output.append(text)
            elif isinstance(stmt, DataDecl):
                self._declare_data(env, stmt)
            else:
                raise TypeError(f"not a statement: {stmt!r}")
        except LangError as e:
            raise e.at(stmt.span)

    def evaluate(self, env: Environment, expr: Expr) -> Value:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("evaluating %s", format_expr(expr))
        try:
            return self._eval(env, expr)
        except LangError as e:
            raise e.at(expr.span)

    # ── Statements ──────────────────────────────────────────────

    def _assign(self, env: Environment, stmt: Assign) -> None:
        if not isinstance(stmt.target, Var):
            raise InvalidAssignTarget(
                f"cannot assign to non-variable '{format_expr(stmt.target)}'",
                stmt.target.span,
            )
        value = self.evaluate(env, stmt.value)
        logger.debug("assign %s", stmt.target.name)
        env.update(stmt.target.name, value)

    def _declare_data(self, env: Environment, decl: DataDecl) -> None:
        if env.resolve_data(decl.name) is not None:
            raise Redefinition(decl.name, decl.span)
        for c in decl.constructors:
            if env.has_local(c.name):
                raise Redefinition(c.name, c.span)
        env.declare_data(
            decl.name, [(c.name, c.arg_types) for c in decl.constructors],
        )
        for c in decl.constructors:
            env.set(c.name, _constructor(c.name, len(c.arg_types)))
        logger.debug(
            "data %s = %s", decl.name, " | ".join(c.name for c in decl.constructors),
        )

    # ── Expressions ─────────────────────────────────────────────

    def _eval(self, env: Environment, expr: Expr) -> Value:
        if isinstance(expr, NumLit):
            return NumberValue(expr.value)
        if isinstance(expr, BoolLit):
            return BooleanValue(expr.value)
        if isinstance(expr, Var):
            if env.has(expr.name):
                return env.get(expr.name)
            if expr.is_quoted:
                return StringValue(expr.name[1:-1])
            raise UnboundName(expr.name, expr.span)
        if isinstance(expr, Not):
            return BooleanValue(
                not _expect_bool(self.evaluate(env, expr.operand), "'not'", expr)
            )
        if isinstance(expr, BinaryExpr):
            return self._eval_binary(env, expr)
        if isinstance(expr, IfExpr):
            cond = self.evaluate(env, expr.condition)
            if _expect_bool(cond, "'if'", expr.condition):
                return self.evaluate(env, expr.then_branch)
            return self.evaluate(env, expr.else_branch)
        if isinstance(expr, Lambda):
            return Closure(expr.param, expr.body, env)
        if isinstance(expr, App):
            return self._eval_app(env, expr)
        if isinstance(expr, PairExpr):
            return PairValue(
                self.evaluate(env, expr.first), self.evaluate(env, expr.second),
            )
        if isinstance(expr, (Fst, Snd)):
            v = self.evaluate(env, expr.operand)
            if not isinstance(v, PairValue):
                what = "'fst'" if isinstance(expr, Fst) else "'snd'"
                raise TypeMismatch(
                    f"{what} expects a pair but a {value_kind(v)} was given",
                    expr.span,
                )
            return v.first if isinstance(expr, Fst) else v.second
        if isinstance(expr, Construct):
            return self._eval_construct(env, expr)
        if isinstance(expr, Match):
            return self._eval_match(env, expr)
        raise TypeError(f"not an expression: {expr!r}")

    def _eval_binary(self, env: Environment, expr: BinaryExpr) -> Value:
        left = self.evaluate(env, expr.left)
        right = self.evaluate(env, expr.right)
        if expr.op == "plus":
            if isinstance(left, NumberValue) and isinstance(right, NumberValue):
                return NumberValue(left.value + right.value)
            raise TypeMismatch(
                f"'plus' expects two numbers but a {value_kind(left)} "
                f"and a {value_kind(right)} were given",
                expr.span,
            )
        a = _expect_bool(left, f"'{expr.op}'", expr)
        b = _expect_bool(right, f"'{expr.op}'", expr)
        if expr.op == "eq":
            return BooleanValue(a == b)
        if expr.op == "and":
            return BooleanValue(a and b)
        if expr.op == "or":
            return BooleanValue(a or b)
        raise TypeError(f"unknown operator: {expr.op!r}")

    def _eval_app(self, env: Environment, expr: App) -> Value:
        head = self.evaluate(env, expr.head)
        args = [self.evaluate(env, a) for a in expr.args]
        if isinstance(head, Closure):
            if len(args) != 1:
                raise ArityMismatch(
                    f"'{format_expr(expr.head)}'", 1, len(args), expr.span,
                )
            return self.evaluate(head.env.extend({head.param: args[0]}), head.body)
        if isinstance(head, Primitive):
            return head(args)
        raise TypeMismatch(
            f"expected a function but found '{display_value(head)}'", expr.head.span,
        )

    def _eval_construct(self, env: Environment, expr: Construct) -> Value:
        fields = tuple(self.evaluate(env, a) for a in expr.args)
        info = env.resolve_constructor(expr.name)
        if info is None:
            raise UnboundName(expr.name, expr.span)
        if len(fields) != info.arity:
            raise ArityMismatch(
                f"constructor '{expr.name}'", info.arity, len(fields), expr.span,
            )
        return Constructed(expr.name, fields)

    def _eval_match(self, env: Environment, expr: Match) -> Value:
        subject = self.evaluate(env, expr.scrutinee)
        if len(expr.patterns) != len(expr.branches):
            raise ArityMismatch(
                "match", len(expr.patterns), len(expr.branches), expr.span,
            )
        for pattern, branch in zip(expr.patterns, expr.branches):
            arm_env = env.extend()
            try:
                matched = self.matcher.match(subject, pattern, arm_env)
            except LangError as e:
                raise e.at(pattern.span)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "match %s against %s: %s",
                    display_value(subject), format_pattern(pattern), matched,
                )
            if matched:
                return self.evaluate(arm_env, branch)
        raise NonExhaustiveMatch(
            f"no pattern matched '{display_value(subject)}'", expr.span,
        )


def evaluate(env: Environment, expr: Expr) -> Value:
    """Reduce ``expr`` to a value under ``env``, or raise a LangError."""
    return Interpreter().evaluate(env, expr)


def execute(env: Environment, program: Program) -> Output:
    """Run ``program`` in order and return the printed lines."""
    return Interpreter().execute(env, program)
