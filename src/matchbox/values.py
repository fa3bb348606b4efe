"""Runtime values produced by the evaluator."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from matchbox.errors import ArityMismatch

if TYPE_CHECKING:
    from matchbox.ast_nodes import Expr
    from matchbox.scope import Environment


@dataclass(frozen=True)
class NumberValue:
    value: int


@dataclass(frozen=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True)
class StringValue:
    value: str  # without the surrounding quotes


@dataclass(frozen=True, eq=False)
class Closure:
    """A lambda paired with the environment live at its definition.

    The environment is shared by reference, so later assignments to its
    bindings are visible through the closure.
    """

    param: str
    body: Expr
    env: Environment


@dataclass(frozen=True, eq=False)
class Primitive:
    """A host function taking the full evaluated argument vector."""

    name: str
    fn: Callable[[Sequence[Value]], Value]
    arity: int | None = None

    def __call__(self, args: Sequence[Value]) -> Value:
        if self.arity is not None and len(args) != self.arity:
            raise ArityMismatch(f"'{self.name}'", self.arity, len(args))
        return self.fn(args)


@dataclass(frozen=True)
class PairValue:
    first: Value
    second: Value


@dataclass(frozen=True)
class Constructed:
    name: str
    fields: tuple[Value, ...] = ()


Value = Union[
    NumberValue, BooleanValue, StringValue, Closure, Primitive,
    PairValue, Constructed,
]


def value_kind(v: Value) -> str:
    """Short kind name for runtime error messages."""
    if isinstance(v, NumberValue):
        return "number"
    if isinstance(v, BooleanValue):
        return "boolean"
    if isinstance(v, StringValue):
        return "string"
    if isinstance(v, (Closure, Primitive)):
        return "function"
    if isinstance(v, PairValue):
        return "pair"
    if isinstance(v, Constructed):
        return f"'{v.name}' value"
    return type(v).__name__


def display_value(v: Value) -> str:
    """Deterministic textual rendering, used for ``print`` output."""
    if isinstance(v, NumberValue):
        return str(v.value)
    if isinstance(v, BooleanValue):
        return "true" if v.value else "false"
    if isinstance(v, StringValue):
        return f'"{v.value}"'
    if isinstance(v, Closure):
        return f"<closure {v.param}>"
    if isinstance(v, Primitive):
        return f"<primitive {v.name}>"
    if isinstance(v, PairValue):
        return f"(pair {display_value(v.first)} {display_value(v.second)})"
    if isinstance(v, Constructed):
        parts = [v.name] + [display_value(f) for f in v.fields]
        return f"({' '.join(parts)})"
    return str(v)
