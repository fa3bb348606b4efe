"""Host primitives available to every program.

Each primitive takes a fixed-arity vector of values and returns one value.
Its static signature is registered in the context under the same name.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from matchbox.errors import TypeMismatch
from matchbox.scope import Context, Environment
from matchbox.types import BOOL, NAT, STR, ArrowType, Type
from matchbox.values import (
    BooleanValue,
    NumberValue,
    Primitive,
    StringValue,
    Value,
    value_kind,
)


def _nat(name: str, v: Value) -> int:
    if not isinstance(v, NumberValue):
        raise TypeMismatch(f"'{name}' expects a number but a {value_kind(v)} was given")
    return v.value


def _str(name: str, v: Value) -> str:
    if not isinstance(v, StringValue):
        raise TypeMismatch(f"'{name}' expects a string but a {value_kind(v)} was given")
    return v.value


def _nat_op(name: str, op: Callable[[int, int], Value]) -> Callable[[Sequence[Value]], Value]:
    def fn(args: Sequence[Value]) -> Value:
        return op(_nat(name, args[0]), _nat(name, args[1]))
    return fn


def _str_op(name: str, op: Callable[[str, str], Value]) -> Callable[[Sequence[Value]], Value]:
    def fn(args: Sequence[Value]) -> Value:
        return op(_str(name, args[0]), _str(name, args[1]))
    return fn


# name -> (signature, implementation)
PRIMITIVES: dict[str, tuple[ArrowType, Callable[[Sequence[Value]], Value]]] = {
    # naturals never go below zero
    "-": (
        ArrowType((NAT, NAT), NAT),
        _nat_op("-", lambda a, b: NumberValue(max(a - b, 0))),
    ),
    "*": (
        ArrowType((NAT, NAT), NAT),
        _nat_op("*", lambda a, b: NumberValue(a * b)),
    ),
    "<": (
        ArrowType((NAT, NAT), BOOL),
        _nat_op("<", lambda a, b: BooleanValue(a < b)),
    ),
    "<=": (
        ArrowType((NAT, NAT), BOOL),
        _nat_op("<=", lambda a, b: BooleanValue(a <= b)),
    ),
    "nat=": (
        ArrowType((NAT, NAT), BOOL),
        _nat_op("nat=", lambda a, b: BooleanValue(a == b)),
    ),
    "str=": (
        ArrowType((STR, STR), BOOL),
        _str_op("str=", lambda a, b: BooleanValue(a == b)),
    ),
    "concat": (
        ArrowType((STR, STR), STR),
        _str_op("concat", lambda a, b: StringValue(a + b)),
    ),
    "show": (
        ArrowType((NAT,), STR),
        lambda args: StringValue(str(_nat("show", args[0]))),
    ),
}


def prelude_types() -> dict[str, Type]:
    return {name: sig for name, (sig, _) in PRIMITIVES.items()}


def prelude_values() -> dict[str, Value]:
    return {
        name: Primitive(name, fn, len(sig.inputs))
        for name, (sig, fn) in PRIMITIVES.items()
    }


def initial_scopes(*, prelude: bool = True) -> tuple[Context, Environment]:
    """Fresh root context and environment, optionally holding the prelude."""
    if not prelude:
        return Context(), Environment()
    return Context(bindings=prelude_types()), Environment(bindings=prelude_values())
