"""Type representations for the matchbox type checker.

Types are explicit in the source (lambda parameters, constructor fields) and
synthesized bottom-up by the checker; nothing is inferred.
"""

from __future__ import annotations

from dataclasses import dataclass

# ── Types ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class PrimitiveType:
    name: str


@dataclass(frozen=True)
class ArrowType:
    inputs: tuple[Type, ...]
    output: Type


@dataclass(frozen=True)
class PairType:
    first: Type
    second: Type


@dataclass(frozen=True)
class DataType:
    """A user-declared algebraic data type, identified solely by name."""

    name: str


@dataclass(frozen=True)
class ConstructType:
    """The type of an applied constructor, tagged with its owning data type."""

    name: str
    arg_types: tuple[Type, ...]
    data: DataType


Type = PrimitiveType | ArrowType | PairType | DataType | ConstructType


# ── Built-in type constants ─────────────────────────────────────

NAT = PrimitiveType("Nat")
BOOL = PrimitiveType("Bool")
STR = PrimitiveType("Str")

BUILTINS: dict[str, Type] = {
    "Nat": NAT,
    "Bool": BOOL,
    "Str": STR,
}


# ── Type utilities ──────────────────────────────────────────────


def type_name(ty: Type) -> str:
    """Human-readable name, in surface syntax."""
    if isinstance(ty, PrimitiveType):
        return ty.name
    if isinstance(ty, ArrowType):
        parts = [type_name(t) for t in ty.inputs] + [type_name(ty.output)]
        return f"(-> {' '.join(parts)})"
    if isinstance(ty, PairType):
        return f"(pair {type_name(ty.first)} {type_name(ty.second)})"
    if isinstance(ty, DataType):
        return ty.name
    if isinstance(ty, ConstructType):
        return ty.data.name
    return str(ty)


def owning_data(ty: Type) -> DataType | None:
    """The nominal data type behind ``ty``, if it is one."""
    if isinstance(ty, DataType):
        return ty
    if isinstance(ty, ConstructType):
        return ty.data
    return None


def same_tag(a: Type, b: Type) -> bool:
    """Top-level shape agreement; a construct counts as its data type."""
    if owning_data(a) is not None and owning_data(b) is not None:
        return True
    if isinstance(a, PrimitiveType) and isinstance(b, PrimitiveType):
        return a.name == b.name
    return type(a) is type(b)


def types_equal(a: Type, b: Type) -> bool:
    """Structural equality, nominal for data types."""
    data_a = owning_data(a)
    data_b = owning_data(b)
    if data_a is not None or data_b is not None:
        return data_a is not None and data_b is not None and data_a.name == data_b.name
    if type(a) is not type(b):
        return False
    if isinstance(a, PrimitiveType) and isinstance(b, PrimitiveType):
        return a.name == b.name
    if isinstance(a, PairType) and isinstance(b, PairType):
        return types_equal(a.first, b.first) and types_equal(a.second, b.second)
    if isinstance(a, ArrowType) and isinstance(b, ArrowType):
        if len(a.inputs) != len(b.inputs):
            return False
        if not types_equal(a.output, b.output):
            return False
        return all(types_equal(x, y) for x, y in zip(a.inputs, b.inputs))
    return a == b
