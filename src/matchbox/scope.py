"""Lexically scoped name tables for the checker and the evaluator."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from matchbox.errors import Redefinition, UnboundName

if TYPE_CHECKING:
    from matchbox.types import Type
    from matchbox.values import Value

T = TypeVar("T")


@dataclass(frozen=True)
class ConstructorInfo:
    name: str
    data: str
    fields: tuple[Type, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.fields)


class DataRegistry:
    """Declared data types and their constructors, shared by a scope chain."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[ConstructorInfo, ...]] = {}
        self._constructors: dict[str, ConstructorInfo] = {}

    def declare(
        self, name: str, constructors: Iterable[tuple[str, Sequence[Type]]],
    ) -> None:
        """Register ``name`` with ``(constructor, field types)`` pairs."""
        if name in self._data:
            raise Redefinition(name)
        infos: list[ConstructorInfo] = []
        for ctor, fields in constructors:
            if ctor in self._constructors or any(i.name == ctor for i in infos):
                raise Redefinition(ctor)
            infos.append(ConstructorInfo(ctor, name, tuple(fields)))
        self._data[name] = tuple(infos)
        for info in infos:
            self._constructors[info.name] = info

    def data(self, name: str) -> tuple[ConstructorInfo, ...] | None:
        return self._data.get(name)

    def constructor(self, name: str) -> ConstructorInfo | None:
        return self._constructors.get(name)


class Scope(Generic[T]):
    """A single lexical scope level, linked to its parent.

    ``set`` only ever touches this level; ``update`` only ever touches the
    nearest level that already owns the name.
    """

    def __init__(
        self,
        parent: Scope[T] | None = None,
        bindings: Mapping[str, T] | None = None,
    ) -> None:
        self.parent = parent
        self._bindings: dict[str, T] = dict(bindings or {})
        self.registry: DataRegistry = (
            parent.registry if parent is not None else DataRegistry()
        )

    def has(self, name: str) -> bool:
        """True if ``name`` is bound here or in any ancestor."""
        return self._owner(name) is not None

    def has_local(self, name: str) -> bool:
        return name in self._bindings

    def get(self, name: str) -> T:
        owner = self._owner(name)
        if owner is None:
            raise UnboundName(name)
        return owner._bindings[name]

    def set(self, name: str, value: T) -> None:
        """Bind ``name`` in this scope. Raises Redefinition if already bound here."""
        if name in self._bindings:
            raise Redefinition(name)
        self._bindings[name] = value

    def update(self, name: str, value: T) -> None:
        """Rebind ``name`` in the nearest scope that owns it."""
        owner = self._owner(name)
        if owner is None:
            raise UnboundName(name)
        owner._bindings[name] = value

    def extend(self, initial: Mapping[str, T] | None = None) -> Scope[T]:
        """Allocate a child scope linked to this one."""
        return type(self)(parent=self, bindings=initial)

    def names(self) -> list[str]:
        """Names bound at this level only."""
        return list(self._bindings)

    def _owner(self, name: str) -> Scope[T] | None:
        scope: Scope[T] | None = self
        while scope is not None:
            if name in scope._bindings:
                return scope
            scope = scope.parent
        return None

    # ── Data registry ───────────────────────────────────────────

    def declare_data(
        self, name: str, constructors: Iterable[tuple[str, Sequence[Type]]],
    ) -> None:
        self.registry.declare(name, constructors)

    def resolve_data(self, name: str) -> tuple[ConstructorInfo, ...] | None:
        return self.registry.data(name)

    def resolve_constructor(self, name: str) -> ConstructorInfo | None:
        return self.registry.constructor(name)


class Context(Scope["Type"]):
    """Static scope: names to types."""


class Environment(Scope["Value"]):
    """Runtime scope: names to values."""
