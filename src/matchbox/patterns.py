"""Pattern classification and the shared pattern-matching engine.

The same first-match algorithm runs over types in the checker and over
values in the evaluator. Subclasses supply the comparison predicates; the
traversal, arity validation and binding discipline live here.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Container, Sequence
from typing import Generic, TypeVar

from matchbox.ast_nodes import (
    BindingPattern,
    BoolLiteralPattern,
    ConstructorPattern,
    IntLiteralPattern,
    PairPattern,
    Pattern,
    StringLiteralPattern,
    WildcardPattern,
)
from matchbox.errors import ArityMismatch, UnboundName
from matchbox.scope import ConstructorInfo, Scope
from matchbox.source import Span

S = TypeVar("S")

PAIR_HEAD = "pair"
WILDCARD = "_"

_INT_RE = re.compile(r"^\d+$")


def is_string_literal(text: str) -> bool:
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')


def classify_binding(
    text: str,
    nullary_constructors: Container[str] = (),
    span: Span | None = None,
) -> Pattern:
    """Classify the textual form of an atomic pattern, once."""
    if text == WILDCARD:
        return WildcardPattern(span=span)
    if _INT_RE.match(text):
        return IntLiteralPattern(int(text), span=span)
    if text in ("true", "false"):
        return BoolLiteralPattern(text == "true", span=span)
    if is_string_literal(text):
        return StringLiteralPattern(text[1:-1], span=span)
    if text in nullary_constructors:
        return ConstructorPattern(text, (), span=span)
    return BindingPattern(text, span=span)


def structured_pattern(
    head: str, subpatterns: Sequence[Pattern], span: Span | None = None,
) -> Pattern:
    """Resolve a pattern head marker to a pair or constructor pattern."""
    if head == PAIR_HEAD:
        if len(subpatterns) != 2:
            raise ArityMismatch("pair pattern", 2, len(subpatterns), span)
        return PairPattern(subpatterns[0], subpatterns[1], span=span)
    return ConstructorPattern(head, tuple(subpatterns), span=span)


class PatternMatcher(ABC, Generic[S]):
    """Decides whether a pattern applies to a scrutinee of kind ``S``.

    Fresh bindings are written into the scope passed to ``match``; callers
    hand in a new child scope per attempt so a failed attempt leaves no
    trace.
    """

    def match(self, scrutinee: S, pattern: Pattern, scope: Scope[S]) -> bool:
        if isinstance(pattern, WildcardPattern):
            return True
        if isinstance(pattern, BindingPattern):
            scope.set(pattern.name, scrutinee)
            return True
        if isinstance(pattern, IntLiteralPattern):
            return self.match_int(scrutinee, pattern.value)
        if isinstance(pattern, BoolLiteralPattern):
            return self.match_bool(scrutinee, pattern.value)
        if isinstance(pattern, StringLiteralPattern):
            return self.match_string(scrutinee, pattern.value)
        if isinstance(pattern, PairPattern):
            parts = self.split_pair(scrutinee)
            if parts is None:
                return False
            return (
                self.match(parts[0], pattern.first, scope)
                and self.match(parts[1], pattern.second, scope)
            )
        if isinstance(pattern, ConstructorPattern):
            info = scope.resolve_constructor(pattern.name)
            if info is None:
                raise UnboundName(pattern.name, pattern.span)
            if len(pattern.args) != info.arity:
                raise ArityMismatch(
                    f"pattern '{pattern.name}'", info.arity, len(pattern.args),
                    pattern.span,
                )
            fields = self.split_constructed(scrutinee, info)
            if fields is None:
                return False
            if len(fields) != len(pattern.args):
                raise ArityMismatch(
                    f"pattern '{pattern.name}'", len(fields), len(pattern.args),
                    pattern.span,
                )
            return all(
                self.match(f, p, scope) for f, p in zip(fields, pattern.args)
            )
        raise TypeError(f"not a pattern: {pattern!r}")

    @abstractmethod
    def match_int(self, scrutinee: S, value: int) -> bool: ...

    @abstractmethod
    def match_bool(self, scrutinee: S, value: bool) -> bool: ...

    @abstractmethod
    def match_string(self, scrutinee: S, value: str) -> bool: ...

    @abstractmethod
    def split_pair(self, scrutinee: S) -> tuple[S, S] | None:
        """Components of a pair scrutinee, or None if it is not a pair."""

    @abstractmethod
    def split_constructed(
        self, scrutinee: S, info: ConstructorInfo,
    ) -> Sequence[S] | None:
        """Fields of a scrutinee built by ``info``, or None if it was not."""
