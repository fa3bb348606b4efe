"""Shared test helpers for the matchbox test suite."""

from __future__ import annotations

import pytest

from matchbox.ast_nodes import Program
from matchbox.checker import check_program, typecheck
from matchbox.errors import LangError
from matchbox.interpreter import evaluate, execute
from matchbox.prelude import initial_scopes
from matchbox.reader import read, read_one
from matchbox.scope import Context
from matchbox.translator import Translator, parse_program
from matchbox.types import Type
from matchbox.values import Value


def program(source: str) -> Program:
    return parse_program(source, "<test>")


def check(source: str) -> Context:
    """Parse and check source, asserting no errors. Returns the context."""
    ctx, _ = initial_scopes()
    check_program(ctx, program(source))
    return ctx


def check_fails(source: str, error: type[LangError]) -> LangError:
    """Parse and check source, asserting the given error is raised."""
    ctx, _ = initial_scopes()
    with pytest.raises(error) as exc:
        check_program(ctx, program(source))
    return exc.value


def run(source: str, *, checked: bool = True) -> list[str]:
    """Parse, optionally check, and execute source. Returns the output log."""
    prog = program(source)
    ctx, env = initial_scopes()
    if checked:
        check_program(ctx, prog)
    return execute(env, prog)


def run_fails(source: str, error: type[LangError]) -> LangError:
    """Execute unchecked source, asserting the given runtime error is raised."""
    prog = program(source)
    _, env = initial_scopes()
    with pytest.raises(error) as exc:
        execute(env, prog)
    return exc.value


def type_of(expr: str, setup: str = "") -> Type:
    """Type of one expression after checking the ``setup`` program."""
    translator = Translator()
    ctx, _ = initial_scopes()
    check_program(ctx, translator.translate_program(read(setup)))
    return typecheck(ctx, translator.translate_expr(read_one(expr)))


def value_of(expr: str, setup: str = "") -> Value:
    """Value of one expression after running the ``setup`` program."""
    translator = Translator()
    _, env = initial_scopes()
    execute(env, translator.translate_program(read(setup)))
    return evaluate(env, translator.translate_expr(read_one(expr)))
