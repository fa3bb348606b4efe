"""matchbox command-line driver."""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from pathlib import Path

import click

from matchbox import __version__
from matchbox.ast_nodes import Program
from matchbox.checker import Checker
from matchbox.config import MatchboxConfig, config_for
from matchbox.errors import CompileError, DiagnosticRenderer, LangError
from matchbox.interpreter import Interpreter, Output
from matchbox.prelude import initial_scopes
from matchbox.reader import read_one
from matchbox.translator import Translator, parse_program
from matchbox.types import type_name
from matchbox.values import display_value

logger = logging.getLogger(__name__)


def _setup_logging(trace: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if trace else logging.WARNING,
        format="%(name)s: %(message)s",
    )


def _renderer(config: MatchboxConfig, filename: str, source: str) -> DiagnosticRenderer:
    return DiagnosticRenderer(color=config.output.color, sources={filename: source})


def _load(file: str, config: MatchboxConfig) -> tuple[Program, DiagnosticRenderer]:
    """Read and translate ``file``; report front-end errors and exit."""
    source = Path(file).read_text()
    renderer = _renderer(config, file, source)
    try:
        program = parse_program(source, file)
    except CompileError as e:
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        raise SystemExit(1)
    return program, renderer


def _report(renderer: DiagnosticRenderer, error: LangError, phase: str) -> None:
    click.echo(renderer.render(error.to_diagnostic(note=phase)), err=True)


@click.group()
@click.version_option(__version__, prog_name="matchbox")
def main() -> None:
    """The matchbox language: type checker and interpreter."""


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--check/--no-check", "typecheck", default=None,
              help="Type check before running.")
@click.option("--keep-going", is_flag=True,
              help="Continue past a failing top-level statement.")
@click.option("--trace", is_flag=True, help="Log every evaluation step.")
@click.option("--no-prelude", is_flag=True, help="Start without host primitives.")
def run(
    file: str,
    typecheck: bool | None,
    keep_going: bool,
    trace: bool,
    no_prelude: bool,
) -> None:
    """Check and run a matchbox program, echoing what it prints."""
    config = config_for(Path(file))
    if typecheck is not None:
        config.run.typecheck = typecheck
    if keep_going:
        config.run.keep_going = True
    if trace:
        config.run.trace = True
    if no_prelude:
        config.run.prelude = False
    _setup_logging(config.run.trace)

    program, renderer = _load(file, config)
    logger.debug("loaded %s: %d statements", file, len(program))
    ctx, env = initial_scopes(prelude=config.run.prelude)
    checker = Checker()
    interpreter = Interpreter()

    if config.run.typecheck and not config.run.keep_going:
        try:
            checker.check_program(ctx, program)
        except LangError as e:
            _report(renderer, e, "while type checking")
            raise SystemExit(1)

    had_errors = False
    output: Output = []
    for stmt in program:
        printed = len(output)
        try:
            if config.run.typecheck and config.run.keep_going:
                try:
                    checker.check_stmt(ctx, stmt)
                except LangError as e:
                    _report(renderer, e, "while type checking")
                    had_errors = True
                    continue
            interpreter.execute_stmt(env, stmt, output)
        except LangError as e:
            _report(renderer, e, "at runtime")
            had_errors = True
            if not config.run.keep_going:
                raise SystemExit(1)
        finally:
            for line in output[printed:]:
                click.echo(line)

    if had_errors:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def check(file: str) -> None:
    """Type-check a matchbox program without running it."""
    config = config_for(Path(file))
    program, renderer = _load(file, config)
    ctx, _ = initial_scopes(prelude=config.run.prelude)
    try:
        Checker().check_program(ctx, program)
    except LangError as e:
        _report(renderer, e, "while type checking")
        raise SystemExit(1)
    click.echo(f"checked {file}: no errors")


@main.command(name="eval")
@click.argument("expr")
@click.option("--no-prelude", is_flag=True, help="Start without host primitives.")
def eval_cmd(expr: str, no_prelude: bool) -> None:
    """Type-check and evaluate a single expression."""
    config = config_for()
    renderer = _renderer(config, "<expr>", expr)
    try:
        node = Translator().translate_expr(read_one(expr, "<expr>"))
    except CompileError as e:
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        raise SystemExit(1)

    ctx, env = initial_scopes(prelude=config.run.prelude and not no_prelude)
    try:
        ty = Checker().infer(ctx, node)
    except LangError as e:
        _report(renderer, e, "while type checking")
        raise SystemExit(1)
    try:
        value = Interpreter().evaluate(env, node)
    except LangError as e:
        _report(renderer, e, "at runtime")
        raise SystemExit(1)
    click.echo(f"{display_value(value)} : {type_name(ty)}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a matchbox program."""
    program, _ = _load(file, config_for(Path(file)))
    for stmt in program:
        _dump_ast(stmt, 0)


def _dump_ast(node: object, depth: int) -> None:
    """Echo one AST node per line, children indented under their field name."""
    pad = "  " * depth
    if not is_dataclass(node):
        click.echo(f"{pad}{node!r}")
        return
    click.echo(f"{pad}{type(node).__name__}")
    for f in fields(node):
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        children = value if isinstance(value, tuple) else (value,)
        if any(is_dataclass(c) for c in children):
            click.echo(f"{pad}  {f.name}:")
            for child in children:
                _dump_ast(child, depth + 2)
        else:
            click.echo(f"{pad}  {f.name}: {value!r}")
