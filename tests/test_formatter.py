"""Tests for the surface-syntax formatter and value display."""

from __future__ import annotations

from matchbox.formatter import Formatter, format_expr, format_pattern
from matchbox.reader import read_one
from matchbox.scope import Environment
from matchbox.translator import Translator, parse_program
from matchbox.values import (
    BooleanValue,
    Closure,
    Constructed,
    NumberValue,
    PairValue,
    Primitive,
    StringValue,
    display_value,
)


def read_expr(source: str):
    return Translator().translate_expr(read_one(source))


PROGRAM = """\
(data List (Nil) (Cons Nat List))
(define len (lambda l List 0))
(assign len (lambda l List (match l (Nil 0 (Cons _ t) (+ 1 (len t))))))
(define p (pair (not true) (and false (or true (= true false)))))
(print (if (fst p) (len (Cons 1 Nil)) (snd p)))
(print (match (pair 1 "s") ((pair 1 "s") "yes" (pair x y) y)))
"""


class TestFormatter:
    def test_program_reads_back_equal(self):
        prog = parse_program(PROGRAM)
        text = Formatter().format(prog)
        assert parse_program(text) == prog

    def test_formatting_is_stable(self):
        once = Formatter().format(parse_program(PROGRAM))
        assert Formatter().format(parse_program(once)) == once

    def test_one_statement_per_line(self):
        text = Formatter().format(parse_program("(define x 1) (print x)"))
        assert text == "(define x 1)\n(print x)\n"

    def test_expressions(self):
        assert format_expr(read_expr("(+ 1 (f x y))")) == "(+ 1 (f x y))"
        assert format_expr(read_expr("(lambda f (-> Nat (pair Nat Bool)) f)")) == (
            "(lambda f (-> Nat (pair Nat Bool)) f)"
        )

    def test_data_declaration(self):
        text = Formatter().format(parse_program("(data Color Red (Mix Color Color))"))
        assert text == "(data Color (Red) (Mix Color Color))\n"

    def test_patterns(self):
        m = read_expr('(match v ((pair _ "a b") 1 7 2 false 3))')
        assert [format_pattern(p) for p in m.patterns] == [
            '(pair _ "a b")', "7", "false",
        ]


class TestDisplayValue:
    def test_scalars(self):
        assert display_value(NumberValue(0)) == "0"
        assert display_value(BooleanValue(True)) == "true"
        assert display_value(StringValue("hi")) == '"hi"'

    def test_pair(self):
        v = PairValue(NumberValue(1), PairValue(BooleanValue(False), StringValue("")))
        assert display_value(v) == '(pair 1 (pair false ""))'

    def test_constructed(self):
        v = Constructed("Cons", (NumberValue(5), Constructed("Cons", (NumberValue(3), Constructed("Nil")))))
        assert display_value(v) == "(Cons 5 (Cons 3 (Nil)))"

    def test_functions(self):
        closure = Closure("x", read_expr("x"), Environment())
        assert display_value(closure) == "<closure x>"
        assert display_value(Primitive("show", lambda args: args[0], 1)) == "<primitive show>"
