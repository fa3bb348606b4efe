"""Tests for the matchbox type checker."""

from __future__ import annotations

import pytest

from matchbox.ast_nodes import Match, NumLit
from matchbox.checker import typecheck
from matchbox.errors import (
    ArityMismatch,
    CompileError,
    InvalidAssignTarget,
    Redefinition,
    TypeMismatch,
    UnboundName,
)
from matchbox.prelude import initial_scopes
from matchbox.types import (
    BOOL,
    NAT,
    STR,
    ArrowType,
    ConstructType,
    DataType,
    PairType,
    types_equal,
)
from tests.helpers import check, check_fails, type_of

LIST_DECL = "(data List (Nil) (Cons Nat List))\n"
LIST = DataType("List")


class TestLiteralsAndOperators:
    def test_literals(self):
        assert type_of("5") == NAT
        assert type_of("true") == BOOL
        assert type_of('"hello"') == STR

    def test_plus(self):
        assert type_of("(+ 1 2)") == NAT

    def test_plus_rejects_bool(self):
        with pytest.raises(TypeMismatch):
            type_of("(+ 1 true)")

    def test_logic(self):
        assert type_of("(and true (or false (not true)))") == BOOL

    def test_not_rejects_nat(self):
        with pytest.raises(TypeMismatch):
            type_of("(not 1)")

    def test_eq_on_booleans(self):
        assert type_of("(= true false)") == BOOL

    def test_eq_rejects_numbers(self):
        with pytest.raises(TypeMismatch):
            type_of("(= 1 1)")

    def test_unbound_variable(self):
        with pytest.raises(UnboundName) as exc:
            type_of("(+ x 1)")
        assert exc.value.name == "x"


class TestPairs:
    def test_fst_of_pair(self):
        assert type_of("(fst (pair 1 true))") == NAT

    def test_snd_of_pair(self):
        assert type_of("(snd (pair 1 true))") == BOOL

    def test_nested_pair(self):
        assert type_of("(pair 1 (pair true 2))") == PairType(NAT, PairType(BOOL, NAT))

    def test_fst_rejects_non_pair(self):
        with pytest.raises(TypeMismatch):
            type_of("(fst 1)")


class TestIf:
    def test_if(self):
        assert type_of("(if true 1 2)") == NAT

    def test_condition_must_be_bool(self):
        with pytest.raises(TypeMismatch):
            type_of("(if 1 2 3)")

    def test_branch_tags_must_agree(self):
        with pytest.raises(TypeMismatch):
            type_of("(if true 1 false)")

    def test_else_type_returned_for_same_shape(self):
        ty = type_of("(if true (pair 1 2) (pair true false))")
        assert ty == PairType(BOOL, BOOL)


class TestFunctions:
    def test_lambda(self):
        assert type_of("(lambda x Nat (+ x 1))") == ArrowType((NAT,), NAT)

    def test_lambda_param_shadows(self):
        ty = type_of("(lambda x Bool x)", "(define x 1)")
        assert ty == ArrowType((BOOL,), BOOL)

    def test_application(self):
        assert type_of("((lambda x Nat (pair x x)) 1)") == PairType(NAT, NAT)

    def test_curried(self):
        setup = "(define add (lambda x Nat (lambda y Nat (+ x y))))"
        assert type_of("add", setup) == ArrowType((NAT,), ArrowType((NAT,), NAT))
        assert type_of("((add 1) 2)", setup) == NAT

    def test_argument_type_checked(self):
        with pytest.raises(TypeMismatch):
            type_of("((lambda x Nat x) true)")

    def test_argument_count_checked(self):
        with pytest.raises(ArityMismatch):
            type_of("((lambda x Nat x) 1 2)")

    def test_head_must_be_function(self):
        with pytest.raises(TypeMismatch):
            type_of("(1 2)")

    def test_prelude_primitive(self):
        assert type_of("(- 5 2)") == NAT
        assert type_of('(concat "a" (show 1))') == STR

    def test_prelude_arity(self):
        with pytest.raises(ArityMismatch):
            type_of("(- 5)")

    def test_higher_order_argument(self):
        setup = "(define twice (lambda f (-> Nat Nat) (lambda x Nat (f (f x)))))"
        assert type_of("((twice (lambda n Nat (+ n 1))) 0)", setup) == NAT


class TestData:
    def test_constructor_signatures(self):
        ctx = check(LIST_DECL)
        assert ctx.get("Nil") == LIST
        assert ctx.get("Cons") == ArrowType((NAT, LIST), LIST)

    def test_construct_type_tagged_with_data(self):
        ty = type_of("(Cons 1 Nil)", LIST_DECL)
        assert isinstance(ty, ConstructType)
        assert ty.data == LIST
        assert types_equal(ty, LIST)

    def test_construct_argument_checked(self):
        with pytest.raises(TypeMismatch):
            type_of("(Cons true Nil)", LIST_DECL)

    def test_construct_arity_checked(self):
        with pytest.raises(ArityMismatch):
            type_of("(Cons 1)", LIST_DECL)

    def test_duplicate_data(self):
        check_fails("(data A (X))\n(data A (Y))\n", Redefinition)

    def test_constructor_in_two_types(self):
        check_fails("(data A (X))\n(data B (X))\n", Redefinition)

    def test_constructor_clashing_with_definition(self):
        check_fails("(define X 1)\n(data A (X))\n", Redefinition)

    def test_field_of_later_type_is_rejected(self):
        # translation already rejects unknown type names
        with pytest.raises(CompileError):
            check("(data A (MkA B))\n(data B (MkB))\n")

    def test_construct_under_shadowing_parameter(self):
        check(
            LIST_DECL
            + "(define f (lambda Cons Nat (Cons Cons Nil)))\n"
            "(print (f 4))\n"
        )

    def test_pattern_fields_under_shadowing_parameter(self):
        ctx = check(
            LIST_DECL
            + "(define xs (Cons 1 Nil))\n"
            "(define g (lambda Cons Bool (match xs ((Cons h t) h _ 0))))\n"
        )
        assert ctx.get("g") == ArrowType((BOOL,), NAT)

    def test_shadowing_signature_cannot_retype_fields(self):
        with pytest.raises(TypeMismatch):
            type_of(
                "(lambda Cons (-> Bool Bool) (match (Cons 1 Nil) ((Cons h t) (not h))))",
                LIST_DECL,
            )

    def test_data_with_pair_and_arrow_fields(self):
        ctx = check("(data Box (MkBox (pair Nat Bool) (-> Nat Nat)))\n")
        assert ctx.get("MkBox") == ArrowType(
            (PairType(NAT, BOOL), ArrowType((NAT,), NAT)), DataType("Box"),
        )


class TestMatch:
    def test_fizzbuzz_scenario(self):
        ty = type_of(
            '(match (Cons 0 (Cons 0 Nil)) ((Cons 0 (Cons 0 Nil)) "fizzbuzz" _ "other"))',
            LIST_DECL,
        )
        assert ty == STR

    def test_bindings_take_field_types(self):
        ty = type_of("(match (Cons 1 Nil) (Nil 0 (Cons h t) h))", LIST_DECL)
        assert ty == NAT

    def test_branch_types_must_agree(self):
        with pytest.raises(TypeMismatch):
            type_of("(match 1 (0 true _ 1))")

    def test_literal_of_wrong_type(self):
        with pytest.raises(TypeMismatch):
            type_of("(match 1 (true 0 _ 1))")

    def test_constructor_of_wrong_type(self):
        with pytest.raises(TypeMismatch):
            type_of("(match 1 (Nil 0 _ 1))", LIST_DECL)

    def test_pattern_arity(self):
        with pytest.raises(ArityMismatch):
            type_of("(match Nil ((Cons x) 1))", LIST_DECL)

    def test_pair_pattern(self):
        assert type_of("(match (pair 1 true) ((pair n b) b))") == BOOL

    def test_bindings_do_not_leak_between_arms(self):
        with pytest.raises(UnboundName):
            type_of("(match 1 (x 0 _ x))")

    def test_repeated_binding(self):
        with pytest.raises(Redefinition):
            type_of("(match (pair 1 2) ((pair x x) x))")

    def test_no_branches(self):
        ctx, _ = initial_scopes()
        with pytest.raises(TypeMismatch):
            typecheck(ctx, Match(NumLit(1), (), ()))

    def test_pattern_branch_count(self):
        ctx, _ = initial_scopes()
        with pytest.raises(ArityMismatch):
            typecheck(ctx, Match(NumLit(1), (), (NumLit(2),)))


class TestStatements:
    def test_define_extends_context(self):
        ctx = check("(define x 1)\n(define y (pair x true))\n")
        assert ctx.get("y") == PairType(NAT, BOOL)

    def test_redefinition(self):
        err = check_fails("(define x 1)\n(define x 2)\n", Redefinition)
        assert err.span is not None
        assert err.span.start_line == 2

    def test_assign_same_type(self):
        check("(define x 1)\n(assign x 2)\n")

    def test_assign_type_mismatch(self):
        check_fails("(define x 1)\n(assign x true)\n", TypeMismatch)

    def test_assign_unbound(self):
        check_fails("(assign x 1)\n", UnboundName)

    def test_assign_non_variable(self):
        check_fails("(define x 1)\n(assign (+ x 1) 2)\n", InvalidAssignTarget)

    def test_print_checks_expression(self):
        check_fails("(print (+ 1 true))\n", TypeMismatch)

    def test_recursive_function_through_assign(self):
        check(
            LIST_DECL
            + "(define sum (lambda l List 0))\n"
            "(assign sum (lambda l List (match l (Nil 0 (Cons h t) (+ h (sum t))))))\n"
        )

    def test_error_points_at_innermost_expression(self):
        err = check_fails("(define x (+ 1 true))", TypeMismatch)
        assert err.span.start_line == 1
        assert err.span.start_col == 11

    def test_checking_is_deterministic(self):
        source = "(define x (pair 1 true))\n(print (snd x))\n"
        first = check(source)
        second = check(source)
        assert first.get("x") == second.get("x")
