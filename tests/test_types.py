"""Tests for type equality and type rendering."""

from __future__ import annotations

from matchbox.types import (
    BOOL,
    NAT,
    STR,
    ArrowType,
    ConstructType,
    DataType,
    PairType,
    owning_data,
    same_tag,
    type_name,
    types_equal,
)

LIST = DataType("List")
TREE = DataType("Tree")


class TestTypesEqual:
    def test_primitives(self):
        assert types_equal(NAT, NAT)
        assert not types_equal(NAT, BOOL)
        assert not types_equal(STR, BOOL)

    def test_pairs_are_structural(self):
        assert types_equal(PairType(NAT, BOOL), PairType(NAT, BOOL))
        assert not types_equal(PairType(NAT, BOOL), PairType(BOOL, NAT))

    def test_arrows_compare_inputs_and_output(self):
        assert types_equal(ArrowType((NAT,), BOOL), ArrowType((NAT,), BOOL))
        assert not types_equal(ArrowType((NAT,), BOOL), ArrowType((NAT,), NAT))
        assert not types_equal(ArrowType((NAT,), BOOL), ArrowType((BOOL,), BOOL))

    def test_arrow_arity_checked(self):
        assert not types_equal(ArrowType((NAT,), NAT), ArrowType((NAT, NAT), NAT))

    def test_data_is_nominal(self):
        assert types_equal(LIST, DataType("List"))
        assert not types_equal(LIST, TREE)

    def test_construct_equals_its_data(self):
        cons = ConstructType("Cons", (NAT, LIST), LIST)
        assert types_equal(cons, LIST)
        assert types_equal(LIST, cons)
        assert not types_equal(cons, TREE)

    def test_constructs_of_same_data_are_equal(self):
        nil = ConstructType("Nil", (), LIST)
        cons = ConstructType("Cons", (NAT, LIST), LIST)
        assert types_equal(nil, cons)

    def test_data_never_equals_primitive(self):
        assert not types_equal(LIST, NAT)
        assert not types_equal(NAT, ConstructType("Nil", (), LIST))

    def test_mixed_kinds(self):
        assert not types_equal(PairType(NAT, NAT), ArrowType((NAT,), NAT))


class TestSameTag:
    def test_primitive_names_must_agree(self):
        assert same_tag(NAT, NAT)
        assert not same_tag(NAT, BOOL)

    def test_shape_only_for_compound_types(self):
        assert same_tag(PairType(NAT, NAT), PairType(BOOL, STR))
        assert same_tag(ArrowType((NAT,), NAT), ArrowType((BOOL, BOOL), STR))

    def test_construct_counts_as_data(self):
        assert same_tag(ConstructType("Nil", (), LIST), LIST)


class TestTypeName:
    def test_primitive(self):
        assert type_name(NAT) == "Nat"

    def test_arrow(self):
        assert type_name(ArrowType((NAT, BOOL), STR)) == "(-> Nat Bool Str)"

    def test_pair(self):
        assert type_name(PairType(NAT, PairType(BOOL, STR))) == "(pair Nat (pair Bool Str))"

    def test_data_and_construct(self):
        assert type_name(LIST) == "List"
        assert type_name(ConstructType("Nil", (), LIST)) == "List"


def test_owning_data():
    assert owning_data(LIST) == LIST
    assert owning_data(ConstructType("Nil", (), LIST)) == LIST
    assert owning_data(NAT) is None
