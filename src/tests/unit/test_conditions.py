"""Unit tests for condition parsing and evaluation."""

import pytest
from pydantic import ValidationError

from quickcluster_wizard.conditions import (
    evaluate,
    iter_malformed,
    parse_condition,
    referenced_variables,
)
from quickcluster_wizard.schemas.conditions import (
    ConditionAnd,
    ConditionLeaf,
    ConditionNot,
    ConditionOr,
    ParameterCondition,
)
from quickcluster_wizard.types import MalformedConditionPolicy, Operator


def leaf(variable: str, operator: str | None, value: object) -> ConditionLeaf:
    return ConditionLeaf(variable=variable, operator=operator, value=value)


class TestTruthTable:
    """AND(a == 1, OR(b == 2, b == 3))."""

    @pytest.fixture
    def tree(self) -> ConditionAnd:
        return ConditionAnd(
            conditions=[
                leaf("a", "==", 1),
                ConditionOr(conditions=[leaf("b", "==", 2), leaf("b", "==", 3)]),
            ]
        )

    @pytest.mark.parametrize(
        "values, expected",
        [
            ({"a": 1, "b": 2}, True),
            ({"a": 1, "b": 3}, True),
            ({"a": 1, "b": 4}, False),
            ({"a": 2, "b": 2}, False),
            ({}, False),
        ],
    )
    def test_truth_table(self, tree: ConditionAnd, values: dict, expected: bool) -> None:
        """Test the documented truth table."""
        assert evaluate(tree, values) is expected

    def test_numeric_strings_compare_as_numbers(self, tree: ConditionAnd) -> None:
        """Test that form strings are compared numerically."""
        assert evaluate(tree, {"a": "1", "b": "2.0"}) is True


class TestLeafOperators:
    """Test cases for individual operators."""

    def test_absent_variable_is_false(self) -> None:
        """Test that unanswered variables never satisfy a leaf."""
        assert evaluate(leaf("x", "!=", 1), {}) is False
        assert evaluate(leaf("x", "not_in", [1]), {}) is False

    def test_not_negates_absent_leaf(self) -> None:
        """Test that NOT over an absent leaf is true."""
        tree = ConditionNot(condition=leaf("x", "==", 1))
        assert evaluate(tree, {}) is True

    def test_equality_on_strings_and_booleans(self) -> None:
        """Test string and boolean equality."""
        assert evaluate(leaf("flavor", "==", "small"), {"flavor": "small"})
        assert not evaluate(leaf("flavor", "==", "small"), {"flavor": "large"})
        assert evaluate(leaf("ha", "==", False), {"ha": False})
        assert evaluate(leaf("ha", "==", "true"), {"ha": True})
        assert not evaluate(leaf("ha", "==", 1), {"ha": True})

    def test_inequality(self) -> None:
        """Test the != operator."""
        assert evaluate(leaf("n", "!=", 3), {"n": 4})
        assert not evaluate(leaf("n", "!=", 3), {"n": "3"})

    def test_membership_in_list(self) -> None:
        """Test membership against a list literal."""
        tree = leaf("version", "in", ["4.11", "4.12"])
        assert evaluate(tree, {"version": "4.12"})
        assert not evaluate(tree, {"version": "4.10"})
        assert evaluate(leaf("n", "in", [1, 2]), {"n": "2"})

    def test_membership_of_list_value(self) -> None:
        """Test that every selected item must be allowed."""
        tree = leaf("addons", "in", ["dns", "lb", "monitoring"])
        assert evaluate(tree, {"addons": ["dns", "lb"]})
        assert not evaluate(tree, {"addons": ["dns", "gpu"]})

    def test_list_contains_scalar(self) -> None:
        """Test a scalar literal against a list value."""
        assert evaluate(leaf("addons", "in", "dns"), {"addons": ["dns", "lb"]})

    def test_substring_membership(self) -> None:
        """Test membership in a string literal."""
        assert evaluate(leaf("zone", "in", "a,b,c"), {"zone": "b"})

    def test_not_in(self) -> None:
        """Test the not_in operator."""
        assert evaluate(leaf("zone", "not_in", ["x"]), {"zone": "y"})
        assert not evaluate(leaf("zone", "not_in", ["y"]), {"zone": "y"})

    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            ("<", 3, True),
            ("<=", 2, True),
            (">", 2, False),
            (">=", 2, True),
            (">=", 3, False),
        ],
    )
    def test_ordering(self, operator: str, value: int, expected: bool) -> None:
        """Test numeric ordering operators."""
        assert evaluate(leaf("n", operator, value), {"n": 2}) is expected

    def test_ordering_on_non_numbers_is_false(self) -> None:
        """Test that ordering never compares strings."""
        assert evaluate(leaf("n", ">", 1), {"n": "many"}) is False

    def test_operator_aliases(self) -> None:
        """Test alternative operator spellings."""
        assert leaf("n", "eq", 1).operator == Operator.EQ
        assert leaf("n", "not in", [1]).operator == Operator.NOT_IN
        assert leaf("n", "GE", 1).operator == Operator.GE

    def test_unknown_operator_rejected(self) -> None:
        """Test that misspelled operators fail validation."""
        with pytest.raises(ValidationError):
            leaf("n", "~=", 1)


class TestMalformedConditions:
    """Test cases for leaves without an operator."""

    def test_fail_policy_is_default(self) -> None:
        """Test that malformed leaves fail by default."""
        tree = parse_condition(["num_nodes", 3])
        assert isinstance(tree, ConditionLeaf)
        assert tree.is_malformed
        assert evaluate(tree, {"num_nodes": 3}) is False

    def test_satisfy_policy(self) -> None:
        """Test the permissive policy."""
        tree = parse_condition(["num_nodes", 3])
        assert evaluate(tree, {}, MalformedConditionPolicy.SATISFY) is True

    def test_iter_malformed(self) -> None:
        """Test finding malformed leaves anywhere in a tree."""
        tree = parse_condition(
            {"and": [["a", "==", 1], {"not": ["b", 2]}, {"or": [["c", 3]]}]}
        )
        assert [node.variable for node in iter_malformed(tree)] == ["b", "c"]

    def test_evaluation_never_raises(self) -> None:
        """Test that malformed trees evaluate without exceptions."""
        tree = parse_condition({"or": [["b", 2], ["a", "==", 1]]})
        assert evaluate(tree, {"a": 1}) is True


class TestParseCondition:
    """Test cases for the authoring forms."""

    def test_dict_forms(self) -> None:
        """Test the compact dict form."""
        tree = parse_condition(
            {
                "and": [
                    {"variable": "a", "operator": "==", "value": 1},
                    {"not": {"variable": "b", "op": "in", "value": [1, 2]}},
                ]
            }
        )
        assert isinstance(tree, ConditionAnd)
        assert isinstance(tree.conditions[1], ConditionNot)
        assert tree.conditions[1].condition.operator == Operator.IN

    def test_list_forms(self) -> None:
        """Test the list form."""
        tree = parse_condition(["or", ["a", "==", 1], ["not", ["b", "==", 2]]])
        assert isinstance(tree, ConditionOr)
        assert isinstance(tree.conditions[1], ConditionNot)

    def test_explicit_kind(self) -> None:
        """Test dicts that already carry a kind."""
        tree = parse_condition(
            {"kind": "or", "conditions": [{"kind": "leaf", "variable": "a", "operator": "==", "value": 1}]}
        )
        assert isinstance(tree, ConditionOr)

    def test_invalid_structure(self) -> None:
        """Test that non-trees are rejected."""
        with pytest.raises(ValidationError):
            parse_condition({"xor": [1, 2], "other": 3})
        with pytest.raises(ValidationError):
            parse_condition(42)

    def test_referenced_variables(self) -> None:
        """Test collecting referenced variables."""
        tree = parse_condition(["and", ["a", "==", 1], ["not", ["b", "in", [1]]]])
        assert referenced_variables(tree) == {"a", "b"}

    def test_parameter_condition_aliases(self) -> None:
        """Test the catalog field names msg and data."""
        condition = ParameterCondition.model_validate(
            {"msg": "line one\nline two", "data": ["a", "==", 1]}
        )
        assert condition.message == "line one\nline two"
        assert isinstance(condition.expression, ConditionLeaf)
