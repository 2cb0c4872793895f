"""Evaluation of parameter condition trees.

Conditions are evaluated against the flat mapping of wizard values. The
evaluator is total and never raises: a leaf that references an unanswered
variable is false, and a leaf with no operator follows the configured
MalformedConditionPolicy.

Usage:
    from quickcluster_wizard.conditions import evaluate, parse_condition

    tree = parse_condition(
        {"and": [["a", "==", 1], {"or": [["b", "==", 2], ["b", "==", 3]]}]}
    )
    evaluate(tree, {"a": 1, "b": 2})   # True
    evaluate(tree, {"a": 1, "b": 4})   # False
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import TypeAdapter

from quickcluster_wizard.schemas.conditions import (
    ConditionAnd,
    ConditionLeaf,
    ConditionNot,
    ConditionOr,
    ConditionTree,
    normalize_condition,
)
from quickcluster_wizard.types import (
    ORDERING_OPERATORS,
    MalformedConditionPolicy,
    Operator,
)

__all__ = [
    "evaluate",
    "parse_condition",
    "iter_malformed",
    "referenced_variables",
]

_TREE_ADAPTER: TypeAdapter[ConditionTree] = TypeAdapter(ConditionTree)


def parse_condition(raw: Any) -> ConditionTree:
    """Build a typed condition tree from any supported authoring form.

    Raises:
        pydantic.ValidationError: If the structure is not a condition tree.
    """
    return _TREE_ADAPTER.validate_python(normalize_condition(raw))


def evaluate(
    tree: ConditionTree,
    values: Mapping[str, Any],
    policy: MalformedConditionPolicy = MalformedConditionPolicy.FAIL,
) -> bool:
    """Evaluate a condition tree against the current values.

    Args:
        tree: Condition to evaluate.
        values: Flat variable -> value mapping.
        policy: Result used for leaves that have no operator.

    Returns:
        True if the condition holds.
    """
    if isinstance(tree, ConditionLeaf):
        return _evaluate_leaf(tree, values, policy)
    if isinstance(tree, ConditionAnd):
        return all(evaluate(child, values, policy) for child in tree.conditions)
    if isinstance(tree, ConditionOr):
        return any(evaluate(child, values, policy) for child in tree.conditions)
    if isinstance(tree, ConditionNot):
        return not evaluate(tree.condition, values, policy)
    raise TypeError(f"Unsupported condition node: {type(tree).__name__}")


def iter_malformed(tree: ConditionTree) -> Iterator[ConditionLeaf]:
    """Yield every leaf that lacks an operator."""
    if isinstance(tree, ConditionLeaf):
        if tree.is_malformed:
            yield tree
    elif isinstance(tree, (ConditionAnd, ConditionOr)):
        for child in tree.conditions:
            yield from iter_malformed(child)
    elif isinstance(tree, ConditionNot):
        yield from iter_malformed(tree.condition)


def referenced_variables(tree: ConditionTree) -> set[str]:
    """Collect the variable names a tree reads."""
    if isinstance(tree, ConditionLeaf):
        return {tree.variable}
    if isinstance(tree, (ConditionAnd, ConditionOr)):
        names: set[str] = set()
        for child in tree.conditions:
            names |= referenced_variables(child)
        return names
    if isinstance(tree, ConditionNot):
        return referenced_variables(tree.condition)
    return set()


def _evaluate_leaf(
    leaf: ConditionLeaf,
    values: Mapping[str, Any],
    policy: MalformedConditionPolicy,
) -> bool:
    if leaf.operator is None:
        return policy == MalformedConditionPolicy.SATISFY

    if leaf.variable not in values:
        return False
    actual = values[leaf.variable]
    expected = leaf.value
    op = leaf.operator

    if op == Operator.EQ:
        return _equals(actual, expected)
    if op == Operator.NE:
        return not _equals(actual, expected)
    if op == Operator.IN:
        return _member(actual, expected)
    if op == Operator.NOT_IN:
        return not _member(actual, expected)
    if op in ORDERING_OPERATORS:
        return _compare(actual, expected, op)
    return False


def _as_number(value: Any) -> float | None:
    """Numeric reading of a value, or None when it is not a number.

    Booleans are not numbers here; form inputs often deliver numbers as
    strings, so numeric strings count.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def _equals(actual: Any, expected: Any) -> bool:
    left, right = _as_number(actual), _as_number(expected)
    if left is not None and right is not None:
        return left == right
    if isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple)):
        return len(actual) == len(expected) and all(
            _equals(a, e) for a, e in zip(actual, expected)
        )
    if isinstance(actual, (list, tuple)) or isinstance(expected, (list, tuple)):
        return False
    if actual is None or expected is None:
        return actual is expected
    return _as_text(actual) == _as_text(expected)


def _member(actual: Any, expected: Any) -> bool:
    """Membership of ``actual`` in ``expected``.

    - list literal: actual (or every element of a list actual) is in it
    - string literal: actual is a substring of it
    - scalar literal with a list actual: the list contains the literal
    """
    if isinstance(expected, (list, tuple)):
        if isinstance(actual, (list, tuple)):
            return all(any(_equals(a, e) for e in expected) for a in actual)
        return any(_equals(actual, e) for e in expected)
    if isinstance(actual, (list, tuple)):
        return any(_equals(a, expected) for a in actual)
    if isinstance(expected, str) and actual is not None:
        return _as_text(actual) in expected
    return False


def _compare(actual: Any, expected: Any, op: Operator) -> bool:
    left, right = _as_number(actual), _as_number(expected)
    if left is None or right is None:
        return False
    if op == Operator.LT:
        return left < right
    if op == Operator.LE:
        return left <= right
    if op == Operator.GT:
        return left > right
    return left >= right
