"""Condition tree schemas attached to product parameters.

A parameter may carry a condition: a boolean expression over other
parameter values that must hold for the configuration to be accepted.
Trees are a tagged variant so every node kind is handled explicitly:

- leaf: ``variable <operator> value``
- and / or: a list of child trees
- not: exactly one child tree

Authors may write trees in a compact form, which ``normalize_condition``
expands before validation:

```yaml
condition:
  msg: "Three or more masters are required for HA clusters"
  data:
    and:
      - {variable: ha_enabled, operator: "==", value: true}
      - {variable: num_master_nodes, operator: ">=", value: 3}
```

The list form ``["and", [...], [...]]`` / ``["num_nodes", ">=", 3]`` is
accepted as well. A leaf written without an operator (``["num_nodes", 3]``)
is kept as a malformed leaf rather than rejected.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from quickcluster_wizard.types import OPERATOR_ALIASES, Operator

__all__ = [
    "ConditionLeaf",
    "ConditionAnd",
    "ConditionOr",
    "ConditionNot",
    "ConditionTree",
    "ParameterCondition",
    "normalize_condition",
]

_CONNECTIVES = ("and", "or", "not")


class ConditionLeaf(BaseModel):
    """Comparison of one variable against a literal."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = "leaf"
    variable: str
    operator: Operator | None = None
    value: Any = None

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize_operator(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower()
            return OPERATOR_ALIASES.get(key, key)
        return value

    @property
    def is_malformed(self) -> bool:
        return self.operator is None


class ConditionAnd(BaseModel):
    """True when every child is true."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    conditions: list[ConditionTree]


class ConditionOr(BaseModel):
    """True when at least one child is true."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    conditions: list[ConditionTree]


class ConditionNot(BaseModel):
    """Negation of a single child."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not"] = "not"
    condition: ConditionTree


ConditionTree = Annotated[
    Union[ConditionLeaf, ConditionAnd, ConditionOr, ConditionNot],
    Field(discriminator="kind"),
]

ConditionAnd.model_rebuild()
ConditionOr.model_rebuild()
ConditionNot.model_rebuild()


def normalize_condition(raw: Any) -> Any:
    """Expand the compact authoring forms into explicit ``kind`` dicts.

    Args:
        raw: A condition as written in a product schema (dict, list or an
            already-built tree model).

    Returns:
        A structure pydantic can validate as a ConditionTree. Anything not
        recognised is returned unchanged so validation reports it.

    Examples:
        >>> normalize_condition({"not": ["a", "==", 1]})
        {'kind': 'not', 'condition': {'kind': 'leaf', 'variable': 'a', 'operator': '==', 'value': 1}}
        >>> normalize_condition(["a", 1])
        {'kind': 'leaf', 'variable': 'a', 'operator': None, 'value': 1}
    """
    if isinstance(raw, BaseModel):
        return raw

    if isinstance(raw, dict):
        if "kind" in raw:
            kind = raw["kind"]
            if kind in ("and", "or"):
                return {
                    "kind": kind,
                    "conditions": [
                        normalize_condition(c) for c in raw.get("conditions", [])
                    ],
                }
            if kind == "not":
                return {"kind": "not", "condition": normalize_condition(raw.get("condition"))}
            return raw

        connective = [key for key in raw if key in _CONNECTIVES]
        if len(raw) == 1 and connective:
            kind = connective[0]
            body = raw[kind]
            if kind == "not":
                # {"not": [child]} is tolerated as well as {"not": child}
                if isinstance(body, list) and len(body) == 1 and _is_tree_like(body[0]):
                    body = body[0]
                return {"kind": "not", "condition": normalize_condition(body)}
            return {
                "kind": kind,
                "conditions": [normalize_condition(c) for c in body or []],
            }

        if "variable" in raw:
            return {
                "kind": "leaf",
                "variable": raw["variable"],
                "operator": raw.get("operator", raw.get("op")),
                "value": raw.get("value"),
            }
        return raw

    if isinstance(raw, (list, tuple)) and raw:
        head = raw[0]
        if isinstance(head, str) and head.lower() in _CONNECTIVES:
            kind = head.lower()
            children = list(raw[1:])
            if kind == "not":
                child = children[0] if len(children) == 1 else children
                return {"kind": "not", "condition": normalize_condition(child)}
            return {
                "kind": kind,
                "conditions": [normalize_condition(c) for c in children],
            }
        if len(raw) == 3:
            return {
                "kind": "leaf",
                "variable": raw[0],
                "operator": raw[1],
                "value": raw[2],
            }
        if len(raw) == 2:
            return {"kind": "leaf", "variable": raw[0], "operator": None, "value": raw[1]}

    return raw


def _is_tree_like(raw: Any) -> bool:
    return isinstance(raw, (dict, list, tuple, BaseModel))


class ParameterCondition(BaseModel):
    """A condition guarding a parameter plus the message shown on failure.

    Attributes:
        expression: Tree that must evaluate true. Read from ``expression``
            or the catalog field ``data``.
        message: Text shown to the user when the tree is false; may span
            several lines. Read from ``message`` or ``msg``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    expression: ConditionTree = Field(
        validation_alias=AliasChoices("expression", "data"),
    )
    message: str = Field(
        default="",
        validation_alias=AliasChoices("message", "msg"),
    )

    @field_validator("expression", mode="before")
    @classmethod
    def _expand_compact_form(cls, value: Any) -> Any:
        return normalize_condition(value)
