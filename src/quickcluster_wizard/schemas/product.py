"""Product catalog schemas: products, their parameters and flavors."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quickcluster_wizard.constants import NODE_COUNT_PATTERN
from quickcluster_wizard.schemas.conditions import ParameterCondition
from quickcluster_wizard.schemas.quota import Quota

__all__ = ["ParameterSchema", "Product", "FlavorCatalog", "product_slug"]


# Flavor name -> resources consumed by one node of that flavor
FlavorCatalog = dict[str, Quota]


def product_slug(name: str) -> str:
    """Collapse a product name into the key used for its default node role.

    Examples:
        >>> product_slug(" OpenShift 4 ")
        'openshift4'
    """
    return re.sub(r"\s", "", name.strip()).lower()


class ParameterSchema(BaseModel):
    """One configurable field of a product.

    Attributes:
        variable: Unique key of the field; the key it is stored under in
            the wizard values and in the submitted product_params.
        name: Human-readable label.
        description: Optional help text.
        type: Input type hint for the form (``integer``, ``string``, ...).
        default: Value used when the user has not answered the field.
        required: Whether the form insists on an answer.
        advanced: True when the field belongs to the Advanced Options step
            instead of the Cluster Configuration step.
        enum: Optional list of allowed values.
        condition: Optional cross-field constraint evaluated on submit.

    Example:
        ```yaml
        parameters:
          - variable: num_web_nodes
            name: Web nodes
            type: integer
            default: 2
          - variable: web_node_flavor
            name: Web node flavor
            default: small
            enum: [small, large]
            advanced: true
        ```
    """

    model_config = ConfigDict(frozen=True)

    variable: str = Field(min_length=1)
    name: str | None = None
    description: str | None = None
    type: str | None = None
    default: Any = None
    required: bool = False
    advanced: bool = False
    enum: list[Any] | None = None
    condition: ParameterCondition | None = None

    @property
    def node_role(self) -> str | None:
        """Role name when this parameter counts nodes, None otherwise.

        ``num_nodes`` has an empty role, meaning the product's own slug.
        """
        match = NODE_COUNT_PATTERN.match(self.variable)
        if not match:
            return None
        return match.group("role") or ""

    @property
    def is_node_count(self) -> bool:
        return self.node_role is not None

    @property
    def label(self) -> str:
        return self.name or self.variable


class Product(BaseModel):
    """A product users can provision clusters of.

    Attributes:
        id: Catalog identifier, stored as ``product_id`` in wizard values.
        name: Display name; its slug names the default node role.
        description: Optional description.
        parameters: Ordered parameter schemas.
        flavors: Per-node resource cost of each flavor the product offers.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None
    parameters: list[ParameterSchema] = Field(default_factory=list)
    flavors: FlavorCatalog = Field(default_factory=dict)

    @field_validator("flavors", mode="before")
    @classmethod
    def _drop_empty_flavors(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {name: quota or {} for name, quota in value.items()}
        return value

    @property
    def slug(self) -> str:
        return product_slug(self.name)

    @property
    def variables(self) -> set[str]:
        return {p.variable for p in self.parameters}

    def get_parameter(self, variable: str) -> ParameterSchema | None:
        for param in self.parameters:
            if param.variable == variable:
                return param
        return None

    def step_parameters(self, advanced: bool) -> list[ParameterSchema]:
        """Parameters owned by the configuration or the advanced step."""
        return [p for p in self.parameters if p.advanced == advanced]

    def conditional_parameters(self) -> list[ParameterSchema]:
        return [p for p in self.parameters if p.condition is not None]

    def defaults(self, advanced: bool | None = None) -> dict[str, Any]:
        """Default values, optionally restricted to one step."""
        return {
            p.variable: p.default
            for p in self.parameters
            if p.default is not None and (advanced is None or p.advanced == advanced)
        }
