"""Projection of resource usage and comparison against region quotas.

The projected usage of a pending request is always computed from scratch:

    total = baseline + sum(count_i * flavor_i)

over the counted node-count parameters of the product (the wizard counts
those shown on the configuration step). Node-count parameters are
recognised by name (``num_<role>_nodes`` or ``num_nodes``). The flavor of
each role is resolved in order from:

1. the companion parameter ``<role>_node_flavor`` (``node_flavor`` for
   ``num_nodes``): submitted value first, then its default;
2. a flavor named after the role (the product slug for ``num_nodes``);
3. the only flavor of the product, when it offers exactly one.

A role whose flavor cannot be resolved contributes nothing; use
``unresolved_node_counts`` to report it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from quickcluster_wizard.constants import (
    DEFAULT_FLAVOR_PARAM,
    FLAVOR_PARAM_TEMPLATE,
    QUOTA_EXCEEDED_TITLE,
)
from quickcluster_wizard.errors import ErrorMessage
from quickcluster_wizard.schemas.product import FlavorCatalog, ParameterSchema
from quickcluster_wizard.schemas.quota import QUOTA_FIELDS, Quota
from quickcluster_wizard.values import merge_values

__all__ = [
    "project_usage",
    "preview_usage",
    "quota_exceeded",
    "resolve_count",
    "resolve_flavor",
    "unresolved_node_counts",
]


def resolve_count(param: ParameterSchema, values: Mapping[str, Any]) -> int:
    """Effective node count: the submitted value, else the schema default.

    Values that are not finite non-negative numbers count as zero nodes.
    """
    raw = values[param.variable] if param.variable in values else param.default
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        count = int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        return 0
    return max(count, 0)


def resolve_flavor(
    param: ParameterSchema,
    parameters: Sequence[ParameterSchema],
    flavors: FlavorCatalog,
    values: Mapping[str, Any],
    product_slug: str = "",
) -> str | None:
    """Name of the flavor a node-count parameter consumes, if resolvable."""
    role = param.node_role
    if role is None:
        return None

    companion = FLAVOR_PARAM_TEMPLATE.format(role=role) if role else DEFAULT_FLAVOR_PARAM
    if companion in values and values[companion] is not None:
        selected = str(values[companion])
        if selected in flavors:
            return selected
    for other in parameters:
        if other.variable == companion and other.default is not None:
            if str(other.default) in flavors:
                return str(other.default)

    fixed = role or product_slug
    if fixed and fixed in flavors:
        return fixed

    if len(flavors) == 1:
        return next(iter(flavors))
    return None


def project_usage(
    parameters: Sequence[ParameterSchema],
    baseline: Quota,
    flavors: FlavorCatalog,
    values: Mapping[str, Any],
    product_slug: str = "",
    counted: Sequence[ParameterSchema] | None = None,
) -> Quota:
    """Project total region usage if the current configuration were created.

    Args:
        parameters: Parameter schemas of the selected product.
        baseline: Usage already committed in the region.
        flavors: The product's flavor catalog.
        values: Current wizard values.
        product_slug: Slug of the product name, naming the role of
            ``num_nodes``.
        counted: Parameters whose node counts are added. Defaults to all of
            ``parameters``, which are still searched for flavor companions.

    Returns:
        Baseline plus the resources requested by the counted node-count
        parameters.
    """
    total = baseline
    for param in parameters if counted is None else counted:
        if not param.is_node_count:
            continue
        flavor = resolve_flavor(param, parameters, flavors, values, product_slug)
        if flavor is None:
            continue
        count = resolve_count(param, values)
        if count:
            total = total + flavors[flavor].scale(count)
    return total


def preview_usage(
    parameters: Sequence[ParameterSchema],
    baseline: Quota,
    flavors: FlavorCatalog,
    values: Mapping[str, Any],
    draft: Mapping[str, Any],
    product_slug: str = "",
    counted: Sequence[ParameterSchema] | None = None,
) -> Quota:
    """Projection for unsaved form input layered over the current values."""
    return project_usage(
        parameters,
        baseline,
        flavors,
        merge_values(values, draft),
        product_slug,
        counted=counted,
    )


def unresolved_node_counts(
    parameters: Sequence[ParameterSchema],
    flavors: FlavorCatalog,
    values: Mapping[str, Any],
    product_slug: str = "",
) -> list[str]:
    """Variables of node-count parameters whose flavor cannot be resolved."""
    return [
        param.variable
        for param in parameters
        if param.is_node_count
        and resolve_flavor(param, parameters, flavors, values, product_slug) is None
    ]


def quota_exceeded(usage: Quota, limit: Quota) -> ErrorMessage | None:
    """Compare projected usage against a limit.

    Args:
        usage: Projected usage.
        limit: Region quota.

    Returns:
        One message listing every exceeded resource with its usage and
        limit, or None when everything fits.

    Example:
        >>> msg = quota_exceeded(Quota(num_vcpus=20), Quota(num_vcpus=16))
        >>> msg.details
        ('vCPUs: 20 requested, limit is 16',)
    """
    details = []
    for field_name, label, unit in QUOTA_FIELDS:
        used, allowed = usage.get(field_name), limit.get(field_name)
        if used > allowed:
            suffix = f" {unit}" if unit else ""
            details.append(
                f"{label}: {used}{suffix} requested, limit is {allowed}{suffix}"
            )
    if not details:
        return None
    return ErrorMessage(title=QUOTA_EXCEEDED_TITLE, details=tuple(details))
