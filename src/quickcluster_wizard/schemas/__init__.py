"""Pydantic schemas for the domain objects the wizard consumes and produces.

- quota: resource counters (limits, usage, flavor costs)
- conditions: condition trees attached to product parameters
- product: products, parameter schemas and flavor catalogs
- region: region quota and usage baseline
- cluster: the cluster request handed to the submission sink
"""

from quickcluster_wizard.schemas.cluster import ClusterRequest
from quickcluster_wizard.schemas.conditions import (
    ConditionAnd,
    ConditionLeaf,
    ConditionNot,
    ConditionOr,
    ConditionTree,
    ParameterCondition,
    normalize_condition,
)
from quickcluster_wizard.schemas.product import (
    FlavorCatalog,
    ParameterSchema,
    Product,
    product_slug,
)
from quickcluster_wizard.schemas.quota import QUOTA_FIELDS, Quota
from quickcluster_wizard.schemas.region import Region

__all__ = [
    # Quota
    "Quota",
    "QUOTA_FIELDS",
    # Conditions
    "ConditionLeaf",
    "ConditionAnd",
    "ConditionOr",
    "ConditionNot",
    "ConditionTree",
    "ParameterCondition",
    "normalize_condition",
    # Catalog
    "FlavorCatalog",
    "ParameterSchema",
    "Product",
    "product_slug",
    "Region",
    # Output
    "ClusterRequest",
]
