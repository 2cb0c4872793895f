"""Constants shared across the wizard engine."""

from __future__ import annotations

import re

# Keys owned by the Product, Region and Review steps rather than by a
# product's parameter schema. They are stripped from product_params.
KEY_NAME = "name"
KEY_REGION = "region_id"
KEY_PRODUCT = "product_id"
KEY_EXPIRATION = "reservation_expiration"

RESERVED_KEYS = (KEY_NAME, KEY_REGION, KEY_PRODUCT, KEY_EXPIRATION)

# num_<role>_nodes, or plain num_nodes for single-role products
NODE_COUNT_PATTERN = re.compile(r"^num_(?:(?P<role>\w+?)_)?nodes$")

# Companion parameter selecting the flavor of a node role
FLAVOR_PARAM_TEMPLATE = "{role}_node_flavor"
DEFAULT_FLAVOR_PARAM = "node_flavor"

INVALID_CONDITIONS_TITLE = "Invalid parameter input detected in the previous step(s)"
QUOTA_EXCEEDED_TITLE = "Quota exceeded"

DEFAULT_RESERVATION_DAYS = 7
