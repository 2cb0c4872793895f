"""Accumulation of per-step wizard values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from quickcluster_wizard.constants import RESERVED_KEYS
from quickcluster_wizard.types import WizardValues


def merge_values(current: Mapping[str, Any], incoming: Mapping[str, Any]) -> WizardValues:
    """Merge a step's submitted values into the accumulated values.

    Keys in ``incoming`` overwrite the same keys in ``current``; keys only in
    ``current`` are kept. Neither argument is modified.

    Args:
        current: Values accumulated so far.
        incoming: Values submitted by one step (only the keys it owns).

    Returns:
        New mapping with the merged values.
    """
    merged = dict(current)
    merged.update(incoming)
    return merged


def unknown_keys(values: Mapping[str, Any], variables: Iterable[str]) -> list[str]:
    """Keys that are neither reserved nor one of ``variables``."""
    allowed = set(variables) | set(RESERVED_KEYS)
    return sorted(key for key in values if key not in allowed)


def product_params(values: Mapping[str, Any]) -> WizardValues:
    """The product-specific part of the values, without reserved keys."""
    return {key: value for key, value in values.items() if key not in RESERVED_KEYS}
