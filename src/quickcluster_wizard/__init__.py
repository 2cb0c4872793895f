"""Validation and resource-accounting engine for the QuickCluster wizard.

The engine accumulates the values submitted by each wizard step, checks
product parameter conditions, projects the region quota the request would
consume and decides whether the user may move between steps.
"""

from quickcluster_wizard.conditions import evaluate, parse_condition
from quickcluster_wizard.errors import (
    INVALID_CONDITIONS_TAG,
    QUOTA_TAG,
    ErrorMessage,
    ErrorTag,
    NavigationError,
    SessionClosedError,
    UnknownParameterError,
    WizardError,
    add_tag,
    append_message,
    clear_messages,
    remove_tag,
)
from quickcluster_wizard.navigation import StepState, can_advance
from quickcluster_wizard.schemas import (
    ClusterRequest,
    ParameterSchema,
    Product,
    Quota,
    Region,
)
from quickcluster_wizard.session import WizardSession
from quickcluster_wizard.types import MalformedConditionPolicy, StepId
from quickcluster_wizard.usage import project_usage, quota_exceeded
from quickcluster_wizard.values import merge_values

__version__ = "0.1.0"

__all__ = [
    # Session
    "WizardSession",
    "StepId",
    "StepState",
    "can_advance",
    # Engine functions
    "evaluate",
    "parse_condition",
    "project_usage",
    "quota_exceeded",
    "merge_values",
    "add_tag",
    "remove_tag",
    "append_message",
    "clear_messages",
    # Schemas
    "ClusterRequest",
    "ParameterSchema",
    "Product",
    "Quota",
    "Region",
    # Errors
    "ErrorMessage",
    "ErrorTag",
    "QUOTA_TAG",
    "INVALID_CONDITIONS_TAG",
    "MalformedConditionPolicy",
    "WizardError",
    "NavigationError",
    "SessionClosedError",
    "UnknownParameterError",
]
