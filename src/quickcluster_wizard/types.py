"""Type definitions and enums for quickcluster-wizard."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any


class StepId(IntEnum):
    """Wizard steps, in the order they are walked."""

    PRODUCT = 1
    REGION = 2
    CONFIGURATION = 3
    ADVANCED = 4
    REVIEW = 5

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    StepId.PRODUCT: "Product",
    StepId.REGION: "Region",
    StepId.CONFIGURATION: "Cluster Configuration",
    StepId.ADVANCED: "Advanced Option",
    StepId.REVIEW: "Review",
}

FIRST_STEP = StepId.PRODUCT
LAST_STEP = StepId.REVIEW


class Operator(str, Enum):
    """Comparison operators allowed in a condition leaf."""

    EQ = "=="
    NE = "!="
    IN = "in"
    NOT_IN = "not_in"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


# Alternative spellings accepted when authoring product schemas
OPERATOR_ALIASES = {
    "=": Operator.EQ,
    "eq": Operator.EQ,
    "ne": Operator.NE,
    "<>": Operator.NE,
    "not in": Operator.NOT_IN,
    "lt": Operator.LT,
    "le": Operator.LE,
    "gt": Operator.GT,
    "ge": Operator.GE,
}

ORDERING_OPERATORS = {Operator.LT, Operator.LE, Operator.GT, Operator.GE}


class ErrorCategory(str, Enum):
    """Kinds of blocking problems tracked in the error set."""

    QUOTA = "quota"
    INVALID_CONDITIONS = "invalid-conditions"


class MalformedConditionPolicy(str, Enum):
    """How a condition leaf without an operator evaluates.

    - FAIL: the leaf is false, so the owning condition blocks navigation
    - SATISFY: the leaf is true, so authoring mistakes never block
    """

    FAIL = "fail"
    SATISFY = "satisfy"


# Accumulated wizard state: parameter variable -> last submitted value
WizardValues = dict[str, Any]
