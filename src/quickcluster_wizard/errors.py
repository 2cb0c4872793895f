"""Error tags, user-facing error messages and exceptions.

Two independent structures track problems while the wizard runs:

- the error set: a frozenset of ErrorTag values. Navigation gates look only
  at this set.
- the error log: an ordered tuple of messages for display. Messages are
  never removed one by one; the log is cleared wholesale when the user
  enters another step.

Both are immutable; every operation returns a new value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from quickcluster_wizard.types import ErrorCategory, StepId

__all__ = [
    "ErrorTag",
    "ErrorMessage",
    "ErrorSet",
    "ErrorLog",
    "QUOTA_TAG",
    "INVALID_CONDITIONS_TAG",
    "add_tag",
    "remove_tag",
    "tags_for_step",
    "append_message",
    "clear_messages",
    "WizardError",
    "NavigationError",
    "SessionClosedError",
    "UnknownParameterError",
    "CatalogError",
]


# ============================================================================
# Tags
# ============================================================================


@dataclass(frozen=True)
class ErrorTag:
    """A class of blocking problem.

    Attributes:
        category: What kind of problem this is.
        step: Step the problem blocks, or None for problems that block every
            form step.
    """

    category: ErrorCategory
    step: StepId | None = None

    def blocks(self, step: StepId) -> bool:
        return self.step is None or self.step == step

    def __str__(self) -> str:
        if self.step is None:
            return self.category.value
        return f"step-{int(self.step)}-{self.category.value}"


QUOTA_TAG = ErrorTag(ErrorCategory.QUOTA, StepId.CONFIGURATION)
INVALID_CONDITIONS_TAG = ErrorTag(ErrorCategory.INVALID_CONDITIONS)

ErrorSet = frozenset[ErrorTag]


def add_tag(tags: ErrorSet, tag: ErrorTag) -> ErrorSet:
    """Return ``tags`` with ``tag`` present."""
    if tag in tags:
        return tags
    return tags | {tag}


def remove_tag(tags: ErrorSet, tag: ErrorTag) -> ErrorSet:
    """Return ``tags`` without ``tag``; absent tags are ignored."""
    if tag not in tags:
        return tags
    return tags - {tag}


def tags_for_step(tags: ErrorSet, step: StepId) -> list[ErrorTag]:
    """Tags that block leaving ``step``."""
    return sorted((tag for tag in tags if tag.blocks(step)), key=str)


# ============================================================================
# Messages
# ============================================================================


@dataclass(frozen=True)
class ErrorMessage:
    """A structured message: a title plus detail lines."""

    title: str
    details: tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.details:
            return self.title
        return "\n".join([self.title, *self.details])


ErrorLog = tuple[Union[str, ErrorMessage], ...]


def append_message(log: ErrorLog, message: str | ErrorMessage) -> ErrorLog:
    return (*log, message)


def clear_messages(log: ErrorLog) -> ErrorLog:
    """Empty log; changing step drops every message of the previous one."""
    return ()


# ============================================================================
# Exceptions
# ============================================================================


class WizardError(Exception):
    """Base class for misuse of the wizard engine."""

    pass


class NavigationError(WizardError):
    """Raised when a step transition is not permitted."""

    pass


class SessionClosedError(WizardError):
    """Raised when a finished or cancelled session is used again."""

    pass


class UnknownParameterError(WizardError):
    """Raised when values are submitted for keys the product does not define."""

    def __init__(self, product_name: str, keys: list[str]) -> None:
        self.product_name = product_name
        self.keys = keys
        super().__init__(
            f"Unknown parameter(s) for product {product_name!r}: {', '.join(keys)}"
        )


class CatalogError(WizardError):
    """Raised when a catalog document cannot be decoded."""

    pass
