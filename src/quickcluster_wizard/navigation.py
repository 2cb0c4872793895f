"""Step gate and navigation state machine.

Steps are walked in StepId order. ``highest_reached`` records how far the
user has been so earlier steps can be revisited directly:

- advance: moves forward one step and raises highest_reached if needed
- retreat: moves back one step and also lowers highest_reached by one
- jump_to: moves to any step not beyond highest_reached

Whether advancing is allowed is decided by ``can_advance``; the transition
functions themselves do not consult it, so callers must check first.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from quickcluster_wizard.constants import KEY_PRODUCT, KEY_REGION
from quickcluster_wizard.errors import (
    ErrorSet,
    NavigationError,
    tags_for_step,
)
from quickcluster_wizard.types import FIRST_STEP, LAST_STEP, StepId

__all__ = [
    "StepState",
    "can_advance",
    "can_finish",
    "can_jump",
    "advance",
    "retreat",
    "jump_to",
]

# Steps whose gate is a required key rather than the error set
_REQUIRED_KEYS = {
    StepId.PRODUCT: KEY_PRODUCT,
    StepId.REGION: KEY_REGION,
}


@dataclass(frozen=True)
class StepState:
    """Current step and the furthest step reached."""

    current: StepId = FIRST_STEP
    highest_reached: StepId = FIRST_STEP

    @property
    def is_last(self) -> bool:
        return self.current == LAST_STEP


def can_advance(step: StepId, values: Mapping[str, Any], tags: ErrorSet) -> bool:
    """Whether "Next" is enabled on ``step``.

    Args:
        step: Step the user is on.
        values: Accumulated wizard values.
        tags: Current error set.

    Returns:
        For the product and region steps, whether their key has a value.
        For the form steps, whether no tag blocks the step. Always False on
        the last step, which finishes instead of advancing.
    """
    if step == LAST_STEP:
        return False
    if step in _REQUIRED_KEYS:
        return bool(values.get(_REQUIRED_KEYS[step]))
    return not tags_for_step(tags, step)


def can_finish(tags: ErrorSet) -> bool:
    return not tags


def can_jump(state: StepState, step: StepId) -> bool:
    return FIRST_STEP <= step <= state.highest_reached


def advance(state: StepState) -> StepState:
    if state.current == LAST_STEP:
        raise NavigationError(f"Cannot advance past the {LAST_STEP.title} step")
    target = StepId(state.current + 1)
    return StepState(current=target, highest_reached=max(state.highest_reached, target))


def retreat(state: StepState) -> StepState:
    # Going back also forgets one step of progress; jump targets shrink with it.
    if state.current == FIRST_STEP:
        raise NavigationError(f"Cannot go back from the {FIRST_STEP.title} step")
    return StepState(
        current=StepId(state.current - 1),
        highest_reached=StepId(max(state.highest_reached - 1, FIRST_STEP)),
    )


def jump_to(state: StepState, step: StepId) -> StepState:
    step = StepId(step)
    if not can_jump(state, step):
        raise NavigationError(
            f"Step {int(step)} ({step.title}) has not been reached yet; "
            f"furthest step is {int(state.highest_reached)}"
        )
    return replace(state, current=step)
