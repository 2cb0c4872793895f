"""Unit tests for the step gate and navigation transitions."""

import pytest

from quickcluster_wizard.errors import INVALID_CONDITIONS_TAG, QUOTA_TAG, NavigationError
from quickcluster_wizard.navigation import (
    StepState,
    advance,
    can_advance,
    can_finish,
    can_jump,
    jump_to,
    retreat,
)
from quickcluster_wizard.types import StepId


class TestCanAdvance:
    """Test cases for the step gate."""

    def test_product_step_requires_product(self) -> None:
        """Test that step 1 needs a selected product."""
        assert not can_advance(StepId.PRODUCT, {}, frozenset())
        assert can_advance(StepId.PRODUCT, {"product_id": 1}, frozenset())

    def test_region_step_requires_region(self) -> None:
        """Test that step 2 needs a selected region."""
        assert not can_advance(StepId.REGION, {"product_id": 1}, frozenset())
        assert can_advance(StepId.REGION, {"region_id": 2}, frozenset())

    def test_region_step_ignores_tags(self) -> None:
        """Test that the error set does not gate the selection steps."""
        tags = frozenset({QUOTA_TAG, INVALID_CONDITIONS_TAG})
        assert can_advance(StepId.REGION, {"region_id": 2}, tags)

    def test_configuration_step_blocked_by_quota(self) -> None:
        """Test that the quota tag blocks only the configuration step."""
        tags = frozenset({QUOTA_TAG})
        assert not can_advance(StepId.CONFIGURATION, {}, tags)
        assert can_advance(StepId.ADVANCED, {}, tags)

    def test_invalid_conditions_block_form_steps(self) -> None:
        """Test that invalid conditions block both form steps."""
        tags = frozenset({INVALID_CONDITIONS_TAG})
        assert not can_advance(StepId.CONFIGURATION, {}, tags)
        assert not can_advance(StepId.ADVANCED, {}, tags)

    def test_last_step_never_advances(self) -> None:
        """Test that the review step finishes instead of advancing."""
        assert not can_advance(StepId.REVIEW, {"product_id": 1}, frozenset())

    def test_can_finish(self) -> None:
        """Test that finishing requires an empty error set."""
        assert can_finish(frozenset())
        assert not can_finish(frozenset({QUOTA_TAG}))


class TestTransitions:
    """Test cases for advance, retreat and jump."""

    def test_advance_raises_highest(self) -> None:
        """Test that advancing records progress."""
        state = advance(advance(StepState()))
        assert state == StepState(StepId.CONFIGURATION, StepId.CONFIGURATION)

    def test_advance_keeps_higher_progress(self) -> None:
        """Test that advancing below the furthest step keeps it."""
        state = advance(StepState(StepId.PRODUCT, StepId.ADVANCED))
        assert state == StepState(StepId.REGION, StepId.ADVANCED)

    def test_advance_past_last_step(self) -> None:
        """Test that the last step cannot be advanced."""
        with pytest.raises(NavigationError):
            advance(StepState(StepId.REVIEW, StepId.REVIEW))

    def test_retreat_lowers_highest(self) -> None:
        """Test that going back also forgets one step of progress."""
        state = retreat(StepState(StepId.CONFIGURATION, StepId.CONFIGURATION))
        assert state == StepState(StepId.REGION, StepId.REGION)

    def test_retreat_twice_from_step_three(self) -> None:
        """Test that two retreats from step 3 leave only step 1 reachable."""
        state = retreat(retreat(StepState(StepId.CONFIGURATION, StepId.CONFIGURATION)))
        assert state == StepState(StepId.PRODUCT, StepId.PRODUCT)
        assert not can_jump(state, StepId.CONFIGURATION)

    def test_retreat_floor(self) -> None:
        """Test that highest_reached never drops below the first step."""
        state = retreat(StepState(StepId.REGION, StepId.PRODUCT))
        assert state.highest_reached == StepId.PRODUCT

    def test_retreat_from_first_step(self) -> None:
        """Test that there is nothing before the first step."""
        with pytest.raises(NavigationError):
            retreat(StepState())

    def test_jump_within_reached(self) -> None:
        """Test jumping back to a reached step."""
        state = jump_to(StepState(StepId.REVIEW, StepId.REVIEW), StepId.REGION)
        assert state == StepState(StepId.REGION, StepId.REVIEW)

    def test_jump_forward_to_reached(self) -> None:
        """Test jumping forward to a step reached before."""
        state = jump_to(StepState(StepId.PRODUCT, StepId.ADVANCED), 4)
        assert state.current == StepId.ADVANCED

    def test_jump_beyond_reached(self) -> None:
        """Test that unreached steps cannot be jumped to."""
        with pytest.raises(NavigationError, match="has not been reached"):
            jump_to(StepState(StepId.REGION, StepId.REGION), StepId.CONFIGURATION)

    def test_step_titles(self) -> None:
        """Test the display titles of the steps."""
        assert StepId.CONFIGURATION.title == "Cluster Configuration"
        assert StepId.ADVANCED.title == "Advanced Option"
