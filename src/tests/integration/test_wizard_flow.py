"""End-to-end walks through the wizard engine."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from quickcluster_wizard import (
    QUOTA_TAG,
    ClusterRequest,
    NavigationError,
    StepId,
    WizardSession,
)
from quickcluster_wizard.catalog import Catalog, CatalogLoader
from quickcluster_wizard.schemas.region import Region


@pytest.fixture
def catalog() -> Catalog:
    fixture_path = Path(__file__).parent.parent / "fixtures" / "catalog.yml"
    return CatalogLoader(strict_mode=True).parse_file(fixture_path)


class TestWizardFlow:
    """Full wizard runs."""

    def test_quota_round_trip(self, catalog: Catalog) -> None:
        """Exceed the quota, fix it, and create the cluster."""
        submitted: list[ClusterRequest] = []
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)

        session = WizardSession.start(catalog.products, catalog.regions)
        session = session.select_product(1).next()
        session = session.select_region(1).next()
        assert session.current_step == StepId.CONFIGURATION

        session = session.submit({"name": "web-demo", "num_web_nodes": 5})
        assert QUOTA_TAG in session.tags
        assert not session.can_advance()
        with pytest.raises(NavigationError):
            session.next()

        session = session.next({"num_web_nodes": 2})
        assert session.tags == frozenset()
        assert session.messages == ()

        session = session.next({"web_node_flavor": "small"})
        assert session.current_step == StepId.REVIEW
        assert session.can_finish()

        session, request = session.finish(submitted.append, now=now)

        assert session.closed
        assert submitted == [request]
        assert request.to_payload() == {
            "name": "web-demo",
            "region_id": 1,
            "product_id": 1,
            "reservation_expiration": "2026-03-08T00:00:00Z",
            "product_params": {"num_web_nodes": 2, "web_node_flavor": "small"},
        }

    def test_step_gate_after_retreat(self, catalog: Catalog) -> None:
        """Two retreats from step 3 forget the progress made."""
        session = (
            WizardSession.start(catalog.products, catalog.regions)
            .select_product(2)
            .next()
            .select_region(2)
            .next()
        )
        assert session.steps.highest_reached == StepId.CONFIGURATION

        session = session.back().back()
        assert session.current_step == StepId.PRODUCT
        assert session.steps.highest_reached == StepId.PRODUCT

        with pytest.raises(NavigationError):
            session.jump(StepId.CONFIGURATION)

        session = session.next().next()
        assert session.current_step == StepId.CONFIGURATION
        assert session.values["region_id"] == 2

    def test_usage_arrives_on_review(self, catalog: Catalog) -> None:
        """Usage answering late still gates finishing."""
        rdu2 = catalog.regions[1]
        session = (
            WizardSession.start(
                catalog.products, [Region(id=1, name="rdu2", quota=rdu2.quota)]
            )
            .select_product(2)
            .next()
            .select_region(1)
            .next({"name": "ocp"})
            .next()
        )
        assert session.current_step == StepId.REVIEW
        assert session.can_finish()

        # 3 x openshift flavor on top of the baseline exceeds 16 vCPUs
        session = session.receive_region(rdu2)
        assert session.usage is not None
        assert session.usage.num_vcpus == 22
        assert not session.can_finish()

        session = session.jump(StepId.CONFIGURATION).submit({"num_nodes": 1})
        assert QUOTA_TAG not in session.tags
        session = session.next().next()

        _, request = session.finish(lambda r: None)
        assert request.product_params == {"num_nodes": 1}
        assert request.reservation_expiration > datetime.now(timezone.utc) + timedelta(
            days=6
        )
