"""Wizard session: the single state value threaded through every transition.

A WizardSession bundles everything one "create a QuickCluster" wizard
knows: the catalogs received so far, the accumulated values, the error set
and log, the step state and the projected usage. Sessions are immutable;
each transition returns a new session.

Whenever values, the product catalog or region data change, the session
recomputes the usage projection and the quota comparison. Data that
arrives late (for example region usage answering after the user already
moved on) therefore still updates the quota error.

Usage:
    session = WizardSession.start(products=catalog.products)
    session = session.select_product(1).next()
    session = session.select_region(2).next()
    session = session.receive_region(region_with_usage)
    session = session.next({"num_web_nodes": 3})
    session = session.next({"web_node_flavor": "small"})
    session, request = session.finish(api.create_cluster)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from quickcluster_wizard.conditions import evaluate
from quickcluster_wizard.config import WizardSettings
from quickcluster_wizard.constants import (
    INVALID_CONDITIONS_TITLE,
    KEY_EXPIRATION,
    KEY_NAME,
    KEY_PRODUCT,
    KEY_REGION,
)
from quickcluster_wizard.errors import (
    INVALID_CONDITIONS_TAG,
    QUOTA_TAG,
    ErrorLog,
    ErrorMessage,
    ErrorSet,
    ErrorTag,
    NavigationError,
    SessionClosedError,
    UnknownParameterError,
    WizardError,
    add_tag,
    append_message,
    clear_messages,
    remove_tag,
    tags_for_step,
)
from quickcluster_wizard.navigation import (
    StepState,
    advance,
    can_advance,
    can_finish,
    jump_to,
    retreat,
)
from quickcluster_wizard.schemas.cluster import ClusterRequest
from quickcluster_wizard.schemas.product import Product
from quickcluster_wizard.schemas.quota import Quota
from quickcluster_wizard.schemas.region import Region
from quickcluster_wizard.types import LAST_STEP, StepId, WizardValues
from quickcluster_wizard.usage import preview_usage, project_usage, quota_exceeded
from quickcluster_wizard.values import merge_values, product_params, unknown_keys

__all__ = ["WizardSession", "SubmissionSink"]

# Steps whose "Next" re-checks the conditions of the answered values
_FORM_STEPS = (StepId.CONFIGURATION, StepId.ADVANCED)

# Receives the finished request; its result is not inspected
SubmissionSink = Callable[[ClusterRequest], Any]


@dataclass(frozen=True)
class WizardSession:
    """State of one wizard instance.

    Attributes:
        products: Product catalog keyed by product id.
        regions: Region quota/usage keyed by region id.
        values: Accumulated values submitted by the steps.
        tags: Blocking error tags.
        messages: User-facing error messages for the current step.
        steps: Current and furthest step.
        usage: Projected usage, None until product and region data allow
            computing it.
        quota_message: Last quota message appended to the log.
        settings: Engine settings.
        closed: True once finished or cancelled.
    """

    products: Mapping[int, Product] = field(default_factory=dict)
    regions: Mapping[int, Region] = field(default_factory=dict)
    values: WizardValues = field(default_factory=dict)
    tags: ErrorSet = frozenset()
    messages: ErrorLog = ()
    steps: StepState = StepState()
    usage: Quota | None = None
    quota_message: ErrorMessage | None = None
    settings: WizardSettings = field(default_factory=WizardSettings)
    closed: bool = False

    @classmethod
    def start(
        cls,
        products: Mapping[int, Product] | Iterable[Product] | None = None,
        regions: Mapping[int, Region] | Iterable[Region] | None = None,
        settings: WizardSettings | None = None,
    ) -> WizardSession:
        """Create an empty session, optionally with catalogs already loaded."""
        return cls(
            products=_by_id(products),
            regions=_by_id(regions),
            settings=settings or WizardSettings(),
        )

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> StepId:
        return self.steps.current

    @property
    def product(self) -> Product | None:
        product_id = _as_id(self.values.get(KEY_PRODUCT))
        if product_id is None:
            return None
        return self.products.get(product_id)

    @property
    def region(self) -> Region | None:
        region_id = _as_id(self.values.get(KEY_REGION))
        if region_id is None:
            return None
        return self.regions.get(region_id)

    @property
    def quota(self) -> Quota | None:
        region = self.region
        return region.quota if region else None

    @property
    def blocking_tags(self) -> list[ErrorTag]:
        """Tags preventing the user from leaving the current step."""
        return tags_for_step(self.tags, self.current_step)

    def can_advance(self) -> bool:
        return not self.closed and can_advance(self.current_step, self.values, self.tags)

    def can_finish(self) -> bool:
        return (
            not self.closed
            and self.current_step == LAST_STEP
            and can_finish(self.tags)
        )

    def preview(self, draft: Mapping[str, Any]) -> Quota | None:
        """Projected usage for unsaved form input, without committing it."""
        product, region = self.product, self.region
        if product is None or region is None or region.usage_baseline is None:
            return None
        return preview_usage(
            product.parameters,
            region.usage_baseline,
            product.flavors,
            self.values,
            draft,
            product.slug,
            counted=product.step_parameters(advanced=False),
        )

    # ------------------------------------------------------------------
    # Data arrival
    # ------------------------------------------------------------------

    def receive_products(
        self, products: Mapping[int, Product] | Iterable[Product]
    ) -> WizardSession:
        """Merge a product catalog and re-check values against it.

        Values submitted before the catalog arrived were not validated.
        Once the selected product is known, keys it does not define are
        discarded with a message, and its conditions are evaluated.
        """
        self._ensure_open()
        session = replace(self, products={**self.products, **_by_id(products)})
        product = session.product
        if product is not None:
            unknown = unknown_keys(session.values, product.variables)
            if unknown:
                kept = {k: v for k, v in session.values.items() if k not in unknown}
                session = replace(
                    session,
                    values=kept,
                    messages=append_message(
                        session.messages,
                        ErrorMessage(
                            title=f"Discarded values not defined by {product.name}",
                            details=tuple(unknown),
                        ),
                    ),
                )
            session = session._check_conditions(product, set(session.values))
        return session.recompute()

    def receive_region(self, region: Region) -> WizardSession:
        self._ensure_open()
        merged = {**self.regions, region.id: region}
        return replace(self, regions=merged).recompute()

    # ------------------------------------------------------------------
    # Value submission
    # ------------------------------------------------------------------

    def select_product(self, product_id: int) -> WizardSession:
        if self.products and product_id not in self.products:
            raise WizardError(f"Unknown product id: {product_id}")
        return self.submit({KEY_PRODUCT: product_id})

    def select_region(self, region_id: int) -> WizardSession:
        if self.regions and region_id not in self.regions:
            raise WizardError(f"Unknown region id: {region_id}")
        return self.submit({KEY_REGION: region_id})

    def submit(self, data: Mapping[str, Any]) -> WizardSession:
        """Merge one step's values, check conditions and recompute usage.

        Raises:
            UnknownParameterError: If ``data`` has keys the selected product
                does not define.
            SessionClosedError: If the session is finished or cancelled.
        """
        self._ensure_open()
        merged = merge_values(self.values, data)

        product_id = _as_id(merged.get(KEY_PRODUCT))
        product = self.products.get(product_id) if product_id is not None else None
        if product is not None:
            unknown = unknown_keys(data, product.variables)
            if unknown:
                raise UnknownParameterError(product.name, unknown)

        session = replace(self, values=merged)
        if product is not None:
            session = session._check_conditions(product, set(data))
        return session.recompute()

    def _revalidate(self, report: bool) -> WizardSession:
        """Re-evaluate every answered condition against the current values.

        Going back drops the invalid-conditions tag, so leaving a form step
        or finishing checks again. With ``report`` each failing condition
        also gets a message.
        """
        self._ensure_open()
        product = self.product
        if product is None:
            return self
        return self._check_conditions(product, set(self.values) if report else set())

    def _check_conditions(self, product: Product, submitted: set[str]) -> WizardSession:
        tags, messages = self.tags, self.messages
        failing = False
        for param in product.conditional_parameters():
            condition = param.condition
            if condition is None or param.variable not in self.values:
                continue
            if evaluate(
                condition.expression,
                self.values,
                self.settings.malformed_condition_policy,
            ):
                continue
            failing = True
            if param.variable in submitted:
                messages = append_message(
                    messages,
                    ErrorMessage(
                        title=INVALID_CONDITIONS_TITLE,
                        details=tuple(condition.message.splitlines()),
                    ),
                )
        if failing:
            tags = add_tag(tags, INVALID_CONDITIONS_TAG)
        else:
            tags = remove_tag(tags, INVALID_CONDITIONS_TAG)
        return replace(self, tags=tags, messages=messages)

    def recompute(self) -> WizardSession:
        """Recompute projected usage and the quota tag from current inputs."""
        product, region = self.product, self.region
        if (
            product is None
            or region is None
            or region.quota is None
            or region.usage_baseline is None
        ):
            return replace(
                self,
                usage=None,
                quota_message=None,
                tags=remove_tag(self.tags, QUOTA_TAG),
            )

        usage = project_usage(
            product.parameters,
            region.usage_baseline,
            product.flavors,
            self.values,
            product.slug,
            counted=product.step_parameters(advanced=False),
        )
        message = quota_exceeded(usage, region.quota)
        if message is None:
            return replace(
                self,
                usage=usage,
                quota_message=None,
                tags=remove_tag(self.tags, QUOTA_TAG),
            )

        messages = self.messages
        if message != self.quota_message:
            messages = append_message(messages, message)
        return replace(
            self,
            usage=usage,
            quota_message=message,
            messages=messages,
            tags=add_tag(self.tags, QUOTA_TAG),
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self, data: Mapping[str, Any] | None = None) -> WizardSession:
        """Submit the step's values (if any) and move to the next step.

        Raises:
            NavigationError: If the current step's gate is closed.
        """
        if data is not None:
            session = self.submit(data)
        elif self.current_step in _FORM_STEPS:
            session = self._revalidate(
                report=INVALID_CONDITIONS_TAG not in self.tags
            )
        else:
            session = self
        session._ensure_open()
        if not can_advance(session.current_step, session.values, session.tags):
            blocking = ", ".join(str(t) for t in session.blocking_tags)
            reason = f"blocked by {blocking}" if blocking else "required value missing"
            raise NavigationError(
                f"Cannot leave the {session.current_step.title} step: {reason}"
            )
        return replace(
            session,
            steps=advance(session.steps),
            messages=clear_messages(session.messages),
            quota_message=None,
        )

    def back(self) -> WizardSession:
        self._ensure_open()
        return replace(
            self,
            steps=retreat(self.steps),
            tags=remove_tag(self.tags, INVALID_CONDITIONS_TAG),
            messages=clear_messages(self.messages),
            quota_message=None,
        )

    def jump(self, step: StepId | int) -> WizardSession:
        self._ensure_open()
        return replace(
            self,
            steps=jump_to(self.steps, StepId(step)),
            messages=clear_messages(self.messages),
            quota_message=None,
        )

    def cancel(self) -> WizardSession:
        """Discard all accumulated state; nothing is submitted."""
        return WizardSession(
            products=self.products,
            regions=self.regions,
            settings=self.settings,
            closed=True,
        )

    def finish(
        self,
        sink: SubmissionSink,
        now: datetime | None = None,
    ) -> tuple[WizardSession, ClusterRequest]:
        """Build the cluster request, hand it to ``sink`` and close.

        Raises:
            NavigationError: If not on the last step or any tag is set.
            WizardError: If the reserved values do not form a valid request.
        """
        self._ensure_open()
        if self.current_step != LAST_STEP:
            raise NavigationError(
                f"Finish is only available on the {LAST_STEP.title} step"
            )
        session = self._revalidate(report=False)
        if not can_finish(session.tags):
            blocking = ", ".join(sorted(str(t) for t in session.tags))
            raise NavigationError(f"Cannot finish: blocked by {blocking}")

        request = session.build_request(now)
        sink(request)
        return replace(session, closed=True), request

    def build_request(self, now: datetime | None = None) -> ClusterRequest:
        now = now or datetime.now(timezone.utc)
        expiration = _resolve_expiration(
            self.values.get(KEY_EXPIRATION),
            now,
            self.settings.default_reservation_days,
        )
        try:
            return ClusterRequest(
                name=str(self.values.get(KEY_NAME) or ""),
                region_id=self.values.get(KEY_REGION),
                product_id=self.values.get(KEY_PRODUCT),
                reservation_expiration=expiration,
                product_params=product_params(self.values),
            )
        except ValidationError as e:
            raise WizardError(f"Incomplete cluster request: {e}") from e

    def _ensure_open(self) -> None:
        if self.closed:
            raise SessionClosedError("Wizard session is already closed")


def _by_id(items: Mapping[int, Any] | Iterable[Any] | None) -> dict[int, Any]:
    if items is None:
        return {}
    if isinstance(items, Mapping):
        return dict(items)
    return {item.id: item for item in items}


def _as_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _resolve_expiration(value: Any, now: datetime, default_days: int) -> datetime:
    """Turn the submitted reservation expiration into an aware datetime.

    The form submits a number of days from now; datetimes and ISO strings
    are accepted as well. Naive datetimes are taken as UTC.

    Raises:
        WizardError: If the value is not an expiration or lies outside the
            range a datetime can hold.
    """
    if value is None or value == "":
        return _days_from_now(now, default_days, value)
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _days_from_now(now, value, value)
    if isinstance(value, str):
        try:
            days = float(value)
        except ValueError:
            days = None
        if days is not None:
            return _days_from_now(now, days, value)
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise WizardError(f"Invalid reservation expiration: {value!r}") from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise WizardError(f"Invalid reservation expiration: {value!r}")


def _days_from_now(now: datetime, days: float, value: Any) -> datetime:
    try:
        return now + timedelta(days=days)
    except (OverflowError, ValueError) as e:
        raise WizardError(f"Reservation expiration out of range: {value!r}") from e
