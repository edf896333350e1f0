"""
Subscription use cases — load/save/delete through the gateway + derived views
(filtering, cost totals, renewal alerts).

The derived-view functions are pure: they take the full list and return new
values without touching the store.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from app.application.store import SubscriptionStore
from app.domain.renewal import is_expiring_soon, days_until_renewal
from app.domain.subscription import Category, Subscription, SubscriptionStatus, parse_date, MalformedRecordError
from app.infrastructure.api_client import SubscriptionGateway
from app.infrastructure.errors import GatewayError
from app.utils.validation import parse_amount

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
MONTHS_PER_YEAR = 12


class ValidationError(ValueError):
    pass


class SubscriptionValidationError(ValidationError):
    pass


# ============================================================================
# Derived views
# ============================================================================


@dataclass(frozen=True)
class SubscriptionTotals:
    monthly_cost: Decimal
    yearly_cost: Decimal
    upcoming_renewal_count: int


def category_options() -> list[str]:
    """Choices for the category filter: the "All" sentinel first"""
    return [ALL_CATEGORIES, *Category.labels()]


def filter_subscriptions(
    subscriptions: Sequence[Subscription],
    search_term: str | None,
    selected_category: str | None,
) -> list[Subscription]:
    """
    Visible subset for the dashboard.

    - search_term: case-insensitive substring of name or category; empty = no filter.
      Not trimmed, so "  " is searched literally.
    - selected_category: exact (case-sensitive) match; ALL_CATEGORIES or None = no filter.

    Order is preserved and the input is not modified.
    """
    needle = (search_term or "").lower()
    result = []
    for sub in subscriptions:
        if needle and needle not in sub.name.lower() and needle not in sub.category.lower():
            continue
        if selected_category not in (None, ALL_CATEGORIES) and sub.category != selected_category:
            continue
        result.append(sub)
    return result


def compute_totals(subscriptions: Iterable[Subscription], today: date) -> SubscriptionTotals:
    """
    Monthly/yearly cost and upcoming renewals, counting active subscriptions only
    """
    monthly = Decimal("0")
    upcoming = 0
    for sub in subscriptions:
        if not sub.is_active:
            continue
        monthly += sub.cost
        if is_expiring_soon(sub.renewal_date, today):
            upcoming += 1
    return SubscriptionTotals(
        monthly_cost=monthly,
        yearly_cost=monthly * MONTHS_PER_YEAR,
        upcoming_renewal_count=upcoming,
    )


def sort_by_renewal(subscriptions: Iterable[Subscription]) -> list[Subscription]:
    """Nearest renewal first; ties keep their original order"""
    return sorted(subscriptions, key=lambda s: s.renewal_date)


def subscription_card(sub: Subscription, today: date) -> dict:
    """Template-ready view of one subscription"""
    return {
        "id": sub.id,
        "name": sub.name,
        "cost": sub.cost,
        "category": sub.category,
        "category_kind": sub.category_kind.value,
        "status": sub.status.value,
        "renewal_date": sub.renewal_date,
        "description": sub.description,
        "days_left": days_until_renewal(sub.renewal_date, today),
        "expiring_soon": is_expiring_soon(sub.renewal_date, today),
    }


# ============================================================================
# Draft validation
# ============================================================================


def build_draft(
    user_id: int,
    name: str,
    cost: str,
    category: str,
    renewal_date: str,
    status: str,
    description: str | None = None,
    subscription_id: int | None = None,
    stored_category: str | None = None,
) -> Subscription:
    """
    Validate form input and build a Subscription (a draft when subscription_id is None)

    Args:
        stored_category: raw category of the record being edited; it is accepted
            as-is even when it is not one of the Category labels

    Raises:
        SubscriptionValidationError: before anything is sent to the gateway
    """
    name = (name or "").strip()
    if not name:
        raise SubscriptionValidationError("Name is required")

    try:
        parsed_cost = parse_amount(cost, max_decimal_places=2)
    except ValueError as e:
        raise SubscriptionValidationError(f"Cost: {e}") from e

    if category not in Category.labels() and category != stored_category:
        raise SubscriptionValidationError(f"Unknown category: {category}")

    try:
        parsed_status = SubscriptionStatus(status)
    except ValueError as e:
        raise SubscriptionValidationError(f"Unknown status: {status}") from e

    try:
        parsed_date = parse_date((renewal_date or "").strip())
    except MalformedRecordError as e:
        raise SubscriptionValidationError("Renewal date must be YYYY-MM-DD") from e

    return Subscription(
        id=subscription_id,
        user_id=user_id,
        name=name,
        cost=parsed_cost,
        category=category,
        renewal_date=parsed_date,
        status=parsed_status,
        description=(description or "").strip() or None,
    )


# ============================================================================
# Use cases
# ============================================================================


class LoadSubscriptionsUseCase:
    def __init__(self, gateway: SubscriptionGateway, store: SubscriptionStore):
        self.gateway = gateway
        self.store = store

    def execute(self) -> None:
        try:
            items = self.gateway.list_subscriptions(self.store.user_id)
        except GatewayError as e:
            logger.exception("Failed to load subscriptions for user_id=%s", self.store.user_id)
            self.store.fail(e)
            raise
        self.store.replace_all(items)


class SaveSubscriptionUseCase:
    """Create a new subscription or update an existing one"""

    def __init__(self, gateway: SubscriptionGateway, store: SubscriptionStore):
        self.gateway = gateway
        self.store = store

    def execute(self, form: dict, subscription_id: int | None = None) -> Subscription:
        user_id = self.store.user_id
        stored_category = None
        if subscription_id is not None:
            existing = self.store.get(subscription_id)
            if existing is not None:
                # owner never changes on edit; a legacy category survives if left untouched
                user_id = existing.user_id
                stored_category = existing.category

        record = build_draft(
            user_id=user_id,
            name=form.get("name", ""),
            cost=form.get("cost", ""),
            category=form.get("category", ""),
            renewal_date=form.get("renewal_date", ""),
            status=form.get("status", ""),
            description=form.get("description"),
            subscription_id=subscription_id,
            stored_category=stored_category,
        )

        if subscription_id is None:
            saved = self.gateway.create_subscription(record)
            self.store.add(saved)
            logger.info("Subscription created: id=%s user_id=%s", saved.id, user_id)
            return saved

        saved = self.gateway.update_subscription(subscription_id, record)
        if not self.store.replace(saved):
            logger.warning("Updated subscription id=%s was not in the store", subscription_id)
        logger.info("Subscription updated: id=%s user_id=%s", subscription_id, user_id)
        return saved


class DeleteSubscriptionUseCase:
    def __init__(self, gateway: SubscriptionGateway, store: SubscriptionStore):
        self.gateway = gateway
        self.store = store

    def execute(self, subscription_id: int) -> None:
        self.gateway.delete_subscription(subscription_id)
        self.store.remove(subscription_id)
        logger.info("Subscription deleted: id=%s user_id=%s", subscription_id, self.store.user_id)
