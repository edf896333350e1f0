"""
Subscriptions JSON API (read-only dashboard data)
"""
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.deps import get_gateway, get_today, get_current_context
from app.application.store import SessionContext
from app.application.subscriptions import (
    ALL_CATEGORIES, LoadSubscriptionsUseCase,
    filter_subscriptions, compute_totals, sort_by_renewal,
)
from app.domain.renewal import days_until_renewal, is_expiring_soon
from app.domain.subscription import Subscription
from app.infrastructure.api_client import SubscriptionGateway
from app.infrastructure.errors import GatewayError


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Response models ===

class SubscriptionResponse(BaseModel):
    id: int | None
    user_id: int
    name: str
    cost: str  # Decimal as string
    category: str
    display_category: str
    renewal_date: date
    status: str
    description: str | None
    days_until_renewal: int
    expiring_soon: bool


class TotalsResponse(BaseModel):
    monthly_cost: str
    yearly_cost: str
    upcoming_renewal_count: int


class SubscriptionListResponse(BaseModel):
    items: list[SubscriptionResponse]
    totals: TotalsResponse


def _to_response(sub: Subscription, today: date) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=sub.id,
        user_id=sub.user_id,
        name=sub.name,
        cost=str(sub.cost),
        category=sub.category,
        display_category=sub.category_kind.value,
        renewal_date=sub.renewal_date,
        status=sub.status.value,
        description=sub.description,
        days_until_renewal=days_until_renewal(sub.renewal_date, today),
        expiring_soon=is_expiring_soon(sub.renewal_date, today),
    )


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


# === Endpoints ===

@router.get("/", response_model=SubscriptionListResponse)
def list_subscriptions(
    q: str = "",
    category: str = ALL_CATEGORIES,
    sort: str | None = None,
    ctx: SessionContext = Depends(get_current_context),
    gateway: SubscriptionGateway = Depends(get_gateway),
    today: date = Depends(get_today),
):
    """Filtered subscriptions + totals over the full list"""
    store = ctx.store
    try:
        LoadSubscriptionsUseCase(gateway, store).execute()
    except GatewayError:
        raise HTTPException(status_code=502, detail="Subscriptions service unavailable")

    visible = filter_subscriptions(store.items, q, category)
    if sort == "renewal":
        visible = sort_by_renewal(visible)
    elif sort is not None:
        raise HTTPException(status_code=400, detail=f"Unsupported sort: {sort}")

    totals = compute_totals(store.items, today)
    return SubscriptionListResponse(
        items=[_to_response(s, today) for s in visible],
        totals=TotalsResponse(
            monthly_cost=_money(totals.monthly_cost),
            yearly_cost=_money(totals.yearly_cost),
            upcoming_renewal_count=totals.upcoming_renewal_count,
        ),
    )
