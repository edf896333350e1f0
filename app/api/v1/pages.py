"""
SSR pages - server-side rendered HTML pages
"""
import logging
from datetime import date
from pathlib import Path

from fastapi import APIRouter, Request, Form, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.api.deps import get_gateway, get_today, get_session_context
from app.application.store import SessionContext
from app.application.subscriptions import (
    ALL_CATEGORIES,
    LoadSubscriptionsUseCase, SaveSubscriptionUseCase, DeleteSubscriptionUseCase,
    SubscriptionValidationError,
    filter_subscriptions, compute_totals, category_options, subscription_card,
)
from app.config import get_settings
from app.domain.subscription import Category, SubscriptionStatus
from app.infrastructure.api_client import SubscriptionGateway
from app.infrastructure.errors import GatewayError, NotFoundError
from app.utils.money import format_money

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

# Templates
templates_dir = Path(__file__).parent.parent.parent.parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))
templates.env.filters["money"] = lambda amount: format_money(amount, get_settings().CURRENCY)

CATEGORY_BADGES = {
    Category.ENTERTAINMENT.value: "badge-red",
    Category.MUSIC.value: "badge-green",
    Category.DESIGN.value: "badge-purple",
    Category.PRODUCTIVITY.value: "badge-blue",
    Category.GAMING.value: "badge-orange",
    Category.EDUCATION.value: "badge-indigo",
    Category.OTHER.value: "badge-gray",
}
STATUS_BADGES = {
    SubscriptionStatus.ACTIVE.value: "status-active",
    SubscriptionStatus.INACTIVE.value: "status-inactive",
    SubscriptionStatus.CANCELLED.value: "status-cancelled",
}


def _flash(request: Request, kind: str, message: str) -> None:
    request.session["flash"] = {"kind": kind, "message": message}


def _pop_flash(request: Request) -> dict | None:
    return request.session.pop("flash", None)


def _error_message(e: GatewayError) -> str:
    if isinstance(e, NotFoundError):
        return "Subscription not found. It may have been deleted."
    return "Could not reach the subscriptions service. Please try again."


def _form_context(ctx: SessionContext, form: dict, subscription_id: int | None = None,
                  error: str | None = None, stored_category: str | None = None) -> dict:
    """
    Template context for the create/edit form

    Args:
        ctx: current user
        form: field values to pre-fill (as strings)
        subscription_id: None for the create form
        error: validation message shown above the form
        stored_category: raw category of the edited record; offered as an extra
            option when it is not one of the Category labels
    """
    categories = Category.labels()
    if stored_category and stored_category not in categories:
        categories.append(stored_category)
    return {
        "user_name": ctx.user_name,
        "form": form,
        "subscription_id": subscription_id,
        "categories": categories,
        "statuses": SubscriptionStatus.labels(),
        "error": error,
    }


def _empty_form(today: date) -> dict:
    return {
        "name": "",
        "cost": "",
        "category": Category.OTHER.value,
        "renewal_date": today.isoformat(),
        "status": SubscriptionStatus.ACTIVE.value,
        "description": "",
    }


# === Dashboard ===

@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    q: str = "",
    category: str = ALL_CATEGORIES,
    gateway: SubscriptionGateway = Depends(get_gateway),
    today: date = Depends(get_today),
):
    """
    Dashboard: totals, search/filter, subscription cards

    The list is reloaded from the service on every visit. Totals always
    cover the whole list; only the cards are filtered.

    Args:
        q: free-text search over name and category (case-insensitive)
        category: exact category label, or "All Categories"

    Usage:
        GET /?q=spot&category=Music
    """
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)

    store = ctx.store
    # message from the previous action (e.g. a failed save) is kept next to a load error
    flashes = [f for f in [_pop_flash(request)] if f]
    try:
        LoadSubscriptionsUseCase(gateway, store).execute()
    except GatewayError:
        flashes.append({"kind": "error", "message": "Failed to load subscriptions"})

    visible = filter_subscriptions(store.items, q, category)
    totals = compute_totals(store.items, today)

    return templates.TemplateResponse(request, "dashboard.html", {
        "user_name": ctx.user_name,
        "flashes": flashes,
        "totals": totals,
        "cards": [subscription_card(s, today) for s in visible],
        "has_subscriptions": len(store) > 0,
        "load_error": store.load_error is not None,
        "search_term": q,
        "selected_category": category,
        "categories": category_options(),
        "category_badges": CATEGORY_BADGES,
        "status_badges": STATUS_BADGES,
    })


# === Subscriptions ===

@router.get("/subscriptions/new", response_class=HTMLResponse)
def new_subscription_page(request: Request, today: date = Depends(get_today)):
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)
    return templates.TemplateResponse(
        request, "subscription_form.html", _form_context(ctx, _empty_form(today)),
    )


@router.post("/subscriptions/new", response_class=HTMLResponse)
def create_subscription_form(
    request: Request,
    name: str = Form(""),
    cost: str = Form(""),
    category: str = Form(Category.OTHER.value),
    renewal_date: str = Form(""),
    status: str = Form(SubscriptionStatus.ACTIVE.value),
    description: str = Form(""),
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    """
    Create form handler

    Invalid input re-renders the form (400) with the entered values.
    Service errors redirect to the dashboard with an error flash.
    """
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)

    form = {
        "name": name, "cost": cost, "category": category,
        "renewal_date": renewal_date, "status": status, "description": description,
    }
    try:
        SaveSubscriptionUseCase(gateway, ctx.store).execute(form)
    except SubscriptionValidationError as e:
        return templates.TemplateResponse(
            request, "subscription_form.html",
            _form_context(ctx, form, error=str(e)),
            status_code=400,
        )
    except GatewayError as e:
        logger.exception("Failed to create subscription for user_id=%s", ctx.user_id)
        _flash(request, "error", f"Failed to save subscription. {_error_message(e)}")
        return RedirectResponse("/", status_code=302)

    _flash(request, "success", "Subscription added successfully!")
    return RedirectResponse("/", status_code=302)


@router.get("/subscriptions/{subscription_id}/edit", response_class=HTMLResponse)
def edit_subscription_page(
    request: Request,
    subscription_id: int,
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    """
    Edit form, pre-filled from the freshly loaded record

    A category outside the standard list (e.g. from an older client) is
    pre-selected as-is so saving without touching it keeps it.
    """
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)

    try:
        LoadSubscriptionsUseCase(gateway, ctx.store).execute()
    except GatewayError as e:
        _flash(request, "error", _error_message(e))
        return RedirectResponse("/", status_code=302)

    sub = ctx.store.get(subscription_id)
    if sub is None:
        _flash(request, "error", "Subscription not found. It may have been deleted.")
        return RedirectResponse("/", status_code=302)

    form = {
        "name": sub.name,
        "cost": str(sub.cost),
        "category": sub.category,
        "renewal_date": sub.renewal_date.isoformat(),
        "status": sub.status.value,
        "description": sub.description or "",
    }
    return templates.TemplateResponse(
        request, "subscription_form.html",
        _form_context(ctx, form, subscription_id=subscription_id, stored_category=sub.category),
    )


@router.post("/subscriptions/{subscription_id}/edit", response_class=HTMLResponse)
def update_subscription_form(
    request: Request,
    subscription_id: int,
    name: str = Form(""),
    cost: str = Form(""),
    category: str = Form(Category.OTHER.value),
    renewal_date: str = Form(""),
    status: str = Form(SubscriptionStatus.ACTIVE.value),
    description: str = Form(""),
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    """
    Edit form handler

    Args:
        subscription_id: record to update; must belong to the current user

    Raises nothing to the client: a missing record or a service error
    becomes an error flash on the dashboard.
    """
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)

    form = {
        "name": name, "cost": cost, "category": category,
        "renewal_date": renewal_date, "status": status, "description": description,
    }
    try:
        LoadSubscriptionsUseCase(gateway, ctx.store).execute()
        if ctx.store.get(subscription_id) is None:
            raise NotFoundError("Subscription not found", record_id=subscription_id)
        SaveSubscriptionUseCase(gateway, ctx.store).execute(form, subscription_id=subscription_id)
    except SubscriptionValidationError as e:
        existing = ctx.store.get(subscription_id)
        return templates.TemplateResponse(
            request, "subscription_form.html",
            _form_context(ctx, form, subscription_id=subscription_id, error=str(e),
                          stored_category=existing.category if existing else None),
            status_code=400,
        )
    except GatewayError as e:
        logger.exception("Failed to update subscription id=%s", subscription_id)
        _flash(request, "error", f"Failed to save subscription. {_error_message(e)}")
        return RedirectResponse("/", status_code=302)

    _flash(request, "success", "Subscription updated successfully!")
    return RedirectResponse("/", status_code=302)


@router.post("/subscriptions/{subscription_id}/delete")
def delete_subscription_form(
    request: Request,
    subscription_id: int,
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    """Delete handler (confirmation happens in the browser)"""
    ctx = get_session_context(request)
    if ctx is None:
        return RedirectResponse("/login", status_code=302)

    try:
        LoadSubscriptionsUseCase(gateway, ctx.store).execute()
        if ctx.store.get(subscription_id) is None:
            raise NotFoundError("Subscription not found", record_id=subscription_id)
        DeleteSubscriptionUseCase(gateway, ctx.store).execute(subscription_id)
    except GatewayError as e:
        logger.exception("Failed to delete subscription id=%s", subscription_id)
        _flash(request, "error", f"Failed to delete subscription. {_error_message(e)}")
        return RedirectResponse("/", status_code=302)

    _flash(request, "success", "Your subscription has been deleted.")
    return RedirectResponse("/", status_code=302)
