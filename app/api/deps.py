"""
FastAPI dependencies (gateway, authentication, current date)
"""
from datetime import date, datetime
from typing import Iterator
from zoneinfo import ZoneInfo

from fastapi import Request, HTTPException, status

from app.application.store import SessionContext
from app.config import get_settings
from app.infrastructure.api_client import SubscriptionGateway


def get_gateway() -> Iterator[SubscriptionGateway]:
    """
    One gateway (and HTTP session) per request, closed afterwards

    Usage:
        @router.get("/")
        def page(gateway: SubscriptionGateway = Depends(get_gateway)):
            ...
    """
    settings = get_settings()
    gateway = SubscriptionGateway(
        base_url=settings.get_api_base_url(),
        timeout=settings.API_TIMEOUT_SECONDS,
    )
    try:
        yield gateway
    finally:
        gateway.close()


def get_today() -> date:
    """Reference date for renewal windows, in the configured timezone"""
    return datetime.now(tz=ZoneInfo(get_settings().TIMEZONE)).date()


def require_user(request: Request) -> bool:
    """
    True if the session has a logged-in user

    Usage in routes:
        if not require_user(request):
            return RedirectResponse("/login")
    """
    return bool(request.session.get("user_id"))


def get_session_context(request: Request) -> SessionContext | None:
    """Build the explicit current-user context from the session cookie"""
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return SessionContext(user_id=int(user_id), user_name=request.session.get("user_name", ""))


def get_current_context(request: Request) -> SessionContext:
    """
    Current-user context for JSON endpoints

    Raises:
        HTTPException(401): not logged in
    """
    ctx = get_session_context(request)
    if ctx is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return ctx
