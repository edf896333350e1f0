"""
Authentication routes (login, register, logout)
"""
import logging

from fastapi import APIRouter, Request, Form, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from app.api.deps import get_gateway, require_user
from app.api.v1.pages import templates
from app.auth import AuthService, RegistrationError
from app.infrastructure.api_client import SubscriptionGateway
from app.infrastructure.errors import GatewayError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

SERVICE_UNAVAILABLE = "Service unavailable, please try again later"


def _start_session(request: Request, user) -> None:
    # A different user gets a fresh session (and therefore a fresh store)
    request.session.clear()
    request.session["user_id"] = user.id
    request.session["user_name"] = user.name


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request):
    """
    Login form
    """
    if require_user(request):
        return RedirectResponse("/", status_code=302)
    return templates.TemplateResponse(request, "login.html", {})


@router.post("/login", response_class=HTMLResponse)
def login_post(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    """
    Login form handler

    On success the session is reset for the user and the browser goes to
    the dashboard. Wrong credentials and service errors re-render the form
    with the entered email.

    Usage:
        POST /login  (form: email, password)
    """
    try:
        user = AuthService(gateway).login(email, password)
    except GatewayError:
        logger.exception("Login failed: remote service error")
        return templates.TemplateResponse(
            request, "login.html",
            {"error": SERVICE_UNAVAILABLE, "email": email},
        )

    if user is None:
        return templates.TemplateResponse(
            request, "login.html",
            {"error": "Invalid email or password", "email": email},
        )

    _start_session(request, user)
    request.session["flash"] = {"kind": "success", "message": f"Welcome back, {user.name}!"}
    return RedirectResponse("/", status_code=302)


@router.get("/register", response_class=HTMLResponse)
def register_get(request: Request):
    if require_user(request):
        return RedirectResponse("/", status_code=302)
    return templates.TemplateResponse(request, "register.html", {})


@router.post("/register", response_class=HTMLResponse)
def register_post(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    gateway: SubscriptionGateway = Depends(get_gateway),
):
    form = {"name": name, "email": email}
    try:
        user = AuthService(gateway).register(email=email, password=password, name=name)
    except RegistrationError as e:
        return templates.TemplateResponse(request, "register.html", {"error": str(e), **form})
    except GatewayError:
        logger.exception("Registration failed: remote service error")
        return templates.TemplateResponse(request, "register.html", {"error": SERVICE_UNAVAILABLE, **form})

    if user is None:
        return templates.TemplateResponse(
            request, "register.html",
            {"error": "An account with this email already exists", **form},
        )

    _start_session(request, user)
    request.session["flash"] = {"kind": "success", "message": "Account created successfully!"}
    return RedirectResponse("/", status_code=302)


@router.get("/logout")
def logout(request: Request):
    """
    Log out
    """
    request.session.clear()
    return RedirectResponse("/login", status_code=302)
