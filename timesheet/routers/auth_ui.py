"""Sign-in / sign-up screen backed by the signed session cookie."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import AUTH_PATH
from ..core.jinja import get_templates
from ..crud.users import authenticate, create_user
from ..db.session import get_db
from ..deps.ui_auth import is_logged_in, sign_in, sign_out
from ..schemas.auth import Credentials
from ..services.listview import LIST_PATH
from ..services.notifications import push_error, push_toast

router = APIRouter()
templates = get_templates()

MODE_SIGN_IN = "signin"
MODE_SIGN_UP = "signup"


def safe_next(target: str | None) -> str:
    """Only local paths are allowed as post-login destinations."""

    value = (target or "").strip()
    if not value.startswith("/") or value.startswith("//") or value.startswith("/\\"):
        return LIST_PATH
    if value.startswith(AUTH_PATH):
        return LIST_PATH
    return value


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def _render(request: Request, mode: str, next_url: str, email: str = "", status_code: int = 200):
    context = {
        "mode": MODE_SIGN_UP if mode == MODE_SIGN_UP else MODE_SIGN_IN,
        "next": next_url,
        "email": email,
    }
    return templates.TemplateResponse(request, "auth.html", context, status_code=status_code)


@router.get(AUTH_PATH, response_class=HTMLResponse)
def auth_page(request: Request, next: str = "", mode: str = MODE_SIGN_IN, db: Session = Depends(get_db)):
    if is_logged_in(request, db):
        return RedirectResponse(url=LIST_PATH, status_code=302)
    return _render(request, mode, safe_next(next))


@router.post(AUTH_PATH, response_class=HTMLResponse)
def auth_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    mode: str = Form(MODE_SIGN_IN),
    next: str = Form(""),
    db: Session = Depends(get_db),
):
    next_url = safe_next(next)
    try:
        creds = Credentials(email=email, password=password)
    except ValidationError as exc:
        push_error(request, "Error", _validation_message(exc))
        return _render(request, mode, next_url, email=email, status_code=422)

    try:
        if mode == MODE_SIGN_UP:
            user = create_user(db, creds.email, creds.password)
            push_toast(request, "Account created", "You are now signed in.")
        else:
            user = authenticate(db, creds.email, creds.password)
            if user is None:
                push_error(request, "Error", "Invalid login credentials")
                return _render(request, mode, next_url, email=email, status_code=401)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error", exc)
        return _render(request, mode, next_url, email=email, status_code=422)

    sign_in(request, user)
    return RedirectResponse(url=next_url, status_code=303)


@router.get("/logout")
@router.post("/logout")
def logout(request: Request):
    sign_out(request)
    return RedirectResponse(url=AUTH_PATH, status_code=303)
