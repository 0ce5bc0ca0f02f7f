"""Session guard for the HTML pages.

The signed session cookie carries the user id. Anything that goes wrong while
resolving it counts as "not signed in", and protected routes answer with a 401
that the app's exception handler turns into a redirect to ``/auth?next=...``.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User
from ..services.auth_events import AuthChange, AuthEvent, auth_events

SESSION_USER_KEY = "user_id"
logger = logging.getLogger("timesheet.auth")


def session_user_id(request: Request) -> int | None:
    try:
        raw = request.session.get(SESSION_USER_KEY)
    except AssertionError:
        # SessionMiddleware not installed on this app.
        return None
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def get_session_user(request: Request, db: Session) -> User | None:
    user_id = session_user_id(request)
    if user_id is None:
        return None
    try:
        user = get_user(db, user_id)
    except SQLAlchemyError:
        logger.exception("auth.session_lookup_failed", extra={"extra_data": {"user_id": user_id}})
        return None
    if user is None:
        request.session.pop(SESSION_USER_KEY, None)
    return user


def is_logged_in(request: Request, db: Session) -> bool:
    return get_session_user(request, db) is not None


def require_ui_session(request: Request, db: Session = Depends(get_db)) -> User:
    """Gate for UI routes: requires a valid session created by the sign-in flow."""

    user = get_session_user(request, db)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    principal = f"user:{user.id}"
    principal_ctx_var.set(principal)
    request.state.principal = principal
    return user


def sign_in(request: Request, user: User) -> None:
    request.session[SESSION_USER_KEY] = user.id
    auth_events.publish(AuthChange(event=AuthEvent.SIGNED_IN, user_id=user.id, email=user.email))


def sign_out(request: Request) -> None:
    user_id = session_user_id(request)
    request.session.clear()
    if user_id is not None:
        auth_events.publish(AuthChange(event=AuthEvent.SIGNED_OUT, user_id=user_id))
