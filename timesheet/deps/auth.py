from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from ..core.security import decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User
from .ui_auth import get_session_user


class AuthContext:
    def __init__(self, *, user: User, scheme: str) -> None:
        self.user = user
        self.scheme = scheme

    @property
    def user_id(self) -> int:
        return self.user.id


def _unauthorized(detail: str = "Unauthorized") -> None:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def optional_api_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> AuthContext | None:
    """Resolve the caller from a bearer token or the UI session; ``None`` if anonymous."""

    if authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() != "bearer" or not credentials:
            _unauthorized("Unsupported authorization scheme")
        try:
            payload = decode_token(credentials, verify_type="access")
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        try:
            user_id = int(payload.sub)
        except ValueError:
            _unauthorized("Invalid token subject")
        user = get_user(db, user_id)
        if user is None:
            _unauthorized("Unknown user")
        _set_principal(request, f"jwt:{user.id}")
        request.state.token_payload = payload
        return AuthContext(user=user, scheme="jwt")

    user = get_session_user(request, db)
    if user is not None:
        _set_principal(request, f"user:{user.id}")
        return AuthContext(user=user, scheme="session")
    return None


def require_api_user(auth: AuthContext | None = Depends(optional_api_user)) -> AuthContext:
    if auth is None:
        _unauthorized("Authorization required")
    return auth
