from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ..core.security import issue_token_pair, refresh_access_token
from ..crud.users import authenticate, create_user, get_user, get_user_by_email
from ..db.session import get_db
from ..deps.auth import AuthContext, require_api_user
from ..deps.ui_auth import sign_out
from ..schemas.auth import Credentials, RefreshRequest, SessionOut, TokenResponse
from ..services.auth_events import AuthChange, AuthEvent, auth_events

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", response_model=SessionOut, status_code=201, summary="Create an account")
def api_signup(payload: Credentials, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already registered")
    try:
        user = create_user(db, payload.email, payload.password)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return SessionOut(user_id=user.id, email=user.email)


@router.post("/token", response_model=TokenResponse, summary="Exchange credentials for JWTs")
def api_token(payload: Credentials, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")
    pair = issue_token_pair(subject=str(user.id))
    auth_events.publish(AuthChange(event=AuthEvent.SIGNED_IN, user_id=user.id, email=user.email, scheme="jwt"))
    return TokenResponse(**pair.model_dump())


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def api_refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    try:
        token_payload, pair = refresh_access_token(payload.refresh_token)
        user_id = int(token_payload.sub)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    user = get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    auth_events.publish(AuthChange(event=AuthEvent.TOKEN_REFRESHED, user_id=user.id, email=user.email, scheme="jwt"))
    return TokenResponse(**pair.model_dump())


@router.get("/session", response_model=SessionOut, summary="Current user")
def api_session(auth: AuthContext = Depends(require_api_user)):
    return SessionOut(user_id=auth.user.id, email=auth.user.email)


@router.post("/logout", summary="End the browser session")
def api_logout(request: Request, auth: AuthContext = Depends(require_api_user)):
    if auth.scheme == "session":
        sign_out(request)
    else:
        auth_events.publish(AuthChange(event=AuthEvent.SIGNED_OUT, user_id=auth.user_id, scheme=auth.scheme))
    return {"status": "signed_out"}
