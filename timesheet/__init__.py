"""Application factory and top-level wiring for the Timesheet app.

Configuration, database setup, middleware, routers and error handling are
brought together here. Importing ``timesheet`` yields a ready ``app``;
``timesheet.main`` adds logging, metrics and the health probe on top.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import http_exception_handler, validation_exception_handler
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the SQLAlchemy models registers them with the metadata.
from .models import project as _project  # noqa: F401
from .models import task as _task  # noqa: F401
from .models import time_entry as _time_entry  # noqa: F401
from .models import user as _user  # noqa: F401

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

# ---------- DB init ----------
Base.metadata.create_all(bind=engine)

# ---------- Middleware ----------
# Starlette runs the last-added middleware first, so the session is available
# to everything the request id middleware wraps.
app.add_middleware(SecurityHeadersMiddleware, https_only=settings.SESSION_HTTPS_ONLY)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)

# ---------- Routers ----------
from .routers import auth_ui as auth_ui_router  # noqa: E402

app.include_router(auth_ui_router.router)

from .routers import ui as ui_router  # noqa: E402

app.include_router(ui_router.router)

from .routers import api_auth as api_auth_router  # noqa: E402

app.include_router(api_auth_router.router)

from .routers import api_projects as api_projects_router  # noqa: E402

app.include_router(api_projects_router.router)

from .routers import api_tasks as api_tasks_router  # noqa: E402

app.include_router(api_tasks_router.router)

from .routers import api_time_entries as api_time_entries_router  # noqa: E402

app.include_router(api_time_entries_router.router)

# ---------- Exception handling ----------
# HTML 401s become a redirect to /auth?next=...; everything else gets the JSON envelope.
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


__all__ = ["app"]
