from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal_id", default=None)
logger = logging.getLogger("timesheet.request")

# Query parameters that describe which slice of the time entry list was asked for.
LIST_STATE_PARAMS = ("q", "project", "sort", "order", "page", "edit")


def _list_state(request: Request) -> dict[str, str]:
    return {name: request.query_params[name] for name in LIST_STATE_PARAMS if request.query_params.get(name)}


def _session_user(request: Request) -> int | None:
    if "session" not in request.scope:
        return None
    return request.session.get("user_id")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and log one line when it finishes."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid4())
        token = request_id_ctx_var.set(request_id)
        principal_token = principal_ctx_var.set(None)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)
            principal_ctx_var.reset(principal_token)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers[self.header_name] = request_id
        response.headers.setdefault("X-Response-Time", f"{duration_ms:.2f}ms")

        data: dict[str, object] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
        }
        principal = getattr(request.state, "principal", None)
        if principal:
            data["principal"] = principal
        user_id = _session_user(request)
        if user_id is not None:
            data["user_id"] = user_id
        list_state = _list_state(request)
        if list_state:
            data["list_state"] = list_state
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "request.completed", extra={"extra_data": data})
        return response
