"""Toast messages carried across the redirect that follows every form post."""

from __future__ import annotations

from typing import Any

from starlette.requests import Request

SESSION_KEY = "_toasts"
VARIANT_DEFAULT = "default"
VARIANT_DESTRUCTIVE = "destructive"


def push_toast(request: Request, title: str, description: str | None = None, variant: str = VARIANT_DEFAULT) -> None:
    toasts = list(request.session.get(SESSION_KEY) or [])
    toasts.append({"title": title, "description": description, "variant": variant})
    request.session[SESSION_KEY] = toasts


def push_error(request: Request, title: str, exc_or_message: Any) -> None:
    push_toast(request, title, str(exc_or_message), variant=VARIANT_DESTRUCTIVE)


def pop_toasts(request: Request) -> list[dict[str, Any]]:
    return list(request.session.pop(SESSION_KEY, None) or [])
