"""Auth state change notifications.

Sign-in, sign-out and token refresh publish an ``AuthChange`` on the module
level ``auth_events`` bus. Interested parts of the app subscribe once at import
time and can unsubscribe through the returned handle.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger("timesheet.auth")


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class AuthChange:
    event: AuthEvent
    user_id: int
    email: str | None = None
    scheme: str = "session"


Listener = Callable[[AuthChange], None]


class Subscription:
    def __init__(self, bus: "AuthEventBus", listener: Listener) -> None:
        self._bus = bus
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self._listener)
            self.active = False


class AuthEventBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, change: AuthChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception(
                    "auth.listener_failed",
                    extra={"extra_data": {"event": change.event.value, "user_id": change.user_id}},
                )


auth_events = AuthEventBus()


def _log_auth_change(change: AuthChange) -> None:
    logger.info(
        "auth.%s",
        change.event.value.lower(),
        extra={"extra_data": {"user_id": change.user_id, "scheme": change.scheme}},
    )


auth_events.subscribe(_log_auth_change)


__all__ = ["AuthChange", "AuthEvent", "AuthEventBus", "Subscription", "auth_events"]
