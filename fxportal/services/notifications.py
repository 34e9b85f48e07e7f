"""Notification banner lifecycle.

One notification at a time. Success messages auto-dismiss after
``auto_dismiss_ms``; error messages stay until replaced or cleared. Every
``show_*`` and ``clear`` cancels the pending dismissal first, so at most one
timer is ever outstanding.
"""
from __future__ import annotations

import logging
from typing import Optional

from fxportal.core.logging import log_event
from fxportal.models.notification import Notification, NotificationKind
from fxportal.services.clock import Cancellable, Clock, require_positive_ms

AUTO_DISMISS_MS = 5000

logger = logging.getLogger("fxportal.notifications")


class NotificationCenter:
    def __init__(self, clock: Clock, auto_dismiss_ms: int = AUTO_DISMISS_MS):
        self._clock = clock
        self.auto_dismiss_ms = require_positive_ms("auto_dismiss_ms", auto_dismiss_ms)
        self._notification: Optional[Notification] = None
        self._timer: Optional[Cancellable] = None
        # bumped on every change; a firing timer only acts if it is still current
        self._seq = 0

    @property
    def notification(self) -> Optional[Notification]:
        return self._notification

    @property
    def dismiss_pending(self) -> bool:
        return self._timer is not None

    def show_error(self, message: str) -> None:
        self._set("error", message)

    def show_success(self, message: str) -> None:
        self._set("success", message)
        seq = self._seq
        self._timer = self._clock.after(self.auto_dismiss_ms, lambda: self._expire(seq))

    def clear(self) -> None:
        self._cancel_timer()
        self._seq += 1
        self._notification = None

    # Internal --------------------------------------------------
    def _set(self, kind: NotificationKind, message: str) -> None:
        self._cancel_timer()
        self._seq += 1
        self._notification = Notification(kind=kind, message=message)
        log_event(
            logger,
            "notification.show",
            "notification shown",
            level=logging.DEBUG,
            kind=kind,
            text=message,
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self, seq: int) -> None:
        if seq != self._seq:
            return
        self._timer = None
        self.clear()
