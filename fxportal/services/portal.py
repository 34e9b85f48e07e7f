from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from fxportal.core.config import Settings
from fxportal.services.clock import Clock, LoopClock
from fxportal.services.currency_catalog import CurrencyCatalog
from fxportal.services.http_client import PaymentApiClient
from fxportal.services.notifications import NotificationCenter
from fxportal.services.payment_form import PaymentForm
from fxportal.services.payment_history import PaymentHistory
from fxportal.services.payments import PaymentService


@dataclass
class Portal:
    """Everything one browser session of the portal works against.

    Built once per application in the lifespan handler; routers reach it via
    ``request.app.state.portal``.
    """

    client: PaymentApiClient
    notifications: NotificationCenter
    catalog: CurrencyCatalog
    payments: PaymentService
    history: PaymentHistory
    form: PaymentForm

    def start(self) -> None:
        self.catalog.start()
        self.history.start()

    async def aclose(self) -> None:
        await self.catalog.close()
        await self.history.close()
        await self.client.aclose()


def get_portal(request: Request) -> Portal:
    """FastAPI dependency; 503 until the lifespan handler has built the portal."""
    portal = getattr(request.app.state, "portal", None)
    if portal is None:
        raise HTTPException(status_code=503, detail="portal not started")
    return portal


def build_portal(
    settings: Settings,
    client: Optional[PaymentApiClient] = None,
    clock: Optional[Clock] = None,
) -> Portal:
    client = client or PaymentApiClient(
        settings.api_base, timeout=settings.http_timeout_seconds
    )
    clock = clock or LoopClock()
    notifications = NotificationCenter(clock, auto_dismiss_ms=settings.auto_dismiss_ms)
    catalog = CurrencyCatalog(
        client,
        notifications,
        clock,
        retry_count=settings.retry_count,
        retry_delay_ms=settings.retry_delay_ms,
    )
    payments = PaymentService(client)
    history = PaymentHistory(
        payments,
        notifications,
        clock,
        page_size=settings.page_size,
        retry_count=settings.retry_count,
        retry_delay_ms=settings.retry_delay_ms,
    )
    form = PaymentForm(payments, catalog, notifications)
    return Portal(
        client=client,
        notifications=notifications,
        catalog=catalog,
        payments=payments,
        history=history,
        form=form,
    )
