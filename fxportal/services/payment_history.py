"""Paginated payment history.

Page changes, the payment-created signal and the retry button all trigger
the same ResourceLoader, so a response for a page the user has already left
is dropped by the loader's generation check.
"""
from __future__ import annotations

from typing import List, Optional

from fxportal.models.constants import MAX_VISIBLE_PAGES
from fxportal.models.payment import PagedResponse, PaymentResponse
from fxportal.services.clock import Clock
from fxportal.services.loader import (
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY_MS,
    LoadState,
    ResourceLoader,
)
from fxportal.services.notifications import NotificationCenter
from fxportal.services.payments import PaymentService

PAYMENTS_FAILED_MESSAGE = "Failed to load payments. Please try again."


def visible_pages(current: int, total: int, max_visible: int = MAX_VISIBLE_PAGES) -> List[int]:
    """Window of page indexes centred on ``current``, clamped to ``[0, total)``."""
    start = max(0, current - max_visible // 2)
    end = min(total, start + max_visible)
    start = max(0, end - max_visible)
    return list(range(start, end))


class PaymentHistory:
    def __init__(
        self,
        payments: PaymentService,
        notifications: NotificationCenter,
        clock: Clock,
        *,
        page_size: int,
        retry_count: int = DEFAULT_RETRY_COUNT,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._payments = payments
        self.page_size = page_size
        self.current_page = 0
        self.loader: ResourceLoader[Optional[PagedResponse]] = ResourceLoader(
            "payments",
            self._fetch,
            None,
            clock=clock,
            notifications=notifications,
            failure_message=PAYMENTS_FAILED_MESSAGE,
            retry_count=retry_count,
            retry_delay_ms=retry_delay_ms,
        )
        payments.on_payment_created(self.on_payment_created)

    async def _fetch(self, page: int) -> PagedResponse:
        return await self._payments.get_payments(page, self.page_size)

    async def close(self) -> None:
        await self.loader.close()

    # Loaded data ----------------------------------------------
    @property
    def payments(self) -> List[PaymentResponse]:
        data = self.loader.data
        return list(data.content) if data else []

    @property
    def total_pages(self) -> int:
        data = self.loader.data
        return data.page.total_pages if data else 0

    @property
    def total_elements(self) -> int:
        data = self.loader.data
        return data.page.total_elements if data else 0

    @property
    def loading(self) -> bool:
        return self.loader.loading

    @property
    def error(self) -> bool:
        return self.loader.error

    @property
    def state(self) -> LoadState[Optional[PagedResponse]]:
        return self.loader.state

    # Pagination -----------------------------------------------
    @property
    def is_first_page(self) -> bool:
        return self.current_page == 0

    @property
    def is_last_page(self) -> bool:
        return self.current_page >= self.total_pages - 1

    @property
    def visible_pages(self) -> List[int]:
        return visible_pages(self.current_page, self.total_pages)

    @property
    def showing_from(self) -> int:
        return self.current_page * self.page_size + 1

    @property
    def showing_to(self) -> int:
        return min((self.current_page + 1) * self.page_size, self.total_elements)

    # Triggers -------------------------------------------------
    def start(self) -> None:
        self.loader.load(self.current_page, reason="startup")

    def go_to_page(self, page: int) -> bool:
        if page < 0 or page >= self.total_pages or page == self.current_page:
            return False
        self.current_page = page
        self.loader.load(page, reason="page")
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    def retry_load(self) -> None:
        self.loader.load(self.current_page, reason="retry")

    def on_payment_created(self) -> None:
        self.current_page = 0
        self.loader.load(0, reason="payment_created")
