from __future__ import annotations

from typing import Callable, List, Protocol

from fxportal.models.constants import DEFAULT_PAGE_SIZE
from fxportal.models.payment import PagedResponse, PaymentRequest, PaymentResponse


class SupportsPayments(Protocol):
    async def list_payments(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> PagedResponse: ...

    async def create_payment(
        self, payment: PaymentRequest, idempotency_key: str
    ) -> PaymentResponse: ...


class PaymentService:
    """Payment endpoints plus the "payment created" signal.

    The history subscribes to the signal to jump back to the first page after
    a successful submission.
    """

    def __init__(self, client: SupportsPayments):
        self._client = client
        self._created_listeners: List[Callable[[], None]] = []

    async def create_payment(
        self, payment: PaymentRequest, idempotency_key: str
    ) -> PaymentResponse:
        return await self._client.create_payment(payment, idempotency_key)

    async def get_payments(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> PagedResponse:
        return await self._client.list_payments(page, size)

    def on_payment_created(self, listener: Callable[[], None]) -> None:
        self._created_listeners.append(listener)

    def notify_payment_created(self) -> None:
        for listener in list(self._created_listeners):
            listener()
