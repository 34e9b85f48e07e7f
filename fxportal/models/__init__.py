"""Pydantic models for the FX payment portal."""

from .constants import (
    MAX_AMOUNT,
    DEFAULT_MIN_AMOUNT,
    DEFAULT_DECIMALS,
    MIN_RECIPIENT_LENGTH,
    MAX_RECIPIENT_LENGTH,
    DEFAULT_PAGE_SIZE,
    MAX_VISIBLE_PAGES,
)  # re-export
from .notification import Notification, NotificationKind
from .payment import (
    ApiErrorResponse,
    CurrencyResponse,
    PageInfo,
    PagedResponse,
    PaymentRequest,
    PaymentResponse,
)

__all__ = [
    "MAX_AMOUNT",
    "DEFAULT_MIN_AMOUNT",
    "DEFAULT_DECIMALS",
    "MIN_RECIPIENT_LENGTH",
    "MAX_RECIPIENT_LENGTH",
    "DEFAULT_PAGE_SIZE",
    "MAX_VISIBLE_PAGES",
    "Notification",
    "NotificationKind",
    "ApiErrorResponse",
    "CurrencyResponse",
    "PageInfo",
    "PagedResponse",
    "PaymentRequest",
    "PaymentResponse",
]
