"""Currency list shared by the payment form and the history table.

The list is loaded once at startup through a ResourceLoader and reloaded
only on request (the form's retry button). Lookups fall back to two
decimals for codes that are not (yet) known.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from fxportal.models.constants import DEFAULT_DECIMALS
from fxportal.models.payment import CurrencyResponse
from fxportal.services.clock import Clock
from fxportal.services.loader import (
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY_MS,
    LoadState,
    ResourceLoader,
)
from fxportal.services.money import AmountLike, amount_step, format_amount
from fxportal.services.notifications import NotificationCenter

CURRENCIES_FAILED_MESSAGE = "Failed to load currencies. Please refresh the page."


class SupportsCurrencyFetch(Protocol):
    async def list_currencies(self) -> List[CurrencyResponse]: ...


class CurrencyCatalog:
    def __init__(
        self,
        client: SupportsCurrencyFetch,
        notifications: NotificationCenter,
        clock: Clock,
        *,
        retry_count: int = DEFAULT_RETRY_COUNT,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
    ):
        self._client = client
        self.loader: ResourceLoader[List[CurrencyResponse]] = ResourceLoader(
            "currencies",
            self._fetch,
            [],
            clock=clock,
            notifications=notifications,
            failure_message=CURRENCIES_FAILED_MESSAGE,
            retry_count=retry_count,
            retry_delay_ms=retry_delay_ms,
        )

    async def _fetch(self, _params: object) -> List[CurrencyResponse]:
        return await self._client.list_currencies()

    def start(self) -> None:
        self.loader.load(reason="startup")

    def reload(self) -> None:
        self.loader.reload()

    async def close(self) -> None:
        await self.loader.close()

    # State ----------------------------------------------------
    @property
    def currencies(self) -> List[CurrencyResponse]:
        return self.loader.data

    @property
    def loading(self) -> bool:
        return self.loader.loading

    @property
    def error(self) -> bool:
        return self.loader.error

    @property
    def state(self) -> LoadState[List[CurrencyResponse]]:
        return self.loader.state

    @property
    def currency_map(self) -> Dict[str, CurrencyResponse]:
        return {c.code: c for c in self.currencies}

    # Lookups --------------------------------------------------
    def get(self, code: str | None) -> Optional[CurrencyResponse]:
        if not code:
            return None
        return self.currency_map.get(code)

    def decimals(self, code: str | None) -> int:
        currency = self.get(code)
        return currency.decimals if currency else DEFAULT_DECIMALS

    def amount_step(self, code: str | None) -> Decimal:
        currency = self.get(code)
        return amount_step(currency.decimals if currency else None)

    def format_amount(self, value: AmountLike, code: str | None) -> Optional[str]:
        return format_amount(value, self.decimals(code))
