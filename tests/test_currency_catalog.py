from decimal import Decimal

import pytest

from fxportal.services.currency_catalog import CURRENCIES_FAILED_MESSAGE, CurrencyCatalog

from fakes import settle


@pytest.fixture()
def catalog(api, notifications, clock) -> CurrencyCatalog:
    return CurrencyCatalog(api, notifications, clock)


@pytest.mark.asyncio
async def test_loads_currencies_on_start(catalog):
    catalog.start()
    assert catalog.loading
    await settle()
    assert [c.code for c in catalog.currencies] == ["EUR", "JPY", "BHD"]
    assert not catalog.loading and not catalog.error


@pytest.mark.asyncio
async def test_lookups_use_currency_decimals(catalog):
    catalog.start()
    await settle()
    assert catalog.decimals("JPY") == 0
    assert catalog.decimals("BHD") == 3
    assert catalog.amount_step("JPY") == Decimal(1)
    assert catalog.amount_step("BHD") == Decimal("0.001")
    assert catalog.format_amount("1234.5", "JPY") == "1,235"
    assert catalog.format_amount("1234.5", "EUR") == "1,234.50"


def test_unknown_currency_falls_back_to_two_decimals(catalog):
    assert catalog.get("XXX") is None
    assert catalog.get(None) is None
    assert catalog.decimals("XXX") == 2
    assert catalog.amount_step("") == Decimal("0.01")


@pytest.mark.asyncio
async def test_recovers_within_retry_budget(catalog, api, clock, notifications):
    api.currency_failures = 2
    catalog.start()
    await settle()
    clock.advance(1000)
    await settle()
    assert catalog.loading
    clock.advance(1000)
    await settle()
    assert len(catalog.currencies) == 3
    assert notifications.errors == []


@pytest.mark.asyncio
async def test_exhaustion_notifies_and_reload_recovers(catalog, api, clock, notifications):
    api.currency_failures = 3
    catalog.start()
    await settle()
    clock.advance(1000)
    await settle()
    clock.advance(1000)
    await settle()
    assert catalog.error
    assert catalog.currencies == []
    assert notifications.errors == [CURRENCIES_FAILED_MESSAGE]

    catalog.reload()
    await settle()
    assert not catalog.error
    assert len(catalog.currencies) == 3
