import json
from decimal import Decimal

import httpx
import pytest

from fxportal.models.payment import PaymentRequest
from fxportal.services.http_client import (
    IDEMPOTENCY_HEADER,
    ConnectionFailed,
    HttpError,
    PaymentApiClient,
    ServerResponseError,
    describe_http_error,
)

BASE = "http://upstream.test"

PAYMENT_JSON = {
    "id": "3f1c0c1e-0000-4000-8000-000000000001",
    "amount": 150.00,
    "currency": "EUR",
    "recipient": "Jane Doe",
    "processingFee": 1.50,
    "createdAt": "2026-01-02T09:30:00Z",
}


def client_for(handler) -> PaymentApiClient:
    return PaymentApiClient(BASE + "/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_currencies():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"code": "JPY", "name": "Japanese Yen", "decimals": 0}])

    async with client_for(handler) as client:
        currencies = await client.list_currencies()

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/v1/currencies"
    assert currencies[0].code == "JPY"
    assert currencies[0].decimals == 0


@pytest.mark.asyncio
async def test_list_payments_sends_paging_and_reads_camel_case():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "content": [PAYMENT_JSON],
                "page": {"totalElements": 41, "totalPages": 3, "size": 20, "number": 2},
            },
        )

    async with client_for(handler) as client:
        page = await client.list_payments(page=2, size=20)

    assert seen[0].url.params["page"] == "2"
    assert seen[0].url.params["size"] == "20"
    assert page.page.total_elements == 41
    assert page.page.total_pages == 3
    assert page.content[0].processing_fee == Decimal("1.50")
    assert page.content[0].created_at.year == 2026


@pytest.mark.asyncio
async def test_create_payment_sends_idempotency_key_and_numeric_amount():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json=PAYMENT_JSON)

    payment = PaymentRequest(
        amount=Decimal("150.00"),
        currency="EUR",
        recipient="Jane Doe",
        recipient_account="DE89370400440532013000",
    )
    async with client_for(handler) as client:
        created = await client.create_payment(payment, "key-123")

    request = seen[0]
    assert request.method == "POST"
    assert request.headers[IDEMPOTENCY_HEADER] == "key-123"
    body = json.loads(request.content)
    assert body == {
        "amount": 150.0,
        "currency": "EUR",
        "recipient": "Jane Doe",
        "recipientAccount": "DE89370400440532013000",
    }
    assert created.id == PAYMENT_JSON["id"]


@pytest.mark.asyncio
async def test_conflict_carries_server_errors():
    def handler(request):
        return httpx.Response(
            409,
            json={"timestamp": "2026-01-01T00:00:00Z", "status": 409, "errors": ["Duplicate payment", "Try later"]},
        )

    async with client_for(handler) as client:
        with pytest.raises(ServerResponseError) as info:
            await client.list_currencies()

    assert info.value.status == 409
    assert describe_http_error(info.value) == "Duplicate payment; Try later"


@pytest.mark.asyncio
async def test_client_error_without_body():
    async with client_for(lambda request: httpx.Response(400, text="bad")) as client:
        with pytest.raises(ServerResponseError) as info:
            await client.list_currencies()

    assert info.value.api_error is None
    assert describe_http_error(info.value) == "Invalid request. Please check your input."


@pytest.mark.asyncio
async def test_server_error():
    async with client_for(lambda request: httpx.Response(503)) as client:
        with pytest.raises(ServerResponseError) as info:
            await client.list_payments()

    assert describe_http_error(info.value) == "A server error occurred. Please try again later."


@pytest.mark.asyncio
async def test_unreachable_server():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with client_for(handler) as client:
        with pytest.raises(ConnectionFailed) as info:
            await client.list_currencies()

    assert info.value.status == 0
    assert describe_http_error(info.value) == "Unable to reach the server. Please check your connection."


@pytest.mark.asyncio
async def test_malformed_json_is_http_error():
    async with client_for(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(HttpError) as info:
            await client.list_currencies()

    assert not isinstance(info.value, ServerResponseError)
    assert describe_http_error(info.value) == "An unexpected error occurred."


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_http_error():
    async with client_for(lambda request: httpx.Response(200, json={"oops": True})) as client:
        with pytest.raises(HttpError):
            await client.list_currencies()


def test_describe_non_http_error():
    assert describe_http_error(RuntimeError("boom")) == "An unexpected error occurred."


def test_conflict_without_body():
    assert describe_http_error(ServerResponseError(409)) == "A conflict occurred."


@pytest.mark.asyncio
async def test_amounts_accept_numbers_and_numeric_strings():
    rows = [
        dict(PAYMENT_JSON, amount=100.5, processingFee=0.0),
        dict(PAYMENT_JSON, amount=7, processingFee=0),
        dict(PAYMENT_JSON, amount="2500.75", processingFee="12.50"),
    ]

    def handler(request):
        return httpx.Response(
            200,
            json={"content": rows, "page": {"totalElements": 3, "totalPages": 1, "size": 20, "number": 0}},
        )

    async with client_for(handler) as client:
        page = await client.list_payments()

    assert [p.amount for p in page.content] == [Decimal("100.5"), Decimal("7"), Decimal("2500.75")]
    assert [p.processing_fee for p in page.content] == [Decimal("0"), Decimal("0"), Decimal("12.50")]


@pytest.mark.asyncio
async def test_created_payment_with_numeric_fee():
    payment = PaymentRequest(
        amount=Decimal("99.99"),
        currency="EUR",
        recipient="Jane Doe",
        recipient_account="DE89370400440532013000",
    )
    body = dict(PAYMENT_JSON, amount=99.99, processingFee=0.5)
    async with client_for(lambda request: httpx.Response(201, json=body)) as client:
        created = await client.create_payment(payment, "key-1")

    assert created.amount == Decimal("99.99")
    assert created.processing_fee == Decimal("0.5")
