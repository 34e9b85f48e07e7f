"""Async client for the upstream payments service.

One request per call; retrying is the resource loader's job. Every failure
surfaces as ``HttpError`` (or a subclass) so callers can catch a single type:

- ``ConnectionFailed``: the request never produced a response (status 0).
- ``ServerResponseError``: a response with status >= 400, carrying the
  structured error body when the server sent one.
- plain ``HttpError``: a 2xx response whose body is not the expected JSON.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from fxportal.core.logging import log_event
from fxportal.models.constants import DEFAULT_PAGE_SIZE
from fxportal.models.payment import (
    ApiErrorResponse,
    CurrencyResponse,
    PagedResponse,
    PaymentRequest,
    PaymentResponse,
)

CURRENCIES_PATH = "/api/v1/currencies"
PAYMENTS_PATH = "/api/v1/payments"
IDEMPOTENCY_HEADER = "Idempotency-Key"

logger = logging.getLogger("fxportal.http")

_CURRENCY_LIST = TypeAdapter(List[CurrencyResponse])


class HttpError(Exception):
    status: int = 0


class ConnectionFailed(HttpError):
    pass


class ServerResponseError(HttpError):
    def __init__(self, status: int, api_error: Optional[ApiErrorResponse] = None):
        self.status = status
        self.api_error = api_error
        detail = api_error.joined() if api_error else "no error body"
        super().__init__(f"HTTP {status}: {detail}")


def describe_http_error(exc: BaseException) -> str:
    """User facing message for a failed request."""
    if not isinstance(exc, HttpError):
        return "An unexpected error occurred."
    status = exc.status
    api_error = getattr(exc, "api_error", None)
    if status == 0:
        if isinstance(exc, ConnectionFailed):
            return "Unable to reach the server. Please check your connection."
        return "An unexpected error occurred."
    if status == 409:
        return api_error.joined() if api_error else "A conflict occurred."
    if 400 <= status < 500:
        return api_error.joined() if api_error else "Invalid request. Please check your input."
    if status >= 500:
        return "A server error occurred. Please try again later."
    return "An unexpected error occurred."


class PaymentApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PaymentApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # Endpoints ------------------------------------------------
    async def list_currencies(self) -> List[CurrencyResponse]:
        body = await self._request("GET", CURRENCIES_PATH)
        return self._parse(_CURRENCY_LIST.validate_python, body, CURRENCIES_PATH)

    async def list_payments(
        self, page: int = 0, size: int = DEFAULT_PAGE_SIZE
    ) -> PagedResponse:
        body = await self._request(
            "GET", PAYMENTS_PATH, params={"page": page, "size": size}
        )
        return self._parse(PagedResponse.model_validate, body, PAYMENTS_PATH)

    async def create_payment(
        self, payment: PaymentRequest, idempotency_key: str
    ) -> PaymentResponse:
        body = await self._request(
            "POST",
            PAYMENTS_PATH,
            json=payment.to_wire(),
            headers={IDEMPOTENCY_HEADER: idempotency_key},
        )
        return self._parse(PaymentResponse.model_validate, body, PAYMENTS_PATH)

    # Internal -------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            resp = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TransportError as e:
            log_event(
                logger,
                "http.unreachable",
                "request failed without response",
                level=logging.WARNING,
                method=method,
                path=path,
                error=repr(e),
            )
            raise ConnectionFailed(f"{method} {path}: {e}") from e

        if resp.status_code >= 400:
            api_error = ApiErrorResponse.parse_body(_json_or_none(resp))
            log_event(
                logger,
                "http.error_status",
                "request returned error status",
                level=logging.WARNING,
                method=method,
                path=path,
                status=resp.status_code,
            )
            raise ServerResponseError(resp.status_code, api_error)

        try:
            return resp.json()
        except ValueError as e:  # JSON decode
            raise HttpError(f"Malformed JSON from {method} {path}") from e

    @staticmethod
    def _parse(validate, body: Any, path: str):  # type: ignore[no-untyped-def]
        try:
            return validate(body)
        except ValidationError as e:
            raise HttpError(f"Unexpected payload from {path}: {e.error_count()} errors") from e


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None
