from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Upstream payloads use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurrencyResponse(_WireModel):
    code: str
    name: str
    decimals: int = Field(..., ge=0)


class PaymentRequest(_WireModel):
    amount: Decimal = Field(..., gt=0)
    currency: str
    recipient: str
    recipient_account: str

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True)
        # upstream expects a JSON number; float repr keeps the entered digits
        data["amount"] = float(self.amount)
        return data


class PaymentResponse(_WireModel):
    # amounts arrive as JSON numbers; numeric strings are accepted too
    id: str
    amount: Decimal
    currency: str
    recipient: str
    processing_fee: Decimal
    created_at: datetime


class PageInfo(_WireModel):
    total_elements: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    size: int = Field(0, ge=0)
    number: int = Field(0, ge=0)


class PagedResponse(_WireModel):
    content: List[PaymentResponse] = Field(default_factory=list)
    page: PageInfo = Field(default_factory=PageInfo)


class ApiErrorResponse(_WireModel):
    timestamp: str | None = None
    status: int
    errors: List[str]

    @classmethod
    def parse_body(cls, body: Any) -> "ApiErrorResponse | None":
        """Return the structured error body, or None when the shape does not match."""
        if not isinstance(body, dict):
            return None
        if "status" not in body or not isinstance(body.get("errors"), list):
            return None
        try:
            return cls.model_validate(body)
        except ValueError:
            return None

    def joined(self) -> str:
        return "; ".join(self.errors)
