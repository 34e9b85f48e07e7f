"""Payment form: validation, normalisation and idempotent submission.

Field rules match the upstream service so most rejections happen before a
request is sent. The idempotency key is kept across failed submissions and
replaced only after the service accepted the payment, so resubmitting after
a timeout cannot create a duplicate.
"""

from __future__ import annotations

import logging
import unicodedata
import uuid
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, cast

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from fxportal.core.logging import log_event
from fxportal.models.constants import (
    DEFAULT_MIN_AMOUNT,
    MAX_AMOUNT,
    MAX_RECIPIENT_LENGTH,
    MIN_RECIPIENT_LENGTH,
)
from fxportal.models.payment import PaymentRequest
from fxportal.services.currency_catalog import CurrencyCatalog
from fxportal.services.http_client import HttpError, describe_http_error
from fxportal.services.iban import is_valid_iban, normalize_iban
from fxportal.services.money import to_decimal
from fxportal.services.notifications import NotificationCenter
from fxportal.services.payments import PaymentService

SUBMIT_SUCCESS_MESSAGE = "Payment submitted successfully."
FIELDS = ("amount", "currency", "recipient", "recipient_account")

logger = logging.getLogger("fxportal.payment_form")


_LATIN_ORDINALS = frozenset("ªº")
_LATIN_NAME_PREFIXES = ("LATIN ", "FULLWIDTH LATIN ")


def _is_latin_letter(ch: str) -> bool:
    # unicodedata has no Script property; character names approximate it
    if not ch.isalpha():
        return False
    if ch in _LATIN_ORDINALS:
        return True
    return unicodedata.name(ch, "").startswith(_LATIN_NAME_PREFIXES)


def is_latin_name(value: str) -> bool:
    """Latin-script letters, combining marks and spaces only."""
    for ch in value:
        if ch == " " or unicodedata.category(ch).startswith("M"):
            continue
        if _is_latin_letter(ch):
            continue
        return False
    return True


def collapse_spaces(value: str) -> str:
    return " ".join(value.split())


class PaymentFormIn(BaseModel):
    """Raw form input. Pass ``context={"min_amount": ...}`` to validate the amount step."""

    model_config = ConfigDict(validate_default=True)

    amount: Optional[Decimal] = None
    currency: str = ""
    recipient: str = ""
    recipient_account: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Amount is required")
        d = to_decimal(v)
        if d is None:
            raise ValueError("Amount must be a number")
        return d

    @field_validator("amount")
    @classmethod
    def amount_in_range(cls, v: Decimal, info: ValidationInfo) -> Decimal:
        min_amount = (info.context or {}).get("min_amount", DEFAULT_MIN_AMOUNT)
        if v < min_amount:
            raise ValueError(f"Amount must be at least {min_amount}")
        if v > MAX_AMOUNT:
            raise ValueError(f"Amount exceeds maximum transaction limit of {MAX_AMOUNT:,}")
        return v

    @field_validator("currency")
    @classmethod
    def currency_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Currency is required")
        return v

    @field_validator("recipient")
    @classmethod
    def valid_recipient(cls, v: str) -> str:
        v = collapse_spaces(v)
        if not v:
            raise ValueError("Recipient is required")
        if not MIN_RECIPIENT_LENGTH <= len(v) <= MAX_RECIPIENT_LENGTH:
            raise ValueError(
                f"Recipient name must be between {MIN_RECIPIENT_LENGTH} and {MAX_RECIPIENT_LENGTH} characters"
            )
        if not is_latin_name(v):
            raise ValueError(
                "Recipient name must contain only Latin letters. Numbers and non-Latin characters are not allowed"
            )
        return v

    @field_validator("recipient_account")
    @classmethod
    def valid_account(cls, v: str) -> str:
        iban = normalize_iban(v)
        if not iban:
            raise ValueError("Recipient account is required")
        if not is_valid_iban(iban):
            raise ValueError("Invalid IBAN: must be a valid IBAN with correct check digits")
        return iban


def field_errors(exc: ValidationError) -> Dict[str, str]:
    """First message per field, without pydantic's "Value error, " prefix."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("form",)
        field = str(loc[0])
        if field in errors:
            continue
        cause = (err.get("ctx") or {}).get("error")
        errors[field] = str(cause) if cause is not None else err.get("msg", "invalid")
    return errors


class PaymentForm:
    def __init__(
        self,
        payments: PaymentService,
        catalog: CurrencyCatalog,
        notifications: NotificationCenter,
    ):
        self._payments = payments
        self._catalog = catalog
        self._notifications = notifications
        self.values: Dict[str, str] = {f: "" for f in FIELDS}
        self.errors: Dict[str, str] = {}
        self.submitting = False
        self.idempotency_key = str(uuid.uuid4())

    @property
    def max_amount(self) -> Decimal:
        return MAX_AMOUNT

    def amount_step(self) -> Decimal:
        return self._catalog.amount_step(self.values.get("currency"))

    def validate(self, raw: Mapping[str, Any]) -> Optional[PaymentRequest]:
        """Validate ``raw`` input; keeps values and errors for re-rendering."""
        self.values = {f: "" if raw.get(f) is None else str(raw.get(f)) for f in FIELDS}
        try:
            form = PaymentFormIn.model_validate(
                dict(self.values), context={"min_amount": self.amount_step()}
            )
        except ValidationError as ve:
            self.errors = field_errors(ve)
            return None
        self.errors = {}
        return PaymentRequest(
            amount=cast(Decimal, form.amount),  # parse_amount rejects None
            currency=form.currency,
            recipient=form.recipient,
            recipient_account=form.recipient_account,
        )

    async def submit(self, raw: Mapping[str, Any]) -> bool:
        if self.submitting:
            return False
        request = self.validate(raw)
        if request is None:
            return False

        self._notifications.clear()
        self.submitting = True
        try:
            created = await self._payments.create_payment(request, self.idempotency_key)
        except HttpError as e:
            log_event(
                logger,
                "payment.submit_failed",
                "payment submission failed",
                level=logging.WARNING,
                status=e.status,
                idempotency_key=self.idempotency_key,
            )
            self._notifications.show_error(describe_http_error(e))
            return False
        finally:
            self.submitting = False

        log_event(
            logger,
            "payment.created",
            "payment submitted",
            payment_id=created.id,
            currency=created.currency,
        )
        self._notifications.show_success(SUBMIT_SUCCESS_MESSAGE)
        self.reset()
        self._payments.notify_payment_created()
        return True

    def reset(self) -> None:
        self.values = {f: "" for f in FIELDS}
        self.errors = {}
        self.idempotency_key = str(uuid.uuid4())
