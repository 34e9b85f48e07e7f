"""Read-only JSON view of the portal state.

Mirrors what the HTML page renders so scripts and tests can poll loader
progress without scraping markup.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fxportal.models.notification import Notification
from fxportal.models.payment import CurrencyResponse, PaymentResponse
from fxportal.services.portal import Portal, get_portal

router = APIRouter(prefix="/api", tags=["state"])


class CurrenciesOut(BaseModel):
    data: List[CurrencyResponse]
    loading: bool
    error: bool


class HistoryOut(BaseModel):
    data: List[PaymentResponse]
    loading: bool
    error: bool
    current_page: int
    total_pages: int
    total_elements: int
    visible_pages: List[int]
    is_first_page: bool
    is_last_page: bool


class StateOut(BaseModel):
    currencies: CurrenciesOut
    payments: HistoryOut
    notification: Optional[Notification]
    submitting: bool


@router.get("/state", response_model=StateOut, summary="Current loader and notification state")
async def get_state(portal: Portal = Depends(get_portal)) -> StateOut:
    catalog = portal.catalog
    history = portal.history
    return StateOut(
        currencies=CurrenciesOut(
            data=catalog.currencies, loading=catalog.loading, error=catalog.error
        ),
        payments=HistoryOut(
            data=history.payments,
            loading=history.loading,
            error=history.error,
            current_page=history.current_page,
            total_pages=history.total_pages,
            total_elements=history.total_elements,
            visible_pages=history.visible_pages,
            is_first_page=history.is_first_page,
            is_last_page=history.is_last_page,
        ),
        notification=portal.notifications.notification,
        submitting=portal.form.submitting,
    )
