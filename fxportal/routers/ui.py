from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from fxportal.services.money import format_amount
from fxportal.services.payment_form import FIELDS
from fxportal.services.portal import Portal, get_portal

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["amount"] = format_amount


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


def _page_context(request: Request, portal: Portal) -> Dict[str, Any]:
    settings = request.app.state.settings
    catalog = portal.catalog
    history = portal.history
    form = portal.form
    return {
        "request": request,
        "app_name": settings.app_name,
        "version": settings.version,
        "notification": portal.notifications.notification,
        "currencies": catalog.currencies,
        "currencies_loading": catalog.loading,
        "currencies_error": catalog.error,
        "decimals": catalog.decimals,
        "form": form.values,
        "errors": form.errors,
        "submitting": form.submitting,
        "amount_step": form.amount_step(),
        "max_amount": form.max_amount,
        "payments": history.payments,
        "history_loading": history.loading,
        "history_error": history.error,
        "current_page": history.current_page,
        "total_pages": history.total_pages,
        "total_elements": history.total_elements,
        "visible_pages": history.visible_pages,
        "is_first_page": history.is_first_page,
        "is_last_page": history.is_last_page,
        "showing_from": history.showing_from,
        "showing_to": history.showing_to,
    }


@router.get("/", response_class=HTMLResponse)
async def ui_home(request: Request, portal: Portal = Depends(get_portal)):
    return templates.TemplateResponse(request, "index.html", _page_context(request, portal))


@router.post("/payments", response_class=HTMLResponse)
async def ui_submit_payment(request: Request, portal: Portal = Depends(get_portal)):
    raw = await request.form()
    submitted = await portal.form.submit({f: raw.get(f) for f in FIELDS})
    if submitted:
        return _redirect_home()
    # Validation errors or upstream failure: re-render with the entered values
    return templates.TemplateResponse(request, "index.html", _page_context(request, portal))


@router.post("/history/page", response_class=RedirectResponse)
async def ui_history_page(
    page: int = Form(...),
    portal: Portal = Depends(get_portal),
):
    portal.history.go_to_page(page)
    return _redirect_home()


@router.post("/history/retry", response_class=RedirectResponse)
async def ui_history_retry(portal: Portal = Depends(get_portal)):
    portal.history.retry_load()
    return _redirect_home()


@router.post("/currencies/reload", response_class=RedirectResponse)
async def ui_currencies_reload(portal: Portal = Depends(get_portal)):
    portal.catalog.reload()
    return _redirect_home()


@router.post("/notifications/clear", response_class=RedirectResponse)
async def ui_notification_clear(portal: Portal = Depends(get_portal)):
    portal.notifications.clear()
    return _redirect_home()
