from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("fxportal.errors")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


def http_error_handler(request: Request, exc):  # type: ignore
    status_code = getattr(exc, "status_code", status.HTTP_404_NOT_FOUND)
    if status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=status_code,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=status_code,
        content={"error": "http_error", "detail": getattr(exc, "detail", "")},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raw exception object, which JSON cannot encode
    out = []
    for err in exc.errors():
        item = {k: v for k, v in err.items() if k != "ctx"}
        out.append(item)
    return out


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    portal = getattr(request.app.state, "portal", None)
    if portal is not None:
        portal.notifications.show_error(UNEXPECTED_ERROR_MESSAGE)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": UNEXPECTED_ERROR_MESSAGE,
        },
    )
