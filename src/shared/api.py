"""HTTP mapping of the shared error taxonomy."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.exceptions import PaymentMismatchError, StorefrontError

logger = structlog.get_logger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    content = {"error": exc.message, "details": exc.messages}
    if isinstance(exc, PaymentMismatchError):
        content["expected"] = exc.expected
        content["received"] = exc.received

    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
