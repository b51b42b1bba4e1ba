"""Maps storefront errors onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.exceptions import StorefrontError

logger = structlog.get_logger(__name__)


def register_storefront_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        logger.info(
            "Request failed",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=exc.status_code,
        )
        headers = {"Retry-After": "5"} if exc.status_code == 503 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)
