import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tableside.core.errors import AppError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_type}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "error": exc.error_type},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Internal server error", "error": "server_error"})
