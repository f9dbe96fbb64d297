import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from app.exceptions import (
    AppError,
    EmptyBatchError,
    FormatError,
    NotFoundError,
    StoreWriteError,
    ValidationError,
)

logger = structlog.get_logger()

# Most specific class wins; anything unlisted is a 500.
STATUS_CODES: dict[type[AppError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    FormatError: 422,
    EmptyBatchError: 422,
    StoreWriteError: 409,
}


def status_code_for(exc: AppError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, message=exc.message)
    elif isinstance(exc, FormatError | EmptyBatchError):
        logger.warning("upload_rejected", path=request.url.path, code=exc.code, message=exc.message)

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


def register_exception_handlers(app):
    app.add_exception_handler(AppError, app_error_handler)
