import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            code=f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} with ID {resource_id} was not found.",
            status_code=404,
        )


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(code="CONFLICT", message=message, status_code=409)


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(code="VALIDATION_ERROR", message=message, status_code=422)


# ---------------------------------------------------------------------------
# Tax calculation errors
# ---------------------------------------------------------------------------


class InvalidAmount(AppError):
    def __init__(self, amount):
        super().__init__(
            code="INVALID_AMOUNT",
            message=f"Amount must be a positive number, got {amount}.",
            status_code=422,
        )


class UnknownCategory(AppError):
    def __init__(self, category: str):
        self.category = category
        super().__init__(
            code="UNKNOWN_CATEGORY",
            message=f"Invalid VAT category: {category}",
            status_code=422,
        )


class InvalidDeductionType(AppError):
    def __init__(self, deduction_type: str):
        self.deduction_type = deduction_type
        super().__init__(
            code="INVALID_DEDUCTION_TYPE",
            message=f"Invalid deduction type: {deduction_type}",
            status_code=422,
        )


class ExternalServiceUnavailable(AppError):
    def __init__(self, service: str, reason: str):
        self.service = service
        self.reason = reason
        super().__init__(
            code="EXTERNAL_SERVICE_UNAVAILABLE",
            message=f"{service} is unavailable: {reason}",
            status_code=502,
        )


class ReportGenerationFailed(AppError):
    def __init__(self, reason: str):
        super().__init__(
            code="REPORT_GENERATION_FAILED",
            message=f"VAT report could not be assembled: {reason}",
            status_code=500,
        )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    "details": None,
                }
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": "HTTP_ERROR",
                    "message": exc.detail,
                    "details": None,
                }
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc),
                    "details": None,
                }
            },
        )
