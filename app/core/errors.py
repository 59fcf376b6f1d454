import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Application-level rejection. Answered as ``{success: false, message}``."""

    def __init__(self, message: str, status_code: int = status.HTTP_200_OK):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthResolutionFailure(Exception):
    """No principal could be resolved for the request."""

    def __init__(self, message: str = "Not Authenticated"):
        self.message = message
        super().__init__(message)


class AuthResolutionError(Exception):
    """Principal resolution itself blew up."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def failure(message: str, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthResolutionFailure)
    async def auth_failure_handler(_: Request, exc: AuthResolutionFailure):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"message": exc.message},
        )

    @app.exception_handler(AuthResolutionError)
    async def auth_error_handler(_: Request, exc: AuthResolutionError):
        logger.warning("Auth resolution error: %s", exc.message)
        return failure(exc.message)

    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError):
        logger.info("AppError: %s", exc.message)
        return failure(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
        return failure(f"{field}: {first.get('msg', 'invalid')}", status.HTTP_422_UNPROCESSABLE_ENTITY)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        return failure(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return failure(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
