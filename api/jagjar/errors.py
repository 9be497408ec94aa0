from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Malformed month token or out-of-range settings value."""
    status_code = 400


class AuthorizationError(AppError):
    """No session (401) or missing admin capability (403)."""
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class ComputationFailure(AppError):
    """Data-access failure inside the allocation pipeline. Nothing is committed."""
    status_code = 500


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, err: AppError):
        return JSONResponse(status_code=err.status_code, content={'detail': err.message})
