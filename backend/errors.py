"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LetterboxError(Exception):
    """Base exception with HTTP status code and a client-facing error code."""

    code = "unhandledError"

    def __init__(self, message: str, status_code: int = 500, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        if code:
            self.code = code


class UnauthenticatedError(LetterboxError):
    code = "unauthenticated"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)


class LabelNotFoundError(LetterboxError):
    code = "labelNotFound"

    def __init__(self, label_name: str):
        super().__init__(f"Label not found: {label_name}", status_code=404)


class GmailNotFoundError(LetterboxError):
    """Gmail has no such resource, e.g. an unknown or deleted message id."""

    code = "notFound"

    def __init__(self, path: str):
        super().__init__(f"Gmail resource not found: {path}", status_code=404)


class GmailApiError(LetterboxError):
    """Gmail answered with an error or could not be reached."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(LetterboxError)
    async def handle_letterbox_error(_request: Request, exc: LetterboxError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc)
        return JSONResponse({"error": exc.code}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "unhandledError"},
            status_code=500,
        )
