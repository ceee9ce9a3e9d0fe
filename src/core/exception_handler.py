"""
Global exception handler for the Substance Access API.
Provides centralized error handling for all API exceptions.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from .exceptions import (
    SubstanceAccessException,
    InvalidInputException,
    SubstanceNotFoundException,
    StoreUnavailableException,
    GeneratorException,
    NoValidRowsException
)

logger = logging.getLogger(__name__)


def _error_body(exc: SubstanceAccessException) -> dict:
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(InvalidInputException)
    async def handle_invalid_input(request: Request, exc: InvalidInputException):
        return JSONResponse(status_code=400, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        content = {"error": "Invalid request"}
        if errors:
            content["details"] = str(errors[0].get("msg", ""))
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(SubstanceNotFoundException)
    async def handle_not_found(request: Request, exc: SubstanceNotFoundException):
        return JSONResponse(status_code=404, content=_error_body(exc))

    @app.exception_handler(StoreUnavailableException)
    async def handle_store_error(request: Request, exc: StoreUnavailableException):
        logger.error("Cache store failure on %s: %s (%s)", request.url.path, exc.message, exc.details)
        return JSONResponse(status_code=503, content=_error_body(exc))

    @app.exception_handler(GeneratorException)
    async def handle_generator_error(request: Request, exc: GeneratorException):
        logger.error("Generator failure on %s: %s (%s)", request.url.path, exc.message, exc.details)
        return JSONResponse(status_code=502, content=_error_body(exc))

    @app.exception_handler(NoValidRowsException)
    async def handle_no_valid_rows(request: Request, exc: NoValidRowsException):
        logger.error("Normalization produced no rows on %s: %s", request.url.path, exc.details)
        return JSONResponse(status_code=502, content=_error_body(exc))

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Server error"}
        )
