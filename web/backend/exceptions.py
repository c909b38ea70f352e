#!/usr/bin/env python3
"""
Custom exceptions and error handlers for the web application.
"""

import logging
from typing import Any, Dict
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""
    status_code = 500

    def extra(self) -> Dict[str, Any]:
        """Additional fields merged into the error response body."""
        return {}


class ValidationException(ServiceException):
    """Raised when a request is malformed or violates a business rule."""
    status_code = 400


class UnauthorizedException(ServiceException):
    """Raised when the caller is not authenticated."""
    status_code = 401


class PaymentRequiredException(ServiceException):
    """Raised when an action needs more credits than the caller holds."""
    status_code = 402

    def __init__(self, message: str = "Insufficient credits", credits_required: int = 1, current_credits: int = 0):
        super().__init__(message)
        self.credits_required = credits_required
        self.current_credits = current_credits

    def extra(self) -> Dict[str, Any]:
        return {
            "credits_required": self.credits_required,
            "current_credits": self.current_credits,
        }


class InsufficientCreditsException(PaymentRequiredException):
    """Raised by the credit ledger when a spend would take the balance below zero."""
    pass


class ForbiddenException(ServiceException):
    """Raised when the caller may not act on the resource."""
    status_code = 403


class NotFoundException(ServiceException):
    """Raised when a referenced resource does not exist."""
    status_code = 404


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Client errors are expected outcomes and logged at info level; anything
    mapped to 500 is logged with its traceback.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = exc.status_code
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    content = {
        "success": False,
        "error": str(exc),
        "type": exc.__class__.__name__
    }
    content.update(exc.extra())

    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.

    Args:
        request: The FastAPI request.
        exc: The HTTP exception.

    Returns:
        JSONResponse with error details.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Report request validation failures as 400 with the first offending field.
    """
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": _describe_validation_error(exc),
            "type": "ValidationError"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: The FastAPI request.
        exc: The exception.

    Returns:
        JSONResponse with error details.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
