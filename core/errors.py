"""
Error Code Definitions and Response Envelope.

Centralized error code management with consistent error responses for
the request boundary.

Every user-visible failure carries a stable error tag plus a human
message. Stack traces are included only in development/debug mode.

Exports:
    ErrorCode: Standardized error tags
    error_code_for: Classify an exception into an ErrorCode
    get_http_status_code: HTTP status for an ErrorCode
    build_error_response: Response envelope for an exception
"""

import traceback
from enum import Enum
from typing import Any, Dict

import pydantic

from exceptions import (
    BusinessLogicError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)


GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred"


class ErrorCode(str, Enum):
    """
    Stable error tags returned to callers.

    NOT_FOUND: missing farm/entity/revision, or farm invisible to the principal
    FORBIDDEN: farm visible but the principal's role does not allow the mutation
    VALIDATION_ERROR: malformed or missing input, including ingestion failures
    INTERNAL_ERROR: store or parse failure with no clearer classification
    """
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    VALIDATION_ERROR = "ValidationError"
    INTERNAL_ERROR = "InternalError"


_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def error_code_for(exc: BaseException) -> ErrorCode:
    """
    Classify an exception.

    Business errors map through their error_tag; pydantic validation of
    client-supplied documents counts as ValidationError; anything else is
    an InternalError.
    """
    if isinstance(exc, NotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(exc, ForbiddenError):
        return ErrorCode.FORBIDDEN
    if isinstance(exc, (ValidationError, pydantic.ValidationError)):
        return ErrorCode.VALIDATION_ERROR
    return ErrorCode.INTERNAL_ERROR


def get_http_status_code(error_code: ErrorCode) -> int:
    """
    Get the appropriate HTTP status code for an error code.

    Example:
        >>> get_http_status_code(ErrorCode.NOT_FOUND)
        404
    """
    return _HTTP_STATUS.get(error_code, 500)


def build_error_response(exc: BaseException, debug_mode: bool = False) -> Dict[str, Any]:
    """
    Create the response envelope for an exception.

    Args:
        exc: Exception raised by a repository, service or pipeline
        debug_mode: Include the stack trace (development only)

    Returns:
        {"error": <tag>, "message": <human message>} plus "stack" in debug mode

    Example:
        >>> build_error_response(NotFoundError("Block not found"))
        {'error': 'NotFound', 'message': 'Block not found'}
    """
    code = error_code_for(exc)

    if isinstance(exc, BusinessLogicError) and code != ErrorCode.INTERNAL_ERROR:
        message = exc.message or str(exc)
    elif isinstance(exc, pydantic.ValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ) or "Invalid input"
    elif debug_mode:
        message = str(exc) or GENERIC_INTERNAL_MESSAGE
    else:
        # Internal details stay out of production responses
        message = GENERIC_INTERNAL_MESSAGE

    response: Dict[str, Any] = {
        "error": code.value,
        "message": message,
    }

    if debug_mode:
        response["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    return response
