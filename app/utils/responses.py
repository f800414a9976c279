"""
Standardized response utilities
"""

import logging
from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from app.core.exceptions import ReservationError
from app.schemas.common import StandardResponse, ErrorResponse

logger = logging.getLogger(__name__)

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=data
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def exception_response(exc: ReservationError) -> JSONResponse:
    """Turn a service error into an error response; server faults stay generic"""
    if exc.status_code >= 500:
        logger.error(f"Request failed: {exc.message}", exc_info=exc.__cause__)
        return error_response(
            message="An internal error occurred. Please try again later.",
            error_code=exc.error_code,
            status_code=exc.status_code
        )
    return error_response(
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        status_code=exc.status_code
    )

def rate_limit_error():
    """Create rate limit error"""
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Please try again later."
    )
