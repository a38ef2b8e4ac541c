"""
Error taxonomy and standardized error handling utilities for API endpoints.

Services raise the four domain errors below directly. They are
``HTTPException`` subclasses, so FastAPI renders them without extra
translation and callers can still tell the kinds apart by type.
"""
from functools import wraps
from typing import Callable, Any, Optional
from uuid import UUID
from fastapi import HTTPException, status
import logging

from shiftboard.core.config import settings

logger = logging.getLogger(__name__)


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer."""
    kind = "service_error"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.default_status, detail=detail)
        self.message = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ValidationError(ServiceError):
    """Missing or malformed input. Raised before any write."""
    kind = "validation_error"
    default_status = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    """Id does not resolve, or resolves outside the caller's scope."""
    kind = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """The record is not in a state that allows the operation."""
    kind = "conflict"
    default_status = status.HTTP_409_CONFLICT


class AuthorizationError(ServiceError):
    """Role lacks the capability, location outside scope, or PIN mismatch."""
    kind = "authorization_error"
    default_status = status.HTTP_403_FORBIDDEN


def parse_uuid(uuid_string: str, entity_name: str = "ID") -> UUID:
    """
    Parse a UUID string and raise a standardized error if invalid.

    Args:
        uuid_string: String to parse as UUID
        entity_name: Name of the entity (for error message)

    Returns:
        Parsed UUID

    Raises:
        ValidationError: If UUID is invalid
    """
    try:
        return UUID(str(uuid_string))
    except ValueError:
        raise ValidationError(
            f"Invalid {entity_name.lower()}: '{uuid_string}'. Must be a valid UUID.",
        )


def handle_endpoint_errors(
    operation_name: str = None,
    log_error: bool = True,
):
    """
    Decorator to standardize error handling across all endpoints.

    Catches unexpected exceptions, logs them, and returns appropriate HTTP responses.

    Args:
        operation_name: Name of the operation (for logging)
        log_error: Whether to log errors (default: True)

    Usage:
        @handle_endpoint_errors(operation_name="create_shift")
        async def create_shift_endpoint(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except ServiceError as e:
                if log_error and e.status_code != status.HTTP_404_NOT_FOUND:
                    logger.info(f"{op_name} rejected ({e.kind}): {e.message}")
                raise
            except HTTPException:
                # Re-raise HTTPExceptions as-is (they're already properly formatted)
                raise
            except ValueError as e:
                # Handle value errors (e.g., invalid enum values, invalid dates)
                if log_error:
                    logger.warning(f"Value error in {op_name}: {str(e)}")
                raise ValidationError(f"Invalid input: {str(e)}")
            except Exception as e:
                error_detail = str(e)
                error_type = type(e).__name__

                if log_error:
                    logger.error(
                        f"Unexpected error in {op_name}",
                        exc_info=True,
                        extra={
                            "operation": op_name,
                            "error": error_detail,
                            "error_type": error_type
                        }
                    )

                # In development, return more detailed error messages
                if settings.ENVIRONMENT.lower() not in ["prod", "production"]:
                    detail_msg = f"Error in {op_name}: {error_type}: {error_detail}"
                else:
                    detail_msg = "An unexpected error occurred while processing your request. Please try again later."

                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=detail_msg,
                )
        return wrapper
    return decorator
