# error_handler.py - Centralized Error Handling

import logging
from typing import Any, Dict, List, Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from config_manager import get_config

logger = logging.getLogger(__name__)
config = get_config()

GENERIC_ERROR_MESSAGE = "Something went wrong!"

class AppError(Exception):
    """Base application error"""
    def __init__(self, message: str, code: str = "APP_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)

class ValidationError(AppError):
    """Structural validation failure carrying every field error found"""
    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, "VALIDATION_ERROR", 400)

class InvalidScheduleError(AppError):
    """Meeting does not start before it ends"""
    def __init__(self, message: str = "Start date must be before end date"):
        super().__init__(message, "INVALID_SCHEDULE", 400)

class MeetingReferenceError(AppError):
    """Meeting refers to users that do not exist"""
    def __init__(self, message: str, code: str = "REFERENCE_ERROR"):
        super().__init__(message, code, 400)

class OrganizerNotFoundError(MeetingReferenceError):
    def __init__(self, message: str = "Organizer not found"):
        super().__init__(message, "ORGANIZER_NOT_FOUND")

class AttendeesNotFoundError(MeetingReferenceError):
    def __init__(self, message: str = "One or more attendees not found"):
        super().__init__(message, "ATTENDEES_NOT_FOUND")

class NotFoundError(AppError):
    """Resource not found error"""
    def __init__(self, message: str = "Resource not found", resource: str = None):
        self.resource = resource
        super().__init__(message, "NOT_FOUND", 404)

class ConflictError(AppError):
    """Unique field collision"""
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, "CONFLICT", 400)

class StoreError(AppError):
    """Storage failure"""
    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, "STORE_ERROR", 500)

def create_error_response(
    error: Exception,
    request: Optional[Request] = None,
    include_details: bool = None
) -> JSONResponse:
    """Create standardized error response"""

    # Determine if we should include detailed error information
    if include_details is None:
        include_details = config.get('server.debug', False)

    if isinstance(error, ValidationError):
        content: Dict[str, Any] = {"errors": error.errors}
        status_code = error.status_code

    elif isinstance(error, AppError):
        content = {"error": error.message}
        status_code = error.status_code

    elif isinstance(error, StarletteHTTPException):
        # Unknown paths and unsupported methods look the same to clients
        if error.status_code in (404, 405):
            content = {"error": "Route not found"}
            status_code = 404
        else:
            content = {"error": str(error.detail)}
            status_code = error.status_code

    else:
        content = {"error": GENERIC_ERROR_MESSAGE}
        status_code = 500

        # Log unexpected errors
        logger.error(f"Unexpected error: {error}", exc_info=error)

    # Add detailed error information in debug mode
    if include_details and status_code >= 500:
        content["error_info"] = {
            "type": type(error).__name__,
            "details": str(error)
        }

        if request:
            content["error_info"]["request"] = {
                "method": request.method,
                "url": str(request.url)
            }

    return JSONResponse(status_code=status_code, content=content)

def request_validation_errors(error: RequestValidationError) -> List[Dict[str, str]]:
    """Convert FastAPI request parsing failures (e.g. malformed JSON) to field errors"""
    errors = []
    for item in error.errors():
        if item.get("type") == "json_invalid":
            errors.append({"field": "body", "message": "Request body must be valid JSON"})
            continue
        location = [str(part) for part in item.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(location) or "body",
            "message": item.get("msg", "Invalid request")
        })
    return errors

def handle_database_error(operation: str, error: Exception) -> AppError:
    """Handle database errors consistently"""
    logger.error(f"Database error in {operation}: {error}")

    # Map specific database errors to user-friendly messages
    error_str = str(error).lower()

    if "unique constraint" in error_str:
        return ConflictError("Resource already exists")
    elif "syntax error" in error_str:
        logger.critical(f"SQL syntax error in {operation}: {error}")
        return StoreError("Invalid database operation")
    else:
        return StoreError(f"Database operation failed: {operation}")

def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": ...} or {"errors": [...]}"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return create_error_response(exc, request)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return create_error_response(ValidationError(request_validation_errors(exc)), request)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return create_error_response(exc, request)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        return create_error_response(exc, request)
