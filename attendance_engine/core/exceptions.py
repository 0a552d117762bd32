"""
Custom Exceptions for the Attendance Reporting Engine

This module defines custom exception classes used throughout the engine
for better error handling and debugging.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the engine"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FILTER_VALUE = "INVALID_FILTER_VALUE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    QUERY_NOT_READY = "QUERY_NOT_READY"

    # Upstream store errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"

    # Processing errors
    CONSOLIDATION_ERROR = "CONSOLIDATION_ERROR"
    EXPORT_FAILED = "EXPORT_FAILED"


class BaseAppException(Exception):
    """
    Base exception class for all engine exceptions.

    Provides consistent error handling across the engine with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Validation Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class FilterValidationError(ValidationError):
    """Raised when a filter value is not valid for the current context"""

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        allowed: Optional[List[Any]] = None,
        error_code: ErrorCode = ErrorCode.INVALID_FILTER_VALUE
    ):
        super().__init__(message, {field: [message]}, error_code)
        self.field = field
        self.details.update({
            "field": field,
            "value": None if value is None else str(value),
        })
        if allowed is not None:
            self.details["allowed"] = [str(a) for a in allowed]


class QueryNotReadyError(BaseAppException):
    """Raised when a query is attempted without all of its required filters"""

    def __init__(self, missing: List[str]):
        message = f"Missing required filters: {', '.join(missing)}"
        super().__init__(message, ErrorCode.QUERY_NOT_READY, {"missing": missing}, 422)
        self.missing = missing


# ========================================
# Upstream Store Exceptions
# ========================================

class RecordStoreError(BaseAppException):
    """
    Raised when the roster or attendance store is unreachable or answers
    with an error status. Recoverable: callers may re-issue the request.
    """

    def __init__(
        self,
        message: str = "Upstream store request failed",
        store: Optional[str] = None,
        path: Optional[str] = None,
        upstream_status: Optional[int] = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR
    ):
        details = {
            "store": store,
            "path": path,
            "upstream_status": upstream_status,
        }
        super().__init__(message, error_code, details, 502)
        self.upstream_status = upstream_status


# ========================================
# Processing Exceptions
# ========================================

class ConsolidationError(BaseAppException):
    """Raised in strict mode when grouped summary rows disagree on student metadata"""

    def __init__(self, student_id: str, field: str, values: List[Any]):
        message = (
            f"Conflicting {field} values for student {student_id}: "
            + ", ".join(repr(v) for v in values)
        )
        details = {"student_id": student_id, "field": field, "values": [str(v) for v in values]}
        super().__init__(message, ErrorCode.CONSOLIDATION_ERROR, details, 500)


class ReportExportError(BaseAppException):
    """Raised when a report document cannot be produced or saved"""

    def __init__(
        self,
        message: str = "Report export failed",
        export_format: Optional[str] = None,
        filename: Optional[str] = None
    ):
        details = {"format": export_format, "filename": filename}
        super().__init__(message, ErrorCode.EXPORT_FAILED, details, 500)
