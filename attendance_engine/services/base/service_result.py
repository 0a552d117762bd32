"""
Result envelope returned by the report facade.

Every facade operation answers with a ServiceResult instead of raising, so
the HTTP layer can map failures to status codes in one place.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from attendance_engine.core.exceptions import BaseAppException, ErrorCode


class ErrorSeverity(str, Enum):
    """How loudly a failure should be reported."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ServiceError:
    """
    One failed operation.

    `status_code` is the HTTP status the API answers with; `field` names the
    offending filter for validation failures.
    """

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    timestamp: datetime = dataclass_field(default_factory=_utcnow)
    status_code: int = 500

    @classmethod
    def from_exception(
        cls,
        exc: BaseAppException,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> "ServiceError":
        return cls(
            code=exc.error_code,
            message=exc.message,
            severity=severity,
            details=exc.details,
            field=exc.details.get("field"),
            status_code=exc.status_code,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "field": self.field,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Success or failure of a facade operation.

    A query that matched nothing is a success with `metadata["empty"]` set;
    see `is_empty`.
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = dataclass_field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=metadata or {})

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def validation_failure(
        cls,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        """Rejected input: answered with 422 and logged at warning level."""
        return cls.failure(
            ServiceError(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                severity=ErrorSeverity.WARNING,
                field=field,
                details=details,
                status_code=422,
            )
        )

    @property
    def is_empty(self) -> bool:
        return self.is_success and bool(self.metadata.get("empty"))

    def unwrap(self) -> TData:
        """
        Raises:
            ValueError: the operation failed
        """
        if not self.is_success:
            reason = self.error.message if self.error else "unknown error"
            raise ValueError(f"Cannot unwrap failed result: {reason}")
        return self.data

    def __bool__(self) -> bool:
        return self.is_success


__all__ = [
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
