from attendance_engine.core.exceptions import (
    BaseAppException,
    ConsolidationError,
    ErrorCode,
    FilterValidationError,
    QueryNotReadyError,
    RecordStoreError,
    ReportExportError,
    ValidationError,
)

__all__ = [
    "BaseAppException",
    "ConsolidationError",
    "ErrorCode",
    "FilterValidationError",
    "QueryNotReadyError",
    "RecordStoreError",
    "ReportExportError",
    "ValidationError",
]
