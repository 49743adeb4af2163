from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    NEGATIVE_NET_PAYABLE = "NEGATIVE_NET_PAYABLE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    TIMED_OUT = "TIMED_OUT"
    NOTIFICATION_DELIVERY_FAILED = "NOTIFICATION_DELIVERY_FAILED"


class ErrorCategory(str, Enum):
    """What the caller should do about a rejected operation"""
    NOT_ALLOWED = "not_allowed"      # block the action
    INVALID_DATA = "invalid_data"    # prompt for correction
    GONE = "gone"                    # refresh
    CONFLICT = "conflict"            # reload and retry
    UNAVAILABLE = "unavailable"      # retry later


class BaseAppException(HTTPException):
    kind: ErrorKind = ErrorKind.VALIDATION_FAILED
    category: ErrorCategory = ErrorCategory.INVALID_DATA

    def __init__(self, status_code: int, detail: str, **context: Any):
        self.message = detail
        self.context = context
        super().__init__(
            status_code=status_code,
            detail={
                "error": self.kind.value,
                "category": self.category.value,
                "message": detail,
                **context,
            },
        )

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ValidationError(BaseAppException):
    kind = ErrorKind.VALIDATION_FAILED
    category = ErrorCategory.INVALID_DATA

    def __init__(self, detail: str = "Validation error", **context: Any):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, detail, **context)


class InvalidAmountError(ValidationError):
    kind = ErrorKind.INVALID_AMOUNT

    def __init__(self, field: str, amount: Any):
        super().__init__(
            f"Amount for '{field}' must be a non-negative whole number, got {amount!r}",
            field=field,
        )


class NegativeNetPayableError(ValidationError):
    kind = ErrorKind.NEGATIVE_NET_PAYABLE

    def __init__(self, gross_total: int, total_deductions: int):
        super().__init__(
            f"Deductions ({total_deductions}) exceed gross total ({gross_total})",
            gross_total=gross_total,
            total_deductions=total_deductions,
        )


class NotFoundError(BaseAppException):
    kind = ErrorKind.NOT_FOUND
    category = ErrorCategory.GONE

    def __init__(self, detail: str = "Resource not found", **context: Any):
        super().__init__(status.HTTP_404_NOT_FOUND, detail, **context)


class InvalidTransitionError(BaseAppException):
    kind = ErrorKind.INVALID_TRANSITION
    category = ErrorCategory.NOT_ALLOWED

    def __init__(self, from_status: Optional[str], to_status: Optional[str], detail: Optional[str] = None):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            status.HTTP_409_CONFLICT,
            detail or f"Transition from {from_status} to {to_status} is not allowed",
            from_status=from_status,
            to_status=to_status,
        )


class MissingRequiredFieldError(BaseAppException):
    kind = ErrorKind.MISSING_REQUIRED_FIELD
    category = ErrorCategory.NOT_ALLOWED

    def __init__(self, field: str, to_status: Optional[str] = None):
        self.field = field
        message = f"'{field}' is required"
        if to_status:
            message = f"'{field}' is required to move to {to_status}"
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, message, field=field, to_status=to_status)


class ConcurrentModificationError(BaseAppException):
    kind = ErrorKind.CONCURRENT_MODIFICATION
    category = ErrorCategory.CONFLICT

    def __init__(self, table: str, record_id: Any, expected_version: int):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"{table} {record_id} was modified by someone else (expected version {expected_version})",
            table=table,
            record_id=record_id,
            expected_version=expected_version,
        )


class TimedOutError(BaseAppException):
    kind = ErrorKind.TIMED_OUT
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            status.HTTP_504_GATEWAY_TIMEOUT,
            f"Database operation '{operation}' timed out after {timeout}s",
            operation=operation,
        )


class NotificationDeliveryFailed(Exception):
    """Raised per recipient during fan-out; callers log it and carry on"""
    kind = ErrorKind.NOTIFICATION_DELIVERY_FAILED

    def __init__(self, user_id: int, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Notification for user {user_id} failed: {reason}")
