"""Common module — shared utilities for StaffDesk."""

from staffdesk.common.audit import AuditTrail, create_audit_entry
from staffdesk.common.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_WORK_TYPES,
    MAX_PAGE_SIZE,
    CheckStatus,
    DayStatus,
    HalfDayPeriod,
    LeaveKind,
    LeaveStatus,
    UserRole,
)
from staffdesk.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InsufficientBalanceException,
    NotFoundException,
    StateConflictError,
    ValidationException,
    register_exception_handlers,
)
from staffdesk.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "CheckStatus",
    "DayStatus",
    "HalfDayPeriod",
    "LeaveKind",
    "LeaveStatus",
    "UserRole",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_WORK_TYPES",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InsufficientBalanceException",
    "NotFoundException",
    "StateConflictError",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
]
