"""Enums and constants for StaffDesk — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    admin = "admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class LeaveKind(str, enum.Enum):
    """Leave type; each kind draws on its own balance on the profile."""

    sick = "sick"
    casual = "casual"


class HalfDayPeriod(str, enum.Enum):
    morning = "morning"
    evening = "evening"


# ── Attendance ──────────────────────────────────────────────────────

class DayStatus(str, enum.Enum):
    """Classification of one employee on one date, in priority order."""

    non_working = "non_working"
    approved_leave = "approved_leave"
    pending_leave = "pending_leave"
    present = "present"
    checked_in = "checked_in"
    absent = "absent"


class CheckStatus(str, enum.Enum):
    """Self-service view of today's record."""

    not_checked_in = "not_checked_in"
    checked_in = "checked_in"
    checked_out = "checked_out"


# ── Work summary ────────────────────────────────────────────────────

DEFAULT_WORK_TYPES: tuple[str, ...] = (
    "Computer Repair",
    "Computer Upgrade",
    "New Computer installation",
    "Head office user Support",
    "POS Configuration",
    "Mobile Device configuration",
    "Scan and Go",
    "Tabs ( HC )",
    "Tabs ( HRP )",
    "Tabs ( Backey Tab )",
    "Other users Support",
)

# ── Misc constants ──────────────────────────────────────────────────

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"   # e.g. 2026-02
HALF_DAY_AMOUNT = "0.5"
MAX_PASSWORD_BYTES = 72                        # bcrypt input limit
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
