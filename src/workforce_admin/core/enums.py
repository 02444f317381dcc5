from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for permission gating."""

    ADMIN = "admin"
    EMPLOYEE = "employee"
    ACCOUNTANT = "accountant"
    OPERATION = "operation"
    SALES_MANAGER = "sales_manager"


class Permission(str, Enum):
    DASHBOARD_VIEW = "dashboard_view"
    EMPLOYEES_VIEW = "employees_view"
    EMPLOYEES_MANAGE = "employees_manage"
    CLIENTS_VIEW = "clients_view"
    CLIENTS_MANAGE = "clients_manage"
    PROJECTS_VIEW = "projects_view"
    PROJECTS_MANAGE = "projects_manage"
    WORKING_HOURS_VIEW = "working_hours_view"
    WORKING_HOURS_MANAGE = "working_hours_manage"
    WORKING_HOURS_APPROVE = "working_hours_approve"
    ROSTER_VIEW = "roster_view"
    ROSTER_MANAGE = "roster_manage"
    PAYROLL_VIEW = "payroll_view"
    PAYROLL_MANAGE = "payroll_manage"
    PAYROLL_PROCESS = "payroll_process"
    BANK_BALANCE_VIEW = "bank_balance_view"
    BANK_BALANCE_MANAGE = "bank_balance_manage"
    REPORTS_VIEW = "reports_view"
    REPORTS_GENERATE = "reports_generate"
    NOTIFICATIONS_VIEW = "notifications_view"


class WorkingHoursStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PayrollStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class RosterStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ClientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


class EmploymentType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CASUAL = "casual"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class TransactionCategory(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    SALARY = "salary"
    EQUIPMENT = "equipment"
    MATERIALS = "materials"
    TRAVEL = "travel"
    OFFICE = "office"
    UTILITIES = "utilities"
    MARKETING = "marketing"
    OTHER = "other"
    OPENING_BALANCE = "opening_balance"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationActionType(str, Enum):
    APPROVE = "approve"
    CONFIRM = "confirm"
    GRANT = "grant"
    CANCEL = "cancel"
    REJECT = "reject"
    NONE = "none"


class BulkPayrollStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class BulkPayrollItemStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
