from app.models.models import (
    CLIENT_FREQUENCIES,
    JOB_STATUSES,
    PAY_TYPES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    RATE_TYPES,
    RECURRENCE_RULES,
    SERVICE_TYPES,
    Business,
    Client,
    Employee,
    Expense,
    Job,
    JobEmployee,
    Membership,
    User,
)

__all__ = [
    "CLIENT_FREQUENCIES",
    "JOB_STATUSES",
    "PAY_TYPES",
    "PAYMENT_METHODS",
    "PAYMENT_STATUSES",
    "RATE_TYPES",
    "RECURRENCE_RULES",
    "SERVICE_TYPES",
    "Business",
    "Client",
    "Employee",
    "Expense",
    "Job",
    "JobEmployee",
    "Membership",
    "User",
]
