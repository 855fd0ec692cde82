from enum import Enum


class EmploymentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class BonStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    CANCELLED = "cancelled"


class LedgerTxnType(str, Enum):
    APPLICATION = "APPLICATION"
    INSTALLMENT = "INSTALLMENT"
    INSTALLMENT_REVERSAL = "INSTALLMENT_REVERSAL"


# bons that still count against an employee's capacity
ACTIVE_BON_STATUSES = (BonStatus.PENDING.value, BonStatus.APPROVED.value)
