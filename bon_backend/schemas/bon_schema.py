from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from bon_backend.schemas.employee_schema import EmployeeMiniOut


class BonCreate(BaseModel):
    employee_id: int
    requested_amount: float = Field(gt=0)
    monthly_installment: float = Field(gt=0)
    note: Optional[str] = None

    @field_validator("note", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


# ---------- PUT /bons/{id}: the legal mutations, tagged by "kind" ----------

class DecisionRequest(BaseModel):
    kind: Literal["decision"] = "decision"
    action: Literal["approve", "reject"]


class FieldUpdateRequest(BaseModel):
    kind: Literal["update"] = "update"
    monthly_installment: Optional[float] = Field(None, gt=0)
    note: Optional[str] = None


BonUpdateRequest = Annotated[
    Union[DecisionRequest, FieldUpdateRequest],
    Field(discriminator="kind"),
]


class BonOut(BaseModel):
    bon_id: int
    employee_id: int
    principal_amount: float
    remaining_balance: float
    monthly_installment: float
    application_date: date
    approval_date: Optional[date] = None
    status: str
    note: Optional[str] = None
    approved_by: Optional[int] = None
    employee: Optional[EmployeeMiniOut] = None

    class Config:
        from_attributes = True


class BonResult(BaseModel):
    success: bool = True
    message: str
    data: BonOut
    warnings: List[str] = []


class PaginationOut(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: int = Field(serialization_alias="from")
    to: int


class BonListOut(BaseModel):
    data: List[BonOut]
    pagination: PaginationOut


class CapacityOut(BaseModel):
    max_installment_capacity: float
    current_installment_burden: float
    available_installment_capacity: float
    active_bons_count: int
    max_active_bons: int


class CalculationOut(BaseModel):
    requested_amount: float
    recommended_period: int
    monthly_installment: float
    total_installment_burden: float
    installment_percentage: int


class EligibilityDetailOut(BaseModel):
    is_eligible: bool
    reasons: List[str]
    max_amount: float
    recommended_period: int
    employment_months: int


class RulesOut(BaseModel):
    max_bon_percentage: float
    max_bon_amount: float
    min_installment_period: int
    max_installment_period: int
    max_active_bon_per_employee: int
    min_employment_duration: int
    max_installment_percentage: float
    min_time_between_applications: int
    employment_month_policy: str


class EligibilityOut(BaseModel):
    employee_id: int
    basic_salary: float
    hire_date: date
    employment_status: str
    eligibility: EligibilityDetailOut
    capacity: CapacityOut
    calculation: Optional[CalculationOut] = None
    rules: RulesOut


class BonStatsOut(BaseModel):
    total_active_bons: int = 0
    total_outstanding: float = 0
    total_monthly_installments: float = 0
    total_employees_with_bon: int = 0


class LedgerRowOut(BaseModel):
    ledger_id: int
    txn_date: datetime
    txn_type: str
    installment_id: Optional[int] = None
    debit: float
    credit: float
    balance_outstanding: float
    narration: Optional[str] = None

    class Config:
        from_attributes = True


# ---------- installments ----------

class InstallmentOut(BaseModel):
    installment_id: int
    bon_id: int
    period: str
    amount: float
    deduction_date: date
    status: str

    class Config:
        from_attributes = True


class ProcessPeriodRequest(BaseModel):
    period: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$")


class BonFailureOut(BaseModel):
    bon_id: int
    error: str


class ProcessPeriodOut(BaseModel):
    success: bool = True
    message: str
    period: str
    data: List[InstallmentOut]
    skipped: int
    failures: List[BonFailureOut] = []


class InstallmentStatusUpdate(BaseModel):
    status: Literal["processed", "cancelled"]
