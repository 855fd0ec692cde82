"""Immutable views over ORM rows so the rule functions stay pure."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bon_backend.utils.bon_calculations import money


@dataclass(frozen=True)
class EmployeeSnapshot:
    employee_id: int
    basic_salary: Decimal
    hire_date: date
    employment_status: str

    @classmethod
    def from_model(cls, employee) -> "EmployeeSnapshot":
        return cls(
            employee_id=employee.employee_id,
            basic_salary=money(employee.basic_salary),
            hire_date=employee.hire_date,
            employment_status=employee.employment_status,
        )


@dataclass(frozen=True)
class BonSnapshot:
    bon_id: int
    employee_id: int
    principal_amount: Decimal
    remaining_balance: Decimal
    monthly_installment: Decimal
    status: str
    application_date: date

    @classmethod
    def from_model(cls, bon) -> "BonSnapshot":
        return cls(
            bon_id=bon.bon_id,
            employee_id=bon.employee_id,
            principal_amount=money(bon.principal_amount),
            remaining_balance=money(bon.remaining_balance),
            monthly_installment=money(bon.monthly_installment),
            status=bon.status,
            application_date=bon.application_date,
        )
