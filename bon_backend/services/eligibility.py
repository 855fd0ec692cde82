"""Borrowing capacity of a single employee.

All functions here are pure: they read snapshots and rules and never
touch the session.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from bon_backend.core.enums import ACTIVE_BON_STATUSES, EmploymentStatus
from bon_backend.core.rules import BonRules
from bon_backend.services.snapshots import BonSnapshot, EmployeeSnapshot
from bon_backend.utils.bon_calculations import (
    employment_months,
    money,
    percent_of,
    recommended_period,
)


@dataclass(frozen=True)
class CapacityBreakdown:
    max_installment_capacity: Decimal
    current_installment_burden: Decimal
    available_installment_capacity: Decimal
    active_bons_count: int
    max_active_bons: int


@dataclass(frozen=True)
class ProposedCalculation:
    requested_amount: Decimal
    recommended_period: int
    monthly_installment: Decimal
    total_installment_burden: Decimal
    installment_percentage: int


@dataclass(frozen=True)
class EligibilityResult:
    is_eligible: bool
    reasons: List[str]
    max_amount: Decimal
    recommended_period: int
    employment_months: int
    capacity: CapacityBreakdown
    calculation: Optional[ProposedCalculation] = field(default=None)


def active_bons(employee_id: int, bons: Sequence[BonSnapshot]) -> List[BonSnapshot]:
    """Pending or approved bons of this employee that still carry a balance."""
    return [
        b for b in bons
        if b.employee_id == employee_id
        and b.status in ACTIVE_BON_STATUSES
        and b.remaining_balance > 0
    ]


def capacity_breakdown(
        employee: EmployeeSnapshot,
        bons: Sequence[BonSnapshot],
        rules: BonRules,
) -> CapacityBreakdown:
    active = active_bons(employee.employee_id, bons)
    max_capacity = percent_of(employee.basic_salary, rules.max_installment_percentage)
    burden = money(sum((b.monthly_installment for b in active), Decimal("0")))

    return CapacityBreakdown(
        max_installment_capacity=max_capacity,
        current_installment_burden=burden,
        available_installment_capacity=money(max_capacity - burden),
        active_bons_count=len(active),
        max_active_bons=rules.max_active_bon_per_employee,
    )


def max_bon_amount(
        employee: EmployeeSnapshot,
        bons: Sequence[BonSnapshot],
        rules: BonRules,
) -> Decimal:
    """
    max_amount = max(0, min(by_salary, absolute_cap, by_capacity))

    by_capacity assumes the shortest allowed period is the binding case:
      available_installment_capacity * min_installment_period
    """
    capacity = capacity_breakdown(employee, bons, rules)
    max_by_salary = percent_of(employee.basic_salary, rules.max_bon_percentage)
    max_by_capacity = money(capacity.available_installment_capacity * rules.min_installment_period)

    return max(money(0), min(max_by_salary, money(rules.max_bon_amount), max_by_capacity))


def proposed_calculation(
        employee: EmployeeSnapshot,
        bons: Sequence[BonSnapshot],
        amount,
        rules: BonRules,
) -> ProposedCalculation:
    amount = money(amount)
    capacity = capacity_breakdown(employee, bons, rules)
    period = recommended_period(amount, employee.basic_salary, rules)
    monthly = money(math.ceil(amount / period))
    total = money(capacity.current_installment_burden + monthly)

    return ProposedCalculation(
        requested_amount=amount,
        recommended_period=period,
        monthly_installment=monthly,
        total_installment_burden=total,
        installment_percentage=int(round(total / employee.basic_salary * 100)),
    )


def evaluate_eligibility(
        employee: EmployeeSnapshot,
        bons: Sequence[BonSnapshot],
        rules: BonRules,
        today: Optional[date] = None,
        proposed_amount=None,
) -> EligibilityResult:
    """Every failing condition is reported, not just the first one."""
    today = today or date.today()
    reasons: List[str] = []

    if employee.employment_status != EmploymentStatus.ACTIVE.value:
        reasons.append("Employee is not active")

    months = employment_months(employee.hire_date, today, rules)
    if months < rules.min_employment_duration:
        reasons.append(
            f"Employment duration is {months} months; "
            f"at least {rules.min_employment_duration} months are required"
        )

    capacity = capacity_breakdown(employee, bons, rules)
    if capacity.active_bons_count >= rules.max_active_bon_per_employee:
        reasons.append(
            f"Already has {capacity.active_bons_count} active bon(s); "
            f"maximum is {rules.max_active_bon_per_employee}"
        )

    max_amount = max_bon_amount(employee, bons, rules)
    if max_amount <= 0:
        reasons.append("Installment capacity is fully used")

    calculation = None
    if proposed_amount is not None:
        calculation = proposed_calculation(employee, bons, proposed_amount, rules)

    return EligibilityResult(
        is_eligible=not reasons,
        reasons=reasons,
        max_amount=max_amount,
        recommended_period=recommended_period(max_amount, employee.basic_salary, rules),
        employment_months=months,
        capacity=capacity,
        calculation=calculation,
    )
