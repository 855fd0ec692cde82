"""Application validation.

Each rule is an independent predicate over an :class:`ApplicationContext`
and returns a message when violated. All rules run, in the fixed order of
``RULES``, so a caller always sees every violation at once.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from bon_backend.core.enums import EmploymentStatus
from bon_backend.core.exceptions import ValidationError
from bon_backend.core.rules import BonRules
from bon_backend.services.eligibility import active_bons
from bon_backend.services.snapshots import BonSnapshot, EmployeeSnapshot
from bon_backend.utils.bon_calculations import (
    employment_months,
    money,
    months_between,
    rupiah,
    share_of,
)


@dataclass(frozen=True)
class ApplicationContext:
    employee: EmployeeSnapshot
    requested_amount: Decimal
    installment_period: int
    existing_bons: Tuple[BonSnapshot, ...]
    active_bons: Tuple[BonSnapshot, ...]
    rules: BonRules
    today: date
    employment_months: int
    max_by_salary: Decimal
    max_installment_by_salary: Decimal
    monthly_installment: Decimal


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors, self.warnings)


Rule = Callable[[ApplicationContext], Optional[str]]


def _employee_active(ctx: ApplicationContext) -> Optional[str]:
    if ctx.employee.employment_status != EmploymentStatus.ACTIVE.value:
        return "Employee must be active to apply for a bon"
    return None


def _employment_duration(ctx: ApplicationContext) -> Optional[str]:
    required = ctx.rules.min_employment_duration
    if ctx.employment_months < required:
        return (
            f"Employee must have worked at least {required} months to apply for a bon. "
            f"Currently {ctx.employment_months} months."
        )
    return None


def _amount_within_salary_share(ctx: ApplicationContext) -> Optional[str]:
    if ctx.requested_amount > ctx.max_by_salary:
        return (
            f"Bon amount may not exceed {ctx.rules.max_bon_percentage}% of basic salary. "
            f"Maximum: {rupiah(ctx.max_by_salary)}"
        )
    return None


def _amount_within_absolute_cap(ctx: ApplicationContext) -> Optional[str]:
    if ctx.requested_amount > ctx.rules.max_bon_amount:
        return f"Bon amount may not exceed {rupiah(ctx.rules.max_bon_amount)}"
    return None


def _period_in_range(ctx: ApplicationContext) -> Optional[str]:
    low, high = ctx.rules.min_installment_period, ctx.rules.max_installment_period
    if not low <= ctx.installment_period <= high:
        return (
            f"Installment period must be between {low} and {high} months, "
            f"got {ctx.installment_period}"
        )
    return None


def _installment_within_salary_share(ctx: ApplicationContext) -> Optional[str]:
    if ctx.monthly_installment > ctx.max_installment_by_salary:
        return (
            f"Monthly installment may not exceed {ctx.rules.max_installment_percentage}% "
            f"of basic salary. Maximum: {rupiah(ctx.max_installment_by_salary)}, "
            f"requested: {rupiah(ctx.monthly_installment)}"
        )
    return None


def _active_bon_limit(ctx: ApplicationContext) -> Optional[str]:
    limit = ctx.rules.max_active_bon_per_employee
    if len(ctx.active_bons) >= limit:
        return (
            f"Employee already has {len(ctx.active_bons)} active bon(s). "
            f"Maximum {limit} active bon(s) per employee."
        )
    return None


def _application_spacing(ctx: ApplicationContext) -> Optional[str]:
    gap = ctx.rules.min_time_between_applications
    recent = [
        b for b in ctx.existing_bons
        if months_between(b.application_date, ctx.today, ctx.rules.employment_month_policy) < gap
    ]
    if recent:
        return f"Must wait at least {gap} month(s) since the last bon application"
    return None


def _total_installment_burden(ctx: ApplicationContext) -> Optional[str]:
    existing = sum((b.monthly_installment for b in ctx.active_bons), Decimal("0"))
    total = existing + ctx.monthly_installment
    if total > ctx.max_installment_by_salary:
        return (
            f"Total installments (including active bons) may not exceed "
            f"{ctx.rules.max_installment_percentage}% of salary. "
            f"Total: {rupiah(total)}, maximum: {rupiah(ctx.max_installment_by_salary)}"
        )
    return None


RULES: Tuple[Rule, ...] = (
    _employee_active,
    _employment_duration,
    _amount_within_salary_share,
    _amount_within_absolute_cap,
    _period_in_range,
    _installment_within_salary_share,
    _active_bon_limit,
    _application_spacing,
    _total_installment_burden,
)


def _large_amount(ctx: ApplicationContext) -> Optional[str]:
    if ctx.max_by_salary > 0 and ctx.requested_amount > ctx.max_by_salary * Decimal("0.7"):
        share = round(ctx.requested_amount / ctx.max_by_salary * 100)
        return (
            f"Bon amount is large ({share}% of the maximum). "
            f"Make sure the employee can afford the installments."
        )
    return None


def _long_period(ctx: ApplicationContext) -> Optional[str]:
    if ctx.installment_period > 12:
        return (
            f"Installment period is long ({ctx.installment_period} months). "
            f"Consider the risk of employment status changes."
        )
    return None


WARNINGS: Tuple[Rule, ...] = (_large_amount, _long_period)


def build_context(
        employee: EmployeeSnapshot,
        requested_amount,
        installment_period: int,
        existing_bons: Sequence[BonSnapshot],
        rules: BonRules,
        today: Optional[date] = None,
) -> ApplicationContext:
    today = today or date.today()
    amount = money(requested_amount)
    own = tuple(b for b in existing_bons if b.employee_id == employee.employee_id)
    # unrounded on purpose: comparisons use the exact share
    monthly = amount / installment_period if installment_period > 0 else amount

    return ApplicationContext(
        employee=employee,
        requested_amount=amount,
        installment_period=installment_period,
        existing_bons=own,
        active_bons=tuple(active_bons(employee.employee_id, own)),
        rules=rules,
        today=today,
        employment_months=employment_months(employee.hire_date, today, rules),
        max_by_salary=share_of(employee.basic_salary, rules.max_bon_percentage),
        max_installment_by_salary=share_of(employee.basic_salary, rules.max_installment_percentage),
        monthly_installment=monthly,
    )


def validate_application(
        employee: EmployeeSnapshot,
        requested_amount,
        installment_period: int,
        existing_bons: Sequence[BonSnapshot],
        rules: BonRules,
        today: Optional[date] = None,
) -> ValidationResult:
    ctx = build_context(employee, requested_amount, installment_period, existing_bons, rules, today)

    result = ValidationResult()
    for rule in RULES:
        message = rule(ctx)
        if message:
            result.errors.append(message)
    for rule in WARNINGS:
        message = rule(ctx)
        if message:
            result.warnings.append(message)
    return result
