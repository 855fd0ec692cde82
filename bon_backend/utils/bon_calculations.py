import math
import re
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from bon_backend.core.rules import BonRules, MONTH_POLICY_CALENDAR

PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def rupiah(x) -> str:
    """Human-readable amount for rule messages, e.g. ``Rp 1,500,000``."""
    amount = money(x)
    if amount == amount.to_integral_value():
        return f"Rp {amount:,.0f}"
    return f"Rp {amount:,.2f}"


def share_of(base, pct) -> Decimal:
    """Exact ``base * pct / 100``, not rounded; use for limit comparisons."""
    return money(base) * Decimal(str(pct)) / Decimal("100")


def percent_of(base, pct) -> Decimal:
    return money(share_of(base, pct))


def months_between(start: date, end: date, policy: str) -> int:
    """
    Whole months from ``start`` to ``end``.

    days30 (default):
      floor(days / 30)  -- an approximation that drifts on 31-day months
    calendar:
      completed calendar months, day-of-month aware
    """
    if policy == MONTH_POLICY_CALENDAR:
        months = (end.year - start.year) * 12 + (end.month - start.month)
        if end.day < start.day:
            months -= 1
        return months
    return (end - start).days // 30


def employment_months(hire_date: date, today: date, rules: BonRules) -> int:
    return months_between(hire_date, today, rules.employment_month_policy)


def installment_period(amount, monthly_installment) -> int:
    """Number of months needed to repay ``amount`` at ``monthly_installment``."""
    monthly = money(monthly_installment)
    if monthly <= 0:
        raise ValueError("monthly_installment must be > 0")
    return int(math.ceil(money(amount) / monthly))


def recommended_period(amount, salary, rules: BonRules) -> int:
    """
    min_period = ceil(amount / (salary * maxInstallmentPercentage%))
    clamped to [min_installment_period, max_installment_period].
    """
    max_monthly = percent_of(salary, rules.max_installment_percentage)
    if max_monthly <= 0:
        return rules.max_installment_period

    min_period = int(math.ceil(money(amount) / max_monthly))
    return max(rules.min_installment_period, min(min_period, rules.max_installment_period))


def is_valid_period(period: str) -> bool:
    return bool(PERIOD_RE.match(period or ""))


def period_of(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"
