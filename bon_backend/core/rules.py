"""Business parameters for salary advances (bon).

Values are layered: dataclass defaults, then ``BON_*`` environment
variables, then ``bon.*`` rows in ``system_settings`` (see
``bon_backend.services.rules_service``). Every layer goes through
:meth:`BonRules.validate` before it is used.
"""

import os
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Mapping

from bon_backend.core.exceptions import ConfigError

SETTING_PREFIX = "bon."
ENV_PREFIX = "BON_"

MONTH_POLICY_DAYS30 = "days30"
MONTH_POLICY_CALENDAR = "calendar"
MONTH_POLICIES = (MONTH_POLICY_DAYS30, MONTH_POLICY_CALENDAR)

RULE_DESCRIPTIONS = {
    "max_bon_percentage": "Maximum bon as % of basic salary",
    "max_bon_amount": "Absolute bon cap",
    "min_installment_period": "Minimum installment period (months)",
    "max_installment_period": "Maximum installment period (months)",
    "max_active_bon_per_employee": "Active bons allowed per employee",
    "min_employment_duration": "Months employed before eligible",
    "max_installment_percentage": "Maximum monthly installments as % of basic salary",
    "min_time_between_applications": "Months between two applications",
    "employment_month_policy": "How employment months are counted (days30 | calendar)",
}


@dataclass(frozen=True)
class BonRules:
    max_bon_percentage: Decimal = Decimal("80")
    max_bon_amount: Decimal = Decimal("10000000")
    min_installment_period: int = 3
    max_installment_period: int = 24
    max_active_bon_per_employee: int = 1
    min_employment_duration: int = 6
    max_installment_percentage: Decimal = Decimal("30")
    min_time_between_applications: int = 1
    # floor(days / 30) approximates months; kept as the default on purpose
    employment_month_policy: str = MONTH_POLICY_DAYS30

    def validate(self) -> "BonRules":
        for name in ("max_bon_percentage", "max_installment_percentage", "max_bon_amount"):
            if not getattr(self, name).is_finite():
                raise ConfigError(name, "must be a finite number")

        for name in ("max_bon_percentage", "max_installment_percentage"):
            value = getattr(self, name)
            if value <= 0 or value > 100:
                raise ConfigError(name, f"must be in (0, 100], got {value}")

        if self.max_bon_amount <= 0:
            raise ConfigError("max_bon_amount", f"must be > 0, got {self.max_bon_amount}")

        if self.min_installment_period < 1:
            raise ConfigError("min_installment_period", "must be >= 1")
        if self.max_installment_period < self.min_installment_period:
            raise ConfigError(
                "max_installment_period",
                f"must be >= min_installment_period ({self.min_installment_period})",
            )

        if self.max_active_bon_per_employee < 1:
            raise ConfigError("max_active_bon_per_employee", "must be >= 1")

        for name in ("min_employment_duration", "min_time_between_applications"):
            if getattr(self, name) < 0:
                raise ConfigError(name, "must be >= 0")

        if self.employment_month_policy not in MONTH_POLICIES:
            raise ConfigError(
                "employment_month_policy",
                f"must be one of {', '.join(MONTH_POLICIES)}",
            )
        return self

    def with_overrides(self, values: Mapping[str, str]) -> "BonRules":
        """Return a copy with raw string values parsed onto the known fields.

        Unknown keys are ignored. Unparseable values raise ConfigError.
        """
        changes = {}
        for f in fields(self):
            if f.name not in values or values[f.name] is None:
                continue
            changes[f.name] = _parse(f.name, f.type, values[f.name])
        return replace(self, **changes)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_env(cls) -> "BonRules":
        raw = {}
        for f in fields(cls):
            env_value = os.getenv(ENV_PREFIX + f.name.upper())
            if env_value is not None and env_value.strip() != "":
                raw[f.name] = env_value
        return cls().with_overrides(raw).validate()


def _parse(name: str, type_, raw):
    text = str(raw).strip()
    try:
        if type_ in (int, "int"):
            return int(text)
        if type_ in (Decimal, "Decimal"):
            return Decimal(text)
    except (ValueError, InvalidOperation):
        raise ConfigError(name, f"cannot parse {text!r}")
    return text
