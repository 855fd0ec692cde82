"""Request-level flows: eligibility lookup, application, decision, edits."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from bon_backend.core.enums import BonStatus
from bon_backend.core.exceptions import NotFoundError, StateError
from bon_backend.core.rules import BonRules
from bon_backend.models.bon_model import Bon
from bon_backend.models.employee_model import Employee
from bon_backend.services.eligibility import EligibilityResult, evaluate_eligibility
from bon_backend.services.ledger import BonLedger
from bon_backend.services.snapshots import BonSnapshot, EmployeeSnapshot
from bon_backend.services.validation import validate_application
from bon_backend.utils.bon_calculations import installment_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityReport:
    employee: EmployeeSnapshot
    eligibility: EligibilityResult
    rules: BonRules


def load_employee(db: Session, employee_id: int) -> EmployeeSnapshot:
    emp = db.query(Employee).filter(Employee.employee_id == employee_id).first()
    if not emp:
        raise NotFoundError("Employee", employee_id)
    return EmployeeSnapshot.from_model(emp)


def _snapshots(ledger: BonLedger, employee_id: int, exclude_bon_id: Optional[int] = None) -> List[BonSnapshot]:
    return [
        BonSnapshot.from_model(b)
        for b in ledger.bons_for_employee(employee_id)
        if b.bon_id != exclude_bon_id
    ]


def get_eligibility(
        db: Session,
        employee_id: int,
        rules: BonRules,
        proposed_amount=None,
        today: Optional[date] = None,
) -> EligibilityReport:
    employee = load_employee(db, employee_id)
    bons = _snapshots(BonLedger(db), employee_id)
    result = evaluate_eligibility(employee, bons, rules, today=today, proposed_amount=proposed_amount)
    return EligibilityReport(employee=employee, eligibility=result, rules=rules)


def submit_application(
        db: Session,
        employee_id: int,
        requested_amount,
        monthly_installment,
        rules: BonRules,
        note: Optional[str] = None,
        today: Optional[date] = None,
        actor_id: Optional[int] = None,
) -> Tuple[Bon, List[str]]:
    """
    Validation -> ledger.create. The validation rules cover every
    eligibility condition, reported with the requested figures.

    Raises ValidationError carrying every violated rule; nothing is
    written in that case. Returns the new bon and the advisory warnings.
    """
    today = today or date.today()
    ledger = BonLedger(db)
    employee = load_employee(db, employee_id)
    bons = _snapshots(ledger, employee_id)

    period = installment_period(requested_amount, monthly_installment)
    result = validate_application(employee, requested_amount, period, bons, rules, today=today)
    if not result.is_valid:
        logger.warning(
            "bon application rejected for employee %s: %d rule(s) violated",
            employee_id, len(result.errors),
        )
    result.raise_for_errors()

    bon = ledger.create_bon(
        employee_id=employee_id,
        principal_amount=requested_amount,
        monthly_installment=monthly_installment,
        note=note,
        today=today,
        actor_id=actor_id,
    )
    return bon, result.warnings


def decide(db: Session, bon_id: int, action: str, actor_id: Optional[int], today: Optional[date] = None) -> Bon:
    return BonLedger(db).decide(bon_id, action, actor_id, today)


def update_fields(
        db: Session,
        bon_id: int,
        rules: BonRules,
        monthly_installment=None,
        note: Optional[str] = None,
        today: Optional[date] = None,
) -> Tuple[Bon, List[str]]:
    """A new monthly installment is re-validated against the employee's other bons."""
    ledger = BonLedger(db)
    warnings: List[str] = []

    if monthly_installment is not None:
        bon = ledger.get_bon(bon_id)
        if bon.status != BonStatus.PENDING.value:
            raise StateError(
                f"Monthly installment of bon {bon_id} can only change while pending",
                status=bon.status,
            )
        employee = load_employee(db, bon.employee_id)
        others = _snapshots(ledger, bon.employee_id, exclude_bon_id=bon_id)
        period = installment_period(bon.principal_amount, monthly_installment)
        result = validate_application(
            employee, bon.principal_amount, period, others, rules, today=bon.application_date
        )
        result.raise_for_errors()
        warnings = result.warnings

    bon = ledger.update_fields(bon_id, monthly_installment=monthly_installment, note=note)
    return bon, warnings
