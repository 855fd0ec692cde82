import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bon_backend.core.rules import BonRules
from bon_backend.core.security import Actor, get_actor, require_privileged_actor
from bon_backend.services import applications
from bon_backend.services.ledger import BonLedger
from bon_backend.services.rules_service import load_rules
from bon_backend.utils.database import get_db

from bon_backend.schemas import (
    BonCreate,
    BonListOut,
    BonOut,
    BonResult,
    BonStatsOut,
    BonUpdateRequest,
    DecisionRequest,
    EligibilityOut,
    LedgerRowOut,
)

router = APIRouter(prefix="/bons", tags=["Bons"])


def get_rules(db: Session = Depends(get_db)) -> BonRules:
    return load_rules(db)


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("/stats", response_model=BonStatsOut)
def bon_stats(db: Session = Depends(get_db)):
    return BonStatsOut(**BonLedger(db).stats())


@router.get("/eligibility", response_model=EligibilityOut)
def bon_eligibility(
        employee_id: int = Query(...),
        amount: Optional[float] = Query(None, gt=0),
        db: Session = Depends(get_db),
        rules: BonRules = Depends(get_rules),
):
    report = applications.get_eligibility(db, employee_id, rules, proposed_amount=amount)
    result = report.eligibility

    return EligibilityOut(
        employee_id=report.employee.employee_id,
        basic_salary=float(report.employee.basic_salary),
        hire_date=report.employee.hire_date,
        employment_status=report.employee.employment_status,
        eligibility={
            "is_eligible": result.is_eligible,
            "reasons": result.reasons,
            "max_amount": float(result.max_amount),
            "recommended_period": result.recommended_period,
            "employment_months": result.employment_months,
        },
        capacity=vars(result.capacity),
        calculation=vars(result.calculation) if result.calculation else None,
        rules=rules.as_dict(),
    )


# =================================================
# 🔹 LIST / CREATE
# =================================================
@router.get("", response_model=BonListOut)
def list_bons(
        search: Optional[str] = None,
        status: Optional[str] = None,
        employee_id: Optional[int] = None,
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=200),
        db: Session = Depends(get_db),
):
    rows, total = BonLedger(db).list_bons(
        search=search, status=status, employee_id=employee_id, page=page, page_size=page_size
    )
    start = (page - 1) * page_size

    return {
        "data": rows,
        "pagination": {
            "current_page": page,
            "per_page": page_size,
            "total": total,
            "last_page": max(1, math.ceil(total / page_size)),
            "from_": start + 1 if rows else 0,
            "to": min(start + page_size, total),
        },
    }


@router.post("", response_model=BonResult, status_code=201)
def submit_bon(
        payload: BonCreate,
        db: Session = Depends(get_db),
        rules: BonRules = Depends(get_rules),
        actor: Optional[Actor] = Depends(get_actor),
):
    bon, warnings = applications.submit_application(
        db,
        employee_id=payload.employee_id,
        requested_amount=payload.requested_amount,
        monthly_installment=payload.monthly_installment,
        rules=rules,
        note=payload.note,
        actor_id=actor.actor_id if actor else None,
    )
    return BonResult(message="Bon application submitted", data=BonOut.model_validate(bon), warnings=warnings)


# =================================================
# 🔹 DYNAMIC ROUTES (LAST)
# =================================================
@router.get("/{bon_id}", response_model=BonOut)
def get_bon(bon_id: int, db: Session = Depends(get_db)):
    return BonLedger(db).get_bon(bon_id)


@router.get("/{bon_id}/statement", response_model=list[LedgerRowOut])
def bon_statement(bon_id: int, db: Session = Depends(get_db)):
    return BonLedger(db).statement(bon_id)


@router.put("/{bon_id}", response_model=BonResult)
def update_bon(
        bon_id: int,
        payload: BonUpdateRequest,
        db: Session = Depends(get_db),
        rules: BonRules = Depends(get_rules),
        actor: Optional[Actor] = Depends(get_actor),
):
    if isinstance(payload, DecisionRequest):
        # decisions are privileged; field edits are not
        actor = require_privileged_actor(
            actor.actor_id if actor else None,
            actor.role if actor else None,
        )
        bon = applications.decide(db, bon_id, payload.action, actor.actor_id)
        message = "Bon approved" if payload.action == "approve" else "Bon rejected"
        return BonResult(message=message, data=BonOut.model_validate(bon))

    bon, warnings = applications.update_fields(
        db,
        bon_id,
        rules,
        monthly_installment=payload.monthly_installment,
        note=payload.note,
    )
    return BonResult(message="Bon updated", data=BonOut.model_validate(bon), warnings=warnings)


@router.delete("/{bon_id}")
def cancel_bon(bon_id: int, db: Session = Depends(get_db)):
    BonLedger(db).delete_bon(bon_id)
    return {"success": True, "message": "Bon cancelled and deleted"}
