from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bon_backend.core.security import Actor, require_privileged_actor
from bon_backend.services.installments import InstallmentProcessor
from bon_backend.services.ledger import BonLedger
from bon_backend.utils.database import get_db

from bon_backend.schemas import (
    InstallmentOut,
    InstallmentStatusUpdate,
    ProcessPeriodOut,
    ProcessPeriodRequest,
)

router = APIRouter(prefix="/bon-installments", tags=["Bon Installments"])


@router.get("", response_model=list[InstallmentOut])
def list_installments(
        period: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
        bon_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        db: Session = Depends(get_db),
):
    return BonLedger(db).list_installments(period=period, bon_id=bon_id, employee_id=employee_id)


@router.post("/process", response_model=ProcessPeriodOut, status_code=201)
def process_period(
        payload: ProcessPeriodRequest,
        db: Session = Depends(get_db),
        actor: Actor = Depends(require_privileged_actor),
):
    result = InstallmentProcessor(BonLedger(db)).process_period(payload.period)

    return ProcessPeriodOut(
        message=f"Processed {len(result.created)} installment(s) for period {result.period}",
        period=result.period,
        data=[InstallmentOut.model_validate(i) for i in result.created],
        skipped=result.skipped,
        failures=[{"bon_id": f.bon_id, "error": f.error} for f in result.failures],
    )


@router.put("/{installment_id}", response_model=InstallmentOut)
def update_installment_status(
        installment_id: int,
        payload: InstallmentStatusUpdate,
        db: Session = Depends(get_db),
        actor: Actor = Depends(require_privileged_actor),
):
    return InstallmentProcessor(BonLedger(db)).update_installment_status(installment_id, payload.status)
