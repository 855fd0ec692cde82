"""Authoritative store for bons, installments and their statement rows.

Every write goes through :class:`BonLedger`. Each public mutator is one
transaction: it commits on success and rolls back on any exception, so a
rejected operation never leaves a half-applied change behind. Balance
changes are funnelled through ``_move_balance``, which enforces
0 <= remaining_balance <= principal_amount before anything is flushed.
"""

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from bon_backend.core.enums import (
    ACTIVE_BON_STATUSES,
    BonStatus,
    InstallmentStatus,
    LedgerTxnType,
)
from bon_backend.core.exceptions import NotFoundError, StateError
from bon_backend.models.bon_installment_model import BonInstallment
from bon_backend.models.bon_ledger_model import BonLedgerEntry
from bon_backend.models.bon_model import Bon
from bon_backend.models.employee_model import Employee
from bon_backend.services import lifecycle
from bon_backend.utils.bon_calculations import money

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"


class BonLedger:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # -------------------------------------------------
    # Reads
    # -------------------------------------------------
    def get_bon(self, bon_id: int, for_update: bool = False) -> Bon:
        q = self.db.query(Bon).filter(Bon.bon_id == bon_id)
        if for_update:
            # row lock where supported; always re-read the row
            q = q.with_for_update().populate_existing()
        bon = q.first()
        if not bon:
            raise NotFoundError("Bon", bon_id)
        return bon

    def get_installment(self, installment_id: int, for_update: bool = False) -> BonInstallment:
        q = self.db.query(BonInstallment).filter(BonInstallment.installment_id == installment_id)
        if for_update:
            q = q.with_for_update().populate_existing()
        inst = q.first()
        if not inst:
            raise NotFoundError("Installment", installment_id)
        return inst

    def bons_for_employee(self, employee_id: int) -> List[Bon]:
        return (
            self.db.query(Bon)
            .filter(Bon.employee_id == employee_id)
            .order_by(Bon.bon_id.asc())
            .all()
        )

    def list_bons(
            self,
            search: Optional[str] = None,
            status: Optional[str] = None,
            employee_id: Optional[int] = None,
            page: int = 1,
            page_size: int = 10,
    ) -> Tuple[List[Bon], int]:
        q = self.db.query(Bon).join(Employee, Employee.employee_id == Bon.employee_id)

        if search:
            q = q.filter(Employee.full_name.ilike(f"%{search.strip()}%"))
        if status and status != "all":
            q = q.filter(Bon.status == status)
        if employee_id is not None:
            q = q.filter(Bon.employee_id == employee_id)

        total = q.count()
        rows = (
            q.order_by(Bon.bon_id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return rows, total

    def live_installment(
            self, bon_id: int, period: str, exclude_id: Optional[int] = None
    ) -> Optional[BonInstallment]:
        q = self.db.query(BonInstallment).filter(
            BonInstallment.bon_id == bon_id,
            BonInstallment.period == period,
            BonInstallment.status != InstallmentStatus.CANCELLED.value,
        )
        if exclude_id is not None:
            q = q.filter(BonInstallment.installment_id != exclude_id)
        return q.first()

    def list_installments(
            self,
            period: Optional[str] = None,
            bon_id: Optional[int] = None,
            employee_id: Optional[int] = None,
    ) -> List[BonInstallment]:
        q = self.db.query(BonInstallment)
        if period:
            q = q.filter(BonInstallment.period == period)
        if bon_id is not None:
            q = q.filter(BonInstallment.bon_id == bon_id)
        if employee_id is not None:
            q = q.join(Bon, Bon.bon_id == BonInstallment.bon_id).filter(Bon.employee_id == employee_id)
        return q.order_by(BonInstallment.installment_id.asc()).all()

    def approved_bon_ids(self) -> List[int]:
        """Bons the installment processor should visit, oldest first."""
        rows = (
            self.db.query(Bon.bon_id)
            .filter(Bon.status == BonStatus.APPROVED.value, Bon.remaining_balance > 0)
            .order_by(Bon.bon_id.asc())
            .all()
        )
        return [r[0] for r in rows]

    def statement(self, bon_id: int) -> List[BonLedgerEntry]:
        self.get_bon(bon_id)
        return (
            self.db.query(BonLedgerEntry)
            .filter(BonLedgerEntry.bon_id == bon_id)
            .order_by(BonLedgerEntry.ledger_id.asc())
            .all()
        )

    def stats(self) -> dict:
        active = (
            self.db.query(
                func.count(Bon.bon_id),
                func.coalesce(func.sum(Bon.remaining_balance), 0),
                func.count(func.distinct(Bon.employee_id)),
            )
            .filter(Bon.status.in_(ACTIVE_BON_STATUSES))
            .one()
        )
        monthly = (
            self.db.query(func.coalesce(func.sum(Bon.monthly_installment), 0))
            .filter(Bon.status == BonStatus.APPROVED.value)
            .scalar()
        )
        return {
            "total_active_bons": int(active[0]),
            "total_outstanding": money(active[1]),
            "total_monthly_installments": money(monthly),
            "total_employees_with_bon": int(active[2]),
        }

    # -------------------------------------------------
    # Writes
    # -------------------------------------------------
    def _move_balance(self, bon: Bon, delta: Decimal) -> None:
        new_balance = money(bon.remaining_balance) + money(delta)
        if new_balance < 0 or new_balance > money(bon.principal_amount):
            raise StateError(
                f"Bon {bon.bon_id}: balance {new_balance} outside [0, {money(bon.principal_amount)}]",
                status=bon.status,
            )
        bon.remaining_balance = new_balance

    def _record(
            self,
            bon: Bon,
            txn_type: LedgerTxnType,
            debit=0,
            credit=0,
            installment_id: Optional[int] = None,
            narration: Optional[str] = None,
            actor_id: Optional[int] = None,
    ) -> None:
        self.db.add(
            BonLedgerEntry(
                bon_id=bon.bon_id,
                txn_type=txn_type.value,
                installment_id=installment_id,
                debit=money(debit),
                credit=money(credit),
                balance_outstanding=money(bon.remaining_balance),
                narration=narration,
                created_by=actor_id,
            )
        )

    def create_bon(
            self,
            employee_id: int,
            principal_amount,
            monthly_installment,
            note: Optional[str] = None,
            today: Optional[date] = None,
            actor_id: Optional[int] = None,
    ) -> Bon:
        principal = money(principal_amount)
        bon = Bon(
            employee_id=employee_id,
            principal_amount=principal,
            remaining_balance=principal,
            monthly_installment=money(monthly_installment),
            application_date=today or date.today(),
            status=BonStatus.PENDING.value,
            note=note,
        )

        with self._unit_of_work():
            self.db.add(bon)
            self.db.flush()  # gives bon.bon_id
            self._record(
                bon,
                LedgerTxnType.APPLICATION,
                debit=principal,
                narration="Bon application",
                actor_id=actor_id,
            )

        self.db.refresh(bon)
        logger.info("bon %s created for employee %s: %s", bon.bon_id, employee_id, principal)
        return bon

    def decide(self, bon_id: int, action: str, actor_id: Optional[int], today: Optional[date] = None) -> Bon:
        with self._unit_of_work():
            bon = self.get_bon(bon_id, for_update=True)
            if action == APPROVE:
                lifecycle.approve(bon, actor_id, today)
            elif action == REJECT:
                lifecycle.reject(bon, actor_id)
            else:
                raise ValueError(f"unknown decision: {action}")

        self.db.refresh(bon)
        return bon

    def update_fields(
            self,
            bon_id: int,
            monthly_installment=None,
            note: Optional[str] = None,
    ) -> Bon:
        with self._unit_of_work():
            bon = self.get_bon(bon_id, for_update=True)
            if monthly_installment is not None:
                if bon.status != BonStatus.PENDING.value:
                    raise StateError(
                        f"Monthly installment of bon {bon_id} can only change while pending",
                        status=bon.status,
                    )
                bon.monthly_installment = money(monthly_installment)
            if note is not None:
                bon.note = note

        self.db.refresh(bon)
        return bon

    def delete_bon(self, bon_id: int) -> None:
        with self._unit_of_work():
            bon = self.get_bon(bon_id, for_update=True)
            lifecycle.cancel(bon)
            self.db.delete(bon)
        logger.info("bon %s cancelled and removed", bon_id)

    def apply_installment(self, bon_id: int, period: str, today: Optional[date] = None) -> Optional[BonInstallment]:
        """
        Read-modify-write of one bon for one period.

        Returns None when there is nothing to do (bon no longer approved,
        already paid off, or a live installment exists for the period).
        """
        with self._unit_of_work():
            bon = self.get_bon(bon_id, for_update=True)
            if bon.status != BonStatus.APPROVED.value or bon.remaining_balance <= 0:
                return None
            if self.live_installment(bon_id, period) is not None:
                return None

            amount = min(money(bon.monthly_installment), money(bon.remaining_balance))
            inst = BonInstallment(
                bon_id=bon_id,
                period=period,
                amount=amount,
                deduction_date=today or date.today(),
                status=InstallmentStatus.PROCESSED.value,
            )
            self.db.add(inst)
            self._move_balance(bon, -amount)
            self.db.flush()  # gives installment_id, trips the unique index on a race

            self._record(
                bon,
                LedgerTxnType.INSTALLMENT,
                credit=amount,
                installment_id=inst.installment_id,
                narration=f"Installment {period}",
            )
            lifecycle.complete_if_exhausted(bon)

        return inst

    def set_installment_status(
            self, installment_id: int, status: str, today: Optional[date] = None
    ) -> BonInstallment:
        with self._unit_of_work():
            inst = self.get_installment(installment_id, for_update=True)
            if inst.status == status:
                return inst

            bon = self.get_bon(inst.bon_id, for_update=True)
            amount = money(inst.amount)

            if status == InstallmentStatus.CANCELLED.value:
                if inst.status == InstallmentStatus.PROCESSED.value:
                    self._move_balance(bon, amount)
                    self._record(
                        bon,
                        LedgerTxnType.INSTALLMENT_REVERSAL,
                        debit=amount,
                        installment_id=inst.installment_id,
                        narration=f"Installment {inst.period} cancelled",
                    )
                    lifecycle.revert_completion(bon)
                inst.status = status

            elif status == InstallmentStatus.PROCESSED.value:
                if bon.status != BonStatus.APPROVED.value:
                    raise StateError(
                        f"Cannot process installment {installment_id}: bon {bon.bon_id} is '{bon.status}'",
                        status=bon.status,
                    )
                if self.live_installment(bon.bon_id, inst.period, exclude_id=inst.installment_id):
                    raise StateError(
                        f"Bon {bon.bon_id} already has an installment for {inst.period}",
                        status=inst.status,
                    )
                if amount > money(bon.remaining_balance):
                    raise StateError(
                        f"Installment {installment_id} exceeds the remaining balance of bon {bon.bon_id}",
                        status=inst.status,
                    )
                inst.status = status
                inst.deduction_date = today or date.today()
                self._move_balance(bon, -amount)
                self._record(
                    bon,
                    LedgerTxnType.INSTALLMENT,
                    credit=amount,
                    installment_id=inst.installment_id,
                    narration=f"Installment {inst.period} reinstated",
                )
                lifecycle.complete_if_exhausted(bon)

            else:
                raise StateError(f"Unsupported installment status '{status}'", status=inst.status)

        logger.info("installment %s -> %s", installment_id, status)
        return inst
