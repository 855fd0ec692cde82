"""Period close: advance every approved bon by one monthly installment."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from bon_backend.core.exceptions import BonError
from bon_backend.models.bon_installment_model import BonInstallment
from bon_backend.services.ledger import BonLedger
from bon_backend.utils.bon_calculations import is_valid_period

logger = logging.getLogger(__name__)

# a lost optimistic race is retried once; the retry then sees the winner's row
MAX_ATTEMPTS = 2


@dataclass
class BonFailure:
    bon_id: int
    error: str


@dataclass
class PeriodResult:
    period: str
    created: List[BonInstallment] = field(default_factory=list)
    skipped: int = 0
    failures: List[BonFailure] = field(default_factory=list)


class InstallmentProcessor:
    def __init__(self, ledger: BonLedger):
        self.ledger = ledger

    def process_period(self, period: str, today: Optional[date] = None) -> PeriodResult:
        """
        Idempotent: a second call for the same period creates nothing and
        moves no balance. Each bon is its own transaction, so one failing bon
        does not undo the others.
        """
        if not is_valid_period(period):
            raise ValueError(f"period must look like YYYY-MM, got {period!r}")

        today = today or date.today()
        result = PeriodResult(period=period)

        for bon_id in self.ledger.approved_bon_ids():
            try:
                inst = self._process_one(bon_id, period, today)
            except (BonError, SQLAlchemyError) as exc:
                logger.exception("period %s: bon %s failed", period, bon_id)
                result.failures.append(BonFailure(bon_id=bon_id, error=str(exc)))
                continue

            if inst is None:
                result.skipped += 1
            else:
                result.created.append(inst)

        logger.info(
            "period %s processed: %d created, %d skipped, %d failed",
            period, len(result.created), result.skipped, len(result.failures),
        )
        return result

    def _process_one(self, bon_id: int, period: str, today: date) -> Optional[BonInstallment]:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return self.ledger.apply_installment(bon_id, period, today)
            except (StaleDataError, IntegrityError):
                if attempt == MAX_ATTEMPTS:
                    raise
                logger.warning("period %s: bon %s changed concurrently, retrying", period, bon_id)
        return None

    def update_installment_status(
            self, installment_id: int, status: str, today: Optional[date] = None
    ) -> BonInstallment:
        return self.ledger.set_installment_status(installment_id, status, today)
