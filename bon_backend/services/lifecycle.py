"""Bon status state machine.

pending   -> approved | rejected | cancelled
rejected  -> cancelled
approved  -> completed   (installment processor only)
completed -> approved    (installment reversal only)

Functions mutate the ORM object in place; committing is the ledger's job.
"""

import logging
from datetime import date
from typing import Optional

from bon_backend.core.enums import BonStatus
from bon_backend.core.exceptions import StateError

logger = logging.getLogger(__name__)

TRANSITIONS = {
    BonStatus.PENDING.value: {
        BonStatus.APPROVED.value,
        BonStatus.REJECTED.value,
        BonStatus.CANCELLED.value,
    },
    BonStatus.REJECTED.value: {BonStatus.CANCELLED.value},
    BonStatus.APPROVED.value: {BonStatus.COMPLETED.value},
    BonStatus.COMPLETED.value: {BonStatus.APPROVED.value},
}


def can_transition(current: str, target: BonStatus) -> bool:
    return target.value in TRANSITIONS.get(current, set())


def _transition(bon, target: BonStatus, action: str) -> None:
    if not can_transition(bon.status, target):
        raise StateError(
            f"Cannot {action} bon {bon.bon_id}: status is '{bon.status}'",
            status=bon.status,
        )
    logger.info("bon %s: %s -> %s", bon.bon_id, bon.status, target.value)
    bon.status = target.value


def approve(bon, actor_id: Optional[int], today: Optional[date] = None) -> None:
    _transition(bon, BonStatus.APPROVED, "approve")
    bon.approval_date = today or date.today()
    bon.approved_by = actor_id


def reject(bon, actor_id: Optional[int]) -> None:
    _transition(bon, BonStatus.REJECTED, "reject")
    bon.approved_by = actor_id


def cancel(bon) -> None:
    """Only pending or rejected bons may be cancelled; the ledger then deletes them."""
    _transition(bon, BonStatus.CANCELLED, "cancel")


def complete_if_exhausted(bon) -> bool:
    if bon.status == BonStatus.APPROVED.value and bon.remaining_balance == 0:
        _transition(bon, BonStatus.COMPLETED, "complete")
        return True
    return False


def revert_completion(bon) -> bool:
    if bon.status == BonStatus.COMPLETED.value and bon.remaining_balance > 0:
        _transition(bon, BonStatus.APPROVED, "reopen")
        return True
    return False
