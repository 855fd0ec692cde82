from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric, Text, ForeignKey
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bon_backend.utils.database import Base


class BonLedgerEntry(Base):
    __tablename__ = "bon_ledger"

    ledger_id = Column(Integer, primary_key=True, index=True)
    bon_id = Column(Integer, ForeignKey("bons.bon_id", ondelete="CASCADE"), nullable=False, index=True)

    txn_date = Column(DateTime, server_default=func.now(), nullable=False)
    txn_type = Column(String(30), nullable=False)  # APPLICATION/INSTALLMENT/INSTALLMENT_REVERSAL

    installment_id = Column(Integer, nullable=True)

    debit = Column(Numeric(14, 2), nullable=False, default=0)
    credit = Column(Numeric(14, 2), nullable=False, default=0)

    balance_outstanding = Column(Numeric(14, 2), nullable=False)
    narration = Column(Text, nullable=True)

    created_by = Column(Integer, nullable=True)

    bon = relationship("Bon", back_populates="ledger_entries")
