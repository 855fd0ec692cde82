from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Index, CheckConstraint, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bon_backend.utils.database import Base


class BonInstallment(Base):
    __tablename__ = "bon_installments"
    __table_args__ = (
        # at most one live (non-cancelled) installment per bon per period
        Index(
            "ux_bon_installment_live_period",
            "bon_id",
            "period",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        CheckConstraint("amount > 0", name="ck_bon_installments_amount_positive"),
    )

    installment_id = Column(Integer, primary_key=True, index=True)
    bon_id = Column(Integer, ForeignKey("bons.bon_id", ondelete="CASCADE"), nullable=False, index=True)

    # YYYY-MM
    period = Column(String(7), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    deduction_date = Column(Date, nullable=False)

    # pending / processed / cancelled
    status = Column(String(20), nullable=False, default="processed")

    created_on = Column(DateTime, server_default=func.now(), nullable=True)
    updated_on = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

    bon = relationship("Bon", back_populates="installments")
