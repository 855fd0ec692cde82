# bon_backend/models/bon_model.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Numeric,
    Text,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bon_backend.utils.database import Base


class Bon(Base):
    __tablename__ = "bons"

    __table_args__ = (
        Index("ix_bons_status", "status"),
        Index("ix_bons_employee_status", "employee_id", "status"),
        CheckConstraint("principal_amount > 0", name="ck_bons_principal_positive"),
        CheckConstraint("monthly_installment > 0", name="ck_bons_installment_positive"),
        CheckConstraint(
            "remaining_balance >= 0 AND remaining_balance <= principal_amount",
            name="ck_bons_balance_bounds",
        ),
    )

    bon_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(
        Integer, ForeignKey("employees.employee_id", ondelete="RESTRICT"), nullable=False, index=True
    )

    principal_amount = Column(Numeric(14, 2), nullable=False)
    remaining_balance = Column(Numeric(14, 2), nullable=False)
    monthly_installment = Column(Numeric(14, 2), nullable=False)

    application_date = Column(Date, nullable=False)
    approval_date = Column(Date, nullable=True)

    # pending / approved / rejected / completed / cancelled
    status = Column(String(20), nullable=False, server_default="pending")

    note = Column(Text, nullable=True)
    approved_by = Column(Integer, nullable=True)

    created_on = Column(DateTime, server_default=func.now(), nullable=True)
    updated_on = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

    # optimistic concurrency: every UPDATE checks and bumps this
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    employee = relationship("Employee", back_populates="bons")

    installments = relationship(
        "BonInstallment",
        back_populates="bon",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BonInstallment.installment_id",
    )
    ledger_entries = relationship(
        "BonLedgerEntry",
        back_populates="bon",
        cascade="all, delete-orphan",
    )
