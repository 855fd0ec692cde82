# bon_backend/models/employee_model.py
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bon_backend.utils.database import Base


class Employee(Base):
    """Read-only projection of the HR directory used by the bon engine."""

    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint("basic_salary > 0", name="ck_employees_salary_positive"),
    )

    employee_id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(150), nullable=False, index=True)

    basic_salary = Column(Numeric(14, 2), nullable=False)
    hire_date = Column(Date, nullable=False)

    # active / inactive
    employment_status = Column(String(20), nullable=False, server_default="active")

    created_on = Column(DateTime, server_default=func.now(), nullable=True)

    bons = relationship("Bon", back_populates="employee", passive_deletes=True)
