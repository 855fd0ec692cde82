# bon_backend/routers/employees_router.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bon_backend.models.employee_model import Employee
from bon_backend.schemas import EmployeeCreate, EmployeeOut
from bon_backend.utils.database import get_db

router = APIRouter(prefix="/employees", tags=["Employees"])


# CREATE
@router.post("/", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    emp = Employee(
        full_name=payload.full_name.strip(),
        basic_salary=payload.basic_salary,
        hire_date=payload.hire_date,
        employment_status=payload.employment_status,
    )
    db.add(emp)
    db.commit()
    db.refresh(emp)
    return emp


# READ ALL
@router.get("/", response_model=list[EmployeeOut])
def list_employees(
        employment_status: Optional[str] = Query(
            default=None,
            description="Filter by employment status (active / inactive)"
        ),
        db: Session = Depends(get_db),
):
    query = db.query(Employee)

    if employment_status is not None:
        query = query.filter(Employee.employment_status == employment_status)

    return query.order_by(Employee.employee_id.asc()).all()


# READ ONE
@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    emp = db.query(Employee).filter(Employee.employee_id == employee_id).first()
    if not emp:
        raise HTTPException(404, "Employee not found")

    return emp
