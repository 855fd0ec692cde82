from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class EmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=150)
    basic_salary: float = Field(gt=0)
    hire_date: date
    employment_status: Literal["active", "inactive"] = "active"


class EmployeeOut(BaseModel):
    employee_id: int
    full_name: str
    basic_salary: float
    hire_date: date
    employment_status: str

    class Config:
        from_attributes = True


class EmployeeMiniOut(BaseModel):
    employee_id: int
    full_name: str

    class Config:
        from_attributes = True
