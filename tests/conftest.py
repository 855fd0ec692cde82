import os

# must be set before bon_backend.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bon_backend.models  # noqa: F401  register tables
from bon_backend.core.rules import BonRules
from bon_backend.models.employee_model import Employee
from bon_backend.services.ledger import BonLedger
from bon_backend.utils.database import Base, get_db

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def _clean_rule_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("BON_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def rules() -> BonRules:
    return BonRules()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def ledger(db) -> BonLedger:
    return BonLedger(db)


@pytest.fixture
def make_employee(db):
    def _make(
            salary=5_000_000,
            hire_date=date(2020, 1, 1),
            status="active",
            name="Budi Santoso",
    ) -> Employee:
        emp = Employee(
            full_name=name,
            basic_salary=Decimal(str(salary)),
            hire_date=hire_date,
            employment_status=status,
        )
        db.add(emp)
        db.commit()
        db.refresh(emp)
        return emp

    return _make


@pytest.fixture
def approved_bon(ledger):
    """Create a bon and approve it, bypassing application rules."""

    def _make(employee, principal, monthly, actor_id=1):
        bon = ledger.create_bon(employee.employee_id, principal, monthly, today=date(2026, 1, 5))
        return ledger.decide(bon.bon_id, "approve", actor_id, today=date(2026, 1, 6))

    return _make


@pytest.fixture
def client(db):
    from main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
