import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from billing_ledger.db.init_db import create_tables, drop_tables  # noqa: E402
from billing_ledger.db.session import SessionLocal, engine  # noqa: E402
from billing_ledger.models import Patient, PaymentMode  # noqa: E402
from billing_ledger.services.billing_payment_ledger import PaymentLedger  # noqa: E402
from billing_ledger.services.billing_period import Period  # noqa: E402
from billing_ledger.services.billing_types import BillingProfile, PaymentRecord  # noqa: E402

JAN_2025 = Period(month=1, year=2025)


@pytest.fixture
def db():
    create_tables(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables(engine)


@pytest.fixture
def client(db):
    from billing_ledger.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_patient(db):
    def _make(
        name="Ravi Kumar",
        admission_date=date(2025, 1, 10),
        monthly_fees="1000",
        blood_test_charge="300",
        pickup_charge="200",
        intake_payment="0",
        status="Active",
        phone=None,
    ) -> Patient:
        p = Patient(
            name=name,
            phone=phone,
            status=status,
            admission_date=admission_date,
            monthly_fees=Decimal(monthly_fees),
            blood_test_charge=Decimal(blood_test_charge),
            pickup_charge=Decimal(pickup_charge),
            intake_payment=Decimal(intake_payment),
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def profile():
    return BillingProfile(
        patient_id=1,
        admission_period=JAN_2025,
        monthly_charge=Decimal("1000"),
        onboarding_charge=Decimal("500"),
    )


def pay(patient_id, on, amount, mode=PaymentMode.CASH, note=None, pid=None) -> PaymentRecord:
    return PaymentRecord(
        id=pid,
        patient_id=patient_id,
        date=on,
        amount=Decimal(str(amount)),
        mode=mode,
        note=note,
    )


def ledger_of(patient_id, *payments) -> PaymentLedger:
    return PaymentLedger(patient_id, payments)


def money(x) -> Decimal:
    return Decimal(str(x))
