# FILE: billing_ledger/models/patient.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Numeric,
)
from sqlalchemy.orm import relationship

from billing_ledger.db.base import Base

MYSQL_ARGS = {
    "mysql_engine": "InnoDB",
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}


class PatientStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DISCHARGED = "Discharged"


class Patient(Base):
    """
    Billing side of a patient record.
    Demographics are owned elsewhere; only what the ledger reads lives here.
    """
    __tablename__ = "patients"
    __table_args__ = MYSQL_ARGS

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    phone = Column(String(20), nullable=True)

    # free text on purpose: reports only bill ACTIVE_STATUS
    status = Column(String(32), nullable=False, default=PatientStatus.ACTIVE.value, index=True)

    # NULL => no admission on file, patient cannot be billed
    admission_date = Column(Date, nullable=True, index=True)

    monthly_fees = Column(Numeric(12, 2), nullable=False, default=0)

    # one-time charges, due only in the admission month
    blood_test_charge = Column(Numeric(12, 2), nullable=False, default=0)
    pickup_charge = Column(Numeric(12, 2), nullable=False, default=0)

    # lump amount collected at intake, outside the itemized payment log
    intake_payment = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    payments = relationship(
        "PatientPayment",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="PatientPayment.payment_date",
    )
    fee_items = relationship(
        "PatientFeeItem",
        back_populates="patient",
        cascade="all, delete-orphan",
    )
