# FILE: billing_ledger/models/patient_payment.py
from __future__ import annotations

import enum
from datetime import datetime, date

from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    Text,
    Numeric,
    ForeignKey,
    Enum,
    Index,
)
from sqlalchemy.orm import relationship

from billing_ledger.db.base import Base
from billing_ledger.models.patient import MYSQL_ARGS


class PaymentMode(str, enum.Enum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    NET_BANKING = "Net-Banking"
    CHEQUE = "Cheque"
    OTHER = "Other"


class PatientPayment(Base):
    """
    Itemized payment log.
    - amount is always positive
    - payment_date never changes after insert (it fixes the billing month)
    """
    __tablename__ = "patient_payments"
    __table_args__ = (
        Index("ix_patient_payments_patient_date", "patient_id", "payment_date"),
        MYSQL_ARGS,
    )

    id = Column(Integer, primary_key=True, index=True)

    patient_id = Column(
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    payment_date = Column(Date, nullable=False, default=date.today)
    amount = Column(Numeric(12, 2), nullable=False)
    mode = Column(Enum(PaymentMode, name="patient_payment_mode"), nullable=False, default=PaymentMode.CASH)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    patient = relationship("Patient", back_populates="payments")
