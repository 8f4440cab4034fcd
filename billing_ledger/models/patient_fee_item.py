# FILE: billing_ledger/models/patient_fee_item.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from billing_ledger.db.base import Base
from billing_ledger.models.patient import MYSQL_ARGS


class PatientFeeItem(Base):
    """Manual fee line items. Reported next to the ledger, never carried forward."""
    __tablename__ = "patient_fee_items"
    __table_args__ = MYSQL_ARGS

    id = Column(Integer, primary_key=True, index=True)

    patient_id = Column(
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    description = Column(String(255), nullable=False)
    fee_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    patient = relationship("Patient", back_populates="fee_items")
