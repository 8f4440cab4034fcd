# FILE: billing_ledger/schemas/patient_payments.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from billing_ledger.models.patient_payment import PaymentMode


class PaymentIn(BaseModel):
    payment_date: date
    amount: Decimal = Field(..., gt=0)
    mode: PaymentMode = PaymentMode.CASH
    note: Optional[str] = None


class PaymentUpdateIn(BaseModel):
    # date / patient are not editable
    amount: Optional[Decimal] = Field(None, gt=0)
    mode: Optional[PaymentMode] = None
    note: Optional[str] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    payment_date: date
    amount: Decimal
    mode: PaymentMode
    note: Optional[str] = None
    created_at: Optional[datetime] = None
