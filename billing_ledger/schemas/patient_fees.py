# FILE: billing_ledger/schemas/patient_fees.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class FeeItemIn(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    fee_date: date
    amount: Decimal = Field(..., gt=0)


class FeeItemUpdateIn(BaseModel):
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    fee_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0)


class FeeItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    description: str
    fee_date: date
    amount: Decimal
    created_at: Optional[datetime] = None


class FeeItemListOut(BaseModel):
    patient_id: int
    items: List[FeeItemOut] = []
    total: Decimal = Decimal("0.00")
