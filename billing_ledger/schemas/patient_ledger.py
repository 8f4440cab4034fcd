# FILE: billing_ledger/schemas/patient_ledger.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from billing_ledger.services.billing_aggregate import CarryForwardReport, LedgerTotals
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_types import LedgerResult


class PeriodOut(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int

    @classmethod
    def of(cls, p: Period) -> "PeriodOut":
        return cls(month=p.month, year=p.year)


class LedgerEntryOut(BaseModel):
    patient_id: int
    period: PeriodOut
    applicable: bool = True
    reason: Optional[str] = None

    monthly_charge: Decimal
    onboarding_charge: Decimal
    charges: Decimal
    carry_forward: Decimal
    payments_applied: Decimal
    total_due: Decimal
    balance: Decimal
    status: str

    @classmethod
    def of(cls, res: LedgerResult) -> "LedgerEntryOut":
        return cls(
            patient_id=res.patient_id,
            period=PeriodOut.of(res.period),
            applicable=res.applicable,
            reason=getattr(res, "reason", None),
            monthly_charge=res.monthly_charge,
            onboarding_charge=res.onboarding_charge,
            charges=res.charges,
            carry_forward=res.carry_forward,
            payments_applied=res.payments_applied,
            total_due=res.total_due,
            balance=res.balance,
            status=res.status,
        )


class StatementOut(BaseModel):
    patient_id: int
    name: Optional[str] = None
    admission_period: Optional[PeriodOut] = None
    entries: List[LedgerEntryOut] = []


class LedgerTotalsOut(BaseModel):
    period: PeriodOut
    total_charges: Decimal
    total_balance: Decimal
    total_due: Decimal
    total_paid: Decimal
    patients_considered: int
    patients_billed: int
    patients_skipped: int
    skipped_patient_ids: List[int] = []
    entries: List[LedgerEntryOut] = []

    @classmethod
    def of(cls, t: LedgerTotals, *, with_entries: bool = False) -> "LedgerTotalsOut":
        return cls(
            period=PeriodOut.of(t.period),
            total_charges=t.total_charges,
            total_balance=t.total_balance,
            total_due=t.total_due,
            total_paid=t.total_paid,
            patients_considered=t.patients_considered,
            patients_billed=t.patients_billed,
            patients_skipped=t.patients_skipped,
            skipped_patient_ids=t.skipped_patient_ids,
            entries=[LedgerEntryOut.of(e) for e in t.entries] if with_entries else [],
        )


class CarryForwardRowOut(BaseModel):
    patient_id: int
    name: Optional[str] = None
    carry_forward: Decimal


class CarryForwardOut(BaseModel):
    period: PeriodOut
    total_carry_forward: Decimal
    rows: List[CarryForwardRowOut] = []

    @classmethod
    def of(cls, r: CarryForwardReport) -> "CarryForwardOut":
        return cls(
            period=PeriodOut.of(r.period),
            total_carry_forward=r.total_carry_forward,
            rows=[CarryForwardRowOut(patient_id=x.patient_id, name=x.name, carry_forward=x.carry_forward) for x in r.rows],
        )
