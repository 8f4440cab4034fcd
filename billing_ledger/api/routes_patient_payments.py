# FILE: billing_ledger/api/routes_patient_payments.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from billing_ledger.api.deps import get_ledger_service, get_store
from billing_ledger.api.response import ok
from billing_ledger.schemas.patient_payments import PaymentIn, PaymentOut, PaymentUpdateIn
from billing_ledger.services.billing_ledger_service import LedgerService
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_store import BillingStore

router = APIRouter(tags=["Patient Payments"])


@router.get("/patients/{patient_id}/payments")
def list_patient_payments(
        patient_id: int,
        month: Optional[int] = Query(None, ge=1, le=12),
        year: Optional[int] = Query(None, ge=1900, le=9999),
        svc: LedgerService = Depends(get_ledger_service),
):
    if (month is None) != (year is None):
        raise HTTPException(status_code=422, detail="month and year go together")

    period = Period(month=month, year=year) if month is not None else None
    rows = svc.payment_history(patient_id, period)
    data = [{
        "id": r.id,
        "patient_id": r.patient_id,
        "payment_date": r.date,
        "amount": r.amount,
        "mode": r.mode,
        "note": r.note,
    } for r in rows]
    return ok(data, meta={"count": len(data)})


@router.post("/patients/{patient_id}/payments")
def add_patient_payment(
        patient_id: int,
        body: PaymentIn,
        store: BillingStore = Depends(get_store),
):
    row = store.add_payment(
        patient_id,
        payment_date=body.payment_date,
        amount=body.amount,
        mode=body.mode,
        note=body.note,
    )
    return ok(PaymentOut.model_validate(row), status_code=201)


@router.patch("/payments/{payment_id}")
def edit_patient_payment(
        payment_id: int,
        body: PaymentUpdateIn,
        store: BillingStore = Depends(get_store),
):
    row = store.edit_payment(payment_id, amount=body.amount, mode=body.mode, note=body.note)
    return ok(PaymentOut.model_validate(row))
