# FILE: billing_ledger/api/routes_patient_fees.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from billing_ledger.api.deps import get_fee_ledger
from billing_ledger.api.response import ok
from billing_ledger.schemas.patient_fees import FeeItemIn, FeeItemListOut, FeeItemOut, FeeItemUpdateIn
from billing_ledger.services.billing_fee_items import AdHocFeeLedger

router = APIRouter(tags=["Patient Fee Items"])


@router.get("/patients/{patient_id}/fee-items")
def list_fee_items(patient_id: int, fees: AdHocFeeLedger = Depends(get_fee_ledger)):
    items = fees.list_for(patient_id)
    return ok(
        FeeItemListOut(
            patient_id=patient_id,
            items=[FeeItemOut.model_validate(i) for i in items],
            total=fees.total_for(patient_id),
        ))


@router.post("/patients/{patient_id}/fee-items")
def add_fee_item(patient_id: int, body: FeeItemIn, fees: AdHocFeeLedger = Depends(get_fee_ledger)):
    item = fees.add(
        patient_id=patient_id,
        description=body.description,
        fee_date=body.fee_date,
        amount=body.amount,
    )
    return ok(FeeItemOut.model_validate(item), status_code=201)


@router.put("/fee-items/{item_id}")
def update_fee_item(item_id: int, body: FeeItemUpdateIn, fees: AdHocFeeLedger = Depends(get_fee_ledger)):
    item = fees.update(
        item_id,
        description=body.description,
        fee_date=body.fee_date,
        amount=body.amount,
    )
    return ok(FeeItemOut.model_validate(item))


@router.delete("/fee-items/{item_id}")
def remove_fee_item(item_id: int, fees: AdHocFeeLedger = Depends(get_fee_ledger)):
    fees.remove(item_id)
    return ok({"id": item_id, "deleted": True})
