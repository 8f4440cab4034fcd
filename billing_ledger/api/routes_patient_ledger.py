# FILE: billing_ledger/api/routes_patient_ledger.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from billing_ledger.api.deps import get_ledger_service
from billing_ledger.api.response import ok
from billing_ledger.schemas.patient_ledger import (
    CarryForwardOut,
    LedgerEntryOut,
    LedgerTotalsOut,
    PeriodOut,
    StatementOut,
)
from billing_ledger.services.billing_ledger_service import LedgerService
from billing_ledger.services.billing_period import Period

router = APIRouter(tags=["Patient Ledger"])


def _parse_period(raw: str, name: str) -> Period:
    try:
        return Period.parse(raw)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"{name} must be YYYY-MM")


@router.get("/patients/{patient_id}/ledger")
def get_ledger_entry(
        patient_id: int,
        month: int = Query(..., ge=1, le=12),
        year: int = Query(..., ge=1900, le=9999),
        svc: LedgerService = Depends(get_ledger_service),
):
    res = svc.get_ledger_entry(patient_id, Period(month=month, year=year))
    return ok(LedgerEntryOut.of(res))


@router.get("/patients/{patient_id}/statement")
def get_statement(
        patient_id: int,
        from_period: str = Query(..., description="YYYY-MM"),
        to_period: str = Query(..., description="YYYY-MM"),
        svc: LedgerService = Depends(get_ledger_service),
):
    start = _parse_period(from_period, "from_period")
    end = _parse_period(to_period, "to_period")

    snap, entries = svc.statement(patient_id, start, end)
    adm = snap.profile.admission_period
    out = StatementOut(
        patient_id=snap.patient_id,
        name=snap.name,
        admission_period=PeriodOut.of(adm) if adm else None,
        entries=[LedgerEntryOut.of(e) for e in entries],
    )
    return ok(out)


@router.get("/ledger/summary")
def ledger_summary(
        month: int = Query(..., ge=1, le=12),
        year: int = Query(..., ge=1900, le=9999),
        patient_ids: Optional[List[int]] = Query(None),
        q: Optional[str] = Query(None, description="name / phone search over active patients"),
        with_entries: bool = False,
        svc: LedgerService = Depends(get_ledger_service),
):
    if patient_ids and (q or "").strip():
        raise HTTPException(status_code=422, detail="patient_ids and q cannot be combined")
    totals = svc.aggregate(Period(month=month, year=year), patient_ids=patient_ids, search=q)
    return ok(LedgerTotalsOut.of(totals, with_entries=with_entries))


@router.get("/ledger/carry-forward")
def ledger_carry_forward(
        month: int = Query(..., ge=1, le=12),
        year: int = Query(..., ge=1900, le=9999),
        q: Optional[str] = None,
        svc: LedgerService = Depends(get_ledger_service),
):
    report = svc.carry_forward_report(Period(month=month, year=year), search=q)
    return ok(CarryForwardOut.of(report), meta={"count": len(report.rows)})
