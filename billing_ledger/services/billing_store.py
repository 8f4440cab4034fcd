# billing_ledger/services/billing_store.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from billing_ledger.core.config import settings
from billing_ledger.core.errors import PatientNotFound, PaymentNotFound
from billing_ledger.models.patient import Patient
from billing_ledger.models.patient_payment import PatientPayment, PaymentMode
from billing_ledger.services.billing_aggregate import PatientSnapshot
from billing_ledger.services.billing_math import money2
from billing_ledger.services.billing_payment_ledger import (
    PaymentLedger,
    parse_payment_amount,
    parse_payment_mode,
    validate_payment,
)
from billing_ledger.services.billing_period import period_of
from billing_ledger.services.billing_types import BillingProfile, PaymentRecord
from billing_ledger.services.billing_upstream import upstream_guard

logger = logging.getLogger(__name__)


class ActivePatient(NamedTuple):
    patient_id: int
    name: str
    profile: BillingProfile


def profile_from_patient(p: Patient) -> BillingProfile:
    return BillingProfile(
        patient_id=int(p.id),
        admission_period=period_of(p.admission_date) if p.admission_date else None,
        monthly_charge=money2(p.monthly_fees),
        onboarding_charge=money2(money2(p.blood_test_charge) + money2(p.pickup_charge)),
        intake_payment=money2(p.intake_payment),
        status=p.status or "",
    )


def payment_from_row(row: PatientPayment) -> PaymentRecord:
    return PaymentRecord(
        id=int(row.id),
        patient_id=int(row.patient_id),
        date=row.payment_date,
        amount=money2(row.amount),
        mode=row.mode or PaymentMode.OTHER,
        note=row.note,
    )


class BillingStore:
    """
    SQLAlchemy side of the ledger: reads snapshots, writes payments.
    Any driver/DB failure comes out as UpstreamUnavailable.
    """

    def __init__(self, db: Session):
        self.db = db

    def _upstream(self, what: str, *, write: bool = False):
        return upstream_guard(self.db, what, write=write)

    # ---------- reads ----------
    def get_billing_profile(self, patient_id: int) -> Optional[BillingProfile]:
        with self._upstream("get_billing_profile"):
            p = self.db.get(Patient, int(patient_id))
        return profile_from_patient(p) if p is not None else None

    def list_payments(self, patient_id: int) -> List[PaymentRecord]:
        with self._upstream("list_payments"):
            rows = (self.db.query(PatientPayment).filter(
                PatientPayment.patient_id == int(patient_id)).order_by(
                    PatientPayment.payment_date.asc(),
                    PatientPayment.id.asc()).all())
        return [payment_from_row(r) for r in rows]

    def _payments_by_patient(self, patient_ids: Iterable[int]) -> Dict[int, List[PaymentRecord]]:
        ids = sorted({int(i) for i in patient_ids})
        out: Dict[int, List[PaymentRecord]] = {i: [] for i in ids}
        if not ids:
            return out
        with self._upstream("list_payments"):
            rows = (self.db.query(PatientPayment).filter(
                PatientPayment.patient_id.in_(ids)).order_by(
                    PatientPayment.payment_date.asc(),
                    PatientPayment.id.asc()).all())
        for r in rows:
            out[int(r.patient_id)].append(payment_from_row(r))
        return out

    def list_active_patients(self, search: Optional[str] = None) -> List[ActivePatient]:
        with self._upstream("list_active_patients"):
            q = self.db.query(Patient).filter(Patient.status == settings.ACTIVE_STATUS)
            s = (search or "").strip()
            if s:
                like = f"%{s}%"
                q = q.filter(or_(Patient.name.ilike(like), Patient.phone.ilike(like)))
            rows = q.order_by(Patient.name.asc(), Patient.id.asc()).all()
        return [ActivePatient(int(p.id), p.name, profile_from_patient(p)) for p in rows]

    # ---------- snapshots ----------
    def snapshot(self, patient_id: int) -> PatientSnapshot:
        with self._upstream("snapshot"):
            p = self.db.get(Patient, int(patient_id))
        if p is None:
            raise PatientNotFound(f"Patient {patient_id} not found")
        ledger = PaymentLedger(p.id, self.list_payments(p.id))
        return PatientSnapshot(profile=profile_from_patient(p), ledger=ledger, name=p.name)

    def snapshots(self, patient_ids: Iterable[int]) -> List[PatientSnapshot]:
        ids = list(dict.fromkeys(int(i) for i in patient_ids))
        if not ids:
            return []
        with self._upstream("snapshots"):
            patients = {int(p.id): p for p in self.db.query(Patient).filter(Patient.id.in_(ids)).all()}
        missing = [i for i in ids if i not in patients]
        if missing:
            raise PatientNotFound(f"Patients not found: {missing}")

        pays = self._payments_by_patient(ids)
        return [
            PatientSnapshot(
                profile=profile_from_patient(patients[i]),
                ledger=PaymentLedger(i, pays[i]),
                name=patients[i].name,
            ) for i in ids
        ]

    def active_snapshots(self, search: Optional[str] = None) -> List[PatientSnapshot]:
        active = self.list_active_patients(search)
        pays = self._payments_by_patient(a.patient_id for a in active)
        return [
            PatientSnapshot(profile=a.profile, ledger=PaymentLedger(a.patient_id, pays[a.patient_id]), name=a.name)
            for a in active
        ]

    # ---------- writes ----------
    def add_payment(
        self,
        patient_id: int,
        *,
        payment_date,
        amount,
        mode=PaymentMode.CASH,
        note: Optional[str] = None,
    ) -> PatientPayment:
        rec = validate_payment(
            patient_id=patient_id,
            payment_date=payment_date,
            amount=amount,
            mode=mode,
            note=note,
        )
        with self._upstream("add_payment", write=True):
            if self.db.get(Patient, rec.patient_id) is None:
                raise PatientNotFound(f"Patient {patient_id} not found")
            row = PatientPayment(
                patient_id=rec.patient_id,
                payment_date=rec.date,
                amount=rec.amount,
                mode=rec.mode,
                note=rec.note,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        logger.info("payment recorded id=%s patient_id=%s amount=%s", row.id, row.patient_id, row.amount)
        return row

    def edit_payment(self, payment_id: int, *, amount=None, mode=None, note=None) -> PatientPayment:
        """Rewrites amount/mode/note. Patient and date are fixed."""
        new_amount = parse_payment_amount(amount) if amount is not None else None
        new_mode = parse_payment_mode(mode) if mode is not None else None

        with self._upstream("edit_payment", write=True):
            row = self.db.get(PatientPayment, int(payment_id))
            if row is None:
                raise PaymentNotFound(f"Payment {payment_id} not found")
            if new_amount is not None:
                row.amount = new_amount
            if new_mode is not None:
                row.mode = new_mode
            if note is not None:
                row.note = note or None
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return row
