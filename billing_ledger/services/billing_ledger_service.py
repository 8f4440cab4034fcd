# billing_ledger/services/billing_ledger_service.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from billing_ledger.services.billing_aggregate import (
    CarryForwardReport,
    LedgerTotals,
    PatientSnapshot,
    aggregate,
    carry_forward_report,
)
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_recurrence import BalanceRecurrence
from billing_ledger.services.billing_store import BillingStore
from billing_ledger.services.billing_types import LedgerEntry, LedgerResult, PaymentRecord


class LedgerService:
    """
    Public face of the ledger.

    Every call reads a fresh snapshot from the store and evaluates it with
    a fresh BalanceRecurrence, so no memo outlives the call that built it.
    """

    def __init__(self, db: Session, store: Optional[BillingStore] = None):
        self.store = store or BillingStore(db)

    def _select(self, patient_ids: Optional[Sequence[int]], search: Optional[str]) -> List[PatientSnapshot]:
        if patient_ids is not None:
            return self.store.snapshots(patient_ids)
        return self.store.active_snapshots(search)

    def get_ledger_entry(self, patient_id: int, period: Period) -> LedgerResult:
        snap = self.store.snapshot(patient_id)
        return BalanceRecurrence().evaluate(snap.profile, snap.ledger, period)

    def statement(self, patient_id: int, start: Period, end: Period) -> Tuple[PatientSnapshot, List[LedgerEntry]]:
        snap = self.store.snapshot(patient_id)
        entries = BalanceRecurrence().statement(snap.profile, snap.ledger, start, end)
        return snap, entries

    def aggregate(
        self,
        period: Period,
        *,
        patient_ids: Optional[Sequence[int]] = None,
        search: Optional[str] = None,
    ) -> LedgerTotals:
        snaps = self._select(patient_ids, search)
        return aggregate(snaps, period, recurrence=BalanceRecurrence())

    def carry_forward_report(
        self,
        period: Period,
        *,
        patient_ids: Optional[Sequence[int]] = None,
        search: Optional[str] = None,
    ) -> CarryForwardReport:
        snaps = self._select(patient_ids, search)
        return carry_forward_report(snaps, period, recurrence=BalanceRecurrence())

    def payment_history(self, patient_id: int, period: Optional[Period] = None) -> List[PaymentRecord]:
        snap = self.store.snapshot(patient_id)
        if period is None:
            return list(snap.ledger)
        return snap.ledger.payments_in(patient_id, period)
