# billing_ledger/services/billing_recurrence.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from billing_ledger.services.billing_math import ZERO, floor_zero, money2
from billing_ledger.services.billing_payment_ledger import PaymentLedger
from billing_ledger.services.billing_period import Period, iter_periods
from billing_ledger.services.billing_types import (
    REASON_ADMISSION_UNKNOWN,
    REASON_BEFORE_ADMISSION,
    BillingProfile,
    LedgerEntry,
    LedgerResult,
    NotApplicable,
)

logger = logging.getLogger(__name__)


class BalanceRecurrence:
    """
    Month-by-month carry-forward ledger.

        total_due = monthly + onboarding (admission month only) + carry_forward
        balance   = max(0, total_due - payments)
        carry_forward(P) = balance(P - 1), 0 in the admission month

    Entries are memoized per (patient, period) for the life of this object.
    Build one per report / request; never share it across snapshots.
    """

    def __init__(self):
        # patient_id -> period.key -> entry
        self._memo: Dict[int, Dict[int, LedgerEntry]] = {}
        # patient_id -> (profile, ledger, ledger.version) the memo was built on
        self._sources: Dict[int, Tuple[BillingProfile, PaymentLedger, int]] = {}

    # ---------- memo control ----------
    def invalidate(self, patient_id: int) -> None:
        self._memo.pop(int(patient_id), None)
        self._sources.pop(int(patient_id), None)

    def clear(self) -> None:
        self._memo.clear()
        self._sources.clear()

    def cached_periods(self, patient_id: int) -> int:
        return len(self._memo.get(int(patient_id), {}))

    def _memo_for(self, profile: BillingProfile, ledger: PaymentLedger) -> Dict[int, LedgerEntry]:
        pid = profile.patient_id
        src = self._sources.get(pid)
        if src is None or src[0] != profile or src[1] is not ledger or src[2] != ledger.version:
            if src is not None:
                logger.debug("ledger memo dropped patient_id=%s", pid)
            self._memo[pid] = {}
            self._sources[pid] = (profile, ledger, ledger.version)
        return self._memo[pid]

    # ---------- evaluation ----------
    def _entry(
        self,
        profile: BillingProfile,
        ledger: PaymentLedger,
        period: Period,
        prev_balance: Optional[Decimal],
    ) -> LedgerEntry:
        is_admission = prev_balance is None
        onboarding = profile.onboarding_charge if is_admission else ZERO
        carry = ZERO if is_admission else prev_balance

        paid = ledger.sum_in(
            profile.patient_id,
            period,
            admission_period=profile.admission_period,
            intake_payment=profile.intake_payment,
        )
        total_due = money2(profile.monthly_charge + onboarding + carry)

        return LedgerEntry(
            patient_id=profile.patient_id,
            period=period,
            monthly_charge=profile.monthly_charge,
            onboarding_charge=onboarding,
            carry_forward=carry,
            payments_applied=paid,
            total_due=total_due,
            # overpayment is dropped, never carried as credit
            balance=floor_zero(total_due - paid),
        )

    def evaluate(self, profile: BillingProfile, ledger: PaymentLedger, period: Period) -> LedgerResult:
        admission = profile.admission_period
        if admission is None:
            return NotApplicable(profile.patient_id, period, REASON_ADMISSION_UNKNOWN)
        if period < admission:
            return NotApplicable(profile.patient_id, period, REASON_BEFORE_ADMISSION)

        memo = self._memo_for(profile, ledger)
        hit = memo.get(period.key)
        if hit is not None:
            return hit

        # nearest memoized month below the target; hard stop at admission
        k = period.key - 1
        while k >= admission.key and k not in memo:
            k -= 1
        prev_balance = memo[k].balance if k >= admission.key else None

        for p in iter_periods(Period.from_key(k + 1), period):
            entry = self._entry(profile, ledger, p, prev_balance)
            memo[p.key] = entry
            prev_balance = entry.balance

        return memo[period.key]

    def statement(
        self,
        profile: BillingProfile,
        ledger: PaymentLedger,
        start: Period,
        end: Period,
    ) -> List[LedgerEntry]:
        """Entries for every billable month in [start, end]; months before admission are skipped."""
        admission = profile.admission_period
        if admission is None:
            return []
        if start < admission:
            start = admission
        out: List[LedgerEntry] = []
        for p in iter_periods(start, end):
            out.append(self.evaluate(profile, ledger, p))
        return out
