# billing_ledger/services/billing_aggregate.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from billing_ledger.services.billing_math import ZERO, money2
from billing_ledger.services.billing_payment_ledger import PaymentLedger
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_recurrence import BalanceRecurrence
from billing_ledger.services.billing_types import BillingProfile, LedgerEntry

logger = logging.getLogger(__name__)


@dataclass
class PatientSnapshot:
    """One patient's profile + payment log, as read at the start of a report."""
    profile: BillingProfile
    ledger: PaymentLedger
    name: Optional[str] = None

    @property
    def patient_id(self) -> int:
        return self.profile.patient_id


@dataclass
class LedgerTotals:
    period: Period
    total_charges: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_due: Decimal = ZERO
    total_paid: Decimal = ZERO
    patients_considered: int = 0
    patients_billed: int = 0
    patients_skipped: int = 0
    entries: List[LedgerEntry] = field(default_factory=list)
    skipped_patient_ids: List[int] = field(default_factory=list)


@dataclass
class CarryForwardRow:
    patient_id: int
    name: Optional[str]
    carry_forward: Decimal


@dataclass
class CarryForwardReport:
    period: Period
    rows: List[CarryForwardRow] = field(default_factory=list)
    total_carry_forward: Decimal = ZERO


def evaluate_all(
    recurrence: BalanceRecurrence,
    snapshots: Iterable[PatientSnapshot],
    period: Period,
) -> List[tuple]:
    return [(s, recurrence.evaluate(s.profile, s.ledger, period)) for s in snapshots]


def aggregate(
    snapshots: Iterable[PatientSnapshot],
    period: Period,
    *,
    recurrence: Optional[BalanceRecurrence] = None,
) -> LedgerTotals:
    """
    Roll up one month over a pre-filtered patient set.
    Patients with no admission, or admitted after `period`, are counted
    as considered but stay out of the money totals.
    """
    recurrence = recurrence or BalanceRecurrence()
    totals = LedgerTotals(period=period)

    for snap, res in evaluate_all(recurrence, snapshots, period):
        totals.patients_considered += 1
        if not res.applicable:
            totals.patients_skipped += 1
            totals.skipped_patient_ids.append(snap.patient_id)
            continue

        totals.patients_billed += 1
        totals.entries.append(res)
        totals.total_charges += res.charges
        totals.total_balance += res.balance
        totals.total_due += res.total_due
        totals.total_paid += res.payments_applied

    totals.total_charges = money2(totals.total_charges)
    totals.total_balance = money2(totals.total_balance)
    totals.total_due = money2(totals.total_due)
    totals.total_paid = money2(totals.total_paid)

    logger.info(
        "ledger aggregate period=%s considered=%s billed=%s skipped=%s balance=%s",
        period,
        totals.patients_considered,
        totals.patients_billed,
        totals.patients_skipped,
        totals.total_balance,
    )
    return totals


def carry_forward_report(
    snapshots: Iterable[PatientSnapshot],
    period: Period,
    *,
    recurrence: Optional[BalanceRecurrence] = None,
) -> CarryForwardReport:
    """Patients entering `period` with an unpaid balance from the month before."""
    recurrence = recurrence or BalanceRecurrence()
    report = CarryForwardReport(period=period)

    for snap, res in evaluate_all(recurrence, snapshots, period):
        if not res.applicable or res.carry_forward <= 0:
            continue
        report.rows.append(CarryForwardRow(snap.patient_id, snap.name, res.carry_forward))
        report.total_carry_forward += res.carry_forward

    report.total_carry_forward = money2(report.total_carry_forward)
    return report

