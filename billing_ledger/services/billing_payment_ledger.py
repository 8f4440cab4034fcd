# billing_ledger/services/billing_payment_ledger.py
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from billing_ledger.core.errors import InvalidPayment, PaymentNotFound
from billing_ledger.models.patient_payment import PaymentMode
from billing_ledger.services.billing_math import ZERO, D, is_finite, money2, msum
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_types import PaymentRecord


# ---------- validation ----------
def parse_payment_date(raw) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        try:
            return date.fromisoformat(raw.strip()[:10])
        except ValueError:
            pass
    raise InvalidPayment(f"Invalid payment date: {raw!r}")


def parse_payment_mode(raw) -> PaymentMode:
    if isinstance(raw, PaymentMode):
        return raw
    s = str(raw or "").strip()
    for m in PaymentMode:
        if s.lower() in (m.value.lower(), m.name.lower()):
            return m
    raise InvalidPayment(f"Invalid payment mode: {raw!r}")


def parse_payment_amount(raw) -> Decimal:
    if not is_finite(raw):
        raise InvalidPayment(f"Payment amount must be a finite number, got {raw!r}")
    amt = money2(D(raw))
    if amt <= 0:
        raise InvalidPayment("Payment amount must be > 0")
    return amt


def validate_payment(
    *,
    patient_id: int,
    payment_date,
    amount,
    mode=PaymentMode.CASH,
    note: Optional[str] = None,
    payment_id: Optional[int] = None,
) -> PaymentRecord:
    return PaymentRecord(
        id=payment_id,
        patient_id=int(patient_id),
        date=parse_payment_date(payment_date),
        amount=parse_payment_amount(amount),
        mode=parse_payment_mode(mode),
        note=(note or None),
    )


# ---------- ledger ----------
class PaymentLedger:
    """
    Payment log of ONE patient, indexed by billing month.

    `version` moves on every append/edit so memoized balances built
    on an older state can be detected and dropped.
    """

    def __init__(self, patient_id: int, payments: Iterable[PaymentRecord] = ()):
        self.patient_id = int(patient_id)
        self.version = 0
        self._payments: List[PaymentRecord] = []
        self._by_period: Dict[int, List[PaymentRecord]] = {}
        for p in payments:
            self._add(p)

    def __len__(self) -> int:
        return len(self._payments)

    def __iter__(self):
        return iter(self._payments)

    def _add(self, p: PaymentRecord) -> None:
        if p.patient_id != self.patient_id:
            raise InvalidPayment(
                f"Payment for patient {p.patient_id} does not belong to ledger of patient {self.patient_id}"
            )
        if p.amount <= 0:
            raise InvalidPayment("Payment amount must be > 0")
        self._payments.append(p)
        self._by_period.setdefault(p.period.key, []).append(p)

    def _reindex(self) -> None:
        self._by_period = {}
        for p in self._payments:
            self._by_period.setdefault(p.period.key, []).append(p)

    def append(self, payment: PaymentRecord) -> PaymentRecord:
        rec = validate_payment(
            patient_id=payment.patient_id,
            payment_date=payment.date,
            amount=payment.amount,
            mode=payment.mode,
            note=payment.note,
            payment_id=payment.id,
        )
        self._add(rec)
        self.version += 1
        return rec

    def edit(self, payment_id: int, *, amount=None, mode=None, note=None) -> PaymentRecord:
        """Rewrites amount/mode/note. Identity and date stay put."""
        for i, p in enumerate(self._payments):
            if p.id != payment_id:
                continue
            changes = {}
            if amount is not None:
                changes["amount"] = parse_payment_amount(amount)
            if mode is not None:
                changes["mode"] = parse_payment_mode(mode)
            if note is not None:
                changes["note"] = note or None
            updated = replace(p, **changes)
            self._payments[i] = updated
            self._reindex()
            self.version += 1
            return updated
        raise PaymentNotFound(f"Payment {payment_id} not found")

    def payments_in(self, patient_id: int, period: Period) -> List[PaymentRecord]:
        if int(patient_id) != self.patient_id:
            return []
        return list(self._by_period.get(period.key, ()))

    def sum_in(
        self,
        patient_id: int,
        period: Period,
        *,
        admission_period: Optional[Period] = None,
        intake_payment=None,
    ) -> Decimal:
        """
        Sum of itemized payments dated in `period`.

        In the admission month the intake lump is added once, unless an
        itemized payment of the exact same amount already sits in that
        month (then it is taken to be the same money).
        """
        items = self.payments_in(patient_id, period)
        total = msum(p.amount for p in items)

        lump = money2(intake_payment)
        if (
            lump > 0
            and admission_period is not None
            and period == admission_period
            and int(patient_id) == self.patient_id
            and not any(p.amount == lump for p in items)
        ):
            total = money2(total + lump)

        return total if total > 0 else ZERO
