# billing_ledger/services/billing_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from billing_ledger.models.patient_payment import PaymentMode
from billing_ledger.services.billing_math import ZERO, is_finite, money2
from billing_ledger.services.billing_period import Period

STATUS_PAID = "Paid"
STATUS_PENDING = "Pending"

REASON_ADMISSION_UNKNOWN = "admission_unknown"
REASON_BEFORE_ADMISSION = "before_admission"


@dataclass(frozen=True)
class BillingProfile:
    """Read-only snapshot of what the ledger needs from a patient record."""
    patient_id: int
    admission_period: Optional[Period]
    monthly_charge: Decimal = ZERO
    onboarding_charge: Decimal = ZERO
    intake_payment: Decimal = ZERO
    status: str = "Active"

    def __post_init__(self):
        for name in ("monthly_charge", "onboarding_charge", "intake_payment"):
            raw = getattr(self, name)
            if not is_finite(raw):
                raise ValueError(f"{name} must be a finite amount, got {raw!r}")
            v = money2(raw)
            if v < 0:
                raise ValueError(f"{name} must be >= 0, got {v}")
            object.__setattr__(self, name, v)


@dataclass(frozen=True)
class PaymentRecord:
    patient_id: int
    date: date
    amount: Decimal
    mode: PaymentMode = PaymentMode.CASH
    note: Optional[str] = None
    id: Optional[int] = None

    @property
    def period(self) -> Period:
        return Period(month=self.date.month, year=self.date.year)


@dataclass(frozen=True)
class LedgerEntry:
    patient_id: int
    period: Period
    monthly_charge: Decimal
    onboarding_charge: Decimal
    carry_forward: Decimal
    payments_applied: Decimal
    total_due: Decimal
    balance: Decimal

    applicable = True

    @property
    def charges(self) -> Decimal:
        return money2(self.monthly_charge + self.onboarding_charge)

    @property
    def status(self) -> str:
        return STATUS_PAID if self.balance <= 0 else STATUS_PENDING


@dataclass(frozen=True)
class NotApplicable:
    """
    The patient cannot be billed for this period.
    Money fields read as zero so it can stand in for an empty entry.
    """
    patient_id: int
    period: Period
    reason: str = REASON_BEFORE_ADMISSION

    applicable = False

    monthly_charge: Decimal = field(default=ZERO, init=False)
    onboarding_charge: Decimal = field(default=ZERO, init=False)
    carry_forward: Decimal = field(default=ZERO, init=False)
    payments_applied: Decimal = field(default=ZERO, init=False)
    total_due: Decimal = field(default=ZERO, init=False)
    balance: Decimal = field(default=ZERO, init=False)

    @property
    def charges(self) -> Decimal:
        return ZERO

    @property
    def status(self) -> str:
        return "Not applicable"


LedgerResult = Union[LedgerEntry, NotApplicable]
