# billing_ledger/services/billing_fee_items.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from billing_ledger.core.errors import FeeItemNotFound, InvalidFeeItem, PatientNotFound
from billing_ledger.models.patient import Patient
from billing_ledger.models.patient_fee_item import PatientFeeItem
from billing_ledger.services.billing_math import D, is_finite, money2
from billing_ledger.services.billing_upstream import upstream_guard


def _clean_description(raw) -> str:
    s = (raw or "").strip() if isinstance(raw, str) else ""
    if not s:
        raise InvalidFeeItem("Description is required")
    return s[:255]


def _clean_date(raw) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        try:
            return date.fromisoformat(raw.strip()[:10])
        except ValueError:
            pass
    raise InvalidFeeItem(f"Invalid fee date: {raw!r}")


def _clean_amount(raw) -> Decimal:
    if not is_finite(raw):
        raise InvalidFeeItem(f"Fee amount must be a finite number, got {raw!r}")
    amt = money2(D(raw))
    if amt <= 0:
        raise InvalidFeeItem("Fee amount must be > 0")
    return amt


class AdHocFeeLedger:
    """
    Manually entered fee lines per patient.
    Plain CRUD; these never feed the monthly carry-forward.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get(self, item_id: int) -> PatientFeeItem:
        with upstream_guard(self.db, "get_fee_item"):
            item = self.db.get(PatientFeeItem, int(item_id))
        if item is None:
            raise FeeItemNotFound(f"Fee item {item_id} not found")
        return item

    def add(self, *, patient_id: int, description, fee_date, amount) -> PatientFeeItem:
        item = PatientFeeItem(
            patient_id=int(patient_id),
            description=_clean_description(description),
            fee_date=_clean_date(fee_date),
            amount=_clean_amount(amount),
        )
        with upstream_guard(self.db, "add_fee_item", write=True):
            if self.db.get(Patient, item.patient_id) is None:
                raise PatientNotFound(f"Patient {patient_id} not found")
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)
        return item

    def update(
        self,
        item_id: int,
        *,
        description=None,
        fee_date=None,
        amount=None,
    ) -> PatientFeeItem:
        item = self._get(item_id)

        # validate everything before touching the row
        new_desc = _clean_description(description) if description is not None else None
        new_date = _clean_date(fee_date) if fee_date is not None else None
        new_amt = _clean_amount(amount) if amount is not None else None

        if new_desc is not None:
            item.description = new_desc
        if new_date is not None:
            item.fee_date = new_date
        if new_amt is not None:
            item.amount = new_amt

        with upstream_guard(self.db, "update_fee_item", write=True):
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)
        return item

    def remove(self, item_id: int) -> None:
        item = self._get(item_id)
        with upstream_guard(self.db, "remove_fee_item", write=True):
            self.db.delete(item)
            self.db.commit()

    def list_for(self, patient_id: int) -> List[PatientFeeItem]:
        with upstream_guard(self.db, "list_fee_items"):
            return (self.db.query(PatientFeeItem).filter(
                PatientFeeItem.patient_id == int(patient_id)).order_by(
                    PatientFeeItem.fee_date.asc(), PatientFeeItem.id.asc()).all())

    def total_for(self, patient_id: int) -> Decimal:
        with upstream_guard(self.db, "total_fee_items"):
            total = self.db.query(func.coalesce(
                func.sum(PatientFeeItem.amount),
                0)).filter(PatientFeeItem.patient_id == int(patient_id)).scalar()
        return money2(total)
