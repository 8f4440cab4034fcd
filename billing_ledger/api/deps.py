# billing_ledger/api/deps.py
from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from billing_ledger.db.session import SessionLocal
from billing_ledger.services.billing_fee_items import AdHocFeeLedger
from billing_ledger.services.billing_ledger_service import LedgerService
from billing_ledger.services.billing_store import BillingStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> BillingStore:
    return BillingStore(db)


def get_ledger_service(store: BillingStore = Depends(get_store)) -> LedgerService:
    return LedgerService(store.db, store=store)


def get_fee_ledger(db: Session = Depends(get_db)) -> AdHocFeeLedger:
    return AdHocFeeLedger(db)
