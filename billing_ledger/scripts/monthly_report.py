from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, sessionmaker

from billing_ledger.core.errors import LedgerError
from billing_ledger.db.session import SessionLocal, make_engine
from billing_ledger.services.billing_aggregate import aggregate
from billing_ledger.services.billing_fee_items import AdHocFeeLedger
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_recurrence import BalanceRecurrence
from billing_ledger.services.billing_store import BillingStore

logger = logging.getLogger(__name__)

HEADER = f"{'ID':>6}  {'Patient':<24} {'Monthly':>10} {'Onboard':>10} {'Carry':>10} {'Paid':>10} {'Balance':>10} {'Manual':>10}  Status"


def _get_session(db_uri: Optional[str]) -> Session:
    if not db_uri:
        return SessionLocal()
    return sessionmaker(bind=make_engine(db_uri), autoflush=False, autocommit=False, future=True)()


def build_report(
    db: Session,
    period: Period,
    *,
    patient_ids: Optional[Sequence[int]] = None,
    search: Optional[str] = None,
) -> List[str]:
    store = BillingStore(db)
    fees = AdHocFeeLedger(db)
    snaps = store.snapshots(patient_ids) if patient_ids else store.active_snapshots(search)

    # one memo for the whole run
    totals = aggregate(snaps, period, recurrence=BalanceRecurrence())
    names = {s.patient_id: (s.name or "") for s in snaps}

    lines = [f"Patient ledger {period}", HEADER]
    for e in totals.entries:
        lines.append(
            f"{e.patient_id:>6}  {names.get(e.patient_id, '')[:24]:<24} "
            f"{e.monthly_charge:>10} {e.onboarding_charge:>10} {e.carry_forward:>10} "
            f"{e.payments_applied:>10} {e.balance:>10} {fees.total_for(e.patient_id):>10}  {e.status}")
    for pid in totals.skipped_patient_ids:
        lines.append(f"{pid:>6}  {names.get(pid, '')[:24]:<24} {'not billable this month':>54}")

    lines.append(
        f"Patients: {totals.patients_considered} (billed {totals.patients_billed}, skipped {totals.patients_skipped})")
    lines.append(f"Total charges: {totals.total_charges}")
    lines.append(f"Total due:     {totals.total_due}")
    lines.append(f"Total paid:    {totals.total_paid}")
    lines.append(f"Total balance: {totals.total_balance}")
    return lines


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Monthly patient billing report")
    parser.add_argument("--period", required=True, help="YYYY-MM")
    parser.add_argument("--patient-id", type=int, action="append", dest="patient_ids")
    parser.add_argument("--search", default=None, help="filter active patients by name/phone")
    parser.add_argument("--db-uri", default=None, help="defaults to DATABASE_URL / MySQL settings")
    args = parser.parse_args(argv)

    try:
        period = Period.parse(args.period)
    except ValueError as e:
        parser.error(str(e))

    db = _get_session(args.db_uri)
    try:
        for line in build_report(db, period, patient_ids=args.patient_ids, search=args.search):
            print(line)
    except LedgerError as e:
        logger.error("report failed: %s", e.msg)
        return 2
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
