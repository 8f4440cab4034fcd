from datetime import date

from billing_ledger.scripts.monthly_report import build_report
from billing_ledger.services.billing_fee_items import AdHocFeeLedger
from billing_ledger.services.billing_period import Period
from billing_ledger.services.billing_store import BillingStore


def test_report_lines(db, make_patient):
    a = make_patient(name="Anita")
    make_patient(name="Unbilled", admission_date=None)
    BillingStore(db).add_payment(a.id, payment_date=date(2025, 1, 5), amount=500)
    AdHocFeeLedger(db).add(patient_id=a.id, description="Physio", fee_date="2025-01-09", amount=250)

    lines = build_report(db, Period(1, 2025))
    text = "\n".join(lines)
    assert lines[0] == "Patient ledger 2025-01"
    assert "Anita" in text
    assert "250.00" in text
    assert "not billable this month" in text
    assert "Patients: 2 (billed 1, skipped 1)" in text
    assert lines[-1] == "Total balance: 1000.00"


def test_report_for_selected_patients(db, make_patient):
    a = make_patient(name="Anita")
    make_patient(name="Bala")
    lines = build_report(db, Period(2, 2025), patient_ids=[a.id])
    assert "Patients: 1 (billed 1, skipped 0)" in lines
    assert lines[-1] == "Total balance: 2500.00"
