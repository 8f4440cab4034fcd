from datetime import date
from decimal import Decimal

from conftest import money

API = "/api"


def _d(x) -> Decimal:
    return Decimal(str(x))


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200


def test_ledger_entry_scenarios(client, make_patient):
    p = make_patient()

    r = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 1, "year": 2025})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    jan = body["data"]
    assert jan["applicable"] is True
    assert jan["period"] == {"month": 1, "year": 2025}
    assert _d(jan["balance"]) == money(1500)
    assert _d(jan["carry_forward"]) == 0

    feb = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 2, "year": 2025}).json()["data"]
    assert _d(feb["carry_forward"]) == money(1500)
    assert _d(feb["balance"]) == money(2500)
    assert feb["status"] == "Pending"

    r = client.post(f"{API}/patients/{p.id}/payments",
                    json={"payment_date": "2025-02-12", "amount": "2500", "mode": "UPI"})
    assert r.status_code == 201
    assert r.json()["data"]["mode"] == "UPI"

    feb = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 2, "year": 2025}).json()["data"]
    assert _d(feb["payments_applied"]) == money(2500)
    assert _d(feb["balance"]) == 0
    assert feb["status"] == "Paid"

    mar = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 3, "year": 2025}).json()["data"]
    assert _d(mar["carry_forward"]) == 0
    assert _d(mar["balance"]) == money(1000)


def test_ledger_not_applicable(client, make_patient):
    p = make_patient(admission_date=None)
    r = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 1, "year": 2025})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["applicable"] is False
    assert data["reason"] == "admission_unknown"

    q = make_patient(name="Later", admission_date=date(2025, 6, 1))
    data = client.get(f"{API}/patients/{q.id}/ledger", params={"month": 1, "year": 2025}).json()["data"]
    assert data["applicable"] is False
    assert data["reason"] == "before_admission"


def test_ledger_unknown_patient_is_404(client):
    r = client.get(f"{API}/patients/999/ledger", params={"month": 1, "year": 2025})
    assert r.status_code == 404
    assert r.json()["ok"] is False
    assert r.json()["error"]["code"] == "PATIENT_NOT_FOUND"


def test_ledger_bad_month_is_422(client, make_patient):
    p = make_patient()
    r = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 13, "year": 2025})
    assert r.status_code == 422
    assert r.json()["ok"] is False


def test_statement(client, make_patient):
    p = make_patient()
    client.post(f"{API}/patients/{p.id}/payments", json={"payment_date": "2025-02-12", "amount": 2500})
    r = client.get(f"{API}/patients/{p.id}/statement",
                   params={"from_period": "2024-11", "to_period": "2025-03"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["admission_period"] == {"month": 1, "year": 2025}
    assert [e["period"]["month"] for e in data["entries"]] == [1, 2, 3]
    assert [_d(e["balance"]) for e in data["entries"]] == [money(1500), 0, money(1000)]

    r = client.get(f"{API}/patients/{p.id}/statement", params={"from_period": "2025", "to_period": "2025-03"})
    assert r.status_code == 422


def test_payment_validation_rejected(client, make_patient):
    p = make_patient()
    r = client.post(f"{API}/patients/{p.id}/payments", json={"payment_date": "2025-02-12", "amount": 0})
    assert r.status_code == 422
    r = client.post(f"{API}/patients/{p.id}/payments", json={"payment_date": "bogus", "amount": 10})
    assert r.status_code == 422
    r = client.post(f"{API}/patients/{p.id}/payments",
                    json={"payment_date": "2025-02-12", "amount": 10, "mode": "Barter"})
    assert r.status_code == 422
    r = client.post(f"{API}/patients/424242/payments", json={"payment_date": "2025-02-12", "amount": 10})
    assert r.status_code == 404

    listing = client.get(f"{API}/patients/{p.id}/payments").json()
    assert listing["data"] == []


def test_payment_history_and_edit(client, make_patient):
    p = make_patient()
    a = client.post(f"{API}/patients/{p.id}/payments",
                    json={"payment_date": "2025-01-20", "amount": 100}).json()["data"]
    client.post(f"{API}/patients/{p.id}/payments", json={"payment_date": "2025-02-03", "amount": 200})

    r = client.get(f"{API}/patients/{p.id}/payments", params={"month": 1, "year": 2025})
    assert r.json()["meta"]["count"] == 1
    assert r.json()["data"][0]["id"] == a["id"]

    r = client.get(f"{API}/patients/{p.id}/payments", params={"month": 1})
    assert r.status_code == 422

    r = client.patch(f"{API}/payments/{a['id']}", json={"amount": "150", "note": "corrected"})
    assert r.status_code == 200
    edited = r.json()["data"]
    assert _d(edited["amount"]) == money(150)
    assert edited["payment_date"] == "2025-01-20"
    assert edited["note"] == "corrected"

    jan = client.get(f"{API}/patients/{p.id}/ledger", params={"month": 1, "year": 2025}).json()["data"]
    assert _d(jan["payments_applied"]) == money(150)

    assert client.patch(f"{API}/payments/9999", json={"amount": 1}).status_code == 404


def test_summary_and_carry_forward(client, make_patient):
    a = make_patient(name="Anita")
    b = make_patient(name="Bala", admission_date=date(2025, 2, 1), blood_test_charge="0", pickup_charge="0",
                     monthly_fees="800")
    make_patient(name="NoAdmission", admission_date=None)
    make_patient(name="Gone", status="Inactive")
    client.post(f"{API}/patients/{a.id}/payments", json={"payment_date": "2025-02-10", "amount": 2500})

    r = client.get(f"{API}/ledger/summary", params={"month": 3, "year": 2025, "with_entries": True})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["patients_considered"] == 3
    assert data["patients_billed"] == 2
    assert data["patients_skipped"] == 1
    assert _d(data["total_balance"]) == money(1000 + 1600)
    assert _d(data["total_charges"]) == money(1000 + 800)
    assert _d(data["total_due"]) == money(1000 + 1600)
    assert sum(_d(e["balance"]) for e in data["entries"]) == _d(data["total_balance"])

    r = client.get(f"{API}/ledger/summary", params={"month": 3, "year": 2025, "patient_ids": [b.id]})
    assert _d(r.json()["data"]["total_balance"]) == money(1600)

    r = client.get(f"{API}/ledger/summary", params={"month": 3, "year": 2025, "q": "anita"})
    assert r.json()["data"]["patients_considered"] == 1

    r = client.get(f"{API}/ledger/summary", params={"month": 3, "year": 2025, "patient_ids": [b.id, 5555]})
    assert r.status_code == 404

    r = client.get(f"{API}/ledger/summary", params={"month": 3, "year": 2025, "patient_ids": [b.id], "q": "anita"})
    assert r.status_code == 422
    assert r.json()["ok"] is False

    r = client.get(f"{API}/ledger/carry-forward", params={"month": 3, "year": 2025})
    cf = r.json()
    assert cf["meta"]["count"] == 1
    assert cf["data"]["rows"][0]["name"] == "Bala"
    assert _d(cf["data"]["total_carry_forward"]) == money(800)


def test_fee_items_crud(client, make_patient):
    p = make_patient()
    r = client.post(f"{API}/patients/{p.id}/fee-items",
                    json={"description": "Physio", "fee_date": "2025-02-02", "amount": "300"})
    assert r.status_code == 201
    item = r.json()["data"]

    r = client.put(f"{API}/fee-items/{item['id']}", json={"amount": "350"})
    assert r.status_code == 200
    assert _d(r.json()["data"]["amount"]) == money(350)

    listing = client.get(f"{API}/patients/{p.id}/fee-items").json()["data"]
    assert len(listing["items"]) == 1
    assert _d(listing["total"]) == money(350)

    assert client.post(f"{API}/patients/{p.id}/fee-items",
                       json={"description": "", "fee_date": "2025-02-02", "amount": 1}).status_code == 422
    assert client.post(f"{API}/patients/{p.id}/fee-items",
                       json={"description": "x", "fee_date": "2025-02-02", "amount": -1}).status_code == 422

    assert client.delete(f"{API}/fee-items/{item['id']}").status_code == 200
    assert client.delete(f"{API}/fee-items/{item['id']}").status_code == 404
    assert client.get(f"{API}/patients/{p.id}/fee-items").json()["data"]["items"] == []


def test_fee_items_store_outage_is_503(client):
    from sqlalchemy.exc import OperationalError

    from billing_ledger.api.deps import get_fee_ledger
    from billing_ledger.main import app
    from billing_ledger.services.billing_fee_items import AdHocFeeLedger

    class _DownSession:
        def _boom(self, *a, **kw):
            raise OperationalError("SELECT 1", {}, Exception("server has gone away"))

        get = query = add = delete = commit = refresh = _boom

        def rollback(self):
            pass

    app.dependency_overrides[get_fee_ledger] = lambda: AdHocFeeLedger(_DownSession())
    try:
        r = client.get(f"{API}/patients/1/fee-items")
        assert r.status_code == 503
        assert r.json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"

        r = client.post(f"{API}/patients/1/fee-items",
                        json={"description": "Lab", "fee_date": "2025-02-02", "amount": 5})
        assert r.status_code == 503
    finally:
        app.dependency_overrides.pop(get_fee_ledger, None)
