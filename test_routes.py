import csv
import io
import os

import pytest
from fastapi.testclient import TestClient

from medstore.config import settings
from medstore.main import create_app
from medstore.repositories import InMemoryStore, seed_store


@pytest.fixture
def client(tmp_path):
    app = create_app(store=seed_store(InMemoryStore()), upload_dir=str(tmp_path))
    return TestClient(app)


def sell(*lines, **extra):
    body = {
        "date": settings.today().isoformat(),
        "type": "sell",
        "invoiceNumber": "INV-T-1",
        "customerName": "Walk-in",
        "items": [
            {"medicineId": mid, "quantity": qty, "price": price, "discount": 0, "taxRate": 12}
            for mid, qty, price in lines
        ],
    }
    body.update(extra)
    return body


def stock_of(client, medicine_id):
    return client.get(f"/medicines/{medicine_id}").json()["stock"]


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_dashboard(client):
    stats = client.get("/dashboard/stats").json()
    assert stats == {
        "todayTransactions": 0,
        "lowStockAlerts": 1,
        "expiringMedicines": 4,
        "totalInventory": 953,
    }


# --- medicines ---

def test_list_medicines(client):
    data = client.get("/medicines/").json()
    assert data["total"] == 10
    assert data["stats"]["lowStockCount"] == 1
    assert data["stats"]["scheduleHCount"] == 3
    first = data["medicines"][0]
    assert {"daysUntilExpiry", "isExpired", "isLowStock", "isExpiringSoon", "expiryDate"} <= set(first)

    low = client.get("/medicines/", params={"tab": "lowStock"}).json()
    assert [m["name"] for m in low["medicines"]] == ["Crocin Tablets"]

    by_price = client.get("/medicines/", params={"sort": "price", "direction": "desc"}).json()
    assert by_price["medicines"][0]["name"] == "Azithromycin 500mg"

    expiring = client.get("/medicines/", params={"expiring": "true", "days": 15}).json()
    assert sorted(m["id"] for m in expiring["medicines"]) == ["2", "4", "9"]


def test_list_medicines_bad_tab(client):
    assert client.get("/medicines/", params={"tab": "nope"}).status_code == 400


def test_add_and_delete_medicine(client):
    body = {
        "name": "Dolo 650", "stock": 5, "price": 30.5, "batch": "DL01",
        "supplier": "MedSupply Co", "expiryDate": "2030-01-01", "schedule": "",
    }
    res = client.post("/medicines/", json=body)
    assert res.status_code == 201
    created = res.json()
    assert created["isLowStock"] is True
    assert created["schedule"] is None
    assert created["price"] == 30.5

    assert client.post("/medicines/", json=body).status_code == 400

    assert client.delete(f"/medicines/{created['id']}").json() == {"status": "ok"}
    assert client.get(f"/medicines/{created['id']}").status_code == 404


def test_add_medicine_validation(client):
    body = {"name": "X", "stock": 0, "price": 1, "batch": "B", "supplier": "S", "expiryDate": "2030-01-01"}
    assert client.post("/medicines/", json=body).status_code == 422
    body.update(stock=1, batch="  ")
    assert client.post("/medicines/", json=body).status_code == 422
    body.update(batch="B", schedule="Q")
    assert client.post("/medicines/", json=body).status_code == 422


def test_adjust_stock(client):
    assert client.patch("/medicines/3/stock", json={"delta": 12}).json()["stock"] == 20
    assert client.patch("/medicines/3/stock", json={"delta": -100}).status_code == 400
    assert stock_of(client, "3") == 20
    assert client.patch("/medicines/missing/stock", json={"delta": 1}).status_code == 404


# --- expiry ---

def test_expiry_list(client):
    data = client.get("/expiry/", params={"days": 30}).json()
    assert [m["id"] for m in data["medicines"]] == ["4", "9", "2", "3", "7"]
    assert data["stats"] == {"expiring15Days": 2, "expiring30Days": 4, "expired": 1, "totalValue": 12220.0}

    critical = client.get("/expiry/", params={"status": "critical"}).json()
    assert [m["severity"] for m in critical["medicines"]] == ["Critical", "Critical"]


def test_expiry_export(client):
    res = client.get("/expiry/export", params={"days": 30})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "expiry-report-30days-" in res.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(res.text)))
    assert len(rows) == 5
    assert rows[0]["Medicine Name"] == "Azithromycin 500mg"
    assert rows[0]["Status"] == "Expired"
    assert rows[0]["Days Until Expiry"] == "-5"


def test_expiry_export_empty(client):
    res = client.get("/expiry/export", params={"search": "no such medicine"})
    assert res.status_code == 400
    assert res.json()["detail"] == "No data to export"


# --- accounting ---

def test_accounting_transactions(client):
    data = client.get("/accounting/transactions", params={"financialYear": "2024-2025"}).json()
    assert data["total"] == 3
    summary = data["taxSummary"]
    assert summary["totalSales"] == 497.28
    assert summary["totalPurchases"] == 2394.0
    assert summary["totalTaxCollected"] == 53.28
    assert summary["totalTaxPaid"] == 256.5
    assert summary["netTaxLiability"] == -203.22
    assert summary["totalDiscounts"] == 0.0

    first = data["transactions"][0]
    assert first["invoiceNumber"] == "INV-2024-001"
    assert first["items"][0]["totalAmount"] == 134.4


def test_accounting_filters(client):
    ranged = client.get("/accounting/transactions", params={
        "financialYear": "2024-2025", "from": "2024-04-16", "to": "2024-04-16"}).json()
    assert ranged["total"] == 1
    assert ranged["taxSummary"]["netTaxLiability"] == -256.5

    searched = client.get("/accounting/transactions", params={
        "financialYear": "2024-2025", "search": "xyz"}).json()
    assert [t["id"] for t in searched["transactions"]] == ["3"]
    # the summary still covers the whole year
    assert searched["taxSummary"]["totalSales"] == 497.28

    purchases = client.get("/accounting/transactions", params={
        "financialYear": "2024-2025", "type": "purchase"}).json()
    assert purchases["total"] == 1

    empty = client.get("/accounting/transactions", params={"financialYear": "2022-2023"}).json()
    assert empty["total"] == 0
    assert empty["taxSummary"]["netTaxLiability"] == 0.0


def test_accounting_post_recomputes_totals(client):
    body = {
        "date": "2024-06-01", "type": "purchase", "invoiceNumber": "PUR-2024-009",
        "supplierName": "Global Pharma", "discountPercent": 10,
        "items": [{"medicineName": "Omeprazole 20mg", "medicineId": "7", "quantity": 10,
                   "price": 30, "discount": 0, "taxRate": 12}],
        "totalAmount": 1, "netAmount": 1, "taxAmount": 1,
    }
    res = client.post("/accounting/transactions", json=body)
    assert res.status_code == 201
    txn = res.json()
    assert txn["financialYear"] == "2024-2025"
    assert txn["totalAmount"] == 336.0
    assert txn["discountAmount"] == 33.6
    assert txn["netAmount"] == 302.4
    assert txn["taxAmount"] == 36.0
    assert stock_of(client, "7") == 70

    assert client.get(f"/accounting/transactions/{txn['id']}").json()["invoiceNumber"] == "PUR-2024-009"
    summary = client.get("/accounting/summary", params={"financialYear": "2024-2025"}).json()
    assert summary["totalPurchases"] == 2696.4


def test_accounting_post_rejects_bad_lines(client):
    body = sell(("1", 1, 12))
    body["items"][0]["discount"] = 150
    res = client.post("/accounting/transactions", json=body)
    assert res.status_code == 400
    assert "discount" in res.json()["detail"]

    body = sell(("1", 0, 12))
    assert client.post("/accounting/transactions", json=body).status_code == 400
    assert stock_of(client, "1") == 150


def test_accounting_post_cannot_replace_existing_transaction(client):
    body = sell(("5", 3, 18), id="1", invoiceNumber="X-1", date="2024-04-20")
    res = client.post("/accounting/transactions", json=body)
    assert res.status_code == 201
    assert res.json()["id"] != "1"
    assert client.get("/accounting/transactions/1").json()["invoiceNumber"] == "INV-2024-001"
    assert client.get("/accounting/transactions", params={"financialYear": "2024-2025"}).json()["total"] == 4
    assert stock_of(client, "5") == 197


def test_direct_schedule_h_sell_is_flagged_as_skipped(client):
    res = client.post("/accounting/transactions", json=sell(("2", 1, 45)))
    assert res.status_code == 201
    assert res.json()["scheduleHCount"] == 1
    assert res.json()["prescriptionSkipped"] is True

    regular = client.post("/accounting/transactions", json=sell(("1", 1, 12))).json()
    assert regular["scheduleHCount"] == 0
    assert regular["prescriptionSkipped"] is False


def test_line_prices_are_held_to_the_paisa(client):
    res = client.post("/accounting/transactions", json=sell(("1", 100, 0.125)))
    line = res.json()["items"][0]
    assert line["price"] == 0.13
    assert line["taxableAmount"] == 13.0


def test_accounting_export(client):
    res = client.get("/accounting/export", params={"financialYear": "2024-2025"})
    rows = list(csv.DictReader(io.StringIO(res.text)))
    assert [r["Invoice Number"] for r in rows] == ["INV-2024-001", "PUR-2024-001", "INV-2024-002"]
    assert rows[1]["Customer/Supplier"] == "PharmaCorp Ltd"
    assert rows[1]["Type"] == "PURCHASE"
    assert rows[0]["Date"] == "15/4/2024"
    assert rows[0]["Net Amount"] == "134.40"


def test_financial_years(client):
    years = client.get("/accounting/financial-years").json()
    assert len(years) == 4
    assert all(len(y) == 9 and y[4] == "-" for y in years)


# --- sale / purchase forms ---

def test_quote(client):
    res = client.post("/transactions/quote", json={
        "items": [{"quantity": 50, "price": 45, "discount": 5, "taxRate": 12}],
        "discountPercent": 0,
    })
    data = res.json()
    assert data["items"][0]["taxableAmount"] == 2137.5
    assert data["items"][0]["taxAmount"] == 256.5
    assert data["subtotal"] == 2394.0
    assert data["netAmount"] == 2394.0


def test_plain_sell_is_recorded_at_once(client):
    res = client.post("/transactions/multi", json=sell(("1", 5, 12)))
    assert res.status_code == 201
    data = res.json()
    assert data["state"] == "Idle"
    assert data["transaction"]["netAmount"] == 67.2
    assert data["transaction"]["prescriptionSkipped"] is False
    assert data["transaction"]["items"][0]["medicineName"] == "Paracetamol 500mg"
    assert stock_of(client, "1") == 145
    assert client.get("/dashboard/stats").json()["todayTransactions"] == 1


def test_purchase_of_schedule_h_skips_gate(client):
    body = sell(("2", 20, 40), type="purchase", supplierName="PharmaCorp Ltd")
    res = client.post("/transactions/multi", json=body)
    assert res.status_code == 201
    assert stock_of(client, "2") == 100


def test_sell_beyond_stock_is_rejected(client):
    res = client.post("/transactions/multi", json=sell(("1", 1, 12), ("3", 9, 15)))
    assert res.status_code == 400
    assert stock_of(client, "1") == 150
    assert stock_of(client, "3") == 8


def test_unknown_medicine(client):
    assert client.post("/transactions/multi", json=sell(("999", 1, 12))).status_code == 404


def test_schedule_h_skip(client):
    res = client.post("/transactions/multi", json=sell(("1", 1, 12), ("2", 2, 45)))
    assert res.status_code == 202
    pending = res.json()
    assert pending["state"] == "AwaitingPrescriptionDecision"
    assert pending["scheduleHItems"] == ["Amoxicillin 250mg"]
    assert pending["transaction"] is None
    assert stock_of(client, "2") == 80

    checkout_id = pending["checkoutId"]
    res = client.post(f"/transactions/checkout/{checkout_id}/skip")
    assert res.status_code == 201
    done = res.json()
    assert done["state"] == "Idle"
    assert done["prescriptionSkipped"] is True
    assert done["transaction"]["prescriptionSkipped"] is True
    assert done["transaction"]["scheduleHCount"] == 1
    assert stock_of(client, "2") == 78

    assert client.app.state.transaction_service.checkouts == {}
    again = client.post(f"/transactions/checkout/{checkout_id}/skip")
    assert again.status_code == 404
    assert stock_of(client, "2") == 78


def test_schedule_h_upload(client, tmp_path):
    checkout_id = client.post("/transactions/multi", json=sell(("9", 1, 85))).json()["checkoutId"]

    bad = client.post(f"/transactions/checkout/{checkout_id}/prescription",
                      files={"prescription": ("rx.txt", b"hello", "text/plain")})
    assert bad.status_code == 400
    assert client.get(f"/transactions/checkout/{checkout_id}").json()["state"] == "AwaitingPrescriptionDecision"

    res = client.post(f"/transactions/checkout/{checkout_id}/prescription",
                      files={"prescription": ("rx.png", b"\x89PNG fake", "image/png")})
    assert res.status_code == 201
    data = res.json()
    assert data["prescriptionSkipped"] is False
    assert data["transaction"]["prescriptionSkipped"] is False
    assert stock_of(client, "9") == 39
    assert os.path.exists(tmp_path / "prescriptions" / f"{checkout_id}.png")
    assert client.get(f"/transactions/checkout/{checkout_id}").status_code == 404


def test_unknown_checkout(client):
    assert client.post("/transactions/checkout/nope/skip").status_code == 404
