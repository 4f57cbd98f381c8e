"""HTTP tests for the document endpoints."""
from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient


def _invoice_body(seed: dict[str, Any], **overrides: Any) -> dict[str, Any]:
    body = {
        "van_id": str(seed["van_id"]),
        "customer_id": str(seed["customer_id"]),
        "invoice_date": "2026-10-18",
        "payment_mode": "credit",
        "paid_amount": "50",
        "items": [
            {"item_id": str(seed["juice"]["id"]), "quantity": "2", "unit_price": "100",
             "discount_percent": "10", "tax_percent": "5"},
            {"item_id": str(seed["water"]["id"]), "quantity": "3", "unit_price": "10.005",
             "discount_percent": "10", "tax_percent": "5"},
        ],
    }
    body.update(overrides)
    return body


# ── Invoices ─────────────────────────────────────────────────────────────


def test_create_and_fetch_invoice(client: TestClient, seed: dict[str, Any]) -> None:
    resp = client.post("/api/v1/invoices", json=_invoice_body(seed))
    assert resp.status_code == 201
    data = resp.json()
    assert data["invoice_number"] == "INV-261018-000001"
    assert data["total_amount"] == "217.364"
    assert data["balance_amount"] == "167.364"
    assert data["payment_status"] == "partial"
    assert len(data["items"]) == 2

    resp = client.get(f"/api/v1/invoices/{data['id']}")
    assert resp.status_code == 200
    assert resp.json()["items"][1]["line_total"] == "28.364"

    resp = client.get("/api/v1/invoices", params={"customer_id": str(seed["customer_id"])})
    assert [inv["id"] for inv in resp.json()] == [data["id"]]


def test_invalid_invoice_is_400_with_kind(client: TestClient, seed: dict[str, Any]) -> None:
    body = _invoice_body(seed)
    body["items"][1]["quantity"] = "0"
    resp = client.post("/api/v1/invoices", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "InvalidLineItem"
    assert client.get("/api/v1/invoices").json() == []

    resp = client.post("/api/v1/invoices", json=_invoice_body(seed, customer_id=None))
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "MissingParty"

    resp = client.post("/api/v1/invoices", json=_invoice_body(seed, items=[]))
    assert resp.json()["detail"]["kind"] == "EmptyDocument"

    body = _invoice_body(seed)
    body["items"][0].update(quantity="1e13", unit_price="1e13")
    resp = client.post("/api/v1/invoices", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "InvalidLineItem"


def test_update_invoice(client: TestClient, seed: dict[str, Any]) -> None:
    created = client.post("/api/v1/invoices", json=_invoice_body(seed)).json()

    resp = client.put(
        f"/api/v1/invoices/{created['id']}",
        json={"items": [{"item_id": str(seed["milk"]["id"]), "quantity": "4",
                         "unit_price": "2.5", "tax_percent": "10"}],
              "paid_amount": "11"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_amount"] == "11.000"
    assert data["payment_status"] == "paid"
    assert len(data["items"]) == 1

    resp = client.put(f"/api/v1/invoices/{created['id']}", json={"total_amount": "1"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "ProtectedField"


def test_missing_invoice_is_404(client: TestClient, seed: dict[str, Any]) -> None:
    resp = client.get("/api/v1/invoices/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "NotFound"
    assert client.get("/api/v1/invoices/garbage").status_code == 404


def test_open_invoices_pdf_and_share_text(client: TestClient, seed: dict[str, Any]) -> None:
    created = client.post("/api/v1/invoices", json=_invoice_body(seed)).json()

    resp = client.get("/api/v1/invoices/open", params={"customer_id": str(seed["customer_id"])})
    assert [inv["id"] for inv in resp.json()] == [created["id"]]

    resp = client.get(f"/api/v1/invoices/{created['id']}/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "INV-261018-000001.pdf" in resp.headers["content-disposition"]
    assert resp.content[:5] == b"%PDF-"

    resp = client.get(f"/api/v1/invoices/{created['id']}/share-text")
    assert "TOTAL: 217.364 BHD" in resp.json()["text"]


# ── Returns and receipts ─────────────────────────────────────────────────


def test_return_round_trip(client: TestClient, seed: dict[str, Any]) -> None:
    body = {
        "van_id": str(seed["van_id"]),
        "customer_id": str(seed["customer_id"]),
        "return_date": "2026-10-18",
        "return_type": "damage",
        "reason": "Leaking",
        "items": [{"item_id": str(seed["milk"]["id"]), "quantity": "2", "unit_price": "2.5"}],
    }
    resp = client.post("/api/v1/returns", json=body)
    assert resp.status_code == 201
    created = resp.json()
    assert created["return_number"] == "RET-261018-000001"
    assert created["total_amount"] == "5.000"

    resp = client.put(f"/api/v1/returns/{created['id']}", json={"reason": ""})
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "MissingReason"

    resp = client.get(f"/api/v1/returns/{created['id']}/pdf")
    assert resp.content[:5] == b"%PDF-"
    assert len(client.get("/api/v1/returns").json()) == 1


def test_receipt_round_trip(client: TestClient, seed: dict[str, Any]) -> None:
    invoice = client.post("/api/v1/invoices", json=_invoice_body(seed)).json()
    body = {
        "van_id": str(seed["van_id"]),
        "customer_id": str(seed["customer_id"]),
        "invoice_id": invoice["id"],
        "receipt_date": "2026-10-18",
        "amount": "100",
        "payment_mode": "cheque",
    }
    resp = client.post("/api/v1/receipts", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "MissingReference"

    resp = client.post("/api/v1/receipts", json={**body, "reference_number": "CHQ-1"})
    assert resp.status_code == 201
    receipt = resp.json()
    assert receipt["receipt_number"] == "RCP-261018-000001"
    assert receipt["amount"] == "100.000"

    resp = client.put(f"/api/v1/receipts/{receipt['id']}", json={"amount": "90"})
    assert resp.json()["amount"] == "90.000"

    unchanged = client.get(f"/api/v1/invoices/{invoice['id']}").json()
    assert unchanged["balance_amount"] == "167.364"
    assert [r["id"] for r in client.get("/api/v1/receipts").json()] == [receipt["id"]]


# ── Catalog ──────────────────────────────────────────────────────────────


def test_catalog_search(client: TestClient, seed: dict[str, Any]) -> None:
    items = client.get("/api/v1/catalog/items", params={"q": "juice"}).json()
    assert [i["code"] for i in items] == ["JUICE1L"]
    assert items[0]["tax_percent"] == "5"

    customers = client.get("/api/v1/catalog/customers", params={"q": "ali"}).json()
    assert [c["code"] for c in customers] == ["C001"]


def test_price_catalog_line(client: TestClient, seed: dict[str, Any]) -> None:
    url = f"/api/v1/catalog/items/{seed['juice']['id']}/line"
    resp = client.get(url, params={"quantity": "2", "discount_percent": "10"})
    assert resp.status_code == 200
    line = resp.json()
    assert line["unit_price"] == "100.000"
    assert line["tax_percent"] == "5.000"
    assert line["line_total"] == "189.000"

    resp = client.get(url, params={"quantity": "0"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "InvalidLineItem"

    resp = client.get(f"/api/v1/catalog/items/{seed['van_id']}/line")
    assert resp.status_code == 404
