"""Fees, invoices and payments over HTTP"""

from decimal import Decimal

import pytest
from fastapi import status


def _invoice(school_data, *amounts: str, due_date: str = "2025-01-31"):
    return {
        "student_id": school_data["student_id"],
        "academic_year": "2024-2025",
        "items": [{"description": f"Item {i}", "amount": a} for i, a in enumerate(amounts, 1)],
        "due_date": due_date,
    }


@pytest.mark.asyncio
async def test_fee_structure_upsert(client, accountant_headers, school_data):
    payload = {
        "class_id": school_data["class_id"],
        "academic_year": "2024-2025",
        "tuition_fee": "900.00",
    }

    first = await client.post("/finance/fees/structures", json=payload, headers=accountant_headers)
    second = await client.post(
        "/finance/fees/structures",
        json={**payload, "transport_fee": "120.00"},
        headers=accountant_headers,
    )

    assert first.status_code == second.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    listing = await client.get("/finance/fees/structures", headers=accountant_headers)
    assert len(listing.json()) == 1
    assert Decimal(listing.json()[0]["transport_fee"]) == Decimal("120")


@pytest.mark.asyncio
async def test_negative_fee_rejected(client, accountant_headers, school_data):
    response = await client.post(
        "/finance/fees/structures",
        json={"class_id": school_data["class_id"], "academic_year": "2024-2025", "meals_fee": "-1"},
        headers=accountant_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_invoice_payment_flow(client, accountant_headers, accountant_user, school_data):
    invoice = (
        await client.post(
            "/finance/invoices",
            json=_invoice(school_data, "300.00", "200.00"),
            headers=accountant_headers,
        )
    ).json()
    assert Decimal(invoice["total_amount"]) == Decimal("500")

    partial = await client.post(
        "/finance/payments",
        json={
            "invoice_id": invoice["id"],
            "amount": "150.00",
            "payment_date": "2025-01-05",
            "method": "Bank Transfer",
            "transaction_id": "TX-1001",
        },
        headers=accountant_headers,
    )
    assert partial.status_code == status.HTTP_201_CREATED
    assert partial.json()["recorded_by"] == accountant_user.id

    after_partial = (
        await client.get(f"/finance/invoices/{invoice['id']}", headers=accountant_headers)
    ).json()
    assert after_partial["status"] == "Partially Paid"
    assert Decimal(after_partial["balance"]) == Decimal("350")

    over = await client.post(
        "/finance/payments",
        json={"invoice_id": invoice["id"], "amount": "400.00", "payment_date": "2025-01-06", "method": "Cash"},
        headers=accountant_headers,
    )
    assert over.status_code == status.HTTP_400_BAD_REQUEST
    assert over.json()["details"]["errors"][0]["field"] == "amount"

    rest = await client.post(
        "/finance/payments",
        json={"invoice_id": invoice["id"], "amount": "350.00", "payment_date": "2025-01-06", "method": "Cash"},
        headers=accountant_headers,
    )
    assert rest.status_code == status.HTTP_201_CREATED

    paid = (
        await client.get("/finance/invoices", params={"status": "Paid"}, headers=accountant_headers)
    ).json()
    assert [i["id"] for i in paid] == [invoice["id"]]

    payments = await client.get(
        "/finance/payments", params={"invoice_id": invoice["id"]}, headers=accountant_headers
    )
    assert len(payments.json()) == 2

    blocked = await client.delete(f"/finance/invoices/{invoice['id']}", headers=accountant_headers)
    assert blocked.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_invoice_needs_items(client, accountant_headers, school_data):
    response = await client.post(
        "/finance/invoices", json=_invoice(school_data), headers=accountant_headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_unpaid_invoice_can_be_deleted(client, accountant_headers, school_data):
    invoice = (
        await client.post(
            "/finance/invoices", json=_invoice(school_data, "75.00"), headers=accountant_headers
        )
    ).json()

    deleted = await client.delete(f"/finance/invoices/{invoice['id']}", headers=accountant_headers)

    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    missing = await client.get(f"/finance/invoices/{invoice['id']}", headers=accountant_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_mark_overdue_endpoint(client, accountant_headers, school_data):
    await client.post(
        "/finance/invoices",
        json=_invoice(school_data, "10.00", due_date="2000-01-01"),
        headers=accountant_headers,
    )
    await client.post(
        "/finance/invoices",
        json=_invoice(school_data, "10.00", due_date="2999-01-01"),
        headers=accountant_headers,
    )

    response = await client.post("/finance/invoices/mark-overdue", headers=accountant_headers)

    assert response.status_code == 200
    assert response.json() == {"updated": 1}
