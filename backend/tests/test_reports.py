from datetime import datetime

import pytest

from app.models import Order, OrderStatus, Transaction
from app.services import InvalidStateError, ReportService
from app.services.reports import csv_cell, parse_report_date


@pytest.fixture
def payments(db):
    """Three paid orders over two days plus one in the next month."""
    rows = [
        ("QA1", 300.0, datetime(2024, 5, 1, 9, 0)),
        ("QA2", 200.5, datetime(2024, 5, 1, 18, 45)),
        ("QA3", 1000.0, datetime(2024, 5, 2, 23, 59, 30)),
        ("QA4", 50.0, datetime(2024, 6, 10, 12, 0)),
    ]
    for receipt, amount, when in rows:
        order = Order(total_amount=amount, status=OrderStatus.PAID)
        db.add(order)
        db.flush()
        db.add(Transaction(
            order_id=order.id,
            mpesa_receipt=receipt,
            amount=amount,
            phone_number="254712345678",
            transaction_date=when
        ))
    db.commit()
    return rows


def test_parse_report_date():
    assert parse_report_date("2024-05-02") == datetime(2024, 5, 2)
    assert parse_report_date("2024-05-02", end_of_day=True).hour == 23
    assert parse_report_date(None) is None
    with pytest.raises(InvalidStateError):
        parse_report_date("02/05/2024")


def test_financials_chart_groups_by_day(client, admin_headers, payments):
    r = client.get("/api/financials", headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["totalRevenue"] == pytest.approx(1550.5)
    assert len(body["transactions"]) == 4
    assert body["transactions"][0]["mpesaReceipt"] == "QA1"
    assert body["chartData"] == [
        {"date": "2024-05-01", "revenue": 500.5},
        {"date": "2024-05-02", "revenue": 1000.0},
        {"date": "2024-06-10", "revenue": 50.0},
    ]


def test_financial_report_range_is_inclusive(client, admin_headers, payments):
    r = client.get(
        "/api/reports/financials",
        params={"startDate": "2024-05-01", "endDate": "2024-05-02"},
        headers=admin_headers
    )
    assert r.status_code == 200
    body = r.json()
    assert body["period"] == "2024-05-01 to 2024-05-02"
    assert body["totalRevenue"] == pytest.approx(1500.5)
    assert [t["mpesaReceipt"] for t in body["transactions"]] == ["QA1", "QA2", "QA3"]
    assert body["transactions"][2]["date"] == "2024-05-02"


def test_financial_report_open_range(db, payments):
    report = ReportService(db).financial_report(start_date="2024-06-01")
    assert report.period == "2024-06-01 to now"
    assert report.total_revenue == 50.0

    empty = ReportService(db).financial_report(end_date="2020-01-01")
    assert empty.period == "beginning to 2020-01-01"
    assert empty.transactions == []
    assert empty.total_revenue == 0.0


def test_financial_report_rejects_bad_range(client, admin_headers):
    r = client.get(
        "/api/reports/financials",
        params={"startDate": "2024-05-03", "endDate": "2024-05-01"},
        headers=admin_headers
    )
    assert r.status_code == 400
    bad = client.get("/api/reports/financials", params={"startDate": "yesterday"}, headers=admin_headers)
    assert bad.status_code == 400


def test_financial_report_csv(client, admin_headers, payments):
    r = client.get(
        "/api/reports/financials",
        params={"startDate": "2024-05-01", "endDate": "2024-05-01", "format": "csv"},
        headers=admin_headers
    )
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"financial_report_" in r.headers["content-disposition"]
    assert r.text.splitlines() == [
        "Period,Total Revenue",
        "2024-05-01 to 2024-05-01,500.50",
        "",
        "Date,Mpesa Receipt,Order ID,Amount",
        "2024-05-01,QA1,1,300.00",
        "2024-05-01,QA2,2,200.50",
    ]


def test_inventory_report_json_and_csv(client, admin_headers, products):
    rows = client.get("/api/reports/inventory", headers=admin_headers).json()
    assert [r["name"] for r in rows][0] == "Green Bell Peppers"
    assert rows[0]["category"] == "Vegetables"
    assert rows[0]["stockQuantity"] == 60

    r = client.get("/api/reports/inventory", params={"format": "csv"}, headers=admin_headers)
    lines = r.text.splitlines()
    assert lines[0] == "id,name,category,price,stockQuantity,inStock"
    assert len(lines) == 6
    assert '"Green Bell Peppers","Vegetables"' in lines[1]
    assert lines[1].endswith('"Green Bell Peppers","Vegetables",180,60,true')


def test_inventory_report_csv_empty(client, admin_headers):
    r = client.get("/api/reports/inventory", params={"format": "csv"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.text == "No data available"


def test_csv_cell_formatting():
    assert csv_cell("Kale") == '"Kale"'
    assert csv_cell(180.0) == "180"
    assert csv_cell(99.5) == "99.5"
    assert csv_cell(0) == "0"
    assert csv_cell(True) == "true"
    assert csv_cell(False) == "false"


def test_reports_require_admin(client, auth_headers):
    assert client.get("/api/financials", headers=auth_headers).status_code == 403
    assert client.get("/api/reports/inventory", headers=auth_headers).status_code == 403
