import csv
import io

from fastapi.testclient import TestClient

from solar_scheduler.main import app

client = TestClient(app)


def _auth_headers(company_id: int) -> dict:
    resp = client.post("/auth/token", json={"user_id": "test", "company_id": company_id})
    assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
    return {"X-Company-Id": str(company_id), "Authorization": f"Bearer {resp.json()['access_token']}"}


def _rows(text: str) -> list:
    return list(csv.reader(io.StringIO(text)))


def _seed(headers) -> dict:
    customer = client.post(
        "/customers",
        headers=headers,
        json={
            "name": "Rowan Ellis",
            "email": "rowan@example.com",
            "phone": "555-777-1000",
            "address": "41 Meridian Rd, Las Cruces NM",
        },
    ).json()
    job = client.post(
        "/jobs",
        headers=headers,
        json={
            "customer_id": customer["id"],
            "system_size": 9.5,
            "estimated_revenue": 24000.0,
            "notes": "South-facing, \"steep\" roof",
        },
    ).json()
    item = client.post(
        "/equipment",
        headers=headers,
        json={
            "name": "Rail kit",
            "category": "mounting",
            "brand": "Ironridge",
            "model": "XR100",
            "quantity": 2,
            "unit_price": 50.0,
            "low_stock_threshold": 3,
        },
    ).json()
    client.post("/installations", headers=headers, json={"scheduled_date": "2030-06-10T07:30:00"})
    return {"customer": customer, "job": job, "item": item}


def test_jobs_csv_export_is_a_download_with_quoted_fields():
    headers = _auth_headers(18001)
    _seed(headers)

    resp = client.get("/exports/jobs", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"].startswith("attachment; filename=solar_jobs_")
    assert resp.headers["content-disposition"].endswith(".csv")

    rows = _rows(resp.text)
    assert rows[0] == [
        "Customer Name", "Address", "System Size (kW)", "Status",
        "Created Date", "Scheduled Date", "Estimated Revenue", "Notes",
    ]
    assert len(rows) == 2
    assert rows[1][0] == "Rowan Ellis"
    assert rows[1][1] == "41 Meridian Rd, Las Cruces NM"
    assert rows[1][3] == "pending"
    assert rows[1][7] == "South-facing, \"steep\" roof"


def test_jobs_export_can_leave_out_notes():
    headers = _auth_headers(18001)
    _seed(headers)

    body = client.get("/exports/jobs", headers=headers, params={"format": "json", "include_details": False}).json()
    assert len(body) == 1
    assert body[0]["customer_name"] == "Rowan Ellis"
    assert "notes" not in body[0]


def test_customers_export_carries_job_totals():
    headers = _auth_headers(18001)
    _seed(headers)

    rows = _rows(client.get("/exports/customers", headers=headers).text)
    assert rows[0][-2:] == ["Total Jobs", "Total Revenue"]
    assert rows[1][0] == "Rowan Ellis"
    assert rows[1][6:] == ["1", "24000.0"]

    txt = client.get("/exports/customers", headers=headers, params={"format": "txt"})
    assert txt.headers["content-type"].startswith("text/plain")
    assert txt.text.startswith("CUSTOMERS REPORT\n")
    assert "Total Customers: 1" in txt.text
    assert "Total Revenue: $24000.00" in txt.text


def test_equipment_json_export():
    headers = _auth_headers(18001)
    seeded = _seed(headers)

    resp = client.get("/exports/equipment", headers=headers, params={"format": "json"})
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.headers["content-disposition"].endswith(".json")
    assert resp.json() == [
        {
            "id": seeded["item"]["id"],
            "name": "Rail kit",
            "category": "mounting",
            "brand": "Ironridge",
            "model": "XR100",
            "quantity": 2,
            "unit_price": 50.0,
            "low_stock_threshold": 3,
            "total_value": 100.0,
            "is_low_stock": True,
        }
    ]


def test_business_report_in_every_format():
    headers = _auth_headers(18001)
    _seed(headers)

    report = client.get("/exports/business_report", headers=headers, params={"format": "json"}).json()
    assert report["summary"] == {
        "total_jobs": 1,
        "total_customers": 1,
        "total_equipment_items": 1,
        "total_installations": 1,
    }
    assert report["job_statistics"]["pending_jobs"] == 1
    assert report["job_statistics"]["pending_revenue"] == 24000.0
    assert report["equipment_statistics"] == {"total_value": 100.0, "low_stock_items": 1, "out_of_stock_items": 0}

    rows = dict(_rows(client.get("/exports/business_report", headers=headers).text)[1:])
    assert rows["Total Jobs"] == "1"
    assert rows["Low Stock Items"] == "1"

    txt = client.get("/exports/business_report", headers=headers, params={"format": "txt"}).text
    for heading in ("BUSINESS REPORT", "SUMMARY", "JOB STATISTICS", "EQUIPMENT STATISTICS"):
        assert heading in txt


def test_exports_are_scoped_to_company():
    _seed(_auth_headers(18001))

    rows = _rows(client.get("/exports/jobs", headers=_auth_headers(18002)).text)
    assert len(rows) == 1

    report = client.get("/exports/business_report", headers=_auth_headers(18002), params={"format": "json"}).json()
    assert report["summary"]["total_jobs"] == 0


def test_unsupported_export_format_is_rejected():
    resp = client.get("/exports/jobs", headers=_auth_headers(18001), params={"format": "pdf"})
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["field"] == "format"
