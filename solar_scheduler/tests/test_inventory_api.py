from fastapi.testclient import TestClient

from solar_scheduler.main import app

client = TestClient(app)


def _auth_headers(company_id: int) -> dict:
    resp = client.post("/auth/token", json={"user_id": "test", "company_id": company_id})
    assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
    return {"X-Company-Id": str(company_id), "Authorization": f"Bearer {resp.json()['access_token']}"}


def _equipment(headers, **overrides) -> dict:
    payload = {
        "name": "String inverter 7.6kW",
        "category": "inverters",
        "brand": "Voltaic",
        "model": "SI-7600",
        "quantity": 12,
        "unit_price": 1450.0,
        "low_stock_threshold": 4,
    }
    payload.update(overrides)
    resp = client.post("/equipment", headers=headers, json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_equipment_stock_adjustments_floor_at_zero():
    headers = _auth_headers(15001)
    item = _equipment(headers)
    assert item["total_value"] == 12 * 1450.0
    assert item["is_low_stock"] is False

    down = client.post(f"/equipment/{item['id']}/adjust_stock", headers=headers, json={"delta": -9})
    assert down.status_code == 200
    assert down.json()["quantity"] == 3
    assert down.json()["is_low_stock"] is True

    floor = client.post(f"/equipment/{item['id']}/adjust_stock", headers=headers, json={"delta": -50})
    assert floor.json()["quantity"] == 0
    assert floor.json()["is_out_of_stock"] is True


def test_equipment_quantity_must_not_go_negative():
    headers = _auth_headers(15001)
    item = _equipment(headers)

    resp = client.post(f"/equipment/{item['id']}/quantity", headers=headers, json={"quantity": -1})
    assert resp.status_code == 422

    resp = client.post(f"/equipment/{item['id']}/quantity", headers=headers, json={"quantity": 30})
    assert resp.status_code == 200
    assert resp.json()["quantity"] == 30


def test_equipment_legacy_category_label_and_filters():
    headers = _auth_headers(15001)
    panel = _equipment(headers, name="Panel 410W", category="Solar Panels", quantity=2, low_stock_threshold=5)
    _equipment(headers, name="Rail kit", category="mounting", quantity=80)

    assert panel["category"] == "solar_panels"

    low = client.get("/equipment", headers=headers, params={"low_stock_only": True}).json()
    assert [e["name"] for e in low] == ["Panel 410W"]

    mounting = client.get("/equipment", headers=headers, params={"category": "mounting"}).json()
    assert [e["name"] for e in mounting] == ["Rail kit"]

    by_price = client.get("/equipment", headers=headers, params={"sort_by": "unit_price", "ascending": True}).json()
    assert len(by_price) == 2


def test_vendor_rating_clamped_and_specialties_unique():
    headers = _auth_headers(15001)
    resp = client.post(
        "/vendors",
        headers=headers,
        json={"name": "Brightline Electric", "specialties": ["electrical", "electrical"], "rating": 7.5},
    )
    assert resp.status_code == 200, resp.text
    vendor = resp.json()
    assert vendor["rating"] == 5.0
    assert vendor["specialties"] == ["electrical"]

    rated = client.post(f"/vendors/{vendor['id']}/rating", headers=headers, json={"rating": -2})
    assert rated.json()["rating"] == 0.0

    added = client.post(f"/vendors/{vendor['id']}/specialties", headers=headers, json={"specialty": "inspection"})
    assert added.json()["specialties"] == ["electrical", "inspection"]

    again = client.post(f"/vendors/{vendor['id']}/specialties", headers=headers, json={"specialty": "inspection"})
    assert again.json()["specialties"] == ["electrical", "inspection"]

    removed = client.delete(f"/vendors/{vendor['id']}/specialties/electrical", headers=headers)
    assert removed.json()["specialties"] == ["inspection"]

    unknown = client.post(f"/vendors/{vendor['id']}/specialties", headers=headers, json={"specialty": "plumbing"})
    assert unknown.status_code == 422


def test_vendor_filters_and_delete_detaches_installations():
    headers = _auth_headers(15001)
    roofer = client.post(
        "/vendors", headers=headers, json={"name": "Peak Roofing", "specialties": ["roofing"], "rating": 4.5}
    ).json()
    client.post("/vendors", headers=headers, json={"name": "Ace Cleanup", "specialties": ["cleanup"], "rating": 3.0})

    roofing = client.get("/vendors", headers=headers, params={"specialty": "roofing"}).json()
    assert [v["name"] for v in roofing] == ["Peak Roofing"]

    top = client.get("/vendors", headers=headers, params={"min_rating": 4}).json()
    assert [v["name"] for v in top] == ["Peak Roofing"]

    installation = client.post(
        "/installations",
        headers=headers,
        json={"vendor_id": roofer["id"], "scheduled_date": "2030-02-02T09:00:00"},
    ).json()

    resp = client.delete(f"/vendors/{roofer['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["detached"] == {"installations": 1}

    survivor = client.get(f"/installations/{installation['id']}", headers=headers)
    assert survivor.status_code == 200
    assert survivor.json()["vendor_id"] is None


def test_equipment_reorder_defaults_to_twice_the_threshold():
    headers = _auth_headers(15001)
    item = _equipment(headers, quantity=2, low_stock_threshold=4)

    default = client.post(f"/equipment/{item['id']}/reorder", headers=headers)
    assert default.status_code == 200
    assert default.json()["quantity"] == 10
    assert default.json()["is_low_stock"] is False

    explicit = client.post(f"/equipment/{item['id']}/reorder", headers=headers, json={"quantity": 5})
    assert explicit.json()["quantity"] == 15

    negative = client.post(f"/equipment/{item['id']}/reorder", headers=headers, json={"quantity": -1})
    assert negative.status_code == 422
    assert client.get(f"/equipment/{item['id']}", headers=headers).json()["quantity"] == 15
