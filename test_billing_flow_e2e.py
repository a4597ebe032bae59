# test_billing_flow_e2e.py
from datetime import datetime, timedelta, timezone
import pytest

def jprint(step, r):
    """Helper to print response and assert on failure."""
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json() if r.headers.get("content-type","").startswith("application/json") else r.text

def _window(days_back=1, days_ahead=1):
    now = datetime.now(timezone.utc)
    return (now - timedelta(days=days_back)).isoformat(), (now + timedelta(days=days_ahead)).isoformat()

def _offer_body(name, **kw):
    start, end = _window()
    body = {
        "name": name, "description": "test offer", "offer_type": "percentage",
        "discount_value": 10, "min_order_amount": 0, "start_date": start, "end_date": end,
    }
    body.update(kw)
    return body


def test_billing_settings_flow(client, base_url, auth_headers, tax_settings):
    # ===== 1. Defaults are readable without auth =====
    s = jprint("GET /billing/settings", client.get(f"{base_url}/billing/settings"))
    assert s["cgst_rate"] == 2.5 and s["sgst_rate"] == 2.5
    assert s["tax_calculation_method"] == "onSubtotal"

    # ===== 2. Writes need an admin =====
    r = client.put(f"{base_url}/billing/settings", json={"cgst_rate": 6})
    assert r.status_code == 401
    r = client.put(f"{base_url}/billing/settings", headers={"Authorization": "Bearer nope"}, json={"cgst_rate": 6})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid or expired token"

    # ===== 3. Range checks =====
    for body, msg in [
        ({"cgst_rate": -1}, "CGST rate must be between 0 and 100"),
        ({"sgst_rate": 101}, "SGST rate must be between 0 and 100"),
        ({"tax_calculation_method": "onTotal"}, "Invalid tax calculation method"),
    ]:
        r = client.put(f"{base_url}/billing/settings", headers=auth_headers, json=body)
        assert r.status_code == 400, r.text
        assert r.json()["detail"] == msg

    # ===== 4. Partial update keeps the other fields =====
    updated = tax_settings(cgst_rate=9)
    assert updated["cgst_rate"] == 9 and updated["sgst_rate"] == 2.5
    assert updated["updated_by"] == "admin@cafe.local"

    updated = tax_settings(tax_calculation_method="onDiscountedSubtotal")
    assert updated["cgst_rate"] == 9
    assert updated["tax_calculation_method"] == "onDiscountedSubtotal"

    s = jprint("GET /billing/settings", client.get(f"{base_url}/billing/settings"))
    assert s["id"] == updated["id"]


def test_calculate_preview_follows_settings(client, base_url, auth_headers, tax_settings):
    body = {"subtotal": 1000, "items": [{"item_id": "x", "category": "Coffee", "quantity": 1, "price": 1000}],
            "discount_type": "percentage", "discount_value": 10}

    b = jprint("POST /billing/calculate", client.post(f"{base_url}/billing/calculate", json=body))
    assert b["discounted_subtotal"] == 900
    assert b["tax"] == pytest.approx(50)
    assert b["total"] == 950

    tax_settings(tax_calculation_method="onDiscountedSubtotal")
    b = jprint("POST /billing/calculate", client.post(f"{base_url}/billing/calculate", json=body))
    assert b["tax"] == pytest.approx(45)
    assert b["total"] == 945

    r = client.post(f"{base_url}/billing/calculate", json={"subtotal": -5})
    assert r.status_code == 422


def test_daily_offer_flow(client, base_url, auth_headers, rng_suffix):
    # ===== 1. Validation =====
    r = client.post(f"{base_url}/billing/offers", json=_offer_body("no auth"))
    assert r.status_code == 401

    r = client.post(f"{base_url}/billing/offers", headers=auth_headers,
                    json=_offer_body("neg", discount_value=-5))
    assert r.status_code == 400
    assert r.json()["detail"] == "Discount value must be non-negative"

    r = client.post(f"{base_url}/billing/offers", headers=auth_headers,
                    json=_offer_body("too much", discount_value=120))
    assert r.status_code == 400
    assert r.json()["detail"] == "Percentage discount cannot exceed 100%"

    r = client.post(f"{base_url}/billing/offers", headers=auth_headers,
                    json=_offer_body("bad day", applicable_days=[7]))
    assert r.status_code == 422

    r = client.post(f"{base_url}/billing/offers", headers=auth_headers,
                    json=_offer_body("tea time", applicable_categories=["Tea"]))
    assert r.status_code == 422

    # ===== 2. Create =====
    r = client.post(f"{base_url}/billing/offers", headers=auth_headers, json=_offer_body(
        f"Shake Day {rng_suffix}", discount_value=20, max_discount_amount=50, min_order_amount=100,
        applicable_categories=["Shakes"], priority=5,
    ))
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["message"] == "Offer created successfully"
    offer = created["offer"]
    offer_id = offer["id"]
    assert offer["max_discount_amount"] == 50

    r = client.post(f"{base_url}/billing/offers", headers=auth_headers, json=_offer_body(
        f"Flat {rng_suffix}", offer_type="fixed", discount_value=30, max_discount_amount=0,
    ))
    flat = jprint("POST /billing/offers (fixed)", r)["offer"]
    assert flat["max_discount_amount"] is None  # 0 means no cap

    # ===== 3. Listing =====
    listed = jprint("GET /billing/offers", client.get(f"{base_url}/billing/offers"))
    assert {offer_id, flat["id"]} <= {o["id"] for o in listed}

    active = jprint("GET /billing/offers/active", client.get(f"{base_url}/billing/offers/active"))
    ids = [o["id"] for o in active]
    assert offer_id in ids and flat["id"] in ids
    assert ids.index(offer_id) < ids.index(flat["id"])

    # ===== 4. Preview with the offer =====
    shake = {"item_id": "shake", "category": "Shakes", "quantity": 2, "price": 250}
    b = jprint("POST /billing/calculate (offer)", client.post(f"{base_url}/billing/calculate", json={
        "subtotal": 500, "items": [shake], "applied_offer_id": offer_id,
    }))
    assert b["offer_discount_amount"] == 50
    assert b["applied_offer"]["id"] == offer_id
    assert b["total"] == 475

    coffee = {"item_id": "latte", "category": "Coffee", "quantity": 2, "price": 250}
    b = jprint("POST /billing/calculate (wrong category)", client.post(f"{base_url}/billing/calculate", json={
        "subtotal": 500, "items": [coffee], "applied_offer_id": offer_id,
    }))
    assert b["offer_discount_amount"] == 0
    assert b["applied_offer"] is None

    # ===== 5. Update =====
    r = client.put(f"{base_url}/billing/offers/{offer_id}", headers=auth_headers, json={"is_active": False})
    assert jprint("PUT /billing/offers/{id}", r)["offer"]["is_active"] is False
    active = jprint("GET /billing/offers/active", client.get(f"{base_url}/billing/offers/active"))
    assert offer_id not in {o["id"] for o in active}

    r = client.put(f"{base_url}/billing/offers/{offer_id}", headers=auth_headers, json={"discount_value": 150})
    assert r.status_code == 400

    # switching the type re-checks the stored value
    r = client.post(f"{base_url}/billing/offers", headers=auth_headers, json=_offer_body(
        f"Big Flat {rng_suffix}", offer_type="fixed", discount_value=150,
    ))
    big = jprint("POST /billing/offers (fixed 150)", r)["offer"]
    r = client.put(f"{base_url}/billing/offers/{big['id']}", headers=auth_headers, json={"offer_type": "percentage"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Percentage discount cannot exceed 100%"
    got = next(o for o in jprint("GET /billing/offers", client.get(f"{base_url}/billing/offers")) if o["id"] == big["id"])
    assert got["offer_type"] == "fixed" and got["discount_value"] == 150

    r = client.put(f"{base_url}/billing/offers/{big['id']}", headers=auth_headers,
                   json={"offer_type": "percentage", "discount_value": 15})
    assert jprint("PUT /billing/offers/{id} (to percentage)", r)["offer"]["discount_value"] == 15
    jprint("DELETE /billing/offers/{id}", client.delete(f"{base_url}/billing/offers/{big['id']}", headers=auth_headers))

    r = client.put(f"{base_url}/billing/offers/missing", headers=auth_headers, json={"name": "x"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Offer not found"

    # ===== 6. Delete =====
    jprint("DELETE /billing/offers/{id}", client.delete(f"{base_url}/billing/offers/{flat['id']}", headers=auth_headers))
    r = client.delete(f"{base_url}/billing/offers/{flat['id']}", headers=auth_headers)
    assert r.status_code == 404

    # ===== 7. Cleanup removes the switched-off offer =====
    start, end = _window(days_back=3, days_ahead=-1)
    r = client.post(f"{base_url}/billing/offers", headers=auth_headers,
                    json=_offer_body(f"Old {rng_suffix}", start_date=start, end_date=end))
    old_id = jprint("POST /billing/offers (expired)", r)["offer"]["id"]

    out = jprint("POST /billing/offers/cleanup", client.post(f"{base_url}/billing/offers/cleanup", headers=auth_headers))
    assert out["deleted"] >= 2
    assert out["inactive"] >= 1 and out["expired"] >= 1
    remaining = {o["id"] for o in jprint("GET /billing/offers", client.get(f"{base_url}/billing/offers"))}
    assert offer_id not in remaining and old_id not in remaining


def test_admin_auth(client, base_url, auth_headers):
    r = client.post(f"{base_url}/auth/login", json={"email": "admin@cafe.local", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"

    r = client.post(f"{base_url}/auth/change-password", headers=auth_headers,
                    params={"current_password": "admin1234", "new_password": "short"})
    assert r.status_code == 400

    r = client.post(f"{base_url}/auth/change-password",
                    params={"current_password": "admin1234", "new_password": "long-enough-pw"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Authorization token missing or malformed"
