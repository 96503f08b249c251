"""
test_routers_admin.py — Tests for admin endpoints

Called by: pytest
Depends on: solarquote/routers/admin.py, conftest.py
"""

import pytest


@pytest.mark.parametrize(
    "path", ["/api/admin/customers", "/api/admin/vendors", "/api/admin/requests",
             "/api/admin/quotations"],
)
def test_non_admin_forbidden(customer_client, path):
    assert customer_client.get(path).status_code == 403


def test_anonymous_unauthorized(client):
    assert client.get("/api/admin/customers").status_code == 401


def test_listings(admin_client, quotation, customer_user, vendor_user):
    assert admin_client.get("/api/admin/customers").json()["customers"][0]["id"] == customer_user.id
    assert admin_client.get("/api/admin/vendors").json()["vendors"][0]["id"] == vendor_user.id
    reqs = admin_client.get("/api/admin/requests").json()["requests"]
    assert reqs[0]["quotation_count"] == 1
    quotes = admin_client.get("/api/admin/quotations").json()["quotations"]
    assert quotes[0]["id"] == quotation.id


def test_listing_bad_status_filter_422(admin_client, quotation):
    resp = admin_client.get("/api/admin/requests", params={"status": "archived"})
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["field"] == "status"
    assert admin_client.get("/api/admin/quotations", params={"status": "bogus"}).status_code == 422
    in_progress = admin_client.get("/api/admin/requests", params={"status": "in_progress"})
    assert len(in_progress.json()["requests"]) == 1


def test_verify_vendor(admin_client, vendor_user):
    resp = admin_client.put(
        f"/api/admin/vendors/{vendor_user.id}/verification",
        json={"verification_status": "verified"},
    )
    assert resp.status_code == 200
    assert resp.json()["profile"]["verification_status"] == "verified"


def test_verify_bad_status_422(admin_client, vendor_user):
    resp = admin_client.put(
        f"/api/admin/vendors/{vendor_user.id}/verification",
        json={"verification_status": "maybe"},
    )
    assert resp.status_code == 422


def test_deactivate_user_blocks_access(admin_client, customer_client, customer_user):
    resp = admin_client.put(f"/api/admin/users/{customer_user.id}", json={"is_active": False})
    assert resp.json()["is_active"] is False
    assert customer_client.get("/api/requests").status_code == 401


def test_cannot_deactivate_self(admin_client, admin_user):
    resp = admin_client.put(f"/api/admin/users/{admin_user.id}", json={"is_active": False})
    assert resp.status_code == 422
    assert resp.json()["error"] == "Cannot deactivate yourself"


def test_admin_close_request(admin_client, quotation_request):
    resp = admin_client.post(f"/api/admin/requests/{quotation_request.id}/close")
    assert resp.json()["status"] == "closed"
