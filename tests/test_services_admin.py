"""
test_services_admin.py — Tests for admin oversight operations

Called by: pytest
Depends on: solarquote/services/admin_service.py, conftest.py
"""

import pytest

from solarquote.errors import NotFound, ValidationFailed
from solarquote.models import Notification
from solarquote.services import admin_service


class TestUsers:
    def test_list_customers(self, db_session, customer_user, vendor_user):
        rows = admin_service.list_customers(db_session)
        assert [r["email"] for r in rows] == [customer_user.email]
        assert rows[0]["profile"]["first_name"] == "Casey"

    def test_list_vendors_filter(self, db_session, vendor_user, second_vendor, admin_user):
        admin_service.set_vendor_verification(db_session, vendor_user.id, "verified", admin_user)
        verified = admin_service.list_vendors(db_session, "verified")
        assert [r["id"] for r in verified] == [vendor_user.id]
        assert len(admin_service.list_vendors(db_session)) == 2

    def test_list_vendors_bad_filter(self, db_session):
        with pytest.raises(ValidationFailed):
            admin_service.list_vendors(db_session, "maybe")

    def test_set_verification_notifies_vendor(self, db_session, vendor_user, admin_user):
        row = admin_service.set_vendor_verification(db_session, vendor_user.id, "rejected", admin_user)
        assert row["profile"]["verification_status"] == "rejected"
        n = db_session.query(Notification).filter_by(user_id=vendor_user.id).one()
        assert "rejected" in n.message

    def test_same_verification_no_notification(self, db_session, vendor_user, admin_user):
        admin_service.set_vendor_verification(db_session, vendor_user.id, "pending", admin_user)
        assert db_session.query(Notification).count() == 0

    def test_verification_on_customer_not_found(self, db_session, customer_user, admin_user):
        with pytest.raises(NotFound):
            admin_service.set_vendor_verification(db_session, customer_user.id, "verified", admin_user)

    def test_deactivate_user(self, db_session, customer_user, admin_user):
        row = admin_service.set_user_active(db_session, customer_user.id, False, admin_user)
        assert row["is_active"] is False

    def test_cannot_deactivate_self(self, db_session, admin_user):
        with pytest.raises(ValidationFailed, match="yourself"):
            admin_service.set_user_active(db_session, admin_user.id, False, admin_user)

    def test_missing_user(self, db_session, admin_user):
        with pytest.raises(NotFound):
            admin_service.set_user_active(db_session, 999, True, admin_user)


class TestListings:
    def test_requests_with_counts(self, db_session, quotation, quotation_request, customer_user):
        rows = admin_service.list_requests(db_session)
        assert rows[0]["quotation_count"] == 1
        assert rows[0]["customer_email"] == customer_user.email
        assert admin_service.list_requests(db_session, "closed") == []

    def test_requests_unknown_status_filter(self, db_session):
        with pytest.raises(ValidationFailed) as exc:
            admin_service.list_requests(db_session, "pending")
        assert exc.value.field == "status"

    def test_quotations(self, db_session, quotation):
        assert [q["id"] for q in admin_service.list_quotations(db_session)] == [quotation.id]

    def test_quotations_status_filter(self, db_session, quotation):
        assert [q["id"] for q in admin_service.list_quotations(db_session, "submitted")] == [quotation.id]
        assert admin_service.list_quotations(db_session, "accepted") == []
        with pytest.raises(ValidationFailed):
            admin_service.list_quotations(db_session, "open")

    def test_marketplace_counts(self, db_session, quotation, admin_user):
        stats = admin_service.marketplace_counts(db_session)
        assert stats["customers"] == 1
        assert stats["vendors"] == 1
        assert stats["admins"] == 1
        assert stats["requests"] == 1
        assert stats["requests_by_status"]["in_progress"] == 1
        assert stats["quotations"] == 1
