"""
test_services_quotation.py — Tests for the request/quotation lifecycle service

Covers request creation, quotation submission (duplicate guard, atomic
open → in_progress), viewing, accept/reject and closing.

Called by: pytest
Depends on: solarquote/services/quotation_service.py, conftest.py
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from solarquote.errors import (
    Conflict,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    ValidationFailed,
)
from solarquote.models import Notification, QuotationRequest, VendorQuotation
from solarquote.services import quotation_service as svc
from conftest import make_quotation, make_request, make_vendor


def _submit(db, vendor, req, price="9800.00", warranty="10 years"):
    return svc.submit_quotation(db, vendor, req.id, price, "6 weeks", warranty)


# ── create_request ───────────────────────────────────────────────────


class TestCreateRequest:
    def test_creates_open_request(self, db_session, customer_user):
        req = svc.create_request(db_session, customer_user, " 7 Solar Ave ", 20, "250.75", "roof")
        assert req.status == "open"
        assert req.address == "7 Solar Ave"
        assert req.monthly_bill == Decimal("250.75")

    def test_notifies_active_vendors(self, db_session, customer_user, vendor_user, second_vendor):
        second_vendor.is_active = False
        db_session.commit()
        req = svc.create_request(db_session, customer_user, "7 Solar Ave", 20, 250)
        notes = db_session.query(Notification).filter_by(notification_type="new_request").all()
        assert [n.user_id for n in notes] == [vendor_user.id]
        assert notes[0].related_id == req.id
        assert "$250.00" in notes[0].message

    @pytest.mark.parametrize(
        "address,devices,bill,field",
        [
            ("   ", 3, 100, "address"),
            ("1 Road", 0, 100, "device_count"),
            ("1 Road", 3, 0, "monthly_bill"),
            ("1 Road", 3, "-5", "monthly_bill"),
            ("1 Road", 3, "lots", "monthly_bill"),
        ],
    )
    def test_validation(self, db_session, customer_user, address, devices, bill, field):
        with pytest.raises(ValidationFailed) as exc:
            svc.create_request(db_session, customer_user, address, devices, bill)
        assert exc.value.field == field
        assert db_session.query(QuotationRequest).count() == 0

    def test_notification_failure_does_not_undo_request(self, db_session, customer_user, vendor_user):
        with patch(
            "solarquote.services.notification_service.Notification",
            side_effect=OperationalError("INSERT", {}, Exception("boom")),
        ):
            req = svc.create_request(db_session, customer_user, "1 Road", 3, 100)
        assert db_session.get(QuotationRequest, req.id) is not None


# ── submit_quotation ─────────────────────────────────────────────────


class TestSubmitQuotation:
    def test_first_quotation_moves_request_in_progress(self, db_session, quotation_request, vendor_user):
        q = _submit(db_session, vendor_user, quotation_request)
        assert q.status == "submitted"
        db_session.refresh(quotation_request)
        assert quotation_request.status == "in_progress"

    def test_second_vendor_leaves_in_progress(
        self, db_session, quotation_request, vendor_user, second_vendor
    ):
        _submit(db_session, vendor_user, quotation_request)
        _submit(db_session, second_vendor, quotation_request, price="9100")
        db_session.refresh(quotation_request)
        assert quotation_request.status == "in_progress"
        assert db_session.query(VendorQuotation).count() == 2

    def test_duplicate_is_conflict(self, db_session, quotation_request, vendor_user):
        _submit(db_session, vendor_user, quotation_request)
        with pytest.raises(Conflict, match="already submitted"):
            _submit(db_session, vendor_user, quotation_request, price="1")
        assert db_session.query(VendorQuotation).count() == 1

    def test_duplicate_caught_by_unique_constraint(self, db_session, quotation_request, vendor_user):
        """Two submissions racing past the pre-check: storage rejects the second."""
        _submit(db_session, vendor_user, quotation_request)
        with patch.object(svc, "_existing_quotation", return_value=None):
            with pytest.raises(Conflict):
                _submit(db_session, vendor_user, quotation_request, price="1")
        assert db_session.query(VendorQuotation).count() == 1

    def test_missing_request(self, db_session, vendor_user):
        with pytest.raises(NotFound):
            svc.submit_quotation(db_session, vendor_user, 9999, 100, "1 week", "5 years")

    def test_closed_request_rejected(self, db_session, customer_user, vendor_user):
        req = make_request(db_session, customer_user, status="closed")
        with pytest.raises(InvalidTransition):
            _submit(db_session, vendor_user, req)
        assert db_session.query(VendorQuotation).count() == 0

    def test_request_closed_after_precheck_rejected(self, db_session, quotation_request, vendor_user):
        """A close that lands between the pre-check and the insert wins."""
        def _close_meanwhile(db, request_id, vendor_id):
            db.query(QuotationRequest).filter(QuotationRequest.id == request_id).update(
                {QuotationRequest.status: "closed"}, synchronize_session=False
            )
            db.commit()
            return None

        with patch.object(svc, "_existing_quotation", side_effect=_close_meanwhile):
            with pytest.raises(InvalidTransition, match="closed"):
                _submit(db_session, vendor_user, quotation_request)
        assert db_session.query(VendorQuotation).count() == 0
        db_session.refresh(quotation_request)
        assert quotation_request.status == "closed"

    def test_non_positive_price(self, db_session, quotation_request, vendor_user):
        with pytest.raises(ValidationFailed):
            _submit(db_session, vendor_user, quotation_request, price="0")

    def test_blank_warranty(self, db_session, quotation_request, vendor_user):
        with pytest.raises(ValidationFailed):
            _submit(db_session, vendor_user, quotation_request, warranty="  ")

    def test_store_failure_rolls_back_both_writes(self, db_session, quotation_request, vendor_user):
        with patch.object(
            db_session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("down"))
        ):
            with pytest.raises(PersistenceFailure):
                _submit(db_session, vendor_user, quotation_request)
        assert db_session.query(VendorQuotation).count() == 0
        db_session.refresh(quotation_request)
        assert quotation_request.status == "open"

    def test_notifies_customer(self, db_session, quotation_request, vendor_user, customer_user):
        q = _submit(db_session, vendor_user, quotation_request)
        note = db_session.query(Notification).filter_by(user_id=customer_user.id).one()
        assert note.notification_type == "new_quotation"
        assert note.related_id == q.id
        assert "Bright Solar Ltd" in note.message


# ── viewing ──────────────────────────────────────────────────────────


class TestMarkViewed:
    def test_submitted_becomes_viewed(self, db_session, customer_user, quotation):
        assert svc.mark_viewed(db_session, customer_user, quotation.id).status == "viewed"

    def test_terminal_left_alone(self, db_session, customer_user, quotation):
        quotation.status = "rejected"
        db_session.commit()
        assert svc.mark_viewed(db_session, customer_user, quotation.id).status == "rejected"

    def test_closed_request_left_alone(self, db_session, customer_user, quotation, quotation_request):
        quotation_request.status = "closed"
        db_session.commit()
        assert svc.mark_viewed(db_session, customer_user, quotation.id).status == "submitted"

    def test_other_customer_not_found(self, db_session, other_customer, quotation):
        with pytest.raises(NotFound):
            svc.mark_viewed(db_session, other_customer, quotation.id)

    def test_mark_request_quotations_viewed(
        self, db_session, customer_user, quotation_request, quotation, second_vendor
    ):
        make_quotation(db_session, quotation_request, second_vendor, status="rejected")
        db_session.refresh(quotation_request)
        assert svc.mark_request_quotations_viewed(db_session, customer_user, quotation_request) == 1
        assert sorted(q.status for q in quotation_request.quotations) == ["rejected", "viewed"]


# ── accept / reject ──────────────────────────────────────────────────


class TestAcceptReject:
    def test_accept_closes_request(self, db_session, customer_user, quotation, quotation_request):
        q = svc.accept_quotation(db_session, customer_user, quotation.id)
        assert q.status == "accepted"
        assert quotation_request.status == "closed"
        assert quotation_request.closed_at is not None

    def test_accept_leaves_siblings(
        self, db_session, customer_user, quotation, quotation_request, second_vendor
    ):
        sibling = make_quotation(db_session, quotation_request, second_vendor, price="9000")
        svc.accept_quotation(db_session, customer_user, quotation.id)
        db_session.refresh(sibling)
        assert sibling.status == "submitted"

    def test_closed_request_rejects_further_mutation(
        self, db_session, customer_user, quotation, quotation_request, second_vendor
    ):
        sibling = make_quotation(db_session, quotation_request, second_vendor, price="9000")
        svc.accept_quotation(db_session, customer_user, quotation.id)
        with pytest.raises(InvalidTransition):
            svc.accept_quotation(db_session, customer_user, sibling.id)
        with pytest.raises(InvalidTransition):
            svc.reject_quotation(db_session, customer_user, sibling.id)
        with pytest.raises(InvalidTransition):
            svc.reject_quotation(db_session, customer_user, quotation.id)

    def test_second_accept_conflict(
        self, db_session, customer_user, quotation, quotation_request, second_vendor
    ):
        """Data already holding an accepted quotation on a still-open request."""
        make_quotation(db_session, quotation_request, second_vendor, status="accepted")
        with pytest.raises(Conflict, match="already been accepted"):
            svc.accept_quotation(db_session, customer_user, quotation.id)

    def test_reject(self, db_session, customer_user, quotation, quotation_request, vendor_user):
        q = svc.reject_quotation(db_session, customer_user, quotation.id)
        assert q.status == "rejected"
        assert quotation_request.status == "in_progress"
        note = db_session.query(Notification).filter_by(user_id=vendor_user.id).one()
        assert note.title == "Quotation Declined"

    def test_rejected_is_terminal(self, db_session, customer_user, quotation):
        svc.reject_quotation(db_session, customer_user, quotation.id)
        with pytest.raises(InvalidTransition):
            svc.accept_quotation(db_session, customer_user, quotation.id)

    def test_only_owner(self, db_session, other_customer, quotation):
        with pytest.raises(NotFound):
            svc.accept_quotation(db_session, other_customer, quotation.id)


# ── close / listings ─────────────────────────────────────────────────


class TestCloseAndList:
    def test_owner_closes(self, db_session, customer_user, quotation_request):
        req = svc.close_request(db_session, customer_user, quotation_request.id)
        assert req.status == "closed"
        with pytest.raises(InvalidTransition):
            svc.close_request(db_session, customer_user, quotation_request.id)

    def test_admin_closes(self, db_session, admin_user, quotation_request):
        assert svc.close_request(db_session, admin_user, quotation_request.id).status == "closed"

    def test_other_customer_cannot_close(self, db_session, other_customer, quotation_request):
        with pytest.raises(NotFound):
            svc.close_request(db_session, other_customer, quotation_request.id)

    def test_customer_list_counts(self, db_session, customer_user, other_customer, quotation):
        make_request(db_session, other_customer)
        rows = svc.list_customer_requests(db_session, customer_user)
        assert len(rows) == 1
        assert rows[0]["quotation_count"] == 1

    def test_vendor_available_list(
        self, db_session, customer_user, vendor_user, second_vendor, quotation
    ):
        make_request(db_session, customer_user, status="closed")
        rows = svc.list_available_requests(db_session, vendor_user)
        assert len(rows) == 1
        assert rows[0]["already_quoted"] is True
        assert svc.list_available_requests(db_session, second_vendor)[0]["already_quoted"] is False

    def test_vendor_detail_hides_closed_unless_quoted(
        self, db_session, customer_user, vendor_user, second_vendor, quotation, quotation_request
    ):
        quotation_request.status = "closed"
        db_session.commit()
        detail = svc.get_request_for_vendor(db_session, vendor_user, quotation_request.id)
        assert detail["my_quotation"]["id"] == quotation.id
        with pytest.raises(NotFound):
            svc.get_request_for_vendor(db_session, second_vendor, quotation_request.id)

    def test_vendor_quotations(self, db_session, vendor_user, quotation):
        rows = svc.list_vendor_quotations(db_session, vendor_user)
        assert rows[0]["id"] == quotation.id
        assert rows[0]["request_status"] == "in_progress"
        assert rows[0]["company_name"] == "Bright Solar Ltd"

    def test_get_customer_request_ownership(self, db_session, other_customer, quotation_request):
        with pytest.raises(NotFound):
            svc.get_customer_request(db_session, other_customer, quotation_request.id)
