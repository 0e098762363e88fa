"""Application tests for starting, progressing and cancelling checkout via domain.process()."""

import json

import pytest
from checkout.errors import FieldValidationError
from checkout.persistence.adapter import get_persistence
from checkout.session.cancellation import CancelCheckout
from checkout.session.coupons import ApplyCoupon, RemoveCoupon
from checkout.session.progression import NavigateToStep
from checkout.session.session import CheckoutSession, SessionStatus
from protean import current_domain
from protean.exceptions import ValidationError


def _get(session_id):
    return current_domain.repository_for(CheckoutSession).get(session_id)


class TestStartCheckout:
    def test_start_creates_session(self, start_checkout):
        session_id = start_checkout()
        session = _get(session_id)
        assert session.session_key == "browser-001"
        assert session.current_step == "contact"
        assert session.currency == "INR"

    def test_start_stores_snapshot(self, start_checkout):
        session_id = start_checkout()
        restored = get_persistence().restore("browser-001")
        assert str(restored.id) == session_id

    def test_reentry_resumes_same_session(self, start_checkout, submit_step, contact_data):
        session_id = start_checkout()
        submit_step(session_id, "contact", contact_data)

        assert start_checkout() == session_id
        assert _get(session_id).current_step == "shipping"

    def test_resume_after_restart_uses_snapshot(self, start_checkout, submit_step, contact_data):
        session_id = start_checkout()
        submit_step(session_id, "contact", contact_data)

        # Repository emptied as after a process restart; only the snapshot is left
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        assert start_checkout() == session_id
        assert _get(session_id).contact.email == "asha@example.com"

    def test_other_browser_session_starts_fresh(self, start_checkout):
        assert start_checkout("browser-001") != start_checkout("browser-002")

    def test_corrupt_snapshot_starts_fresh(self, start_checkout):
        get_persistence().storage.scoped("browser-001").set(get_persistence().key, "{broken")
        session_id = start_checkout()
        assert _get(session_id).completed == []


class TestSubmitStep:
    def test_steps_advance_in_order(self, session_at_payment):
        session = _get(session_at_payment)
        assert session.current_step == "payment"
        assert session.completed == ["contact", "shipping", "billing"]

    def test_invalid_step_raises_field_errors(self, start_checkout, submit_step, contact_data):
        session_id = start_checkout()
        contact_data["email"] = "nope"

        with pytest.raises(FieldValidationError) as exc:
            submit_step(session_id, "contact", contact_data)

        assert exc.value.messages == {"email": ["Please enter a valid email address"]}
        assert _get(session_id).current_step == "contact"

    def test_out_of_order_submission_is_ignored(self, start_checkout, submit_step, shipping_data):
        session_id = start_checkout()
        assert submit_step(session_id, "shipping", shipping_data) == "contact"
        assert _get(session_id).completed == []

    def test_progress_is_persisted(self, session_at_payment):
        restored = get_persistence().restore("browser-001")
        assert restored.current_step == "payment"

    def test_card_details_kept_out_of_storage(self, session_at_payment, submit_step, card_data):
        submit_step(session_at_payment, "payment", card_data)
        raw = get_persistence().storage.scoped("browser-001").get(get_persistence().key)
        assert "4111111111111111" not in raw
        assert json.loads(raw)["payment"]["card_last4"] == "1111"


class TestNavigateToStep:
    def test_back_navigation(self, session_at_payment):
        command = NavigateToStep(session_id=session_at_payment, step="contact")
        assert current_domain.process(command, asynchronous=False) is True
        assert _get(session_at_payment).current_step == "contact"

    def test_skipping_ahead_rejected(self, start_checkout):
        session_id = start_checkout()
        command = NavigateToStep(session_id=session_id, step="billing")
        assert current_domain.process(command, asynchronous=False) is False
        assert _get(session_id).current_step == "contact"


class TestCoupons:
    def test_apply_and_remove(self, start_checkout):
        session_id = start_checkout()

        discount = current_domain.process(ApplyCoupon(session_id=session_id, coupon_code="welcome10"), asynchronous=False)
        assert discount == 13000
        assert _get(session_id).coupons == ["WELCOME10"]

        current_domain.process(RemoveCoupon(session_id=session_id, coupon_code="welcome10"), asynchronous=False)
        assert _get(session_id).coupons == []

    def test_ineligible_coupon_not_applied(self, start_checkout):
        session_id = start_checkout(items=[{"product_id": "prod-003", "unit_price": 50000, "quantity": 1}])
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ApplyCoupon(session_id=session_id, coupon_code="FLAT100"), asynchronous=False)

        assert exc.value.messages == {"coupon_code": ["Minimum order value of ₹999 required"]}
        assert _get(session_id).coupons == []

    def test_coupon_applied_once(self, start_checkout):
        session_id = start_checkout()
        current_domain.process(ApplyCoupon(session_id=session_id, coupon_code="WELCOME10"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ApplyCoupon(session_id=session_id, coupon_code="WELCOME10"), asynchronous=False)
        assert exc.value.messages == {"coupon_code": ["Coupon already applied"]}


class TestCancelCheckout:
    def test_cancel_discards_snapshot(self, start_checkout):
        session_id = start_checkout()
        current_domain.process(CancelCheckout(session_id=session_id), asynchronous=False)

        assert _get(session_id).status == SessionStatus.CANCELLED.value
        assert get_persistence().restore("browser-001") is None

    def test_reentry_after_cancel_starts_fresh(self, start_checkout):
        session_id = start_checkout()
        current_domain.process(CancelCheckout(session_id=session_id), asynchronous=False)
        assert start_checkout() != session_id
