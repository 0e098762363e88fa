"""Tests for order assembly from a completed checkout."""

import pytest
from checkout.errors import IncompleteCheckoutError
from checkout.pricing.engine import PricingEngine
from checkout.review.assembler import assemble_order
from checkout.session.session import CheckoutSession


@pytest.fixture()
def session(cart_items, contact_data, shipping_data):
    checkout_session = CheckoutSession.start(session_key="browser-001", cart_items=cart_items)
    checkout_session.submit_step("contact", contact_data)
    checkout_session.submit_step("shipping", shipping_data)
    return checkout_session


class TestAssembleOrder:
    def test_incomplete_checkout(self, session):
        with pytest.raises(IncompleteCheckoutError) as exc:
            assemble_order(session)
        assert "billing, payment" in str(exc.value)

    def test_billing_same_as_shipping(self, session, billing_data, card_data):
        session.submit_step("billing", billing_data)
        session.submit_step("payment", card_data)

        order = assemble_order(session)
        assert order.billing_address == order.shipping_address
        assert order.shipping_address["city"] == "Bengaluru"

    def test_separate_billing_address_with_tax_details(self, session, shipping_data, card_data):
        billing = {
            **shipping_data,
            "same_as_shipping": False,
            "address_line1": "44 Residency Road",
            "company_name": "Verma Textiles",
            "tax_id": "29abcde1234f1z5",
        }
        session.submit_step("billing", billing)
        session.submit_step("payment", card_data)

        order = assemble_order(session)
        assert order.billing_address["address_line1"] == "44 Residency Road"
        assert order.billing_address["company_name"] == "Verma Textiles"
        assert order.billing_address["tax_id"] == "29ABCDE1234F1Z5"
        assert order.shipping_address["address_line1"] == "12 MG Road"

    def test_payment_summary_is_masked(self, session, billing_data, card_data):
        session.submit_step("billing", billing_data)
        session.submit_step("payment", card_data)

        payload = assemble_order(session).to_dict()
        assert payload["payment_method"] == {
            "method": "card",
            "display": "Visa ending in 1111",
            "card_brand": "Visa",
            "card_last4": "1111",
        }
        assert "4111111111111111" not in str(payload)
        assert "account" not in payload

    def test_flags_items_and_totals(self, session, billing_data, upi_data):
        session.submit_step("billing", billing_data)
        session.submit_step("payment", upi_data)
        totals = session.price(PricingEngine())

        payload = assemble_order(session, totals).to_dict()
        assert payload["flags"]["newsletter"] is True
        assert payload["flags"]["gift_wrap"] is False
        assert [item["quantity"] for item in payload["items"]] == [2, 1]
        assert payload["totals"]["total"]["amount"] == totals.total
        assert payload["payment_method"]["upi_id"] == "asha@okhdfc"

    def test_requested_account_carries_no_password(self, cart_items, contact_data, shipping_data, billing_data, cod_data):
        session = CheckoutSession.start(session_key="browser-002", cart_items=cart_items)
        contact_data.update(create_account=True, password="Str0ng!Pass", confirm_password="Str0ng!Pass")
        session.submit_step("contact", contact_data)
        session.submit_step("shipping", shipping_data)
        session.submit_step("billing", billing_data)
        session.submit_step("payment", cod_data)

        order = assemble_order(session)
        assert order.account == {"email": "asha@example.com"}
        assert "Str0ng!Pass" not in str(order.to_dict())
        assert "Str0ng!Pass" not in repr(order)
