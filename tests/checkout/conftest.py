import json
from datetime import date

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


# ---------------------------------------------------------------------------
# Step data
# ---------------------------------------------------------------------------
@pytest.fixture()
def cart_items():
    return [
        {"product_id": "prod-001", "title": "Cotton Kurta", "unit_price": 50000, "quantity": 2},
        {"product_id": "prod-002", "title": "Silk Scarf", "unit_price": 30000, "quantity": 1},
    ]


@pytest.fixture()
def contact_data():
    return {
        "first_name": "Asha",
        "last_name": "Verma",
        "email": "asha@example.com",
        "phone": "9876543210",
        "newsletter": True,
    }


@pytest.fixture()
def shipping_data():
    return {
        "first_name": "Asha",
        "last_name": "Verma",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
        "country": "India",
        "phone": "9876543210",
        "shipping_method": "standard",
    }


@pytest.fixture()
def billing_data():
    return {"same_as_shipping": True}


@pytest.fixture()
def card_data():
    return {
        "method": "card",
        "card_number": "4111 1111 1111 1111",
        "cardholder_name": "Asha Verma",
        "expiry_month": "12",
        "expiry_year": str(date.today().year + 3),
        "cvv": "123",
    }


@pytest.fixture()
def upi_data():
    return {"method": "upi", "upi_id": "asha@okhdfc"}


@pytest.fixture()
def cod_data():
    return {"method": "cod"}


# ---------------------------------------------------------------------------
# Sessions driven through the command layer
# ---------------------------------------------------------------------------
@pytest.fixture()
def start_checkout(cart_items):
    """Start a checkout for a session key and return its id."""
    from checkout.session.start import StartCheckout
    from protean import current_domain

    def _start(session_key="browser-001", items=None):
        command = StartCheckout(
            session_key=session_key,
            cart_items=json.dumps(cart_items if items is None else items),
        )
        return current_domain.process(command, asynchronous=False)

    return _start


@pytest.fixture()
def submit_step():
    from checkout.session.progression import SubmitStep
    from protean import current_domain

    def _submit(session_id, step, data):
        command = SubmitStep(session_id=session_id, step=step, data=json.dumps(data))
        return current_domain.process(command, asynchronous=False)

    return _submit


@pytest.fixture()
def session_at_payment(start_checkout, submit_step, contact_data, shipping_data, billing_data):
    """Id of a checkout whose contact, shipping and billing steps are complete."""
    session_id = start_checkout()
    submit_step(session_id, "contact", contact_data)
    submit_step(session_id, "shipping", shipping_data)
    submit_step(session_id, "billing", billing_data)
    return session_id
