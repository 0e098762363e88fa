"""Explicit, versioned serialization of a CheckoutSession.

Snapshots are written field by field rather than via ``to_dict()`` so that
nothing reaches storage by accident: sensitive fields listed in
``SENSITIVE_FIELDS`` are dropped here, whatever the session holds in memory.
"""

import json
from datetime import datetime

from checkout.errors import PersistenceError
from checkout.session.details import (
    SENSITIVE_FIELDS,
    Address,
    BillingDetails,
    ContactDetails,
    PaymentSelection,
    ShippingDetails,
)
from checkout.session.session import CheckoutSession, SessionStatus

SNAPSHOT_VERSION = 1

_DETAIL_TYPES = {
    "contact": ContactDetails,
    "shipping": ShippingDetails,
    "billing": BillingDetails,
    "payment": PaymentSelection,
}


def _details_to_dict(step: str, details) -> dict | None:
    if details is None:
        return None
    data = details.to_dict()
    for name in SENSITIVE_FIELDS.get(step, ()):
        data.pop(name, None)
    return data


def _details_from_dict(step: str, data: dict | None):
    if data is None:
        return None
    data = {name: value for name, value in data.items() if name not in SENSITIVE_FIELDS.get(step, ())}
    address = data.pop("address", None)
    if address is not None:
        data["address"] = Address(**address)
    return _DETAIL_TYPES[step](**data)


def _datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def to_snapshot(session: CheckoutSession) -> dict:
    return {
        "version": SNAPSHOT_VERSION,
        "id": str(session.id),
        "session_key": session.session_key,
        "current_step": session.current_step,
        "completed_steps": session.completed,
        "contact": _details_to_dict("contact", session.contact),
        "shipping": _details_to_dict("shipping", session.shipping),
        "billing": _details_to_dict("billing", session.billing),
        "payment": _details_to_dict("payment", session.payment),
        "cart_items": json.loads(session.cart_items) if session.cart_items else [],
        "applied_coupons": session.coupons,
        "currency": session.currency,
        "region": session.region,
        "status": session.status,
        "created_at": session.created_at.isoformat() if session.created_at else None,
        "updated_at": session.updated_at.isoformat() if session.updated_at else None,
    }


def dumps(session: CheckoutSession) -> str:
    return json.dumps(to_snapshot(session))


def from_snapshot(data: dict) -> CheckoutSession:
    """Rebuild a session from a snapshot dict.

    Raises:
        PersistenceError: if the snapshot is malformed, of another version, or
            describes a session that violates the aggregate's invariants.
    """
    if not isinstance(data, dict):
        raise PersistenceError("Snapshot is not an object")
    if data.get("version") != SNAPSHOT_VERSION:
        raise PersistenceError(f"Unsupported snapshot version {data.get('version')!r}")

    try:
        return CheckoutSession(
            id=data["id"],
            session_key=data["session_key"],
            current_step=data["current_step"],
            completed_steps=json.dumps(data["completed_steps"]),
            contact=_details_from_dict("contact", data.get("contact")),
            shipping=_details_from_dict("shipping", data.get("shipping")),
            billing=_details_from_dict("billing", data.get("billing")),
            payment=_details_from_dict("payment", data.get("payment")),
            cart_items=json.dumps(data.get("cart_items", [])),
            applied_coupons=json.dumps(data.get("applied_coupons", [])),
            currency=data.get("currency", "INR"),
            region=data.get("region", "IN"),
            status=data.get("status", SessionStatus.ACTIVE.value),
            created_at=_datetime(data.get("created_at")),
            updated_at=_datetime(data.get("updated_at")),
        )
    except PersistenceError:
        raise
    except Exception as exc:
        # Field errors, invariant violations and malformed shapes all mean the same thing here
        raise PersistenceError(f"Snapshot does not describe a valid session: {exc}") from exc


def loads(raw: str) -> CheckoutSession:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise PersistenceError(f"Snapshot is not valid JSON: {exc}") from exc
    return from_snapshot(data)
