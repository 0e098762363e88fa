"""Pydantic request/response schemas for the Checkout API.

These are the external contracts of the API, kept apart from the internal
Protean commands.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartItemSchema(BaseModel):
    product_id: str | None = None
    title: str | None = None
    unit_price: int = Field(ge=0, description="Price in minor units (paise)")
    quantity: int = Field(ge=1)
    original_price: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class StartCheckoutRequest(BaseModel):
    session_key: str = Field(min_length=1, max_length=255)
    cart_items: list[CartItemSchema] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "session_key": "browser-session-001",
                    "cart_items": [
                        {"product_id": "prod-001", "title": "Cotton Kurta", "unit_price": 129900, "quantity": 1},
                    ],
                }
            ]
        }
    }


class SubmitStepRequest(BaseModel):
    data: dict[str, Any]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "data": {
                        "first_name": "Asha",
                        "last_name": "Verma",
                        "email": "asha@example.com",
                        "phone": "9876543210",
                    }
                }
            ]
        }
    }


class NavigateRequest(BaseModel):
    step: str


class ValidateFieldRequest(BaseModel):
    field: str
    value: Any = None
    values: dict[str, Any] = {}
    region: str | None = None


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(max_length=100)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_code: str = "PAYMENT_DECLINED"
    failure_message: str = "Payment was declined by the bank"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class SessionIdResponse(BaseModel):
    session_id: str


class SessionResponse(BaseModel):
    session_id: str
    session_key: str
    status: str
    current_step: str
    completed_steps: list[str]
    accessible_steps: list[str]
    steps: dict[str, dict[str, Any]]
    applied_coupons: list[str]
    cart_items: list[dict[str, Any]]


class StepResponse(BaseModel):
    current_step: str
    completed_steps: list[str]


class NavigateResponse(BaseModel):
    navigated: bool
    current_step: str


class FieldValidationResponse(BaseModel):
    field: str
    valid: bool
    message: str | None = None


class CouponResponse(BaseModel):
    coupon_code: str
    discount: int


class OrderPlacementResponse(BaseModel):
    status: str
    order_id: str | None = None
    payment: dict[str, Any]
    totals: dict[str, Any]


class PaymentStatusResponse(BaseModel):
    status: str
    payment: dict[str, Any] | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_code: str
    failure_message: str


class PaymentMethodInfo(BaseModel):
    id: str
    name: str
    required_fields: list[str]
    confirmation: str
    fee: int = 0
    fee_label: str | None = None


class ShippingMethodInfo(BaseModel):
    id: str
    name: str
    description: str
    estimated_days: str
    price: int
    is_express: bool


class EmiPlan(BaseModel):
    tenure: int
    annual_rate: int
    monthly_instalment: int
