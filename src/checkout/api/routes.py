"""FastAPI routes for guest checkout: sessions, steps, coupons and payment."""

import json
import os

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from checkout.api.schemas import (
    ApplyCouponRequest,
    ConfigureGatewayRequest,
    CouponResponse,
    EmiPlan,
    FieldValidationResponse,
    GatewayConfigResponse,
    NavigateRequest,
    NavigateResponse,
    OrderPlacementResponse,
    PaymentMethodInfo,
    PaymentStatusResponse,
    SessionIdResponse,
    SessionResponse,
    ShippingMethodInfo,
    StartCheckoutRequest,
    StatusResponse,
    StepResponse,
    SubmitStepRequest,
    ValidateFieldRequest,
)
from checkout.config import get_settings
from checkout.payment.gateway import get_gateway
from checkout.payment.gateway.fake_adapter import FakeGateway
from checkout.payment.methods import registry
from checkout.payment.options import EMI_TENURES, calculate_emi
from checkout.pricing.engine import PricingEngine
from checkout.pricing.shipping import SHIPPING_METHODS
from checkout.session.cancellation import CancelCheckout
from checkout.session.confirmation import AbortPayment, ConfirmPayment, RetryPayment
from checkout.session.coupons import ApplyCoupon, RemoveCoupon
from checkout.session.placement import PlaceOrder
from checkout.session.progression import NavigateToStep, SubmitStep
from checkout.session.session import CheckoutSession
from checkout.session.start import StartCheckout
from checkout.session.steps import DATA_STEPS, STEP_ORDER, CheckoutStep
from checkout.validation.result import ValidationContext
from checkout.validation.rules import FIELD_RULES, validate

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _load(session_id: str) -> CheckoutSession:
    return current_domain.repository_for(CheckoutSession).get(session_id)


def _step(value: str) -> str:
    try:
        return CheckoutStep(value).value
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown checkout step {value!r}") from None


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------
@router.get("/payment-methods", response_model=list[PaymentMethodInfo])
async def list_payment_methods() -> list[PaymentMethodInfo]:
    settings = get_settings()
    return [
        PaymentMethodInfo(
            id=spec.id,
            name=spec.name,
            required_fields=list(spec.required_fields),
            confirmation=spec.confirmation.value,
            fee=getattr(settings, spec.fee_setting) if spec.fee_setting else 0,
            fee_label=spec.fee_label,
        )
        for spec in registry.all()
    ]


@router.get("/shipping-methods", response_model=list[ShippingMethodInfo])
async def list_shipping_methods() -> list[ShippingMethodInfo]:
    return [
        ShippingMethodInfo(
            id=method.id,
            name=method.name,
            description=method.description,
            estimated_days=method.estimated_days,
            price=method.price,
            is_express=method.is_express,
        )
        for method in SHIPPING_METHODS.values()
    ]


@router.get("/emi-plans", response_model=list[EmiPlan])
async def list_emi_plans(amount: int = Query(gt=0)) -> list[EmiPlan]:
    """Monthly instalments for financing ``amount`` (minor units) over each tenure."""
    return [
        EmiPlan(tenure=tenure, annual_rate=rate, monthly_instalment=calculate_emi(amount, tenure))
        for tenure, rate in EMI_TENURES.items()
    ]


@router.post("/validate", response_model=FieldValidationResponse)
async def validate_field(body: ValidateFieldRequest) -> FieldValidationResponse:
    """Validate a single field as the shopper leaves it."""
    if body.field not in FIELD_RULES:
        raise HTTPException(status_code=404, detail=f"Unknown field {body.field!r}")

    context = ValidationContext(region=body.region or get_settings().region, values=body.values)
    result = validate(body.field, body.value, context)
    return FieldValidationResponse(field=body.field, valid=result.valid, message=result.message)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@router.post("/sessions", status_code=201, response_model=SessionIdResponse)
async def start_checkout(body: StartCheckoutRequest) -> SessionIdResponse:
    """Start checkout, or resume the stored one for the same session key."""
    command = StartCheckout(
        session_key=body.session_key,
        cart_items=json.dumps([item.model_dump(exclude_none=True) for item in body.cart_items]),
    )
    session_id = current_domain.process(command, asynchronous=False)
    return SessionIdResponse(session_id=session_id)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    session = _load(session_id)
    return SessionResponse(
        session_id=str(session.id),
        session_key=session.session_key,
        status=session.status,
        current_step=session.current_step,
        completed_steps=session.completed,
        accessible_steps=[step for step in STEP_ORDER if session.is_step_accessible(step)],
        steps={step: session.step_values(step) for step in DATA_STEPS},
        applied_coupons=session.coupons,
        cart_items=[item.as_dict() for item in session.line_items],
    )


@router.delete("/sessions/{session_id}", response_model=StatusResponse)
async def cancel_checkout(session_id: str) -> StatusResponse:
    current_domain.process(CancelCheckout(session_id=session_id), asynchronous=False)
    return StatusResponse(status="cancelled")


@router.post("/sessions/{session_id}/steps/{step}", response_model=StepResponse)
async def submit_step(session_id: str, step: str, body: SubmitStepRequest) -> StepResponse:
    """Submit a step's fields; the response carries the step the shopper lands on."""
    command = SubmitStep(session_id=session_id, step=_step(step), data=json.dumps(body.data))
    current_step = current_domain.process(command, asynchronous=False)
    return StepResponse(current_step=current_step, completed_steps=_load(session_id).completed)


@router.post("/sessions/{session_id}/navigate", response_model=NavigateResponse)
async def navigate(session_id: str, body: NavigateRequest) -> NavigateResponse:
    command = NavigateToStep(session_id=session_id, step=_step(body.step))
    navigated = current_domain.process(command, asynchronous=False)
    return NavigateResponse(navigated=navigated, current_step=_load(session_id).current_step)


# ---------------------------------------------------------------------------
# Coupons and totals
# ---------------------------------------------------------------------------
@router.post("/sessions/{session_id}/coupons", response_model=CouponResponse)
async def apply_coupon(session_id: str, body: ApplyCouponRequest) -> CouponResponse:
    command = ApplyCoupon(session_id=session_id, coupon_code=body.coupon_code)
    discount = current_domain.process(command, asynchronous=False)
    return CouponResponse(coupon_code=body.coupon_code.strip().upper(), discount=discount)


@router.delete("/sessions/{session_id}/coupons/{coupon_code}", response_model=StatusResponse)
async def remove_coupon(session_id: str, coupon_code: str) -> StatusResponse:
    current_domain.process(RemoveCoupon(session_id=session_id, coupon_code=coupon_code), asynchronous=False)
    return StatusResponse(status="removed")


@router.get("/sessions/{session_id}/summary")
async def price_summary(session_id: str) -> dict:
    """Live price breakdown for the order summary."""
    return _load(session_id).price(PricingEngine()).to_dict()


# ---------------------------------------------------------------------------
# Order placement and payment
# ---------------------------------------------------------------------------
@router.post("/sessions/{session_id}/order", response_model=OrderPlacementResponse)
async def place_order(session_id: str) -> OrderPlacementResponse:
    result = current_domain.process(PlaceOrder(session_id=session_id), asynchronous=False)
    return OrderPlacementResponse(**result)


@router.post("/sessions/{session_id}/payment/confirm", response_model=OrderPlacementResponse)
async def confirm_payment(session_id: str) -> OrderPlacementResponse:
    result = current_domain.process(ConfirmPayment(session_id=session_id), asynchronous=False)
    return OrderPlacementResponse(**result)


@router.post("/sessions/{session_id}/payment/retry", response_model=StepResponse)
async def retry_payment(session_id: str) -> StepResponse:
    current_step = current_domain.process(RetryPayment(session_id=session_id), asynchronous=False)
    return StepResponse(current_step=current_step, completed_steps=_load(session_id).completed)


@router.post("/sessions/{session_id}/payment/abort", response_model=PaymentStatusResponse)
async def abort_payment(session_id: str) -> PaymentStatusResponse:
    payment = current_domain.process(AbortPayment(session_id=session_id), asynchronous=False)
    return PaymentStatusResponse(status="aborted" if payment else "idle", payment=payment)


@router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_code=body.failure_code,
        failure_message=body.failure_message,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_code=gateway.failure_code,
        failure_message=gateway.failure_message,
    )
