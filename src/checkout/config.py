"""Checkout settings.

Tunables are read from ``CHECKOUT_*`` environment variables (or a ``.env``
file). Protean's own configuration is still selected through ``PROTEAN_ENV``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CheckoutSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CHECKOUT_", env_file=".env", extra="ignore")

    currency: str = Field(default="INR", min_length=3, max_length=3)
    region: str = "IN"

    # Combined rate of the dual-component tax, in basis points (1800 = 18%)
    tax_rate_bps: int = Field(default=1800, ge=0, le=10000)
    tax_on_discounted_base: bool = True

    # Fees in minor units
    cod_fee: int = Field(default=5000, ge=0)
    gift_wrap_fee: int = Field(default=5000, ge=0)

    storage_key: str = "guestCheckout_session"
    storage_dir: str | None = None
    persistence_debounce_seconds: float = Field(default=0.5, ge=0)

    # Adapter names
    payment_gateway: str = "fake"
    order_submitter: str = "fake"

    upi_wait_window_seconds: float = Field(default=300.0, gt=0)
    debug: bool = False


@lru_cache
def get_settings() -> CheckoutSettings:
    """Return the process-wide settings (cached)."""
    return CheckoutSettings()
