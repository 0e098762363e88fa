"""Regional format rules for phone numbers, postal codes and states.

Each supported country is described as data; field rules look the region up
through the validation context instead of hard-coding one locale.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class RegionRules:
    code: str
    country_name: str
    currency: str
    phone_pattern: re.Pattern
    phone_message: str
    postal_pattern: re.Pattern
    postal_message: str
    states: tuple[str, ...] = ()


INDIAN_STATES = (
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chhattisgarh",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "Odisha",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttarakhand",
    "West Bengal",
    "Andaman and Nicobar Islands",
    "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi",
    "Jammu and Kashmir",
    "Ladakh",
    "Lakshadweep",
    "Puducherry",
)

REGIONS = {
    "IN": RegionRules(
        code="IN",
        country_name="India",
        currency="INR",
        # Mobile numbers start with 6-9 and are 10 digits long
        phone_pattern=re.compile(r"^[6-9]\d{9}$"),
        phone_message="Please enter a valid 10-digit Indian mobile number",
        postal_pattern=re.compile(r"^[1-9][0-9]{5}$"),
        postal_message="Please enter a valid 6-digit Indian PIN code",
        states=INDIAN_STATES,
    ),
    "US": RegionRules(
        code="US",
        country_name="United States",
        currency="USD",
        phone_pattern=re.compile(r"^[2-9]\d{9}$"),
        phone_message="Please enter a valid 10-digit US phone number",
        postal_pattern=re.compile(r"^[0-9]{5}(-[0-9]{4})?$"),
        postal_message="Please enter a valid 5-digit ZIP code",
    ),
}

DEFAULT_REGION = "IN"


def get_region(code: str | None) -> RegionRules:
    """Return the rules for a region code, falling back to the default region."""
    return REGIONS.get((code or DEFAULT_REGION).upper(), REGIONS[DEFAULT_REGION])


def region_for_country(country: str | None) -> RegionRules | None:
    """Resolve a country given either as ISO code or display name."""
    if not country:
        return None
    needle = country.strip().lower()
    for rules in REGIONS.values():
        if needle in (rules.code.lower(), rules.country_name.lower()):
            return rules
    return None
