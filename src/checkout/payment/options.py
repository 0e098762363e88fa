"""Reference data for the choice fields of the payment step."""

BANKS = {
    "SBI": "State Bank of India",
    "HDFC": "HDFC Bank",
    "ICICI": "ICICI Bank",
    "AXIS": "Axis Bank",
    "KOTAK": "Kotak Mahindra Bank",
    "PNB": "Punjab National Bank",
    "BOB": "Bank of Baroda",
    "CANARA": "Canara Bank",
    "IDBI": "IDBI Bank",
    "YES": "Yes Bank",
}

WALLETS = {
    "PAYTM": "Paytm",
    "PHONEPE": "PhonePe",
    "GOOGLEPAY": "Google Pay",
    "AMAZONPAY": "Amazon Pay",
    "FREECHARGE": "FreeCharge",
    "MOBIKWIK": "MobiKwik",
}

# Tenure in months -> annual interest rate in percent
EMI_TENURES = {
    3: 12,
    6: 13,
    9: 14,
    12: 15,
    18: 16,
    24: 17,
}


def calculate_emi(principal: int, tenure: int) -> int:
    """Monthly instalment (minor units) for an amount financed over ``tenure`` months.

    Standard reducing-balance formula; returns 0 for an unknown tenure.
    """
    annual_rate = EMI_TENURES.get(tenure)
    if annual_rate is None or principal <= 0:
        return 0

    rate = annual_rate / 100 / 12
    growth = (1 + rate) ** tenure
    return round(principal * rate * growth / (growth - 1))
