"""Common schemas and validators used across multiple modules"""
from decimal import Decimal
from typing import Optional

from tripledger.core.constants import SUPPORTED_CURRENCIES


def to_decimal(v):
    """Convert numeric input to Decimal, leaving None alone"""
    if v is None:
        return v
    return Decimal(str(v))


def check_currency(v: Optional[str]) -> Optional[str]:
    """Normalise a currency code and reject unsupported ones"""
    if v is None:
        return v
    code = v.strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported currency '{v}'. Supported: {', '.join(SUPPORTED_CURRENCIES)}"
        )
    return code


def normalise_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    return v.strip().lower()
