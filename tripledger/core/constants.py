"""Supported currencies"""

SUPPORTED_CURRENCIES = ("USD", "EUR", "ARS", "BRL", "MXN", "COP", "CLP", "PEN")

DEFAULT_CURRENCY = "USD"
