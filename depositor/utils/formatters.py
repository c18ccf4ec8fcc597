"""
Formatters utility.

Human-readable rendering of base-unit amounts.
"""

from decimal import Decimal

from depositor.config.constants import NATIVE_DECIMALS, NATIVE_SYMBOL


def format_units(value: int, decimals: int = NATIVE_DECIMALS) -> str:
    """
    Convert a base-unit integer to a plain decimal string.

    Trailing zeros are dropped; whole numbers have no fractional part.

    Examples:
        >>> format_units(50000000000000000)
        '0.05'
        >>> format_units(10**18)
        '1'
        >>> format_units(0)
        '0'
    """
    quantized = Decimal(value).scaleb(-decimals)
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_ether(value_wei: int) -> str:
    """Format wei as '<amount> ETH'."""
    return f"{format_units(value_wei)} {NATIVE_SYMBOL}"
