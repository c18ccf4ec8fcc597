"""Deposit amount validation."""

import re

from depositor.config.constants import NATIVE_DECIMALS
from depositor.models.deposit import Amount
from depositor.utils.exceptions import AmountValidationError

MAX_UINT256 = 2**256 - 1
MAX_AMOUNT_TEXT_LENGTH = 100

_AMOUNT_PATTERN = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?")


def validate_amount(
    value: str,
    decimals: int = NATIVE_DECIMALS,
) -> tuple[bool, Amount | None, str | None]:
    """
    Validate a decimal amount typed by the operator.

    The amount is converted to base units with integer arithmetic only, so
    nothing is rounded: a value that needs more than ``decimals`` fractional
    digits is rejected rather than truncated.

    Args:
        value: Amount string, e.g. "0.05"
        decimals: Decimals of the native coin

    Returns:
        Tuple of (is_valid, parsed_amount, error_message)

    Examples:
        >>> validate_amount("0.05")
        (True, Amount(value=50000000000000000, text='0.05'), None)
        >>> validate_amount("0")
        (False, None, "Amount must be greater than 0")
        >>> validate_amount("abc")
        (False, None, "Amount must be a valid number")
    """
    if not value or not isinstance(value, str):
        return False, None, "Amount is empty"

    value = value.strip()

    if not value:
        return False, None, "Amount is empty"

    if len(value) > MAX_AMOUNT_TEXT_LENGTH:
        return False, None, "Amount is too long"

    match = _AMOUNT_PATTERN.fullmatch(value)
    if match is None:
        return False, None, "Amount must be a valid number"

    whole = match.group("whole")
    frac = match.group("frac") or ""

    if not whole and not frac:
        return False, None, "Amount must be a valid number"

    if len(frac) > decimals:
        return False, None, f"Amount has too many decimal places (maximum {decimals})"

    base_units = int(whole or "0") * 10**decimals + int(frac.ljust(decimals, "0") or "0")

    if base_units <= 0:
        return False, None, "Amount must be greater than 0"

    if base_units > MAX_UINT256:
        return False, None, "Amount is too large"

    return True, Amount(value=base_units, text=value), None


def parse_amount(value: str, decimals: int = NATIVE_DECIMALS) -> Amount:
    """
    Parse an amount or raise.

    Raises:
        AmountValidationError: If the amount is rejected
    """
    is_valid, amount, error = validate_amount(value, decimals=decimals)
    if not is_valid or amount is None:
        raise AmountValidationError(error or "Invalid amount")
    return amount
