"""
Validators package.

Provides validation functions for operator input.
"""

from depositor.validators.amount import parse_amount, validate_amount


__all__ = [
    "validate_amount",
    "parse_amount",
]
