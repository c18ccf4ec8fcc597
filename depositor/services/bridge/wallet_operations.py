"""
Wallet operations for the deposit tool.

This module handles:
- Account derivation from a private key
- Address validation
"""

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address
from loguru import logger

from depositor.utils.exceptions import ConfigurationError
from depositor.utils.security import mask_address


def load_account(private_key: str | None) -> LocalAccount:
    """
    Derive the signing account from a private key.

    The same address is used on both ledgers.

    Args:
        private_key: Hex private key, with or without the 0x prefix

    Returns:
        LocalAccount able to sign source-ledger transactions

    Raises:
        ConfigurationError: If the key is missing or malformed
    """
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY is not set. Add it to your .env file.")

    key = private_key.strip()
    if not key.startswith("0x"):
        key = f"0x{key}"

    try:
        account = Account.from_key(key)
    except Exception as e:
        # Never echo the key itself
        raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {type(e).__name__}") from e

    logger.info(f"Wallet loaded: {mask_address(account.address)}")
    return account


def normalize_address(address: str) -> str:
    """
    Validate an address and return its checksum form.

    Raises:
        ValueError: If the address is invalid
    """
    if not address or not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)
