"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""

import aiohttp
from web3.exceptions import Web3Exception


class DepositError(Exception):
    """Base exception for deposit orchestration errors."""
    pass


class ConfigurationError(DepositError):
    """Raised for an unusable setup: wrong network, missing or invalid private key. Never retried."""
    pass


class NetworkMismatchError(ConfigurationError):
    """Raised when an RPC endpoint reports an unexpected chain id."""

    def __init__(self, ledger: str, expected: int, reported: int) -> None:
        self.ledger = ledger
        self.expected = expected
        self.reported = reported
        super().__init__(
            f"{ledger} RPC reports chain id {reported}, expected {expected}"
        )


class AmountValidationError(DepositError, ValueError):
    """Raised when a deposit amount cannot be accepted."""
    pass


class SubmissionError(DepositError):
    """
    Raised when the node refuses the bridging call before issuing a tx id.

    ``tx_hash`` is the locally computed hash when signing succeeded but the
    node's answer was lost; the operator should look it up before retrying.
    """

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        self.tx_hash = tx_hash
        super().__init__(message)


class DoubleSubmissionError(DepositError):
    """Raised when a deposit attempt is submitted more than once."""
    pass


class CreditTimeoutError(DepositError):
    """Raised when the destination credit is not observed before the deadline."""

    def __init__(
        self,
        target: int,
        last_balance: int | None,
        polls: int,
        failed_polls: int,
        elapsed_ms: float,
    ) -> None:
        self.target = target
        self.last_balance = last_balance
        self.polls = polls
        self.failed_polls = failed_polls
        self.elapsed_ms = elapsed_ms
        super().__init__(
            f"Destination balance did not reach {target} within {elapsed_ms:.0f} ms "
            f"({polls} polls, {failed_polls} failed with RPC errors)"
        )


class BlockchainTimeoutError(Exception):
    """Raised when blockchain RPC call times out."""
    pass


# Read-only polls treat these as "not observed yet"
TRANSIENT_RPC_ERRORS = (
    Web3Exception,
    BlockchainTimeoutError,
    TimeoutError,
    ConnectionError,
    aiohttp.ClientError,
    OSError,
)

