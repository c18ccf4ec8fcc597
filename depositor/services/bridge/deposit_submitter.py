"""
Deposit submission.

Builds the L1StandardBridge ``depositETHTo`` call for a self-deposit and
sends it on the source ledger. This is the only state-mutating call of the
deposit flow and runs at most once per DepositAttempt.
"""

from loguru import logger
from web3 import Web3

from depositor.models.deposit import DepositAttempt, DepositState, TransactionRecord
from depositor.utils.exceptions import DoubleSubmissionError, SubmissionError
from depositor.utils.security import mask_address

from .core_constants import (
    DEFAULT_MIN_GAS_LIMIT,
    DEPOSIT_FUNCTION_NAME,
    EMPTY_EXTRA_DATA,
    L1_STANDARD_BRIDGE_ABI,
    MAX_UINT32,
)
from .ledger_client import LedgerClient


class DepositSubmitter:
    """Sends the bridging transaction."""

    def __init__(
        self,
        source: LedgerClient,
        bridge_address: str,
        min_gas_limit: int = DEFAULT_MIN_GAS_LIMIT,
        gas_limit_hint: int | None = None,
    ) -> None:
        """
        Initialize deposit submitter.

        Args:
            source: Source ledger client holding the signing account
            bridge_address: L1StandardBridge address on the source ledger
            min_gas_limit: Gas forwarded for the destination-side credit
            gas_limit_hint: Source tx gas limit; estimated by the node if None
        """
        if not 0 < min_gas_limit <= MAX_UINT32:
            raise ValueError(f"min_gas_limit must fit in uint32, got {min_gas_limit}")

        self.source = source
        self.bridge_address = Web3.to_checksum_address(bridge_address)
        self.min_gas_limit = min_gas_limit
        self.gas_limit_hint = gas_limit_hint
        self._bridge = Web3().eth.contract(
            address=self.bridge_address, abi=L1_STANDARD_BRIDGE_ABI
        )

    def encode_deposit(self, recipient: str) -> bytes:
        """ABI-encode ``depositETHTo(recipient, minGasLimit, 0x)``."""
        data = self._bridge.encode_abi(
            DEPOSIT_FUNCTION_NAME,
            args=[
                Web3.to_checksum_address(recipient),
                self.min_gas_limit,
                EMPTY_EXTRA_DATA,
            ],
        )
        return Web3.to_bytes(hexstr=data)

    async def submit(self, attempt: DepositAttempt) -> TransactionRecord:
        """
        Send the deposit for ``attempt`` and attach the pending record.

        The recipient is the depositing account itself.

        Raises:
            DoubleSubmissionError: If this attempt was already submitted
            SubmissionError: If the node refused the transaction
        """
        if attempt.submitted or attempt.source_tx is not None:
            raise DoubleSubmissionError(
                "Deposit already submitted for this attempt; "
                "retry the wait, not the submission"
            )
        if attempt.state is not DepositState.SUBMITTING:
            raise RuntimeError(f"Cannot submit from state {attempt.state}")
        if attempt.amount is None:
            raise RuntimeError("Cannot submit without a validated amount")

        data = self.encode_deposit(attempt.account)

        logger.info(
            f"Submitting deposit of {attempt.amount.text} to bridge "
            f"{mask_address(self.bridge_address)} for {mask_address(attempt.account)}"
        )

        attempt.submitted = True
        tx_hash = await self.source.send_transaction(
            to=self.bridge_address,
            value=attempt.amount.value,
            data=data,
            gas_limit_hint=self.gas_limit_hint,
        )
        if not tx_hash:
            raise SubmissionError("Node returned no transaction hash")

        record = TransactionRecord(identifier=tx_hash)
        attempt.source_tx = record
        return record
