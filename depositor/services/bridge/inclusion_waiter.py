"""
Source inclusion waiter.

Polls the source ledger for the receipt of a submitted transaction until it
is included. There is no internal timeout: source liveness is outside this
tool's control and the operator can always interrupt.
"""

from loguru import logger

from depositor.config.constants import RECEIPT_POLL_INTERVAL_MS
from depositor.models.deposit import TransactionRecord, TransactionStatus
from depositor.utils.datetime_utils import MonotonicClock
from depositor.utils.exceptions import TRANSIENT_RPC_ERRORS
from depositor.utils.security import mask_tx_hash

from .ledger_client import LedgerClient


class InclusionWaiter:
    """Moves a TransactionRecord from pending to its included outcome."""

    def __init__(
        self,
        source: LedgerClient,
        poll_interval_ms: float = RECEIPT_POLL_INTERVAL_MS,
        clock: MonotonicClock | None = None,
    ) -> None:
        self.source = source
        self.poll_interval_ms = poll_interval_ms
        self.clock = clock or MonotonicClock()

    async def wait(self, record: TransactionRecord) -> TransactionRecord:
        """
        Suspend until the transaction is included.

        Transient RPC errors are logged and the receipt is looked up again on
        the next tick.

        Args:
            record: Pending transaction record

        Returns:
            The same record with a terminal status
        """
        if record.status.is_terminal:
            return record

        lookups = 0
        while True:
            lookups += 1
            try:
                receipt = await self.source.get_receipt(record.identifier)
            except TRANSIENT_RPC_ERRORS as e:
                logger.warning(
                    f"Receipt lookup {lookups} for {mask_tx_hash(record.identifier)} "
                    f"failed: {e}"
                )
                receipt = None

            if receipt is not None:
                record.status = (
                    TransactionStatus.INCLUDED_SUCCESS
                    if receipt.success
                    else TransactionStatus.INCLUDED_FAILURE
                )
                record.block_number = receipt.block_number
                logger.info(
                    f"{self.source.name} tx {mask_tx_hash(record.identifier)} included "
                    f"in block {receipt.block_number}: {record.status}"
                )
                return record

            await self.clock.sleep_ms(self.poll_interval_ms)
