"""
Balance operations for the deposit flow.

This module handles:
- Native balance reads on either ledger
- Timestamped balance snapshots
- The concurrent two-ledger balance report
"""

import asyncio

from loguru import logger

from depositor.models.deposit import BalanceReport, BalanceSnapshot, Ledger
from depositor.utils.security import mask_address

from .ledger_client import LedgerClient


class BalanceReader:
    """
    Reads native balances. No caching: every call hits the ledger.

    RPC errors propagate; callers decide whether to retry.
    """

    def __init__(self, source: LedgerClient, destination: LedgerClient) -> None:
        """
        Initialize balance reader.

        Args:
            source: Source ledger client
            destination: Destination ledger client
        """
        self._clients = {
            Ledger.SOURCE: source,
            Ledger.DESTINATION: destination,
        }

    async def read(self, ledger: Ledger, account: str) -> int:
        """
        Get native balance in wei.

        Args:
            ledger: Which ledger to query
            account: Account address

        Returns:
            Balance in base units
        """
        value = await self._clients[ledger].get_balance(account)
        logger.debug(f"{ledger} balance of {mask_address(account)}: {value} wei")
        return value

    async def snapshot(self, ledger: Ledger, account: str) -> BalanceSnapshot:
        """Read a balance and stamp it with the current time."""
        value = await self.read(ledger, account)
        return BalanceSnapshot(ledger=ledger, account=account, value=value)

    async def report(self, account: str) -> BalanceReport:
        """Snapshot both ledgers concurrently."""
        source, destination = await asyncio.gather(
            self.snapshot(Ledger.SOURCE, account),
            self.snapshot(Ledger.DESTINATION, account),
        )
        return BalanceReport(source=source, destination=destination)
