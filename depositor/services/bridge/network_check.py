"""
Network identity check.

Confirms both RPC endpoints serve the expected chains before any balance is
read or any funds are committed. A mismatch is a configuration error and is
never retried.
"""

import asyncio

from loguru import logger

from depositor.utils.exceptions import NetworkMismatchError

from .ledger_client import LedgerClient


class NetworkIdentityCheck:
    """Compares reported chain ids against the expected ones."""

    def __init__(
        self,
        source: LedgerClient,
        destination: LedgerClient,
        expected_source_chain_id: int,
        expected_destination_chain_id: int,
    ) -> None:
        self.source = source
        self.destination = destination
        self.expected_source_chain_id = expected_source_chain_id
        self.expected_destination_chain_id = expected_destination_chain_id

    async def verify(self) -> tuple[int, int]:
        """
        Query both endpoints and fail fast on mismatch.

        Returns:
            Tuple of (source_chain_id, destination_chain_id)

        Raises:
            NetworkMismatchError: If either endpoint reports an unexpected id
        """
        source_id, destination_id = await asyncio.gather(
            self.source.get_chain_id(),
            self.destination.get_chain_id(),
        )

        if source_id != self.expected_source_chain_id:
            logger.error(
                f"{self.source.name} RPC is on chain {source_id}, "
                f"expected {self.expected_source_chain_id}"
            )
            raise NetworkMismatchError(
                self.source.name, self.expected_source_chain_id, source_id
            )

        if destination_id != self.expected_destination_chain_id:
            logger.error(
                f"{self.destination.name} RPC is on chain {destination_id}, "
                f"expected {self.expected_destination_chain_id}"
            )
            raise NetworkMismatchError(
                self.destination.name, self.expected_destination_chain_id, destination_id
            )

        logger.info(
            f"RPC endpoints verified: {self.source.name}={source_id}, "
            f"{self.destination.name}={destination_id}"
        )
        return source_id, destination_id
