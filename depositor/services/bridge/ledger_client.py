"""
Ledger RPC client.

Thin async wrapper around AsyncWeb3 exposing the four calls the deposit flow
needs from a ledger:
- chain id
- native balance
- signed transaction submission
- receipt lookup
"""

from dataclasses import dataclass

import aiohttp
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from depositor.config.constants import BLOCKCHAIN_RPC_TIMEOUT, BLOCKCHAIN_TIMEOUT
from depositor.utils.exceptions import SubmissionError
from depositor.utils.security import mask_address, mask_rpc_url, mask_tx_hash

from .core_constants import GAS_LIMIT_MULTIPLIER
from .rpc_wrapper import timeout_decorator

# Errors raised while the node is still deciding whether to accept a send
_SEND_ERRORS = (
    Web3Exception,
    ValueError,
    aiohttp.ClientError,
    ConnectionError,
    TimeoutError,
    OSError,
)


@dataclass(frozen=True)
class TransactionReceipt:
    """Final outcome of an included transaction."""

    tx_hash: str
    success: bool
    block_number: int
    gas_used: int | None = None


class LedgerClient:
    """
    RPC access to one ledger.

    The signing account is optional: read-only clients (the destination
    ledger, balance-only runs) are built without one.
    """

    def __init__(
        self,
        name: str,
        web3: AsyncWeb3,
        account: LocalAccount | None = None,
        read_timeout: float = BLOCKCHAIN_TIMEOUT,
    ) -> None:
        """
        Initialize ledger client.

        Args:
            name: Human-readable ledger name for logs ("Sepolia", ...)
            web3: AsyncWeb3 instance bound to the ledger's RPC endpoint
            account: Signing account for state-mutating calls (optional)
            read_timeout: Seconds allowed for each read-only call
        """
        self.name = name
        self.web3 = web3
        self.account = account
        self.read_timeout = read_timeout

    @classmethod
    def from_url(
        cls,
        name: str,
        rpc_url: str,
        account: LocalAccount | None = None,
        request_timeout: float = BLOCKCHAIN_RPC_TIMEOUT,
    ) -> "LedgerClient":
        """Build a client over an HTTP JSON-RPC endpoint."""
        logger.debug(f"{name} RPC endpoint: {mask_rpc_url(rpc_url)}")
        provider = AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
        )
        return cls(
            name=name,
            web3=AsyncWeb3(provider),
            account=account,
            read_timeout=request_timeout,
        )

    @timeout_decorator(operation_name="get_chain_id")
    async def get_chain_id(self) -> int:
        """Chain id reported by the endpoint."""
        return int(await self.web3.eth.chain_id)

    @timeout_decorator(operation_name="get_balance")
    async def get_balance(self, address: str) -> int:
        """Native balance of ``address`` in wei at the latest block."""
        return int(await self.web3.eth.get_balance(to_checksum_address(address)))

    @timeout_decorator(operation_name="get_receipt")
    async def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """
        Look up a transaction receipt once.

        Returns:
            The receipt, or None while the transaction is not yet included
        """
        try:
            receipt = await self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

        if not receipt:
            return None

        return TransactionReceipt(
            tx_hash=tx_hash,
            success=receipt["status"] == 1,
            block_number=receipt["blockNumber"],
            gas_used=receipt.get("gasUsed"),
        )

    async def send_transaction(
        self,
        to: str,
        value: int,
        data: bytes,
        gas_limit_hint: int | None = None,
    ) -> str:
        """
        Sign and broadcast a transaction from the configured account.

        Args:
            to: Recipient (contract) address
            value: Wei to attach
            data: ABI-encoded call data
            gas_limit_hint: Gas limit to use instead of the node's estimate

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            SubmissionError: If the node refused the transaction
        """
        if self.account is None:
            raise SubmissionError(f"{self.name}: wallet not configured")

        sender = self.account.address
        to = to_checksum_address(to)
        signed = None

        try:
            nonce = await self.web3.eth.get_transaction_count(sender, "pending")
            gas_price = await self.web3.eth.gas_price
            chain_id = await self.web3.eth.chain_id

            txn = {
                "from": sender,
                "to": to,
                "value": value,
                "data": data,
                "nonce": nonce,
                "gasPrice": gas_price,
                "chainId": chain_id,
            }

            if gas_limit_hint is not None:
                gas_limit = gas_limit_hint
            else:
                gas_est = await self.web3.eth.estimate_gas(txn)
                gas_limit = int(gas_est * GAS_LIMIT_MULTIPLIER)
            txn["gas"] = gas_limit

            logger.info(
                f"Sending {self.name} tx: from={mask_address(sender)}, to={mask_address(to)}, "
                f"value={value} wei, nonce={nonce}, gas_price={gas_price} wei "
                f"({gas_price / 10**9} Gwei), gas_limit={gas_limit}"
            )

            signed = self.account.sign_transaction(txn)
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except _SEND_ERRORS as e:
            local_hash = Web3.to_hex(signed.hash) if signed is not None else None
            if local_hash:
                logger.error(
                    f"{self.name} node did not confirm acceptance of "
                    f"{mask_tx_hash(local_hash)}: {e}"
                )
            else:
                logger.error(f"{self.name} transaction refused before signing: {e}")
            raise SubmissionError(str(e), tx_hash=local_hash) from e

        tx_hash_str = Web3.to_hex(tx_hash)
        logger.info(f"{self.name} tx accepted: {mask_tx_hash(tx_hash_str)}")
        return tx_hash_str

    async def disconnect(self) -> None:
        """Close the underlying HTTP session."""
        disconnect = getattr(self.web3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
