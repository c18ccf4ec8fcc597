"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment so the global Settings instance loads in tests
os.environ.setdefault(
    "PRIVATE_KEY", "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
)
os.environ.setdefault("RPC_L1", "https://ethereum-sepolia-rpc.publicnode.com")
os.environ.setdefault("RPC_L2", "https://sepolia-rpc.giwa.io")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from depositor.services.bridge.ledger_client import TransactionReceipt


# Hardhat/Anvil default account #0
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
TEST_TX_HASH = "0xabc0000000000000000000000000000000000000000000000000000000000def"


class FakeClock:
    """Clock whose sleep advances time instantly."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now = start_ms
        self.sleeps: list[float] = []

    def now_ms(self) -> float:
        return self.now

    async def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        self.now += ms


class FakeLedger:
    """
    Scripted stand-in for LedgerClient.

    ``balances`` and ``receipts`` are consumed one entry per call; the last
    entry repeats. Exception instances in a script are raised.
    """

    def __init__(
        self,
        name: str,
        chain_id: int,
        balances: list | None = None,
        receipts: list | None = None,
        send_result: str | Exception = TEST_TX_HASH,
        clock: FakeClock | None = None,
    ) -> None:
        self.name = name
        self.chain_id = chain_id
        self.balances = list(balances if balances is not None else [0])
        self.receipts = list(receipts if receipts is not None else [None])
        self.send_result = send_result
        self.clock = clock
        self.chain_id_calls = 0
        self.balance_calls: list[tuple[float | None, str]] = []
        self.receipt_calls = 0
        self.send_calls: list[dict] = []
        self.events: list[str] = []

    @staticmethod
    def _next(script: list):
        item = script[0] if len(script) == 1 else script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def get_chain_id(self) -> int:
        self.chain_id_calls += 1
        return self.chain_id

    async def get_balance(self, address: str) -> int:
        self.balance_calls.append((self.clock.now_ms() if self.clock else None, address))
        self.events.append("balance")
        return self._next(self.balances)

    async def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        self.receipt_calls += 1
        return self._next(self.receipts)

    async def send_transaction(
        self,
        to: str,
        value: int,
        data: bytes,
        gas_limit_hint: int | None = None,
    ) -> str:
        self.send_calls.append(
            {"to": to, "value": value, "data": data, "gas_limit_hint": gas_limit_hint}
        )
        self.events.append("send")
        if isinstance(self.send_result, Exception):
            raise self.send_result
        return self.send_result

    async def disconnect(self) -> None:
        pass


@pytest.fixture
def clock():
    """Instant clock for pollers."""
    return FakeClock()


@pytest.fixture
def account_address():
    """Depositing account used on both ledgers."""
    return TEST_ADDRESS


@pytest.fixture
def sample_transaction_hash():
    """Sample transaction hash for testing."""
    return TEST_TX_HASH


@pytest.fixture
def make_ledger(clock):
    """Factory for scripted fake ledgers sharing the test clock."""
    def _make(name: str = "Sepolia", chain_id: int = 11155111, **kwargs) -> FakeLedger:
        kwargs.setdefault("clock", clock)
        return FakeLedger(name=name, chain_id=chain_id, **kwargs)
    return _make


@pytest.fixture
def receipt():
    """Factory for included-transaction receipts."""
    def _receipt(success: bool = True, block_number: int = 100) -> TransactionReceipt:
        return TransactionReceipt(
            tx_hash=TEST_TX_HASH, success=success, block_number=block_number
        )
    return _receipt


@pytest.fixture
def dev_private_key():
    """Well-known development private key (never holds real funds)."""
    return TEST_PRIVATE_KEY
