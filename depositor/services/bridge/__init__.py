"""
Bridge deposit services module.

One module per component of the source → destination deposit flow:

ledger_client.py      - AsyncWeb3 RPC access to one ledger
network_check.py      - Chain id verification of both endpoints
balance_operations.py - Native balance reads and snapshots
deposit_submitter.py  - depositETHTo submission (once per attempt)
inclusion_waiter.py   - Source receipt polling
credit_waiter.py      - Destination credit polling with deadline
orchestrator.py       - State machine composing the above
"""

from .balance_operations import BalanceReader
from .core_constants import (
    DEFAULT_MIN_GAS_LIMIT,
    L1_STANDARD_BRIDGE_ABI,
    L1_STANDARD_BRIDGE_ADDRESS,
)
from .credit_waiter import CreditObservation, CreditWaiter
from .deposit_submitter import DepositSubmitter
from .inclusion_waiter import InclusionWaiter
from .ledger_client import LedgerClient, TransactionReceipt
from .network_check import NetworkIdentityCheck
from .orchestrator import DepositOrchestrator, StateObserver
from .wallet_operations import load_account


__all__ = [
    "BalanceReader",
    "CreditObservation",
    "CreditWaiter",
    "DEFAULT_MIN_GAS_LIMIT",
    "DepositOrchestrator",
    "DepositSubmitter",
    "InclusionWaiter",
    "L1_STANDARD_BRIDGE_ABI",
    "L1_STANDARD_BRIDGE_ADDRESS",
    "LedgerClient",
    "NetworkIdentityCheck",
    "StateObserver",
    "TransactionReceipt",
    "load_account",
]
