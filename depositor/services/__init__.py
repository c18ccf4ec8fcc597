"""
Services.

Deposit logic layer.
"""

from depositor.services.bridge import (
    BalanceReader,
    CreditWaiter,
    DepositOrchestrator,
    DepositSubmitter,
    InclusionWaiter,
    LedgerClient,
    NetworkIdentityCheck,
)


__all__ = [
    "BalanceReader",
    "CreditWaiter",
    "DepositOrchestrator",
    "DepositSubmitter",
    "InclusionWaiter",
    "LedgerClient",
    "NetworkIdentityCheck",
]
