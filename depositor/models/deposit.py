"""
Deposit domain models.

Plain dataclasses describing one deposit run. Nothing here is persisted:
a DepositAttempt lives for a single orchestration call.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from depositor.utils.datetime_utils import utc_now


class Ledger(StrEnum):
    """Which side of the bridge a value belongs to."""

    SOURCE = "source"
    DESTINATION = "destination"


class TransactionStatus(StrEnum):
    """Lifecycle of a submitted source-ledger transaction."""

    PENDING = "pending"
    INCLUDED_SUCCESS = "included-success"
    INCLUDED_FAILURE = "included-failure"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


class DepositState(StrEnum):
    """States of the deposit state machine."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_SOURCE_INCLUSION = "awaiting_source_inclusion"
    AWAITING_DESTINATION_CREDIT = "awaiting_destination_credit"
    COMPLETED = "completed"
    VALIDATION_FAILED = "validation_failed"
    SUBMISSION_FAILED = "submission_failed"
    SOURCE_REJECTED = "source_rejected"
    CREDIT_TIMED_OUT = "credit_timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_unresolved(self) -> bool:
        """Source tx succeeded but the credit is not observed yet; not a failure."""
        return self is DepositState.CREDIT_TIMED_OUT

    @property
    def is_failure(self) -> bool:
        return self.is_terminal and self not in (
            DepositState.COMPLETED,
            DepositState.CREDIT_TIMED_OUT,
        )


TERMINAL_STATES = frozenset({
    DepositState.COMPLETED,
    DepositState.VALIDATION_FAILED,
    DepositState.SUBMISSION_FAILED,
    DepositState.SOURCE_REJECTED,
    DepositState.CREDIT_TIMED_OUT,
})

# Allowed edges of the state machine
TRANSITIONS: dict[DepositState, frozenset[DepositState]] = {
    DepositState.IDLE: frozenset({
        DepositState.SUBMITTING,
        DepositState.VALIDATION_FAILED,
    }),
    DepositState.SUBMITTING: frozenset({
        DepositState.AWAITING_SOURCE_INCLUSION,
        DepositState.SUBMISSION_FAILED,
    }),
    DepositState.AWAITING_SOURCE_INCLUSION: frozenset({
        DepositState.AWAITING_DESTINATION_CREDIT,
        DepositState.SOURCE_REJECTED,
    }),
    DepositState.AWAITING_DESTINATION_CREDIT: frozenset({
        DepositState.COMPLETED,
        DepositState.CREDIT_TIMED_OUT,
    }),
    # A timed-out credit wait may be resumed with a new deadline
    DepositState.CREDIT_TIMED_OUT: frozenset({
        DepositState.AWAITING_DESTINATION_CREDIT,
    }),
}


@dataclass(frozen=True)
class Amount:
    """Validated positive amount in base units (wei)."""

    value: int
    text: str

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("Amount must be positive")


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balance of one account on one ledger at one moment."""

    ledger: Ledger
    account: str
    value: int
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class TransactionRecord:
    """Source-ledger bridging transaction."""

    identifier: str
    submitting_ledger: Ledger = Ledger.SOURCE
    status: TransactionStatus = TransactionStatus.PENDING
    block_number: int | None = None


@dataclass
class DepositAttempt:
    """Aggregate root for one deposit run."""

    account: str
    amount: Amount | None = None
    source_tx: TransactionRecord | None = None
    pre_deposit_dest_balance: int | None = None
    post_deposit_dest_balance: int | None = None
    state: DepositState = DepositState.IDLE
    cause: str | None = None
    submitted: bool = False

    @property
    def credit_target(self) -> int | None:
        """Destination balance that proves the credit has landed."""
        if self.amount is None or self.pre_deposit_dest_balance is None:
            return None
        return self.pre_deposit_dest_balance + self.amount.value


@dataclass(frozen=True)
class BalanceReport:
    """Balances of the account on both ledgers."""

    source: BalanceSnapshot
    destination: BalanceSnapshot


@dataclass(frozen=True)
class DepositResult:
    """Terminal outcome of a deposit run."""

    state: DepositState
    attempt: DepositAttempt
    cause: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is DepositState.COMPLETED

    @property
    def tx_hash(self) -> str | None:
        return self.attempt.source_tx.identifier if self.attempt.source_tx else None
