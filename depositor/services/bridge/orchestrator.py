"""
Deposit orchestration.

Runs one source → destination deposit through its state machine:

    Idle → Submitting → AwaitingSourceInclusion → AwaitingDestinationCredit → Completed

with the terminal failures ValidationFailed, SubmissionFailed, SourceRejected
and CreditTimedOut. Sending the bridging transaction is the point of no
return: after it, the deposit can be waited on again but never cancelled,
rolled back or resubmitted.
"""

from collections.abc import Callable

from loguru import logger

from depositor.config.constants import NATIVE_DECIMALS, NATIVE_SYMBOL
from depositor.models.deposit import (
    TRANSITIONS,
    BalanceReport,
    DepositAttempt,
    DepositResult,
    DepositState,
    Ledger,
    TransactionStatus,
)
from depositor.utils.exceptions import (
    TRANSIENT_RPC_ERRORS,
    CreditTimeoutError,
    SubmissionError,
)
from depositor.utils.formatters import format_ether
from depositor.utils.security import mask_address, mask_tx_hash
from depositor.validators.amount import validate_amount

from .balance_operations import BalanceReader
from .credit_waiter import CreditWaiter
from .deposit_submitter import DepositSubmitter
from .inclusion_waiter import InclusionWaiter
from .network_check import NetworkIdentityCheck

# observer(attempt, previous_state, new_state)
StateObserver = Callable[[DepositAttempt, DepositState, DepositState], None]


class DepositOrchestrator:
    """
    Composes the deposit components into the end-to-end flow.

    Each call to ``deposit()`` creates a fresh DepositAttempt; nothing is
    carried over between calls.
    """

    def __init__(
        self,
        account: str,
        network_check: NetworkIdentityCheck,
        balance_reader: BalanceReader,
        submitter: DepositSubmitter,
        inclusion_waiter: InclusionWaiter,
        credit_waiter: CreditWaiter,
        decimals: int = NATIVE_DECIMALS,
        observers: list[StateObserver] | None = None,
    ) -> None:
        """
        Initialize deposit orchestrator.

        Args:
            account: Depositing address, reused on both ledgers
            network_check: Chain id verification for both endpoints
            balance_reader: Native balance reads on both ledgers
            submitter: Sends the bridging transaction
            inclusion_waiter: Waits for the source receipt
            credit_waiter: Waits for the destination credit
            decimals: Native coin decimals used to parse amounts
            observers: State-change callbacks (progress display, etc.)
        """
        self.account = account
        self.network_check = network_check
        self.balance_reader = balance_reader
        self.submitter = submitter
        self.inclusion_waiter = inclusion_waiter
        self.credit_waiter = credit_waiter
        self.decimals = decimals
        self._verified = False
        self._observers: list[StateObserver] = list(observers or [])

    def subscribe(self, observer: StateObserver) -> None:
        """Register a state-change observer."""
        self._observers.append(observer)

    def _transition(
        self,
        attempt: DepositAttempt,
        new_state: DepositState,
        cause: str | None = None,
    ) -> None:
        previous = attempt.state
        if new_state not in TRANSITIONS.get(previous, frozenset()):
            raise RuntimeError(f"Illegal deposit transition {previous} -> {new_state}")

        attempt.state = new_state
        attempt.cause = cause

        if new_state.is_failure:
            logger.error(f"Deposit {previous} -> {new_state}: {cause}")
        elif new_state.is_unresolved:
            logger.warning(f"Deposit {previous} -> {new_state}: {cause}")
        else:
            logger.info(f"Deposit {previous} -> {new_state}")

        for observer in self._observers:
            try:
                observer(attempt, previous, new_state)
            except Exception as e:
                # Observers are display-only and must not alter the flow
                logger.exception(f"State observer failed: {e}")

    def _result(self, attempt: DepositAttempt) -> DepositResult:
        return DepositResult(state=attempt.state, attempt=attempt, cause=attempt.cause)

    async def prepare(self) -> BalanceReport:
        """
        Verify both endpoints, then report balances on both ledgers.

        Raises:
            NetworkMismatchError: If either endpoint is on the wrong chain.
                No balance is read in that case.
        """
        await self._ensure_verified()
        return await self.report_balances()

    async def _ensure_verified(self) -> None:
        # Once per orchestrator, before any balance read or send
        if not self._verified:
            await self.network_check.verify()
            self._verified = True

    async def report_balances(self) -> BalanceReport:
        """Snapshot the account's balance on both ledgers concurrently."""
        report = await self.balance_reader.report(self.account)
        logger.info(
            f"Balances of {mask_address(self.account)}: "
            f"source={format_ether(report.source.value)}, "
            f"destination={format_ether(report.destination.value)}"
        )
        return report

    async def run(self, amount_text: str) -> DepositResult:
        """Network check, balance report, then one deposit."""
        await self.prepare()
        return await self.deposit(amount_text)

    async def deposit(self, amount_text: str) -> DepositResult:
        """
        Run one deposit attempt to a terminal state.

        Args:
            amount_text: Operator-supplied decimal amount, e.g. "0.05"

        Returns:
            DepositResult carrying the terminal state and its cause

        Raises:
            NetworkMismatchError: If the endpoints were not verified yet and
                either is on the wrong chain. Nothing is read or sent.
        """
        attempt = DepositAttempt(account=self.account)

        is_valid, amount, error = validate_amount(amount_text, decimals=self.decimals)
        if not is_valid or amount is None:
            self._transition(attempt, DepositState.VALIDATION_FAILED, error)
            return self._result(attempt)

        await self._ensure_verified()

        attempt.amount = amount
        self._transition(attempt, DepositState.SUBMITTING)

        # Baseline must be taken before the send; a fast credit could otherwise
        # land in the baseline and never be detected.
        try:
            attempt.pre_deposit_dest_balance = await self.balance_reader.read(
                Ledger.DESTINATION, self.account
            )
        except TRANSIENT_RPC_ERRORS as e:
            self._transition(
                attempt,
                DepositState.SUBMISSION_FAILED,
                f"Could not read destination balance before submitting: {e}. "
                "Nothing was sent.",
            )
            return self._result(attempt)

        logger.warning(
            f"Submitting deposit of {amount.text} {NATIVE_SYMBOL}: "
            "point of no return, the deposit cannot be cancelled once sent"
        )

        try:
            record = await self.submitter.submit(attempt)
        except SubmissionError as e:
            cause = f"Node refused the deposit transaction: {e}."
            if e.tx_hash:
                cause += (
                    f" The signed transaction {e.tx_hash} may still have been broadcast;"
                    " check an explorer before retrying."
                )
            else:
                cause += " No funds left the source ledger; safe to retry."
            self._transition(attempt, DepositState.SUBMISSION_FAILED, cause)
            return self._result(attempt)

        logger.info(f"Source bridge tx: {record.identifier} (waiting for inclusion)")
        self._transition(attempt, DepositState.AWAITING_SOURCE_INCLUSION)
        return await self._await_inclusion(attempt)

    async def resume_inclusion_wait(self, attempt: DepositAttempt) -> DepositResult:
        """
        Wait again for the source receipt of an interrupted attempt.

        Never resubmits.
        """
        if attempt.state is not DepositState.AWAITING_SOURCE_INCLUSION or attempt.source_tx is None:
            raise ValueError(f"Attempt is not awaiting source inclusion (state={attempt.state})")
        return await self._await_inclusion(attempt)

    async def resume_credit_wait(
        self,
        attempt: DepositAttempt,
        deadline_ms: float | None = None,
    ) -> DepositResult:
        """
        Wait again for the destination credit, optionally with a new deadline.

        Valid for attempts that timed out or whose credit wait was
        interrupted. Never resubmits.
        """
        if attempt.state is DepositState.CREDIT_TIMED_OUT:
            self._transition(attempt, DepositState.AWAITING_DESTINATION_CREDIT)
        elif attempt.state is not DepositState.AWAITING_DESTINATION_CREDIT:
            raise ValueError(f"Attempt is not awaiting destination credit (state={attempt.state})")
        return await self._await_credit(attempt, deadline_ms)

    async def _await_inclusion(self, attempt: DepositAttempt) -> DepositResult:
        record = await self.inclusion_waiter.wait(attempt.source_tx)

        if record.status is TransactionStatus.INCLUDED_FAILURE:
            self._transition(
                attempt,
                DepositState.SOURCE_REJECTED,
                f"Deposit transaction {mask_tx_hash(record.identifier)} reverted on the source ledger "
                f"(block {record.block_number}). Gas was spent but the amount was "
                "not bridged; do not wait for a destination credit.",
            )
            return self._result(attempt)

        self._transition(attempt, DepositState.AWAITING_DESTINATION_CREDIT)
        return await self._await_credit(attempt)

    async def _await_credit(
        self,
        attempt: DepositAttempt,
        deadline_ms: float | None = None,
    ) -> DepositResult:
        target = attempt.credit_target
        if target is None:
            raise RuntimeError("Attempt has no credit target")

        try:
            observation = await self.credit_waiter.wait(
                self.account, target, deadline_ms=deadline_ms
            )
        except CreditTimeoutError as e:
            attempt.post_deposit_dest_balance = e.last_balance
            rpc_note = (
                f" {e.failed_polls} of {e.polls} polls failed with RPC errors."
                if e.failed_polls
                else ""
            )
            self._transition(
                attempt,
                DepositState.CREDIT_TIMED_OUT,
                f"Unresolved: source transaction {mask_tx_hash(attempt.source_tx.identifier)} "
                f"succeeded but the destination credit was not observed within "
                f"{e.elapsed_ms / 1000:.0f}s.{rpc_note} The deposit is likely still in "
                "flight; check again later instead of depositing again.",
            )
            return self._result(attempt)

        attempt.post_deposit_dest_balance = observation.balance
        self._transition(attempt, DepositState.COMPLETED)
        return self._result(attempt)
