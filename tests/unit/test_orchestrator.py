"""Unit tests for the deposit orchestrator state machine."""

import pytest
from web3.exceptions import Web3Exception

from depositor.models.deposit import (
    Amount,
    DepositAttempt,
    DepositState,
    TransactionRecord,
)
from depositor.services.bridge.balance_operations import BalanceReader
from depositor.services.bridge.core_constants import L1_STANDARD_BRIDGE_ADDRESS
from depositor.services.bridge.credit_waiter import CreditWaiter
from depositor.services.bridge.deposit_submitter import DepositSubmitter
from depositor.services.bridge.inclusion_waiter import InclusionWaiter
from depositor.services.bridge.network_check import NetworkIdentityCheck
from depositor.services.bridge.orchestrator import DepositOrchestrator
from depositor.utils.exceptions import NetworkMismatchError, SubmissionError

ONE_ETH = 10**18
DEPOSIT = 5 * 10**16
SEPOLIA_ID = 11155111
GIWA_ID = 91342


@pytest.fixture
def build(make_ledger, clock, account_address):
    """Factory wiring an orchestrator over scripted ledgers."""

    def _build(source_kwargs=None, destination_kwargs=None):
        source = make_ledger("Sepolia", **{"chain_id": SEPOLIA_ID, **(source_kwargs or {})})
        destination = make_ledger(
            "Giwa Sepolia", **{"chain_id": GIWA_ID, **(destination_kwargs or {})}
        )
        # One timeline across both ledgers
        destination.events = source.events

        reader = BalanceReader(source, destination)
        orchestrator = DepositOrchestrator(
            account=account_address,
            network_check=NetworkIdentityCheck(source, destination, SEPOLIA_ID, GIWA_ID),
            balance_reader=reader,
            submitter=DepositSubmitter(source, bridge_address=L1_STANDARD_BRIDGE_ADDRESS),
            inclusion_waiter=InclusionWaiter(source, poll_interval_ms=4000, clock=clock),
            credit_waiter=CreditWaiter(
                reader, interval_ms=10_000, deadline_ms=60_000, clock=clock
            ),
        )
        return orchestrator, source, destination

    return _build


def _recorder():
    seen = []

    def observer(attempt, previous, new):
        seen.append((previous, new))

    return observer, seen


class TestDepositFlow:
    """End-to-end runs over scripted ledgers."""

    @pytest.mark.asyncio
    async def test_completed_deposit(self, build, receipt, sample_transaction_hash):
        orchestrator, source, destination = build(
            source_kwargs={"receipts": [None, receipt(success=True)]},
            destination_kwargs={"balances": [ONE_ETH, ONE_ETH, ONE_ETH, ONE_ETH + DEPOSIT]},
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.COMPLETED
        assert result.succeeded
        assert result.cause is None
        assert result.tx_hash == sample_transaction_hash
        assert result.attempt.pre_deposit_dest_balance == ONE_ETH
        assert result.attempt.post_deposit_dest_balance == ONE_ETH + DEPOSIT
        assert len(source.send_calls) == 1
        assert source.send_calls[0]["value"] == DEPOSIT
        # Baseline plus three credit polls
        assert len(destination.balance_calls) == 4

    @pytest.mark.asyncio
    async def test_baseline_read_before_send(self, build, receipt):
        orchestrator, source, _ = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [ONE_ETH, ONE_ETH + DEPOSIT]},
        )

        await orchestrator.deposit("0.05")

        assert source.events[:2] == ["balance", "send"]

    @pytest.mark.asyncio
    async def test_observers_see_every_transition(self, build, receipt):
        orchestrator, _, _ = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, DEPOSIT]},
        )
        observer, seen = _recorder()
        orchestrator.subscribe(observer)

        await orchestrator.deposit("0.05")

        assert seen == [
            (DepositState.IDLE, DepositState.SUBMITTING),
            (DepositState.SUBMITTING, DepositState.AWAITING_SOURCE_INCLUSION),
            (DepositState.AWAITING_SOURCE_INCLUSION, DepositState.AWAITING_DESTINATION_CREDIT),
            (DepositState.AWAITING_DESTINATION_CREDIT, DepositState.COMPLETED),
        ]

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_break_flow(self, build, receipt):
        orchestrator, _, _ = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, DEPOSIT]},
        )

        def broken(attempt, previous, new):
            raise RuntimeError("display crashed")

        observer, seen = _recorder()
        orchestrator.subscribe(broken)
        orchestrator.subscribe(observer)

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.COMPLETED
        assert len(seen) == 4

    @pytest.mark.asyncio
    async def test_each_call_is_a_fresh_attempt(self, build, receipt):
        orchestrator, source, _ = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, DEPOSIT, DEPOSIT, 2 * DEPOSIT]},
        )

        first = await orchestrator.deposit("0.05")
        second = await orchestrator.deposit("0.05")

        assert first.attempt is not second.attempt
        assert second.state is DepositState.COMPLETED
        assert len(source.send_calls) == 2

    @pytest.mark.asyncio
    async def test_run_checks_networks_first(self, build, receipt):
        orchestrator, source, destination = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, 0, DEPOSIT]},
        )

        result = await orchestrator.run("0.05")

        assert result.state is DepositState.COMPLETED
        assert source.chain_id_calls == 1
        assert destination.chain_id_calls == 1


class TestDepositFailures:
    """Terminal failure states."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "abc", "", "-1", "0.0000000000000000001"])
    async def test_invalid_amount_touches_nothing(self, build, amount):
        orchestrator, source, destination = build()
        observer, seen = _recorder()
        orchestrator.subscribe(observer)

        result = await orchestrator.deposit(amount)

        assert result.state is DepositState.VALIDATION_FAILED
        assert result.cause
        assert result.tx_hash is None
        assert seen == [(DepositState.IDLE, DepositState.VALIDATION_FAILED)]
        assert source.chain_id_calls == 0
        assert source.balance_calls == []
        assert destination.balance_calls == []
        assert source.send_calls == []

    @pytest.mark.asyncio
    async def test_refused_send_is_safe_to_retry(self, build):
        orchestrator, source, destination = build(
            source_kwargs={"send_result": SubmissionError("insufficient funds for gas")},
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.SUBMISSION_FAILED
        assert "insufficient funds" in result.cause
        assert "safe to retry" in result.cause
        assert result.tx_hash is None
        assert source.receipt_calls == 0
        # Baseline only, no credit polling
        assert len(destination.balance_calls) == 1

    @pytest.mark.asyncio
    async def test_lost_send_answer_reports_local_hash(self, build, sample_transaction_hash):
        orchestrator, _, _ = build(
            source_kwargs={
                "send_result": SubmissionError("read timeout", tx_hash=sample_transaction_hash)
            },
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.SUBMISSION_FAILED
        assert sample_transaction_hash in result.cause
        assert "check an explorer" in result.cause

    @pytest.mark.asyncio
    async def test_baseline_read_error_sends_nothing(self, build):
        orchestrator, source, _ = build(
            destination_kwargs={"balances": [Web3Exception("503 Service Unavailable")]},
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.SUBMISSION_FAILED
        assert "Nothing was sent" in result.cause
        assert source.send_calls == []

    @pytest.mark.asyncio
    async def test_reverted_source_tx_skips_credit_wait(self, build, receipt, clock):
        orchestrator, _, destination = build(
            source_kwargs={"receipts": [None, receipt(success=False, block_number=77)]},
            destination_kwargs={"balances": [ONE_ETH]},
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.SOURCE_REJECTED
        assert "reverted" in result.cause
        assert "block 77" in result.cause
        assert result.attempt.post_deposit_dest_balance is None
        assert len(destination.balance_calls) == 1
        assert clock.sleeps == [4000]

    @pytest.mark.asyncio
    async def test_credit_timeout_is_unresolved(self, build, receipt, clock):
        orchestrator, _, destination = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [ONE_ETH]},
        )

        result = await orchestrator.deposit("0.05")

        assert result.state is DepositState.CREDIT_TIMED_OUT
        assert result.cause.startswith("Unresolved")
        assert not result.state.is_failure
        assert "check again later" in result.cause
        assert result.attempt.post_deposit_dest_balance == ONE_ETH
        assert len(destination.balance_calls) == 1 + 6
        assert clock.now_ms() == 60_000


class TestNetworkPreflight:
    """prepare() fails fast on a wrong endpoint."""

    @pytest.mark.asyncio
    async def test_mismatch_reads_no_balance(self, build):
        orchestrator, source, destination = build(source_kwargs={"chain_id": 1})

        with pytest.raises(NetworkMismatchError):
            await orchestrator.prepare()

        assert source.balance_calls == []
        assert destination.balance_calls == []
        assert source.send_calls == []

    @pytest.mark.asyncio
    async def test_destination_mismatch_reads_no_balance(self, build):
        orchestrator, source, destination = build(destination_kwargs={"chain_id": SEPOLIA_ID})

        with pytest.raises(NetworkMismatchError):
            await orchestrator.prepare()

        assert source.balance_calls == []
        assert destination.balance_calls == []

    @pytest.mark.asyncio
    async def test_deposit_without_prepare_refuses_wrong_chain(self, build, receipt):
        orchestrator, source, destination = build(
            source_kwargs={"chain_id": 1, "receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, DEPOSIT]},
        )

        with pytest.raises(NetworkMismatchError):
            await orchestrator.deposit("0.05")

        assert source.send_calls == []
        assert source.balance_calls == []
        assert destination.balance_calls == []

    @pytest.mark.asyncio
    async def test_deposit_without_prepare_verifies_once(self, build, receipt):
        orchestrator, source, destination = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [0, DEPOSIT, DEPOSIT, 2 * DEPOSIT]},
        )

        first = await orchestrator.deposit("0.05")
        second = await orchestrator.deposit("0.05")

        assert first.state is DepositState.COMPLETED
        assert second.state is DepositState.COMPLETED
        assert source.chain_id_calls == 1
        assert destination.chain_id_calls == 1

    @pytest.mark.asyncio
    async def test_prepare_reports_balances(self, build):
        orchestrator, _, _ = build(
            source_kwargs={"balances": [2 * ONE_ETH]},
            destination_kwargs={"balances": [ONE_ETH]},
        )

        report = await orchestrator.prepare()

        assert report.source.value == 2 * ONE_ETH
        assert report.destination.value == ONE_ETH


class TestResume:
    """Waiting again on an interrupted or timed-out attempt."""

    @pytest.mark.asyncio
    async def test_resume_after_timeout_never_resubmits(self, build, receipt):
        orchestrator, source, destination = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [ONE_ETH]},
        )
        timed_out = await orchestrator.deposit("0.05")
        assert timed_out.state is DepositState.CREDIT_TIMED_OUT

        destination.balances = [ONE_ETH + DEPOSIT]
        result = await orchestrator.resume_credit_wait(timed_out.attempt, deadline_ms=30_000)

        assert result.state is DepositState.COMPLETED
        assert result.cause is None
        assert result.attempt.post_deposit_dest_balance == ONE_ETH + DEPOSIT
        assert len(source.send_calls) == 1

    @pytest.mark.asyncio
    async def test_resume_inclusion_wait(self, build, receipt, account_address, sample_transaction_hash):
        orchestrator, source, _ = build(
            source_kwargs={"receipts": [receipt(success=True)]},
            destination_kwargs={"balances": [ONE_ETH + DEPOSIT]},
        )
        attempt = DepositAttempt(
            account=account_address,
            amount=Amount(value=DEPOSIT, text="0.05"),
            source_tx=TransactionRecord(identifier=sample_transaction_hash),
            pre_deposit_dest_balance=ONE_ETH,
            state=DepositState.AWAITING_SOURCE_INCLUSION,
            submitted=True,
        )

        result = await orchestrator.resume_inclusion_wait(attempt)

        assert result.state is DepositState.COMPLETED
        assert source.send_calls == []

    @pytest.mark.asyncio
    async def test_resume_rejects_wrong_state(self, build, account_address):
        orchestrator, _, _ = build()
        attempt = DepositAttempt(account=account_address, state=DepositState.COMPLETED)

        with pytest.raises(ValueError):
            await orchestrator.resume_credit_wait(attempt)
        with pytest.raises(ValueError):
            await orchestrator.resume_inclusion_wait(attempt)
