"""
Deposit tool entry point.

Verifies both RPC endpoints, shows balances, asks for an amount and bridges
it from the source ledger to the destination ledger. The process exit code
identifies the terminal outcome so scripts can branch on it.
"""

import argparse
import asyncio
import sys
from enum import IntEnum

from loguru import logger
from pydantic import ValidationError

from console.initialization.logging import setup_logging
from console.prompts import prompt_amount
from console.spinner import Spinner, SpinnerObserver
from depositor.models.deposit import BalanceReport, DepositResult, DepositState
from depositor.services.bridge import (
    BalanceReader,
    CreditWaiter,
    DepositOrchestrator,
    DepositSubmitter,
    InclusionWaiter,
    LedgerClient,
    NetworkIdentityCheck,
    load_account,
)
from depositor.services.bridge.wallet_operations import normalize_address
from depositor.utils.exceptions import TRANSIENT_RPC_ERRORS, ConfigurationError
from depositor.utils.formatters import format_ether


class ExitCode(IntEnum):
    """Process exit codes, one per terminal outcome."""

    OK = 0
    UNEXPECTED_ERROR = 1
    CONFIGURATION_ERROR = 2
    VALIDATION_FAILED = 3
    SUBMISSION_FAILED = 4
    SOURCE_REJECTED = 5
    CREDIT_TIMED_OUT = 6
    INTERRUPTED = 130


EXIT_CODES = {
    DepositState.COMPLETED: ExitCode.OK,
    DepositState.VALIDATION_FAILED: ExitCode.VALIDATION_FAILED,
    DepositState.SUBMISSION_FAILED: ExitCode.SUBMISSION_FAILED,
    DepositState.SOURCE_REJECTED: ExitCode.SOURCE_REJECTED,
    DepositState.CREDIT_TIMED_OUT: ExitCode.CREDIT_TIMED_OUT,
}


def exit_code_for(state: DepositState) -> ExitCode:
    """Map a deposit state to its exit code; non-terminal states are unexpected."""
    return EXIT_CODES.get(state, ExitCode.UNEXPECTED_ERROR)


def positive_seconds(value: str) -> float:
    """argparse type for durations; zero, negative and non-finite values are rejected."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not seconds > 0 or seconds == float("inf"):
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l1-l2-deposit",
        description="Deposit native ETH from the source ledger to the destination ledger.",
    )
    parser.add_argument(
        "--amount",
        help="Amount in ETH (e.g. 0.05); prompts interactively when omitted",
    )
    parser.add_argument(
        "--balances-only",
        action="store_true",
        help="Verify endpoints and print balances without depositing",
    )
    parser.add_argument(
        "--address",
        help="Address to report in --balances-only mode when no PRIVATE_KEY is set",
    )
    parser.add_argument(
        "--deadline-seconds",
        type=positive_seconds,
        help="Override CREDIT_DEADLINE_MS for destination credit detection",
    )
    parser.add_argument(
        "--interval-seconds",
        type=positive_seconds,
        help="Override CREDIT_POLL_INTERVAL_MS",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    return parser


def build_orchestrator(
    settings,
    account_address: str,
    source: LedgerClient,
    destination: LedgerClient,
    interval_ms: float | None = None,
    deadline_ms: float | None = None,
) -> DepositOrchestrator:
    """Wire the deposit components from settings."""
    balance_reader = BalanceReader(source, destination)
    return DepositOrchestrator(
        account=account_address,
        decimals=settings.source_chain.decimals,
        network_check=NetworkIdentityCheck(
            source,
            destination,
            expected_source_chain_id=settings.l1_chain_id,
            expected_destination_chain_id=settings.l2_chain_id,
        ),
        balance_reader=balance_reader,
        submitter=DepositSubmitter(
            source,
            bridge_address=settings.l1_standard_bridge_address,
            min_gas_limit=settings.deposit_min_gas_limit,
        ),
        inclusion_waiter=InclusionWaiter(
            source, poll_interval_ms=settings.receipt_poll_interval_ms
        ),
        credit_waiter=CreditWaiter(
            balance_reader,
            interval_ms=(
                interval_ms if interval_ms is not None else settings.credit_poll_interval_ms
            ),
            deadline_ms=(
                deadline_ms if deadline_ms is not None else settings.credit_deadline_ms
            ),
        ),
    )


def print_balances(report: BalanceReport, source_name: str, destination_name: str) -> None:
    width = max(len(source_name), len(destination_name)) + 6
    print("\n=== BALANCES ===")
    print(f"{(source_name + ' (L1):').ljust(width)} {format_ether(report.source.value)}")
    print(f"{(destination_name + ' (L2):').ljust(width)} {format_ether(report.destination.value)}")
    print("=================\n")


def print_result(result: DepositResult) -> None:
    print(f"\nResult: {result.state}")
    if result.tx_hash:
        print(f"L1 bridge tx : {result.tx_hash}")
    if result.attempt.post_deposit_dest_balance is not None:
        print(f"L2 balance   : {format_ether(result.attempt.post_deposit_dest_balance)}")
    if result.cause:
        print(result.cause)
    if result.succeeded:
        print("\nDeposit completed!")


async def run_cli(args: argparse.Namespace, settings) -> ExitCode:
    """Run the tool with parsed arguments and loaded settings."""
    source_chain = settings.source_chain
    destination_chain = settings.destination_chain

    account = None
    if settings.private_key or not args.balances_only:
        account = load_account(settings.private_key)
        account_address = account.address
    elif args.address:
        account_address = normalize_address(args.address)
    else:
        raise ConfigurationError("--balances-only needs PRIVATE_KEY or --address")

    source = LedgerClient.from_url(
        source_chain.name,
        settings.rpc_l1,
        account=account,
        request_timeout=settings.rpc_request_timeout,
    )
    destination = LedgerClient.from_url(
        destination_chain.name,
        settings.rpc_l2,
        request_timeout=settings.rpc_request_timeout,
    )

    orchestrator = build_orchestrator(
        settings,
        account_address,
        source,
        destination,
        interval_ms=args.interval_seconds * 1000 if args.interval_seconds is not None else None,
        deadline_ms=args.deadline_seconds * 1000 if args.deadline_seconds is not None else None,
    )

    try:
        report = await orchestrator.prepare()
        print_balances(report, source_chain.name, destination_chain.name)

        if args.balances_only:
            return ExitCode.OK

        amount_text = args.amount if args.amount is not None else await prompt_amount()

        orchestrator.subscribe(
            SpinnerObserver(Spinner(), source_chain.name, destination_chain.name)
        )
        print(
            f"\nDeposit {amount_text} {source_chain.currency_symbol}: "
            f"{source_chain.name} -> {destination_chain.name} ..."
        )
        result = await orchestrator.deposit(amount_text)
        print_result(result)

        if result.attempt.submitted:
            try:
                print_balances(
                    await orchestrator.report_balances(),
                    source_chain.name,
                    destination_chain.name,
                )
            except TRANSIENT_RPC_ERRORS as e:
                logger.warning(f"Could not read final balances: {e}")

        return exit_code_for(result.state)
    finally:
        await source.disconnect()
        await destination.disconnect()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        from depositor.config.settings import settings
    except ValidationError as e:
        setup_logging(args.log_level or "INFO")
        logger.error(f"Invalid configuration: {e}")
        return ExitCode.CONFIGURATION_ERROR

    setup_logging(args.log_level or settings.log_level, settings.log_file)

    try:
        return asyncio.run(run_cli(args, settings))
    except ConfigurationError as e:
        logger.error(str(e))
        return ExitCode.CONFIGURATION_ERROR
    except (ValueError, *TRANSIENT_RPC_ERRORS) as e:
        logger.error(f"Deposit aborted: {e}")
        return ExitCode.UNEXPECTED_ERROR
    except KeyboardInterrupt:
        logger.warning(
            "Interrupted. A deposit that was already sent cannot be cancelled; "
            "check the L1 bridge tx on an explorer before depositing again."
        )
        return ExitCode.INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
