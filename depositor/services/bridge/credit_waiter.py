"""
Destination credit waiter.

Fixed-interval poll of the destination balance until it reaches
``baseline + amount`` or the deadline passes. The ``>=`` comparison keeps the
check monotone: once the credit has landed, every later poll also succeeds.
"""

from dataclasses import dataclass

from loguru import logger

from depositor.config.constants import CREDIT_DEADLINE_MS, CREDIT_POLL_INTERVAL_MS
from depositor.models.deposit import Ledger
from depositor.utils.datetime_utils import MonotonicClock
from depositor.utils.exceptions import TRANSIENT_RPC_ERRORS, CreditTimeoutError
from depositor.utils.security import mask_address

from .balance_operations import BalanceReader


@dataclass(frozen=True)
class CreditObservation:
    """Balance that satisfied the credit target."""

    balance: int
    polls: int
    elapsed_ms: float


class CreditWaiter:
    """
    Detects the destination-ledger credit of a deposit.

    ``interval_ms`` and ``deadline_ms`` are the only tunables.
    """

    def __init__(
        self,
        balance_reader: BalanceReader,
        interval_ms: float = CREDIT_POLL_INTERVAL_MS,
        deadline_ms: float = CREDIT_DEADLINE_MS,
        clock: MonotonicClock | None = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if deadline_ms <= 0:
            raise ValueError("deadline_ms must be positive")

        self.balance_reader = balance_reader
        self.interval_ms = interval_ms
        self.deadline_ms = deadline_ms
        self.clock = clock or MonotonicClock()

    async def wait(
        self,
        account: str,
        target: int,
        deadline_ms: float | None = None,
    ) -> CreditObservation:
        """
        Poll until the destination balance is at least ``target``.

        Each round sleeps first, then reads. The last sleep is shortened so
        the final poll lands on the deadline. A poll that fails with a
        transient RPC error counts as "not yet credited"; the deadline is not
        extended.

        Args:
            account: Account address on the destination ledger
            target: Balance (wei) that proves the credit
            deadline_ms: Override of the configured deadline

        Returns:
            CreditObservation with the exact balance seen

        Raises:
            CreditTimeoutError: If the deadline elapses first
        """
        deadline = self.deadline_ms if deadline_ms is None else deadline_ms
        if deadline <= 0:
            raise ValueError("deadline_ms must be positive")

        start = self.clock.now_ms()
        polls = 0
        failed_polls = 0
        last_balance: int | None = None

        logger.info(
            f"Monitoring destination balance of {mask_address(account)} "
            f"for >= {target} wei (every {self.interval_ms:.0f} ms, "
            f"deadline {deadline:.0f} ms)"
        )

        while True:
            remaining = deadline - (self.clock.now_ms() - start)
            await self.clock.sleep_ms(min(self.interval_ms, max(remaining, 0)))

            polls += 1
            try:
                last_balance = await self.balance_reader.read(Ledger.DESTINATION, account)
            except TRANSIENT_RPC_ERRORS as e:
                failed_polls += 1
                logger.warning(f"Destination balance poll {polls} failed: {e}")
            else:
                if last_balance >= target:
                    elapsed = self.clock.now_ms() - start
                    logger.info(
                        f"Destination credit observed on poll {polls}: "
                        f"{last_balance} wei after {elapsed:.0f} ms"
                    )
                    return CreditObservation(
                        balance=last_balance, polls=polls, elapsed_ms=elapsed
                    )

            elapsed = self.clock.now_ms() - start
            if elapsed >= deadline:
                raise CreditTimeoutError(
                    target=target,
                    last_balance=last_balance,
                    polls=polls,
                    failed_polls=failed_polls,
                    elapsed_ms=elapsed,
                )
