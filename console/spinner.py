"""
Terminal progress display.

The spinner is a pure observer of deposit state changes: the orchestrator
notifies it and never asks it anything.
"""

import asyncio
import sys
from typing import TextIO

from depositor.config.constants import SPINNER_FRAME_DELAY, SPINNER_FRAMES
from depositor.models.deposit import DepositAttempt, DepositState


class Spinner:
    """Single-line braille spinner driven by an asyncio task."""

    def __init__(self, stream: TextIO | None = None, enabled: bool | None = None) -> None:
        self.stream = stream or sys.stdout
        if enabled is None:
            enabled = self.stream.isatty()
        self.enabled = enabled
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self, text: str) -> None:
        self.stop()
        if not self.enabled:
            self.stream.write(f"{text}\n")
            self.stream.flush()
            return
        self._task = asyncio.get_running_loop().create_task(self._spin(text))

    def stop(self, message: str | None = None) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            self.stream.write("\r".ljust(50) + "\r")
        if message:
            self.stream.write(f"{message}\n")
        self.stream.flush()

    async def _spin(self, text: str) -> None:
        i = 0
        while True:
            i = (i + 1) % len(SPINNER_FRAMES)
            self.stream.write(f"\r{SPINNER_FRAMES[i]} {text}")
            self.stream.flush()
            await asyncio.sleep(SPINNER_FRAME_DELAY)


class SpinnerObserver:
    """Maps deposit state changes onto spinner start/stop calls."""

    def __init__(
        self,
        spinner: Spinner,
        source_name: str = "L1",
        destination_name: str = "L2",
    ) -> None:
        self.spinner = spinner
        self.source_name = source_name
        self.destination_name = destination_name

    def __call__(
        self,
        attempt: DepositAttempt,
        previous: DepositState,
        new: DepositState,
    ) -> None:
        if previous is DepositState.AWAITING_SOURCE_INCLUSION:
            if new is DepositState.AWAITING_DESTINATION_CREDIT:
                self.spinner.stop(f"✔️ {self.source_name} tx confirmed!")
            else:
                self.spinner.stop(f"✖ {self.source_name} tx reverted.")
        elif previous is DepositState.AWAITING_DESTINATION_CREDIT:
            if new is DepositState.COMPLETED:
                self.spinner.stop(f"✔️ {self.destination_name} balance increased!")
            else:
                self.spinner.stop(f"… {self.destination_name} credit not observed yet.")

        if new is DepositState.AWAITING_SOURCE_INCLUSION:
            self.spinner.start(f"Waiting for {self.source_name} confirmation...")
        elif new is DepositState.AWAITING_DESTINATION_CREDIT:
            self.spinner.start(f"Monitoring {self.destination_name} balance...")
