"""
Operator prompts.

Interactive input runs in a worker thread so the event loop stays free.
"""

import asyncio
from collections.abc import Callable

from depositor.validators.amount import validate_amount

AMOUNT_PROMPT = "Enter deposit amount in ETH (e.g., 0.05): "
MAX_AMOUNT_PROMPTS = 3


async def prompt_amount(
    read: Callable[[str], str] = input,
    write: Callable[[str], object] = print,
    attempts: int = MAX_AMOUNT_PROMPTS,
) -> str:
    """
    Ask for a deposit amount, re-prompting on invalid input.

    Returns the last answer even if it is still invalid; the orchestrator
    turns that into a ValidationFailed result.
    """
    answer = ""
    for _ in range(attempts):
        answer = (await asyncio.to_thread(read, AMOUNT_PROMPT)).strip()
        is_valid, _, error = validate_amount(answer)
        if is_valid:
            return answer
        write(f"Invalid amount: {error}")
    return answer
