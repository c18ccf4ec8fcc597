"""
Timeouts for read-only RPC calls.

Chain id, balance and receipt lookups are bounded so a stalled endpoint turns
into a BlockchainTimeoutError that pollers treat as a failed poll. Sends are
never wrapped: a send that timed out locally may still have reached the node.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger

from depositor.config.constants import BLOCKCHAIN_TIMEOUT
from depositor.utils.exceptions import BlockchainTimeoutError

T = TypeVar("T")


async def with_timeout(
    coro: Awaitable[T],
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
) -> T:
    """
    Await ``coro`` for at most ``timeout`` seconds.

    Raises:
        BlockchainTimeoutError: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        logger.warning(f"{operation_name} gave no answer within {timeout}s")
        raise BlockchainTimeoutError(f"{operation_name} timed out after {timeout}s") from e


def timeout_decorator(
    timeout: float | None = None,
    operation_name: str | None = None,
):
    """
    Bound an async method with ``with_timeout``.

    Without an explicit ``timeout`` the bound instance's ``read_timeout``
    attribute is used, falling back to BLOCKCHAIN_TIMEOUT. Works on plain
    coroutine functions too.

    Usage:
        @timeout_decorator(operation_name="get_balance")
        async def get_balance(self, address: str) -> int:
            ...
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        name = operation_name or func.__name__

        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            limit = timeout
            if limit is None:
                limit = getattr(args[0], "read_timeout", None) if args else None
            return await with_timeout(
                func(*args, **kwargs),
                timeout=limit or BLOCKCHAIN_TIMEOUT,
                operation_name=name,
            )
        return wrapper
    return decorator
