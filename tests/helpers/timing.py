# tests/helpers/timing.py
"""Suspending helpers for async accumulator tests.

Callbacks built on these force a real suspension point, so tests exercise
the action queue's ordering rather than callbacks that complete inline.
"""

import asyncio


async def sleep(ms: float) -> None:
    """Suspend the current task for ms milliseconds."""
    await asyncio.sleep(ms / 1000)


async def sleep_and_return[T](value: T, ms: float = 10) -> T:
    await sleep(ms)
    return value


async def sleep_and_raise(message: str, ms: float = 10) -> Exception:
    await sleep(ms)
    raise ValueError(message)
