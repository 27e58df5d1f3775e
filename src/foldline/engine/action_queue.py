# src/foldline/engine/action_queue.py
"""Sequential action queue for async accumulators.

Every mutating call on an AsyncAccumulator (append, and each transform's
stage installation) becomes one action on this queue. A single worker task
runs the actions strictly in enqueue order, awaiting each to completion
before starting the next, so a suspending callback can never reorder
effects.

State machine:
    idle     --enqueue()-->  draining  (worker task started)
    draining --queue empty--> idle     (worker task returns)

Enqueueing while no event loop is running is allowed; the worker then
starts on the next drain() or submit() from inside the loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from foldline.contracts.errors import ActionQueueError
from foldline.core.logging import get_logger

type Action = Callable[[], Awaitable[None]]


class ActionQueue:
    """Single-consumer FIFO of zero-argument async actions.

    Invariants:
        - At most one worker drains the queue at a time
        - Execution order equals enqueue order
        - The worker drains to empty before returning to idle

    Actions are expected to route their own failures (the accumulator's
    error channel). An action that raises anyway is recorded, logged, and
    re-raised as ActionQueueError from every later drain(); remaining
    actions still run.

    Usage:
        queue = ActionQueue(name="orders")
        queue.enqueue(lambda: stage.append(datum))
        value = await queue.submit(stage.resolve)  # runs after the append
    """

    def __init__(self, name: str = "accumulator") -> None:
        self._name = name
        self._actions: asyncio.Queue[Action] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._failure: Exception | None = None
        self._log = get_logger(__name__, queue=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_draining(self) -> bool:
        """True while a worker task is running actions."""
        return self._worker is not None and not self._worker.done()

    @property
    def pending_count(self) -> int:
        """Number of enqueued actions not yet started."""
        return self._actions.qsize()

    def enqueue(self, action: Action) -> None:
        """Append action to the FIFO and start the worker if idle."""
        self._actions.put_nowait(action)
        self._start_worker()

    def _start_worker(self) -> None:
        if self.is_draining or self._actions.empty():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Not inside a loop yet; drain() starts the worker later
            return
        self._worker = loop.create_task(self._run(), name=f"{self._name}-action-queue")

    async def _run(self) -> None:
        while not self._actions.empty():
            action = self._actions.get_nowait()
            try:
                await action()
            except Exception as exc:
                if self._failure is None:
                    self._failure = exc
                self._log.error(
                    "action_queue_action_failed",
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
            finally:
                self._actions.task_done()

    async def drain(self) -> None:
        """Wait until every enqueued action has run.

        Raises:
            ActionQueueError: If any action raised since the queue was created.
        """
        self._start_worker()
        await self._actions.join()
        if self._failure is not None:
            raise ActionQueueError(f"Action failed in queue {self._name!r}: {self._failure}") from self._failure

    async def submit[T](self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn as the next action in order and return its result.

        Everything enqueued before submit() runs first, and nothing enqueued
        after it runs until fn completes. Exceptions from fn propagate to
        the caller instead of being recorded as a queue failure.

        If the caller stops waiting (cancellation, timeout), fn still runs to
        completion in its turn and its outcome is discarded.
        """
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

        async def action() -> None:
            try:
                value = await fn()
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
                else:
                    self._log.debug("action_queue_submit_abandoned", error_type=type(exc).__name__)
                return
            if not future.done():
                future.set_result(value)

        self.enqueue(action)
        return await future
