"""
Concurrent fan-out / fan-in over a shared SerializedCounter.

Responsibilities:
- Launch one asyncio task per requested operation
- Record each unit's result as it completes
- Join on every launched unit before returning
- Convert launch failures into LaunchFailure (no partial batches)

Non-responsibilities:
- No ordering guarantees beyond what the counter's lock provides
- No retries (callers decide whether to retry a LaunchFailure)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Coroutine, Sequence
from typing import Any, Awaitable, Callable

from constants import (
    DISPATCH_MAX_IN_FLIGHT_DEFAULT,
    METRIC_DISPATCH_ALL_LATENCY,
    TASK_ID_START,
)
from counter.enums.operation import Operation
from counter.errors import LaunchFailure
from counter.serialized_counter import SerializedCounter
from dispatch.task import DispatchBatch, TaskRecord
from observability.logger import log_event
from observability.metrics import timed


# ---------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------

SpawnFn = Callable[[Coroutine[Any, Any, None]], "asyncio.Task[None]"]
AfterOperationFn = Callable[[TaskRecord], Awaitable[None]]


class TaskDispatcher:
    """
    Runs a batch of operations concurrently against one counter.

    Lifecycle of a unit:
    1. dispatch_all spawns it (task_id assigned in submission order)
    2. it waits for an in-flight slot, if max_in_flight is set, and
       holds it through steps 3 and 4
    3. it applies its operation through the counter (serialized)
    4. optional after_operation hook runs (simulated work, tracing)
    5. its TaskRecord is appended to the batch (completion order)

    Guarantees:
    - dispatch_all returns only after every launched unit completed
    - The returned batch holds exactly one record per operation
    - A launch failure cancels and awaits everything already launched,
      then raises LaunchFailure
    """

    def __init__(
        self,
        counter: SerializedCounter,
        *,
        max_in_flight: int | None = DISPATCH_MAX_IN_FLIGHT_DEFAULT,
        spawn: SpawnFn | None = None,
        after_operation: AfterOperationFn | None = None,
    ) -> None:
        if max_in_flight is not None and max_in_flight <= 0:
            raise ValueError("max_in_flight must be > 0")

        self._counter = counter
        self._max_in_flight = max_in_flight
        self._spawn: SpawnFn = spawn or asyncio.create_task
        self._after_operation = after_operation

    @property
    def counter(self) -> SerializedCounter:
        return self._counter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def dispatch_all(self, operations: Sequence[Operation]) -> DispatchBatch:
        """
        Apply every operation concurrently and wait for all of them.

        Returns:
            DispatchBatch with one record per operation, in completion order.

        Raises:
            LaunchFailure if any unit could not be started.
            CancelledError if the caller cancels; all units are cancelled too.
        """
        ops = tuple(operations)
        if not ops:
            return DispatchBatch.empty()

        completed: list[TaskRecord] = []
        tasks: list[asyncio.Task[None]] = []
        gate = (
            asyncio.Semaphore(self._max_in_flight)
            if self._max_in_flight is not None
            else None
        )

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "DISPATCH_STARTED",
            "operations": len(ops),
            "max_in_flight": self._max_in_flight,
            "counter": self._counter.snapshot(),
        })

        with timed(
            METRIC_DISPATCH_ALL_LATENCY,
            details={"operations": len(ops)},
        ):
            # ---- fan-out ----
            for task_id, op in enumerate(ops, start=TASK_ID_START):
                coro = self._run_unit(
                    task_id=task_id,
                    op=op,
                    gate=gate,
                    completed=completed,
                )
                try:
                    tasks.append(self._spawn(coro))
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    coro.close()
                    await _cancel_and_wait(tasks)
                    log_event({
                        "ts_ms": _now_ms(),
                        "event_type": "DISPATCH_LAUNCH_FAILED",
                        "requested": len(ops),
                        "launched": len(tasks),
                        "exception": type(exc).__name__,
                        "message": str(exc),
                    })
                    raise LaunchFailure(
                        requested=len(ops),
                        launched=len(tasks),
                        reason=str(exc),
                    ) from exc

            # ---- fan-in ----
            try:
                await asyncio.gather(*tasks)
            except BaseException:
                await _cancel_and_wait(tasks)
                raise

        batch = DispatchBatch(records=tuple(completed))

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "DISPATCH_COMPLETED",
            "operations": len(batch),
            "net_delta": batch.net_delta(),
            "counter": self._counter.snapshot(),
        })

        return batch

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _run_unit(
        self,
        *,
        task_id: int,
        op: Operation,
        gate: asyncio.Semaphore | None,
        completed: list[TaskRecord],
    ) -> None:
        # The slot is held for the whole unit, hook included
        if gate is None:
            record = await self._apply(task_id=task_id, op=op)
        else:
            async with gate:
                record = await self._apply(task_id=task_id, op=op)

        completed.append(record)

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "TASK_COMPLETED",
            **record.to_payload(),
        })

    async def _apply(self, *, task_id: int, op: Operation) -> TaskRecord:
        mutation = await self._counter.apply(op)
        record = TaskRecord(
            task_id=task_id,
            operation=op,
            result=mutation.value,
            mutation_seq=mutation.seq,
        )

        if self._after_operation is not None:
            await self._after_operation(record)

        return record


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

async def _cancel_and_wait(tasks: list[asyncio.Task[None]]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000
