"""
Serialized integer counter.

Responsibilities:
- Own a single mutable integer
- Serialize every read-modify-write through one asyncio.Lock
- Impose a total order over mutations (mutation_seq)
- Return each caller the value at its own position in that order

Non-responsibilities:
- No task spawning (see dispatch.dispatcher)
- No bounds or overflow checks
- No I/O beyond a creation log line
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from constants import (
    COUNTER_INITIAL_VALUE_DEFAULT,
    COUNTER_STEP,
    MUTATION_SEQ_START,
)
from counter.enums.operation import Operation
from observability.logger import log_event


@dataclass(frozen=True)
class Mutation:
    """
    Outcome of a single serialized mutation.

    seq is the position of this mutation in the counter's total order.
    value is the counter value immediately after it was applied.
    """

    seq: int
    value: int


class SerializedCounter:
    """
    Integer counter whose mutations never interleave.

    Guarantees:
    - Final value == initial + (#increments - #decrements), for any
      interleaving of concurrent callers
    - Each mutation returns the value right after its own effect
    - Once a mutation holds the lock it always runs to completion:
      the critical section has no suspension point, so cancellation
      can only land while a caller is still waiting for the lock
    - get() never observes a partially applied update

    The raw value is private; the only writers are increment/decrement.
    """

    def __init__(self, initial_value: int = COUNTER_INITIAL_VALUE_DEFAULT) -> None:
        self._initial_value = initial_value
        self._value = initial_value
        self._next_seq = MUTATION_SEQ_START
        self._lock = asyncio.Lock()

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "COUNTER_CREATED",
            "initial_value": initial_value,
        })

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def increment(self) -> int:
        """Add one and return the new value."""
        mutation = await self._mutate(COUNTER_STEP)
        return mutation.value

    async def decrement(self) -> int:
        """Subtract one and return the new value."""
        mutation = await self._mutate(-COUNTER_STEP)
        return mutation.value

    async def apply(self, op: Operation) -> Mutation:
        """
        Apply a single Operation.

        Returns the full Mutation so callers can trace where in the total
        order their update landed.
        """
        delta = COUNTER_STEP if op is Operation.INCREMENT else -COUNTER_STEP
        return await self._mutate(delta)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self) -> int:
        """
        Return the current value without mutating it.

        Mutations are applied atomically with respect to the event loop,
        so any value read here existed at some real instant.
        """
        return self._value

    @property
    def value(self) -> int:
        return self._value

    @property
    def mutations(self) -> int:
        """Number of mutations applied so far."""
        return self._next_seq - MUTATION_SEQ_START

    def snapshot(self) -> dict[str, int]:
        """
        Lightweight snapshot for logging / HTTP responses.
        """
        return {
            "value": self._value,
            "initial_value": self._initial_value,
            "mutations": self.mutations,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _mutate(self, delta: int) -> Mutation:
        async with self._lock:
            # No await between here and return
            self._value += delta
            mutation = Mutation(seq=self._next_seq, value=self._value)
            self._next_seq += 1
            return mutation


def _now_ms() -> int:
    return time.time_ns() // 1_000_000
