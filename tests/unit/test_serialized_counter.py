# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
import json

import pytest

from counter.enums.operation import Operation
from counter.errors import UnknownOperationError
from counter.serialized_counter import SerializedCounter
from observability import logger


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    captured: list[str] = []
    monkeypatch.setattr(logger, "_print", captured.append)
    return captured


# ---------------------------------------------------------------------
# Basic operations
# ---------------------------------------------------------------------

def test_increment_and_decrement_return_new_value():
    async def scenario() -> list[int]:
        counter = SerializedCounter()
        return [
            await counter.increment(),
            await counter.increment(),
            await counter.decrement(),
        ]

    assert asyncio.run(scenario()) == [1, 2, 1]


def test_get_is_read_only_and_repeatable():
    async def scenario() -> tuple[int, int, int, int]:
        counter = SerializedCounter(initial_value=7)
        await counter.increment()
        return counter.get(), counter.get(), counter.get(), counter.mutations

    first, second, third, mutations = asyncio.run(scenario())
    assert first == second == third == 8
    assert mutations == 1


def test_value_has_no_setter():
    counter = SerializedCounter()
    with pytest.raises(AttributeError):
        counter.value = 10  # type: ignore[misc]


def test_apply_reports_position_in_total_order():
    async def scenario() -> list[tuple[int, int]]:
        counter = SerializedCounter()
        out = []
        for op in (Operation.INCREMENT, Operation.DECREMENT, Operation.DECREMENT):
            m = await counter.apply(op)
            out.append((m.seq, m.value))
        return out

    assert asyncio.run(scenario()) == [(1, 1), (2, 0), (3, -1)]


def test_snapshot_and_creation_log(quiet_logger: list[str]):
    counter = SerializedCounter(initial_value=3)
    assert counter.snapshot() == {"value": 3, "initial_value": 3, "mutations": 0}

    created = [json.loads(line) for line in quiet_logger]
    assert created[-1]["event_type"] == "COUNTER_CREATED"
    assert created[-1]["initial_value"] == 3


# ---------------------------------------------------------------------
# Serialization under concurrency
# ---------------------------------------------------------------------

def test_concurrent_increments_lose_no_updates():
    async def scenario() -> tuple[int, list[int]]:
        counter = SerializedCounter()
        results = await asyncio.gather(*(counter.increment() for _ in range(1000)))
        return counter.get(), list(results)

    final, results = asyncio.run(scenario())
    assert final == 1000
    # Each caller saw its own slot in the total order
    assert sorted(results) == list(range(1, 1001))


def test_concurrent_decrements_lose_no_updates():
    async def scenario() -> int:
        counter = SerializedCounter()
        await asyncio.gather(*(counter.decrement() for _ in range(1000)))
        return counter.get()

    assert asyncio.run(scenario()) == -1000


def test_waiter_cancelled_before_acquiring_lock_has_no_effect():
    async def scenario() -> tuple[int, bool]:
        counter = SerializedCounter()
        # Hold the lock so the next caller must wait
        await counter._lock.acquire()  # pylint: disable=protected-access
        waiter = asyncio.create_task(counter.increment())
        await asyncio.sleep(0)
        waiter.cancel()
        counter._lock.release()  # pylint: disable=protected-access
        try:
            await waiter
        except asyncio.CancelledError:
            return counter.get(), True
        return counter.get(), False

    value, cancelled = asyncio.run(scenario())
    assert cancelled is True
    assert value == 0


# ---------------------------------------------------------------------
# Operation parsing
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "name, expected",
    [
        ("increment", Operation.INCREMENT),
        ("DECREMENT", Operation.DECREMENT),
        ("  Increment ", Operation.INCREMENT),
    ],
)
def test_operation_parse_accepts_canonical_names(name: str, expected: Operation):
    assert Operation.parse(name) is expected


@pytest.mark.parametrize("name", ["inc", "", "multiply"])
def test_operation_parse_rejects_unknown(name: str):
    with pytest.raises(UnknownOperationError) as info:
        Operation.parse(name)
    assert isinstance(info.value, ValueError)