"""
Console demonstration of the counter service.

1. Three concurrent increments against a shared counter.
2. A mixed batch: even task ids increment, odd ones decrement, and every
   task simulates some work after its counter call.

Prints results as tasks complete; completion order varies between runs,
the final value does not.
"""

from __future__ import annotations

import argparse
import asyncio
import random
from typing import Sequence

from dotenv import load_dotenv

from config import AppConfig
from constants import DEMO_ACTOR_BATCH_SIZE, DEMO_INCREMENT_BURST
from counter.enums.operation import Operation
from counter.serialized_counter import SerializedCounter
from dispatch.dispatcher import TaskDispatcher
from dispatch.task import TaskRecord
from observability import logger


def mixed_batch(size: int) -> list[Operation]:
    """Task i (1-based) increments when i is even, decrements when odd."""
    return [
        Operation.INCREMENT if i % 2 == 0 else Operation.DECREMENT
        for i in range(1, size + 1)
    ]


def parse_ops(raw: str) -> list[Operation]:
    return [Operation.parse(name) for name in raw.split(",") if name.strip()]


async def run_demo(
    *,
    initial: int,
    ops: Sequence[Operation],
    max_in_flight: int | None,
    jitter_ms: tuple[int, int],
) -> int:
    """Run both demo phases and return the final counter value."""
    counter = SerializedCounter(initial)

    print("Working with a shared counter...")
    burst = await TaskDispatcher(counter).dispatch_all(
        [Operation.INCREMENT] * DEMO_INCREMENT_BURST
    )
    print(f"Increment results: {list(burst.results)}")
    print(f"Final counter value: {counter.get()}")

    print("\nDemonstrating serialized access...")

    async def simulate_work(record: TaskRecord) -> None:
        verb = (
            "incremented" if record.operation is Operation.INCREMENT
            else "decremented"
        )
        print(f"Task {record.task_id} {verb} counter to {record.result}")
        await asyncio.sleep(random.randint(*jitter_ms) / 1000.0)

    dispatcher = TaskDispatcher(
        counter,
        max_in_flight=max_in_flight,
        after_operation=simulate_work,
    )
    await dispatcher.dispatch_all(ops)

    final_value = counter.get()
    print(f"Final counter value after all tasks: {final_value}")
    return final_value


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    config = AppConfig.load_from_env()

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--initial", type=int, default=config.counter_initial_value)
    parser.add_argument(
        "--ops",
        type=parse_ops,
        default=None,
        help="comma-separated operations, e.g. increment,decrement,increment",
    )
    parser.add_argument(
        "--max-in-flight",
        type=int,
        default=config.dispatch_max_in_flight,
    )
    parser.add_argument(
        "--jitter-ms",
        type=int,
        nargs=2,
        metavar=("MIN", "MAX"),
        default=(config.demo_jitter_min_ms, config.demo_jitter_max_ms),
    )
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=config.enable_json_logs,
        help="emit JSONL events to stdout (default: ENABLE_JSON_LOGS)",
    )
    args = parser.parse_args(argv)
    if not 0 <= args.jitter_ms[0] <= args.jitter_ms[1]:
        parser.error("--jitter-ms expects 0 <= MIN <= MAX")
    if args.max_in_flight is not None and args.max_in_flight <= 0:
        parser.error("--max-in-flight must be > 0")

    logger.configure(enabled=args.json_logs)

    ops = args.ops if args.ops is not None else mixed_batch(DEMO_ACTOR_BATCH_SIZE)

    print("Counter Service")
    print("---------------")
    asyncio.run(
        run_demo(
            initial=args.initial,
            ops=ops,
            max_in_flight=args.max_in_flight,
            jitter_ms=tuple(args.jitter_ms),
        )
    )
    print("\nAll counter examples completed!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
