"""
Task and batch value objects for dispatch_all.

Rules:
- Records are immutable and created only after a unit has completed.
- Batch ordering is completion order, never submission order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from counter.enums.operation import Operation


@dataclass(frozen=True)
class TaskRecord:
    """
    Result of one completed unit of work.

    task_id:       submission index, for tracing only
    operation:     the operation the unit applied
    result:        counter value immediately after the operation
    mutation_seq:  position of the operation in the counter's total order
    """

    task_id: int
    operation: Operation
    result: int
    mutation_seq: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "operation": self.operation.value,
            "result": self.result,
            "mutation_seq": self.mutation_seq,
        }


@dataclass(frozen=True)
class DispatchBatch:
    """
    Completed dispatch: one record per requested operation.
    """

    records: tuple[TaskRecord, ...] = ()

    @staticmethod
    def empty() -> DispatchBatch:
        return DispatchBatch()

    @property
    def results(self) -> tuple[int, ...]:
        """Post-operation values in completion order."""
        return tuple(r.result for r in self.records)

    def __len__(self) -> int:
        return len(self.records)

    def count(self, op: Operation) -> int:
        return sum(1 for r in self.records if r.operation is op)

    def net_delta(self) -> int:
        """#increments - #decrements."""
        return self.count(Operation.INCREMENT) - self.count(Operation.DECREMENT)

    def in_total_order(self) -> tuple[TaskRecord, ...]:
        """
        Records sorted by the counter's mutation order.

        Completion order and mutation order can differ when units do work
        after their counter call.
        """
        return tuple(sorted(self.records, key=lambda r: r.mutation_seq))

    def to_payload(self) -> dict[str, Any]:
        return {
            "results": list(self.results),
            "records": [r.to_payload() for r in self.records],
            "net_delta": self.net_delta(),
        }
