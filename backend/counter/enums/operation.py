"""
Counter operation enumeration.

Rules:
- This enum identifies mutating operations only.
- It must NOT encode behavior; the counter decides what an operation does.
"""

from __future__ import annotations

from enum import Enum

from counter.errors import UnknownOperationError


class Operation(str, Enum):
    """
    Mutating operations accepted by SerializedCounter.

    INCREMENT:
        Add one to the counter.

    DECREMENT:
        Subtract one from the counter.
    """

    INCREMENT = "increment"
    DECREMENT = "decrement"

    @classmethod
    def parse(cls, name: str) -> Operation:
        """
        Parse a wire/CLI name into an Operation.

        Accepts the canonical names in any case. Raises UnknownOperationError
        for anything else.
        """
        normalized = name.strip().lower()
        for op in cls:
            if op.value == normalized:
                return op
        raise UnknownOperationError(name)
