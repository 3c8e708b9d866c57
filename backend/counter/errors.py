"""
Error taxonomy for the counter service.

- LaunchFailure: the event loop could not start a requested unit of work.
  Fatal to the enclosing dispatch_all call; no partial batch is returned.
- UnknownOperationError: a caller named an operation that does not exist.

Counter mutations themselves have no failure mode.
"""

from __future__ import annotations


class CounterServiceError(Exception):
    """Base class for all counter service errors."""


class LaunchFailure(CounterServiceError):
    """
    Raised when dispatch_all could not launch every requested unit.

    Attributes:
        requested: number of operations the caller asked for
        launched: number of units started before the failure
    """

    def __init__(self, *, requested: int, launched: int, reason: str) -> None:
        super().__init__(
            f"launched {launched} of {requested} tasks before failure: {reason}"
        )
        self.requested = requested
        self.launched = launched
        self.reason = reason


class UnknownOperationError(CounterServiceError, ValueError):
    """Raised when an operation name cannot be parsed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown counter operation: {name!r}")
        self.name = name
