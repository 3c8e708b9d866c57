"""
Route registration for the counter service API.

Responsibilities:
- Define HTTP endpoints
- Translate request bodies into Operations
- Map domain errors onto HTTP status codes
- Pull dependencies from app.state
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from constants import HTTP_DISPATCH_MAX_OPERATIONS
from counter.enums.operation import Operation
from counter.errors import LaunchFailure, UnknownOperationError
from counter.serialized_counter import SerializedCounter
from dispatch.dispatcher import TaskDispatcher
from observability.logger import log_event


class DispatchRequest(BaseModel):
    """Body of POST /dispatch."""

    operations: list[str] = Field(
        default_factory=list,
        max_length=HTTP_DISPATCH_MAX_OPERATIONS,
    )


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""

    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.get("/counter")
    async def read_counter() -> dict[str, int]: # pyright: ignore[reportUnusedFunction]
        counter: SerializedCounter = app.state.counter
        return counter.snapshot()

    @app.post("/counter/increment")
    async def increment() -> dict[str, int]: # pyright: ignore[reportUnusedFunction]
        counter: SerializedCounter = app.state.counter
        return {"value": await counter.increment()}

    @app.post("/counter/decrement")
    async def decrement() -> dict[str, int]: # pyright: ignore[reportUnusedFunction]
        counter: SerializedCounter = app.state.counter
        return {"value": await counter.decrement()}

    @app.post("/dispatch")
    async def dispatch(body: DispatchRequest) -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        dispatcher: TaskDispatcher = app.state.dispatcher

        try:
            ops = [Operation.parse(name) for name in body.operations]
        except UnknownOperationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        try:
            batch = await dispatcher.dispatch_all(ops)
        except LaunchFailure as exc:
            log_event({
                "event_type": "HTTP_DISPATCH_LAUNCH_FAILURE",
                "requested": exc.requested,
                "launched": exc.launched,
                "reason": exc.reason,
            })
            raise HTTPException(status_code=503, detail=str(exc)) from exc

        return {
            **batch.to_payload(),
            "final_value": dispatcher.counter.get(),
        }
