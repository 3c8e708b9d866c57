"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (one counter + dispatcher per process)
- Register routes
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig
from counter.serialized_counter import SerializedCounter
from dispatch.dispatcher import TaskDispatcher
from observability import logger

from server.routes import register_routes


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Passing a config explicitly lets tests avoid the environment.
    """
    config = config or AppConfig.load_from_env()
    logger.configure(enabled=config.enable_json_logs)

    app = FastAPI(title="Counter Service API")

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten later
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Counter lives for the process lifetime
    app.state.counter = SerializedCounter(config.counter_initial_value)
    app.state.dispatcher = TaskDispatcher(
        app.state.counter,
        max_in_flight=config.dispatch_max_in_flight,
    )

    # Routes
    register_routes(app)

    return app
