# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

from config import AppConfig
from counter.errors import LaunchFailure
from dispatch.dispatcher import TaskDispatcher
from observability import logger
from server.app import create_app


def make_config(**overrides: Any) -> AppConfig:
    values: dict[str, Any] = {
        "env": "test",
        "log_level": "INFO",
        "counter_initial_value": 0,
        "dispatch_max_in_flight": None,
        "enable_json_logs": False,
        "demo_jitter_min_ms": 0,
        "demo_jitter_max_ms": 0,
        "http_host": "127.0.0.1",
        "http_port": 8000,
    }
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    # create_app reconfigures the global sink; restore it afterwards
    monkeypatch.setattr(logger, "_print", logger._print)  # pylint: disable=protected-access
    app = create_app(make_config(counter_initial_value=10))
    with TestClient(app) as c:
        yield c


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "ok"}


def test_increment_decrement_and_read(client: TestClient):
    assert client.post("/counter/increment").json() == {"value": 11}
    assert client.post("/counter/increment").json() == {"value": 12}
    assert client.post("/counter/decrement").json() == {"value": 11}

    assert client.get("/counter").json() == {
        "value": 11,
        "initial_value": 10,
        "mutations": 3,
    }


def test_dispatch_batch(client: TestClient):
    resp = client.post(
        "/dispatch",
        json={"operations": ["increment", "increment", "DECREMENT", "increment"]},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["final_value"] == 12
    assert body["net_delta"] == 2
    assert len(body["results"]) == 4
    assert sorted(r["task_id"] for r in body["records"]) == [1, 2, 3, 4]


def test_dispatch_empty(client: TestClient):
    body = client.post("/dispatch", json={"operations": []}).json()
    assert body["results"] == []
    assert body["final_value"] == 10


def test_dispatch_unknown_operation_is_422(client: TestClient):
    resp = client.post("/dispatch", json={"operations": ["increment", "square"]})
    assert resp.status_code == 422
    # Nothing was applied
    assert client.get("/counter").json()["value"] == 10


def test_dispatch_launch_failure_is_503(
    client: TestClient,
    monkeypatch: pytest.MonkeyPatch,
):
    async def failing_dispatch(self: TaskDispatcher, operations: Any) -> Any:
        raise LaunchFailure(requested=len(operations), launched=0, reason="loop closed")

    monkeypatch.setattr(TaskDispatcher, "dispatch_all", failing_dispatch)
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(logger, "_print", lambda line: emitted.append(json.loads(line)))

    resp = client.post("/dispatch", json={"operations": ["increment"]})
    assert resp.status_code == 503
    assert "loop closed" in resp.json()["detail"]

    failures = [e for e in emitted if e["event_type"] == "HTTP_DISPATCH_LAUNCH_FAILURE"]
    assert failures[0]["reason"] == "loop closed"
    assert "ts_ms" in failures[0]
