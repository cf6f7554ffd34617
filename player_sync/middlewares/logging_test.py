import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from player_sync.errors import register_error_handlers
from player_sync.middlewares.logging import LoggingMiddleware


class LogCaptureHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def app():
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/test")
    async def test_endpoint():
        return JSONResponse({"hello": "world"})

    @app.post("/admin")
    async def admin_endpoint():
        return JSONResponse({"message": "ok"})

    return app


@pytest.fixture
def log_handler():
    handler = LogCaptureHandler()
    logger = logging.getLogger("player_sync.access")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield handler
    logger.removeHandler(handler)


def test_middleware_adds_request_id(app, log_handler):
    client = TestClient(app)
    response = client.get("/test")

    assert "X-Request-ID" in response.headers
    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 36  # UUID

    assert len(log_handler.records) == 1
    log_json = json.loads(log_handler.records[0].getMessage())

    assert log_json["request_id"] == request_id
    assert log_json["method"] == "GET"
    assert log_json["path"] == "/test"
    assert log_json["status_code"] == 200
    assert "duration_ms" in log_json
    assert log_json["request_body"] is None
    assert log_json["response_body"] == {"hello": "world"}


def test_middleware_redacts_password(app, log_handler):
    client = TestClient(app)
    response = client.post("/admin", json={"uid": "123", "password": "s3cret"})
    assert response.status_code == 200

    log_json = json.loads(log_handler.records[0].getMessage())
    assert log_json["request_body"] == {"uid": "123", "password": "***"}
    assert "s3cret" not in log_handler.records[0].getMessage()


def test_middleware_logs_failed_request(log_handler):
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    register_error_handlers(app)

    @app.get("/players")
    async def failing_endpoint():
        raise RuntimeError("connection refused")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/players")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}

    assert len(log_handler.records) == 1
    log_json = json.loads(log_handler.records[0].getMessage())
    assert log_json["method"] == "GET"
    assert log_json["path"] == "/players"
    assert log_json["status_code"] == 500
    assert log_json["response_body"] is None
