import contextlib

from fastapi.testclient import TestClient

from player_sync import main


def test_lifespan_is_async_context_manager():
    cm = main.lifespan(main.app)
    assert isinstance(cm, contextlib.AbstractAsyncContextManager)


def test_health_reports_fail_without_pool():
    # без входа в контекст TestClient не запускает lifespan, пула нет
    client = TestClient(main.app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "fail"}
