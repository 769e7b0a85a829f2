import pytest
from fastapi.testclient import TestClient

from app.main import create_app


@pytest.fixture
def client(tmp_path, monkeypatch):
    # isolate data dir for this test run
    d = tmp_path / "data"
    d.mkdir()
    monkeypatch.setenv("DATA_DIR", str(d))
    monkeypatch.setenv("RECIPES_FILE", str(d / "recipes.json"))
    monkeypatch.setenv("CATALOG_FILE", str(d / "catalog.json"))
    monkeypatch.setenv("CARTS_FILE", str(d / "carts.json"))
    monkeypatch.setenv("ORDERS_FILE", str(d / "orders.json"))
    monkeypatch.setenv("EVENTS_FILE", str(d / "events.jsonl"))
    monkeypatch.setenv("RETRY_INITIAL_DELAY", "0")

    app = create_app()
    return TestClient(app)
