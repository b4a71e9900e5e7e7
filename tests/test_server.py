"""
Tests for the REST service and its document store.
"""

import pytest
from fastapi.testclient import TestClient

from finance_tracker.server.api import create_app
from finance_tracker.server.store import DocumentStore
from finance_tracker.services.storage import LocalStoreError


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path)


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


TRANSACTION = {
    "amount": 40,
    "date": "2024-01-10",
    "description": "Groceries",
    "category": "c1",
    "type": "expense",
}


class TestDocumentStore:
    """Tests for JSON document collections."""

    def test_insert_assigns_object_id(self, store):
        collection = store.collection("categories")
        document = collection.insert_one({"name": "Food"})
        assert len(document["id"]) == 24
        assert collection.find_one(document["id"]) == document

    def test_update_one_merges(self, store):
        collection = store.collection("categories")
        document = collection.insert_one({"name": "Food", "color": "#ff0000"})

        assert collection.update_one(document["id"], {"name": "Groceries"}) is True
        assert collection.find_one(document["id"]) == {**document, "name": "Groceries"}
        assert collection.update_one("missing", {"name": "x"}) is False

    def test_delete_one(self, store):
        collection = store.collection("budgets")
        document = collection.insert_one({"amount": 1})
        assert collection.delete_one(document["id"]) is True
        assert collection.delete_one(document["id"]) is False
        assert collection.find_all() == []

    def test_collection_is_cached(self, store):
        assert store.collection("budgets") is store.collection("budgets")


class TestApi:
    """Tests for the REST routes."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_list_starts_empty(self, client):
        for path in ("/api/transactions", "/api/categories", "/api/budgets"):
            response = client.get(path)
            assert response.status_code == 200
            assert response.json() == []

    def test_create_returns_201_with_id(self, client):
        response = client.post("/api/transactions", json=TRANSACTION)
        assert response.status_code == 201
        body = response.json()
        assert len(body["id"]) == 24
        assert {k: body[k] for k in TRANSACTION} == TRANSACTION
        assert client.get("/api/transactions").json() == [body]

    def test_create_validates_body(self, client):
        response = client.post("/api/budgets", json={"categoryId": "c1", "amount": 10, "month": "January"})
        assert response.status_code == 422

    def test_update_echoes_body(self, client):
        created = client.post("/api/categories", json={"name": "Food", "color": "#ff0000"}).json()
        changed = {**created, "name": "Groceries"}

        response = client.put(f"/api/categories/{created['id']}", json=changed)

        assert response.status_code == 200
        assert response.json() == changed
        assert client.get("/api/categories").json() == [changed]

    def test_delete_returns_204(self, client):
        created = client.post(
            "/api/budgets", json={"categoryId": "c1", "amount": 100, "month": "2024-01"}
        ).json()

        response = client.delete(f"/api/budgets/{created['id']}")
        assert response.status_code == 204
        assert client.get("/api/budgets").json() == []

        # Idempotent
        assert client.delete(f"/api/budgets/{created['id']}").status_code == 204

    def test_storage_failure_is_500(self, store, monkeypatch):
        def fail(name):
            raise LocalStoreError("disk full")

        client = TestClient(create_app(store=store))
        monkeypatch.setattr(store._slots, "read", fail)

        response = client.get("/api/categories")
        assert response.status_code == 500
        assert response.json() == {"error": "Storage failure: disk full"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
