"""
Tests for the remote record store and the resource gateways.

The remote store is either mocked (httpx.MockTransport) or the real
REST service served in-process (httpx.ASGITransport).
"""

import asyncio
from datetime import date

import httpx
import pytest

from finance_tracker.audit import ActivityLogger
from finance_tracker.config import ApiSettings, LocalStoreSettings
from finance_tracker.models.activity import ActivityEventType
from finance_tracker.models.finance import (
    Category,
    CategoryDraft,
    EntityKind,
    Transaction,
    TransactionDraft,
)
from finance_tracker.server.api import create_app
from finance_tracker.server.store import DocumentStore
from finance_tracker.services import (
    LocalFallbackStore,
    LocalStoreError,
    RecordStoreInterface,
    RemoteProtocolError,
    RemoteRecordStore,
    RemoteUnavailableError,
    ResourceGateway,
    ServedBy,
    create_gateways,
)
from finance_tracker.services.storage import create_http_client


API = ApiSettings(url="http://testserver/api")


def refusing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.MockTransport(handler)


def status_transport(status_code: int, content: bytes = b"") -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status_code, content=content))


def server_transport(tmp_path) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_app(store=DocumentStore(tmp_path / "server")))


def food_draft() -> CategoryDraft:
    return CategoryDraft(name="Food", color="#ff0000")


class BrokenStore(RecordStoreInterface):
    """A remote store that fails with something other than unavailability."""

    kind = EntityKind.CATEGORIES

    async def list_all(self):
        raise RuntimeError("bug in remote store")

    async def create(self, draft):
        raise RuntimeError("bug in remote store")

    async def update(self, entity):
        raise RuntimeError("bug in remote store")

    async def delete(self, entity_id):
        raise RuntimeError("bug in remote store")


class TestRemoteRecordStore:
    """Tests for error mapping in the REST client."""

    def run_list(self, transport):
        async def scenario():
            async with create_http_client(API, transport=transport) as client:
                return await RemoteRecordStore(EntityKind.CATEGORIES, client).list_all()
        return asyncio.run(scenario())

    def test_connection_error_is_unavailable(self):
        with pytest.raises(RemoteUnavailableError):
            self.run_list(refusing_transport())

    def test_server_error_is_unavailable(self):
        with pytest.raises(RemoteUnavailableError):
            self.run_list(status_transport(500, b'{"error": "Storage failure"}'))

    def test_invalid_json_is_a_protocol_error(self):
        """Test that a 2xx answer with an unreadable body is not treated as unavailable."""
        with pytest.raises(RemoteProtocolError):
            self.run_list(status_transport(200, b"<html>"))

    def test_non_list_payload_is_a_protocol_error(self):
        with pytest.raises(RemoteProtocolError):
            self.run_list(status_transport(200, b'{"id": "c1"}'))

    def test_invalid_documents_are_skipped(self):
        payload = b'[{"id": "c1", "name": "Food", "color": "#ff0000"}, {"id": "c2"}]'
        categories = self.run_list(status_transport(200, payload))
        assert [c.id for c in categories] == ["c1"]

    def test_requests_hit_kind_paths(self):
        """Test the URL and method of every operation."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            if request.method == "POST":
                return httpx.Response(201, json={"id": "srv1", "name": "Food", "color": "#ff0000"})
            if request.method == "GET":
                return httpx.Response(200, json=[])
            return httpx.Response(204 if request.method == "DELETE" else 200)

        async def scenario():
            async with create_http_client(API, transport=httpx.MockTransport(handler)) as client:
                store = RemoteRecordStore(EntityKind.CATEGORIES, client)
                await store.list_all()
                created = await store.create(food_draft())
                await store.update(created)
                await store.delete(created.id)
                return created

        created = asyncio.run(scenario())
        assert created.id == "srv1"
        assert seen == [
            ("GET", "/api/categories"),
            ("POST", "/api/categories"),
            ("PUT", "/api/categories/srv1"),
            ("DELETE", "/api/categories/srv1"),
        ]


class TestResourceGateway:
    """Tests for remote-then-local dispatch."""

    def make_gateway(self, tmp_path, transport, activity_logger=None):
        client = create_http_client(API, transport=transport)
        local = LocalFallbackStore(tmp_path / "local")
        gateway = ResourceGateway(
            remote=RemoteRecordStore(EntityKind.CATEGORIES, client),
            local=local.store_for(EntityKind.CATEGORIES),
            activity_logger=activity_logger,
        )
        return gateway, local

    def test_rejects_mismatched_kinds(self, tmp_path):
        local = LocalFallbackStore(tmp_path)
        with pytest.raises(ValueError):
            ResourceGateway(
                remote=RemoteRecordStore(EntityKind.BUDGETS, create_http_client(API)),
                local=local.store_for(EntityKind.CATEGORIES),
            )

    def test_get_all_falls_back_to_local(self, tmp_path):
        """Test that a refused connection is served from local storage."""
        gateway, local = self.make_gateway(tmp_path, refusing_transport())

        async def scenario():
            stored = await local.store_for(EntityKind.CATEGORIES).create(food_draft())
            return stored, await gateway.get_all()

        stored, categories = asyncio.run(scenario())
        assert categories == [stored]

    def test_fallback_equivalence(self, tmp_path):
        """Test that a failed remote call behaves exactly like the local call."""
        gateway, local = self.make_gateway(tmp_path, status_transport(503))
        direct = local.store_for(EntityKind.CATEGORIES)

        async def scenario():
            added = await gateway.add(food_draft())
            renamed = Category(id=added.id, name="Groceries", color=added.color)
            assert await gateway.update(renamed) == renamed
            via_gateway = await gateway.get_all()
            via_local = await direct.list_all()
            await gateway.delete(added.id)
            return added, via_gateway, via_local, await direct.list_all()

        added, via_gateway, via_local, after_delete = asyncio.run(scenario())
        assert len(added.id) == 32
        assert via_gateway == via_local
        assert via_gateway[0].name == "Groceries"
        assert after_delete == []

    def test_fallback_is_logged(self, tmp_path):
        activity = ActivityLogger()
        gateway, _ = self.make_gateway(tmp_path, refusing_transport(), activity_logger=activity)

        asyncio.run(gateway.get_all())

        event = activity.recent_events()[0]
        assert event.event_type == ActivityEventType.REMOTE_FALLBACK
        assert event.entity_kind == EntityKind.CATEGORIES
        assert event.details["operation"] == "list_all"

    def test_dispatch_reports_serving_store(self, tmp_path):
        gateway, _ = self.make_gateway(tmp_path, refusing_transport())
        result = asyncio.run(gateway._dispatch("list_all"))
        assert result.served_by == ServedBy.LOCAL
        assert result.value == []

    def test_other_errors_propagate(self, tmp_path):
        """Test that only unavailability selects the local path."""
        local = LocalFallbackStore(tmp_path)
        gateway = ResourceGateway(remote=BrokenStore(), local=local.store_for(EntityKind.CATEGORIES))
        with pytest.raises(RuntimeError):
            asyncio.run(gateway.get_all())

    def test_invalid_create_response_is_not_written_locally(self, tmp_path):
        """Test that a 2xx answer with an invalid entity never creates a local copy."""
        posts = []

        def handler(request: httpx.Request) -> httpx.Response:
            posts.append(request.method)
            return httpx.Response(201, json={"name": "Food"})

        gateway, local = self.make_gateway(tmp_path, httpx.MockTransport(handler))

        with pytest.raises(RemoteProtocolError):
            asyncio.run(gateway.add(food_draft()))

        assert posts == ["POST"]
        assert asyncio.run(local.store_for(EntityKind.CATEGORIES).list_all()) == []

    def test_garbled_list_reads_as_empty(self, tmp_path):
        """Test that a 2xx answer with an unreadable body is not served from local storage."""
        activity = ActivityLogger()
        gateway, local = self.make_gateway(tmp_path, status_transport(200, b"<html>"), activity_logger=activity)
        asyncio.run(local.store_for(EntityKind.CATEGORIES).create(food_draft()))

        assert asyncio.run(gateway.get_all()) == []

        event_types = [e.event_type for e in activity.recent_events()]
        assert event_types == [ActivityEventType.STORAGE_FAILURE]

    def test_unusable_local_slot_reads_as_empty(self, tmp_path):
        """Test that get_all still returns a list when neither store can be read."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("occupied", encoding="utf-8")
        activity = ActivityLogger()
        gateway = ResourceGateway(
            remote=RemoteRecordStore(EntityKind.CATEGORIES, create_http_client(API, transport=refusing_transport())),
            local=LocalFallbackStore(blocker / "data").store_for(EntityKind.CATEGORIES),
            activity_logger=activity,
        )

        assert asyncio.run(gateway.get_all()) == []

        latest = activity.recent_events()[0]
        assert latest.event_type == ActivityEventType.STORAGE_FAILURE
        assert latest.severity.value == "error"
        assert latest.details["operation"] == "list_all"

    def test_unusable_local_slot_fails_writes(self, tmp_path):
        """Test that writes still report a failure when the local path is the last resort."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("occupied", encoding="utf-8")
        gateway = ResourceGateway(
            remote=RemoteRecordStore(EntityKind.CATEGORIES, create_http_client(API, transport=refusing_transport())),
            local=LocalFallbackStore(blocker / "data").store_for(EntityKind.CATEGORIES),
        )

        with pytest.raises(LocalStoreError):
            asyncio.run(gateway.add(food_draft()))

    def test_remote_success_skips_local(self, tmp_path):
        """Test that records created remotely carry server ids and stay out of local slots."""
        gateway, local = self.make_gateway(tmp_path, server_transport(tmp_path))

        async def scenario():
            added = await gateway.add(food_draft())
            return added, await gateway.get_all(), await local.store_for(EntityKind.CATEGORIES).list_all()

        added, remote_categories, local_categories = asyncio.run(scenario())
        assert len(added.id) == 24
        assert remote_categories == [added]
        assert local_categories == []


class TestCreateGateways:
    """Tests for the gateway factory."""

    def test_round_trip_through_server(self, tmp_path):
        gateways = create_gateways(
            api_settings=API,
            local_settings=LocalStoreSettings(data_dir=str(tmp_path / "local")),
            transport=server_transport(tmp_path),
        )

        async def scenario():
            draft = TransactionDraft(
                amount=40, date=date(2024, 1, 10), description="Groceries", category="c1", type="expense",
            )
            added = await gateways.transactions.add(draft)
            updated = Transaction(**{**added.model_dump(), "description": "Weekly groceries"})
            await gateways.transactions.update(updated)
            listed = await gateways.transactions.get_all()
            await gateways.transactions.delete(added.id)
            remaining = await gateways.transactions.get_all()
            await gateways.aclose()
            return listed, remaining

        listed, remaining = asyncio.run(scenario())
        assert [t.description for t in listed] == ["Weekly groceries"]
        assert remaining == []

    def test_for_kind(self, tmp_path):
        gateways = create_gateways(
            api_settings=API,
            local_settings=LocalStoreSettings(data_dir=str(tmp_path)),
            transport=refusing_transport(),
        )
        for kind in EntityKind:
            assert gateways.for_kind(kind).kind == kind


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
