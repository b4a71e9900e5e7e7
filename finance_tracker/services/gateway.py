"""
Resource Gateways

One gateway per entity kind. Each operation is tried on the remote store
first; if the remote store is unavailable the same operation runs on the
local fallback store. Both stores implement RecordStoreInterface, so the
gateway only has to decide which one serves the request.

GUARANTEES:
- get_all never raises a StorageError; it returns the local list when the
  remote store is down, and an empty list when no store can be read
- add always returns a full entity (server id or local id)
- update echoes its input
- delete is idempotent
- The caller cannot tell which path served the request

The two paths run one after the other, never in parallel. A remote
failure is logged and not retried, and nothing is synced back when the
remote store comes back.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

import httpx

from finance_tracker.audit import ActivityLogger
from finance_tracker.config.settings import ApiSettings, LocalStoreSettings
from finance_tracker.models.activity import ActivityEventBuilder
from finance_tracker.models.finance import EntityKind
from finance_tracker.services.storage import (
    LocalFallbackStore,
    RecordStoreInterface,
    RemoteRecordStore,
    RemoteUnavailableError,
    StorageError,
    create_http_client,
)


T = TypeVar("T")


class ServedBy(str, Enum):
    """Which store answered a request."""
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """Value of a dispatched operation, tagged with the store that produced it."""
    value: T
    served_by: ServedBy


class ResourceGateway:
    """Dual-path (remote, then local) CRUD for one entity kind."""

    def __init__(
        self,
        remote: RecordStoreInterface,
        local: RecordStoreInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        if remote.kind != local.kind:
            raise ValueError(
                f"Remote store serves {remote.kind.value} but local store serves {local.kind.value}"
            )
        self._remote = remote
        self._local = local
        self._activity_logger = activity_logger or ActivityLogger()

    @property
    def kind(self) -> EntityKind:
        return self._remote.kind

    async def get_all(self) -> list[Any]:
        """
        Every record of this kind, from whichever store answers.

        A garbled remote answer or an unusable local slot reads as no records.
        """
        try:
            return (await self._dispatch("list_all")).value
        except StorageError as e:
            self._activity_logger.log(
                ActivityEventBuilder.storage_failure(self.kind, "list_all", str(e))
            )
            return []

    async def add(self, draft: Any) -> Any:
        """Create a record from a draft; the result always carries an id."""
        return (await self._dispatch("create", draft)).value

    async def update(self, entity: Any) -> Any:
        """Replace the record with entity.id; returns the input unchanged."""
        await self._dispatch("update", entity)
        return entity

    async def delete(self, entity_id: str) -> None:
        """Remove the record with this id, if any."""
        await self._dispatch("delete", entity_id)

    async def _dispatch(self, operation: str, *args: Any) -> GatewayResult:
        """
        Run an operation on the remote store, falling back to the local store.

        Only RemoteUnavailableError selects the local path; any other error,
        including RemoteProtocolError after a 2xx answer, propagates.
        """
        try:
            value = await getattr(self._remote, operation)(*args)
            return GatewayResult(value=value, served_by=ServedBy.REMOTE)
        except RemoteUnavailableError as e:
            self._activity_logger.log(
                ActivityEventBuilder.remote_fallback(self.kind, operation, str(e))
            )

        value = await getattr(self._local, operation)(*args)
        return GatewayResult(value=value, served_by=ServedBy.LOCAL)


@dataclass
class FinanceGateways:
    """The three gateways plus the HTTP client they share."""

    transactions: ResourceGateway
    categories: ResourceGateway
    budgets: ResourceGateway
    client: Optional[httpx.AsyncClient] = None

    def for_kind(self, kind: EntityKind) -> ResourceGateway:
        return {
            EntityKind.TRANSACTIONS: self.transactions,
            EntityKind.CATEGORIES: self.categories,
            EntityKind.BUDGETS: self.budgets,
        }[kind]

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()


def create_gateways(
    api_settings: Optional[ApiSettings] = None,
    local_settings: Optional[LocalStoreSettings] = None,
    activity_logger: Optional[ActivityLogger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FinanceGateways:
    """
    Factory function to build the gateways from configuration.

    Args:
        api_settings: Remote REST service settings
        local_settings: Local fallback store settings
        activity_logger: Shared activity logger (fallbacks are recorded there)
        transport: Optional httpx transport, e.g. a mock or ASGI transport in tests

    Returns:
        FinanceGateways for transactions, categories and budgets
    """
    activity_logger = activity_logger or ActivityLogger()
    client = create_http_client(api_settings, transport=transport)
    local = LocalFallbackStore.from_settings(local_settings)

    gateways = {
        kind: ResourceGateway(
            remote=RemoteRecordStore(kind, client),
            local=local.store_for(kind),
            activity_logger=activity_logger,
        )
        for kind in EntityKind
    }

    return FinanceGateways(
        transactions=gateways[EntityKind.TRANSACTIONS],
        categories=gateways[EntityKind.CATEGORIES],
        budgets=gateways[EntityKind.BUDGETS],
        client=client,
    )
