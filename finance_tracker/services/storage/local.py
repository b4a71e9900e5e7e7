"""
Local Fallback Store

Mirrors the REST service's CRUD surface on local slots so the app keeps
working when the remote store is unreachable. One slot per entity kind:
finance_transactions, finance_categories, finance_budgets.

Every operation deserializes the full list, does a linear scan and writes
the full list back. Expected record counts are small, and keeping the list
as-is means the order callers see is always insertion order.

Slot I/O and lock waits run in a worker thread (asyncio.to_thread) so a
slow disk or a lock held by another process doesn't stall the event loop.

Local ids come from their own id space (uuid4 hex) and are never
reconciled with ids assigned by the REST service.
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional, Union
from uuid import uuid4

import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.config.settings import LocalStoreSettings
from finance_tracker.models.finance import EntityKind, entity_from_draft
from finance_tracker.services.storage.interface import RecordStoreInterface
from finance_tracker.services.storage.slots import SlotStore


def new_local_id() -> str:
    """Generate an id for a record created while the remote store is down."""
    return uuid4().hex


class LocalRecordStore(RecordStoreInterface):
    """Local slot implementation of one entity kind's record set."""

    def __init__(
        self,
        kind: EntityKind,
        slots: SlotStore,
        id_factory: Callable[[], str] = new_local_id,
    ):
        self.kind = kind
        self._slots = slots
        self._id_factory = id_factory
        self._logger = structlog.get_logger(__name__)

    @property
    def slot_key(self) -> str:
        return self.kind.slot_key

    async def list_all(self) -> list[Any]:
        """Every parseable record in the slot, in stored order."""
        entities = []
        for record in await asyncio.to_thread(self._slots.read, self.slot_key):
            try:
                entities.append(self.kind.model.model_validate(record))
            except ValidationError as e:
                self._logger.warning(
                    "local_record_skipped",
                    kind=self.kind.value,
                    record_id=record.get("id"),
                    error=str(e),
                )
        return entities

    async def create(self, draft: BaseModel) -> Any:
        entity = entity_from_draft(self.kind, draft, self._id_factory())
        document = entity.to_wire()
        await asyncio.to_thread(self._slots.mutate, self.slot_key, lambda records: [*records, document])
        return entity

    async def update(self, entity: Any) -> Any:
        document = entity.to_wire()
        await asyncio.to_thread(
            self._slots.mutate,
            self.slot_key,
            lambda records: [document if record.get("id") == entity.id else record for record in records],
        )
        return entity

    async def delete(self, entity_id: str) -> None:
        await asyncio.to_thread(
            self._slots.mutate,
            self.slot_key,
            lambda records: [record for record in records if record.get("id") != entity_id],
        )


class LocalFallbackStore:
    """
    The three local slots, one LocalRecordStore per entity kind.

    Slots are created lazily as empty lists on first access.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        lock_timeout: float = 5.0,
        id_factory: Callable[[], str] = new_local_id,
    ):
        self._slots = SlotStore(data_dir, lock_timeout=lock_timeout)
        self._stores = {
            kind: LocalRecordStore(kind, self._slots, id_factory=id_factory)
            for kind in EntityKind
        }

    @classmethod
    def from_settings(cls, settings: Optional[LocalStoreSettings] = None) -> "LocalFallbackStore":
        settings = settings or LocalStoreSettings()
        return cls(settings.data_dir, lock_timeout=settings.lock_timeout_seconds)

    @property
    def slots(self) -> SlotStore:
        return self._slots

    def store_for(self, kind: EntityKind) -> LocalRecordStore:
        return self._stores[kind]

    def clear(self) -> None:
        """Empty every slot."""
        for kind in EntityKind:
            self._slots.clear(kind.slot_key)
