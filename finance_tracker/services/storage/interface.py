"""
Abstract Record Store Interface

DESIGN DECISION: The remote REST service and the local fallback store
implement the same interface. This allows us to:
1. Swap the path serving a request without the caller noticing
2. Use in-memory or temp-dir storage for testing
3. Keep the session and the aggregation engine decoupled from storage

The interface is intentionally simple - four CRUD operations over one
entity kind, filtered by id only. No joins, no cross-kind transactions.
"""

from abc import ABC, abstractmethod
from typing import Any

from finance_tracker.models.finance import EntityKind


class RecordStoreInterface(ABC):
    """
    Abstract interface for one entity kind's record set.

    Any storage implementation (REST service, local slots, ...)
    must implement these methods.
    """

    kind: EntityKind

    @abstractmethod
    async def list_all(self) -> list[Any]:
        """
        Return every record of this kind, in storage order.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create(self, draft: Any) -> Any:
        """
        Persist a draft and return the full entity with its new id.

        Raises:
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    async def update(self, entity: Any) -> Any:
        """
        Replace the record with the same id. Returns the input entity.

        Updating an unknown id is not an error.

        Raises:
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """
        Remove the record with this id. Idempotent.

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RemoteUnavailableError(StorageError):
    """The REST service could not be reached or answered with a non-2xx status."""
    pass


class RemoteProtocolError(StorageError):
    """
    The REST service answered 2xx with a body we can't use.

    The request may already have taken effect remotely, so this never
    selects the local path.
    """
    pass


class LocalStoreError(StorageError):
    """A local slot could not be locked or written."""
    pass
