"""
Storage Services Package

Provides the abstract record store interface and its two implementations:
the remote REST store and the local fallback store.
"""

from finance_tracker.services.storage.interface import (
    LocalStoreError,
    RecordStoreInterface,
    RemoteProtocolError,
    RemoteUnavailableError,
    StorageError,
)
from finance_tracker.services.storage.slots import SlotStore
from finance_tracker.services.storage.local import (
    LocalFallbackStore,
    LocalRecordStore,
    new_local_id,
)
from finance_tracker.services.storage.remote import (
    RemoteRecordStore,
    create_http_client,
)

__all__ = [
    # Interface
    "RecordStoreInterface",
    # Exceptions
    "LocalStoreError",
    "RemoteProtocolError",
    "RemoteUnavailableError",
    "StorageError",
    # Local fallback
    "LocalFallbackStore",
    "LocalRecordStore",
    "SlotStore",
    "new_local_id",
    # Remote
    "RemoteRecordStore",
    "create_http_client",
]
