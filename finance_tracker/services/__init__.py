"""Services package."""

from finance_tracker.services.gateway import (
    FinanceGateways,
    GatewayResult,
    ResourceGateway,
    ServedBy,
    create_gateways,
)
from finance_tracker.services.storage import (
    LocalFallbackStore,
    LocalRecordStore,
    LocalStoreError,
    RecordStoreInterface,
    RemoteProtocolError,
    RemoteRecordStore,
    RemoteUnavailableError,
    SlotStore,
    StorageError,
)

__all__ = [
    # Gateways
    "FinanceGateways",
    "GatewayResult",
    "ResourceGateway",
    "ServedBy",
    "create_gateways",
    # Storage services
    "LocalFallbackStore",
    "LocalRecordStore",
    "LocalStoreError",
    "RecordStoreInterface",
    "RemoteProtocolError",
    "RemoteRecordStore",
    "RemoteUnavailableError",
    "SlotStore",
    "StorageError",
]
