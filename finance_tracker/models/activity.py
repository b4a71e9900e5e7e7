"""
Activity Models for Personal Finance Tracker

Every mutation of the session state and every storage fallback
produces an activity event. Events go to the structured log and to
a short in-memory history the UI shows as recent activity.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_tracker.models.finance import EntityKind


class ActivityEventType(str, Enum):
    """Types of events we record."""
    # Loading
    DATA_LOADED = "data_loaded"

    # Mutations
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"

    # Business rules
    RULE_VIOLATION = "rule_violation"

    # Storage
    REMOTE_FALLBACK = "remote_fallback"
    STORAGE_FAILURE = "storage_failure"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    entity_kind: Optional[EntityKind] = None
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_kind": self.entity_kind.value if self.entity_kind else None,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.record_added(EntityKind.BUDGETS, budget.id)
        activity_logger.log(event)
    """

    @staticmethod
    def data_loaded(counts: dict[str, int]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_LOADED,
            description="Loaded " + ", ".join(f"{n} {kind}" for kind, n in counts.items()),
            details=counts,
        )

    @staticmethod
    def record_added(kind: EntityKind, entity_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_ADDED,
            entity_kind=kind,
            entity_id=entity_id,
            description=f"{kind.label.capitalize()} added successfully",
        )

    @staticmethod
    def record_updated(kind: EntityKind, entity_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_UPDATED,
            entity_kind=kind,
            entity_id=entity_id,
            description=f"{kind.label.capitalize()} updated successfully",
        )

    @staticmethod
    def record_deleted(kind: EntityKind, entity_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_DELETED,
            entity_kind=kind,
            entity_id=entity_id,
            description=f"{kind.label.capitalize()} deleted successfully",
        )

    @staticmethod
    def rule_violation(
        kind: EntityKind,
        message: str,
        entity_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RULE_VIOLATION,
            severity=ActivitySeverity.WARNING,
            entity_kind=kind,
            entity_id=entity_id,
            description=message,
        )

    @staticmethod
    def remote_fallback(kind: EntityKind, operation: str, error: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REMOTE_FALLBACK,
            severity=ActivitySeverity.WARNING,
            entity_kind=kind,
            description=f"Remote {operation} of {kind.value} failed, served from local storage",
            details={"operation": operation, "error": error},
        )

    @staticmethod
    def storage_failure(kind: EntityKind, operation: str, error: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_FAILURE,
            severity=ActivitySeverity.ERROR,
            entity_kind=kind,
            description=f"Could not {operation.replace('_', ' ')} {kind.value}, showing no records",
            details={"operation": operation, "error": error},
        )
