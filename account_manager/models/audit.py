"""
Audit Models for Account Manager

Every load, save and import is logged for audit purposes.
This provides:
1. Traceability of what changed the data file and when
2. Debugging information when an import does not do what the user expected
3. Visibility into silent repairs made to hand-edited files

DESIGN DECISION: Audit events never carry secrets. Passwords, tokens and
app passwords stay out of the log; counts and identifiers go in.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One per step of the load / save / import flows.
    """
    # Persistence
    DATASET_LOADED = "dataset_loaded"
    DATASET_SAVED = "dataset_saved"
    DATASET_REPAIRED = "dataset_repaired"
    STORAGE_FAILED = "storage_failed"

    # Import
    IMPORT_PARSED = "import_parsed"
    IMPORT_COMPLETED = "import_completed"
    IMPORT_EMPTY = "import_empty"
    IMPORT_REJECTED = "import_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'dataset', 'import')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity, e.g. the storage path"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one public operation"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.dataset_loaded(path, 12, 3, correlation_id)
        event = AuditEventBuilder.import_completed(path, 5, 2, 3, correlation_id)
    """

    @staticmethod
    def dataset_loaded(
        path: str,
        account_count: int,
        group_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATASET_LOADED,
            entity_type="dataset",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Loaded {account_count} accounts and {group_count} groups",
            details={
                "account_count": account_count,
                "group_count": group_count,
            },
        )

    @staticmethod
    def dataset_saved(
        path: str,
        account_count: int,
        group_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATASET_SAVED,
            entity_type="dataset",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Saved {account_count} accounts and {group_count} groups",
            details={
                "account_count": account_count,
                "group_count": group_count,
            },
        )

    @staticmethod
    def dataset_repaired(
        path: str,
        repairs: dict[str, int],
        correlation_id: UUID
    ) -> AuditEvent:
        changed = {name: count for name, count in repairs.items() if count}
        return AuditEvent(
            event_type=AuditEventType.DATASET_REPAIRED,
            entity_type="dataset",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Normalization repaired {sum(changed.values())} inconsistencies",
            details=changed,
        )

    @staticmethod
    def storage_failed(
        path: str,
        operation: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="dataset",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Storage {operation} failed",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def import_parsed(
        mode: str,
        draft_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_PARSED,
            severity=AuditSeverity.DEBUG,
            entity_type="import",
            correlation_id=correlation_id,
            description=f"Parsed {draft_count} account drafts ({mode} mode)",
            details={
                "mode": mode,
                "draft_count": draft_count,
            },
        )

    @staticmethod
    def import_completed(
        path: str,
        imported: int,
        created: int,
        updated: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            entity_type="import",
            entity_id=path,
            correlation_id=correlation_id,
            description=f"Imported {imported} accounts ({created} new, {updated} updated)",
            details={
                "imported": imported,
                "created": created,
                "updated": updated,
            },
        )

    @staticmethod
    def import_empty(
        mode: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_EMPTY,
            entity_type="import",
            correlation_id=correlation_id,
            description="No accounts found in pasted text; nothing written",
            details={
                "mode": mode,
            },
        )

    @staticmethod
    def import_rejected(
        mode: str,
        error_message: str,
        position: Optional[int],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            correlation_id=correlation_id,
            description="Import rejected: pasted text does not match the expected format",
            error_message=error_message,
            details={
                "mode": mode,
                "position": position,
            },
        )
