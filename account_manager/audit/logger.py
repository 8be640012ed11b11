"""
Audit Logger

DESIGN DECISION: Every load, save and import is logged.
This provides:
1. Traceability of every write to the data file
2. A record of silent repairs made by the Normalizer
3. Debugging capability for imports that did not match expectations

The audit logger:
- Logs locally through structlog (JSON lines)
- Never receives secrets; events carry counts and paths only
- Supports correlation IDs to trace the events of one operation
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from account_manager.models.audit import AuditEvent, AuditEventBuilder
from account_manager.models.dataset import Dataset, NormalizationReport


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through a stdlib handler at ``level``."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Every event is logged at the level matching its severity. The most
    recent events are also kept in memory for the desktop shell and tests.
    """

    def __init__(
        self,
        logger_name: str = "account_manager.audit",
        max_events: int = 200,
    ):
        self._logger = structlog.get_logger(logger_name)
        self.events: deque[AuditEvent] = deque(maxlen=max_events)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event and keep it for inspection."""
        self.events.append(event)
        log_dict = event.to_log_dict()

        severity = event.severity.value
        if severity == "error":
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_dataset_loaded(
        self,
        path: str,
        dataset: Dataset,
        correlation_id: UUID,
    ) -> None:
        """Log a completed load."""
        self.log(AuditEventBuilder.dataset_loaded(
            path=path,
            account_count=len(dataset.accounts),
            group_count=len(dataset.groups),
            correlation_id=correlation_id,
        ))

    def log_dataset_saved(
        self,
        path: str,
        dataset: Dataset,
        correlation_id: UUID,
    ) -> None:
        """Log a completed write."""
        self.log(AuditEventBuilder.dataset_saved(
            path=path,
            account_count=len(dataset.accounts),
            group_count=len(dataset.groups),
            correlation_id=correlation_id,
        ))

    def log_repairs(
        self,
        path: str,
        report: NormalizationReport,
        correlation_id: UUID,
    ) -> None:
        """Log normalization repairs, if there were any."""
        if not report.has_repairs:
            return
        self.log(AuditEventBuilder.dataset_repaired(
            path=path,
            repairs=report.model_dump(),
            correlation_id=correlation_id,
        ))

    def log_storage_failed(
        self,
        path: str,
        operation: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a storage failure."""
        self.log(AuditEventBuilder.storage_failed(
            path=path,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_import_parsed(
        self,
        mode: str,
        draft_count: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.import_parsed(
            mode=mode,
            draft_count=draft_count,
            correlation_id=correlation_id,
        ))

    def log_import_completed(
        self,
        path: str,
        created: int,
        updated: int,
        correlation_id: UUID,
    ) -> None:
        """Log a completed import."""
        self.log(AuditEventBuilder.import_completed(
            path=path,
            imported=created + updated,
            created=created,
            updated=updated,
            correlation_id=correlation_id,
        ))

    def log_import_empty(self, mode: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.import_empty(
            mode=mode,
            correlation_id=correlation_id,
        ))

    def log_import_rejected(
        self,
        mode: str,
        error_message: str,
        position: Optional[int],
        correlation_id: UUID,
    ) -> None:
        """Log a strict-mode rejection."""
        self.log(AuditEventBuilder.import_rejected(
            mode=mode,
            error_message=error_message,
            position=position,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each public operation (load, save, import).
    """
    return uuid4()
