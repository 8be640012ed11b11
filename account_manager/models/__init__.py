"""
Data Models Package

This package contains all Pydantic models used in the Account Manager.
Everything read from or written to the data file conforms to these schemas.
"""

from account_manager.models.dataset import (
    AUXILIARY_FIELDS,
    DATA_VERSION,
    Account,
    AccountDraft,
    Dataset,
    FamilyGroup,
    FamilyMember,
    ImportResult,
    MemberRole,
    NormalizationReport,
)
from account_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Dataset models
    "AUXILIARY_FIELDS",
    "DATA_VERSION",
    "Account",
    "AccountDraft",
    "Dataset",
    "FamilyGroup",
    "FamilyMember",
    "ImportResult",
    "MemberRole",
    "NormalizationReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
