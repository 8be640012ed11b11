"""
Core Data Models for Account Manager

These models define the persisted document and everything that flows
into it. They are designed to:
1. Read hand-edited or older files without failing on missing fields
2. Serialize with the lower-camel-case keys of the stored document
3. Carry raw, possibly inconsistent values until the Normalizer repairs them

DESIGN DECISION: The models are deliberately lenient. Invariants
(unique logins, single admin, one group per account) are restored by the
Normalizer, not rejected at parse time, because the input may come from
an externally edited file.
"""

from enum import Enum
from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DATA_VERSION = 1


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class MemberRole(str, Enum):
    """
    Role of an account inside a family group.

    Raw input may carry any label ("owner", "child", ...). The Normalizer
    maps every label onto one of these two values.
    """
    ADMIN = "admin"
    MEMBER = "member"


# =============================================================================
# BASE
# =============================================================================

class StoredModel(BaseModel):
    """Shared config for everything written to the JSON document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info) -> Any:
        """Treat JSON null like a missing key for string and int fields."""
        if v is not None:
            return v
        annotation = cls.model_fields[info.field_name].annotation
        if annotation is str:
            return ""
        if annotation is int:
            return 0
        if get_origin(annotation) is list:
            return []
        return v


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountFields(StoredModel):
    """String fields shared by stored accounts and import drafts."""

    login: str = Field(
        default="",
        description="Login (email address), unique case-insensitively"
    )
    password: str = ""
    recovery_email: str = Field(
        default="",
        description="Recovery contact email"
    )
    phone: str = ""
    authenticator_token: str = Field(
        default="",
        description="Second-factor (TOTP) secret"
    )
    app_password: str = Field(
        default="",
        description="Derived app-specific password"
    )
    authenticator_url: str = Field(
        default="",
        description="Website where the second-factor code can be looked up"
    )
    messages_url: str = Field(
        default="",
        description="Inbox / messages URL"
    )
    note: str = ""


# Names of every string field an import may set, login excluded.
AUXILIARY_FIELDS = (
    "password",
    "recovery_email",
    "phone",
    "authenticator_token",
    "app_password",
    "authenticator_url",
    "messages_url",
    "note",
)


class AccountDraft(AccountFields):
    """
    An account parsed from pasted text.

    CRITICAL: This is PROPOSED data. It has no identifier and no
    timestamps until the Reconciler merges it into a Dataset.
    """


class Account(AccountFields):
    """A stored credential bundle."""

    id: str = Field(
        default="",
        description="Opaque identifier, assigned once and never changed"
    )
    created_at: int = Field(
        default=0,
        description="Creation time, milliseconds since epoch"
    )
    updated_at: int = Field(
        default=0,
        description="Last update time, milliseconds since epoch"
    )

    @property
    def login_key(self) -> str:
        """Case-insensitive identity of this account."""
        return self.login.lower()


# =============================================================================
# FAMILY GROUPS
# =============================================================================

class FamilyMember(StoredModel):
    """Role-tagged link between a group and an account."""

    account_id: str = ""
    role: str = Field(
        default=MemberRole.MEMBER.value,
        description="Raw role label; normalized to admin/member"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN.value


class FamilyGroup(StoredModel):
    """A named set of accounts sharing at most one administrator."""

    id: str = ""
    name: str = ""
    note: str = ""
    members: list[FamilyMember] = Field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0


# =============================================================================
# ROOT DOCUMENT
# =============================================================================

class Dataset(StoredModel):
    """
    The unit of persistence.

    One JSON document holding every account and every group.
    """

    version: int = DATA_VERSION
    accounts: list[Account] = Field(default_factory=list)
    groups: list[FamilyGroup] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "Dataset":
        return cls(version=DATA_VERSION)

    def to_document(self) -> str:
        """Serialize to the on-disk JSON form."""
        return self.model_dump_json(by_alias=True, indent=2)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class ImportResult(StoredModel):
    """Outcome of one bulk import."""

    imported: int = Field(
        default=0,
        ge=0,
        description="created + updated"
    )
    created: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    data: Dataset = Field(default_factory=Dataset.empty)


class NormalizationReport(BaseModel):
    """
    Counts of the silent repairs made by one normalization pass.

    These are NOT errors. They are logged so a user can see that a
    hand-edited file was cleaned up.
    """

    accounts_without_login: int = 0
    duplicate_logins: int = 0
    identifiers_assigned: int = 0
    timestamps_assigned: int = 0
    groups_renamed: int = 0
    dangling_members: int = 0
    duplicate_members: int = 0
    roles_remapped: int = 0
    extra_admins: int = 0
    claimed_elsewhere: int = 0

    @property
    def repair_count(self) -> int:
        return sum(self.model_dump().values())

    @property
    def has_repairs(self) -> bool:
        return self.repair_count > 0
