"""
Dataset Normalizer

The invariant-enforcement pass run after every load and every mutation.

GUARANTEES (after every pass):
1. Every account has a login, a unique identifier and positive timestamps
2. Logins are unique case-insensitively; the most recently updated wins
3. Every group has an identifier and a name
4. Every member points at an existing account
5. At most one admin per group
6. An account belongs to at most one group
7. Accounts are sorted by login, groups by name (case-insensitive)

IMPORTANT: Normalization never raises for bad data. Dangling members,
duplicate logins, duplicate admins and unknown roles are repaired
deterministically and counted in a NormalizationReport. The input may
come from a hand-edited file; repairing it is the job, not a failure.

The pass is pure (input is never mutated) and idempotent.
"""

from typing import Optional

from account_manager.identifiers import (
    ACCOUNT_PREFIX,
    GROUP_PREFIX,
    Clock,
    IdGenerator,
    SequentialIdGenerator,
    now_ms,
)
from account_manager.models.dataset import (
    AUXILIARY_FIELDS,
    DATA_VERSION,
    Account,
    Dataset,
    FamilyGroup,
    FamilyMember,
    MemberRole,
    NormalizationReport,
)


DEFAULT_GROUP_NAME = "Unnamed family group"

ADMIN_ROLE_LABELS = frozenset({"admin", "manager", "owner", "管理员"})
MEMBER_ROLE_LABELS = frozenset({
    "member", "adult", "child", "parent", "invited", "invite", "pending", "成员",
})


def normalize_member_role(raw_role: str) -> MemberRole:
    """Map any role label onto admin/member. Unknown labels become member."""
    label = (raw_role or "").strip().lower()
    if label in ADMIN_ROLE_LABELS:
        return MemberRole.ADMIN
    return MemberRole.MEMBER


def member_role_priority(member: FamilyMember) -> int:
    return 0 if member.is_admin else 1


class Normalizer:
    """
    Restores every dataset invariant.

    Usage:
        normalizer = Normalizer(clock=lambda: 1_700_000_000_000)
        clean = normalizer.normalize(raw_dataset)
    """

    def __init__(
        self,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        default_group_name: str = DEFAULT_GROUP_NAME,
    ):
        self._clock = clock or now_ms
        self._next_id = id_generator or SequentialIdGenerator(self._clock)
        self._default_group_name = default_group_name

    def normalize(self, dataset: Dataset) -> Dataset:
        normalized, _ = self.normalize_with_report(dataset)
        return normalized

    def normalize_with_report(
        self,
        dataset: Dataset,
    ) -> tuple[Dataset, NormalizationReport]:
        """Normalize and report what had to be repaired."""
        report = NormalizationReport()
        current = self._clock()

        accounts = self._normalize_accounts(dataset.accounts, current, report)
        account_ids = {account.id for account in accounts}

        groups = [
            self._normalize_group(group, account_ids, current, report)
            for group in dataset.groups
        ]
        groups = self._apply_exclusivity(groups, report)
        groups.sort(key=lambda group: group.name.lower())

        normalized = Dataset(
            version=DATA_VERSION,
            accounts=accounts,
            groups=groups,
        )
        return normalized, report

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def _normalize_accounts(
        self,
        accounts: list[Account],
        current: int,
        report: NormalizationReport,
    ) -> list[Account]:
        # Stable sort: among equal timestamps the earlier input wins
        by_recency = sorted(accounts, key=lambda account: account.updated_at, reverse=True)

        seen: set[str] = set()
        used_ids: set[str] = set()
        kept: list[Account] = []

        for original in by_recency:
            account = original.model_copy()
            account.login = account.login.strip()
            for name in AUXILIARY_FIELDS:
                setattr(account, name, getattr(account, name).strip())

            if not account.login:
                report.accounts_without_login += 1
                continue
            if account.login_key in seen:
                report.duplicate_logins += 1
                continue
            seen.add(account.login_key)

            # A colliding id stays with the most recently updated holder
            account.id = account.id.strip()
            if not account.id or account.id in used_ids:
                account.id = self._next_id(ACCOUNT_PREFIX)
                report.identifiers_assigned += 1
            used_ids.add(account.id)
            if account.created_at <= 0:
                account.created_at = current
                report.timestamps_assigned += 1
            if account.updated_at <= 0:
                account.updated_at = current
                report.timestamps_assigned += 1

            kept.append(account)

        kept.sort(key=lambda account: account.login_key)
        return kept

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def _normalize_group(
        self,
        original: FamilyGroup,
        account_ids: set[str],
        current: int,
        report: NormalizationReport,
    ) -> FamilyGroup:
        group = original.model_copy()

        group.id = group.id.strip()
        if not group.id:
            group.id = self._next_id(GROUP_PREFIX)
            report.identifiers_assigned += 1

        group.name = group.name.strip()
        group.note = group.note.strip()
        if not group.name:
            group.name = self._default_group_name
            report.groups_renamed += 1

        if group.created_at <= 0:
            group.created_at = current
            report.timestamps_assigned += 1
        if group.updated_at <= 0:
            group.updated_at = current
            report.timestamps_assigned += 1

        seen: set[str] = set()
        members: list[FamilyMember] = []
        for raw in original.members:
            role = normalize_member_role(raw.role).value
            if role != raw.role:
                report.roles_remapped += 1
            member = FamilyMember(account_id=raw.account_id.strip(), role=role)

            if not member.account_id or member.account_id not in account_ids:
                report.dangling_members += 1
                continue
            if member.account_id in seen:
                report.duplicate_members += 1
                continue
            seen.add(member.account_id)
            members.append(member)

        members.sort(key=member_role_priority)
        group.members = members
        return group

    def _apply_exclusivity(
        self,
        groups: list[FamilyGroup],
        report: NormalizationReport,
    ) -> list[FamilyGroup]:
        """
        Give every account to the first group (in input order) that lists it,
        and keep only the first admin of each group.
        """
        claimed: set[str] = set()

        for group in groups:
            has_admin = False
            kept: list[FamilyMember] = []

            for member in group.members:
                if member.account_id in claimed:
                    report.claimed_elsewhere += 1
                    continue
                if member.is_admin:
                    if has_admin:
                        report.extra_admins += 1
                        continue
                    has_admin = True

                claimed.add(member.account_id)
                kept.append(member)

            group.members = kept

        return groups
