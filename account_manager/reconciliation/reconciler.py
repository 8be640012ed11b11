"""
Reconciliation Engine

Merges a batch of account drafts into a dataset with create-or-update
semantics keyed on the case-insensitive login.

RULES:
- Existing account: only non-empty draft values overwrite. An import can
  add or change data, never erase it.
- Note: appended on its own line unless the existing note already
  contains it, so re-importing the same paste is a no-op for notes.
- New account: fresh identifier, current timestamps, draft fields as given.

The input dataset is never mutated. The merged result is normalized
before it is returned.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from account_manager.identifiers import (
    ACCOUNT_PREFIX,
    Clock,
    IdGenerator,
    SequentialIdGenerator,
    now_ms,
)
from account_manager.models.dataset import (
    AUXILIARY_FIELDS,
    Account,
    AccountDraft,
    Dataset,
    NormalizationReport,
)
from account_manager.normalization import Normalizer


@dataclass
class ReconcileOutcome:
    """Merged dataset plus how many drafts created vs. updated accounts."""
    dataset: Dataset
    created: int
    updated: int
    report: NormalizationReport

    @property
    def imported(self) -> int:
        return self.created + self.updated


def merge_note(existing: str, incoming: str) -> str:
    """Append ``incoming`` on a new line unless it is already present."""
    incoming = incoming.strip()
    if not incoming:
        return existing
    if not existing.strip():
        return incoming
    if incoming in existing:
        return existing
    return f"{existing.strip()}\n{incoming}"


class Reconciler:
    """
    Applies drafts to a dataset.

    The id generator and clock are shared with the Normalizer so that one
    import sees a single, consistent notion of "now".
    """

    def __init__(
        self,
        normalizer: Optional[Normalizer] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        self._clock = clock or now_ms
        self._next_id = id_generator or SequentialIdGenerator(self._clock)
        self._normalizer = normalizer or Normalizer(
            id_generator=self._next_id,
            clock=self._clock,
        )

    def merge(
        self,
        dataset: Dataset,
        drafts: Sequence[AccountDraft],
    ) -> ReconcileOutcome:
        """
        Merge ``drafts`` into a copy of ``dataset``.

        Drafts are applied in order; a later draft for a login created
        earlier in the same batch counts as an update.
        """
        now = self._clock()
        working = dataset.model_copy(deep=True)
        by_login = {account.login_key: account for account in working.accounts}
        created = 0
        updated = 0

        for draft in drafts:
            login = draft.login.strip()
            if not login:
                continue

            existing = by_login.get(login.lower())
            if existing is not None:
                self._update(existing, draft, now)
                updated += 1
                continue

            account = Account(
                id=self._next_id(ACCOUNT_PREFIX),
                login=login,
                **{name: getattr(draft, name) for name in AUXILIARY_FIELDS},
                created_at=now,
                updated_at=now,
            )
            working.accounts.append(account)
            by_login[account.login_key] = account
            created += 1

        normalized, report = self._normalizer.normalize_with_report(working)
        return ReconcileOutcome(
            dataset=normalized,
            created=created,
            updated=updated,
            report=report,
        )

    @staticmethod
    def _update(account: Account, draft: AccountDraft, now: int) -> None:
        account.login = draft.login.strip()
        for name in AUXILIARY_FIELDS:
            if name == "note":
                continue
            value = getattr(draft, name).strip()
            if value:
                setattr(account, name, value)
        account.note = merge_note(account.note, draft.note)
        account.updated_at = now
