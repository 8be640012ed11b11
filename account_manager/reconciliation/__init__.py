"""Draft reconciliation package."""

from account_manager.reconciliation.reconciler import (
    ReconcileOutcome,
    Reconciler,
    merge_note,
)

__all__ = ["ReconcileOutcome", "Reconciler", "merge_note"]
