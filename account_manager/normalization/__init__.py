"""Dataset normalization package."""

from account_manager.normalization.normalizer import (
    DEFAULT_GROUP_NAME,
    Normalizer,
    normalize_member_role,
)

__all__ = ["DEFAULT_GROUP_NAME", "Normalizer", "normalize_member_role"]
