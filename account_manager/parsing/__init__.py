"""Bulk-import parsing package."""

from account_manager.parsing.tokenizer import (
    CLASSIFIER_RULES,
    ClassifierRule,
    Token,
    TokenKind,
    classify,
    tokenize,
)
from account_manager.parsing.drafts import (
    FIELD_RULES,
    DraftBuilder,
    FieldRule,
    ImportFormatError,
    ImportMode,
    ParsingError,
    mask_value,
    parse_accounts,
)

__all__ = [
    "CLASSIFIER_RULES",
    "ClassifierRule",
    "Token",
    "TokenKind",
    "classify",
    "tokenize",
    "FIELD_RULES",
    "DraftBuilder",
    "FieldRule",
    "ImportFormatError",
    "ImportMode",
    "ParsingError",
    "mask_value",
    "parse_accounts",
]
