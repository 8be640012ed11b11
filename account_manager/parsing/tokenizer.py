"""
Text Tokenizer / Classifier

Turns a pasted blob into an ordered list of classified tokens.

DESIGN DECISION: Classification is pure and context-free. A 16-letter
string may be a password or a 2FA secret; this module only says what it
LOOKS like. The Draft Builder, which knows where the token sits in a
record, makes the final call.

Classification is an ordered tuple of named rules evaluated top to
bottom, with TEXT as the explicit fallback, so the heuristics stay
auditable and each can be tested on its own.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence


EMAIL_PATTERN = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE)
URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)
URL_SEARCH_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
# Base32 alphabet, the shape of a TOTP secret
TOKEN_PATTERN = re.compile(r"^[a-zA-Z2-7]{16,32}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\-\s()]{8,}$")

# Newline, carriage return and semicolon all end a field.
DEFAULT_DELIMITERS = ("\r\n", "\r", "\n", ";")
DEFAULT_BLOCK_SEPARATOR = "----"

# BOM and zero-width characters that survive copy/paste from web pages
_INVISIBLE = "\ufeff\u200b\u200c\u200d\u2060"
_PUNCTUATION = ",;"


class TokenKind(str, Enum):
    """What a token looks like, independent of where it sits."""
    LOGIN = "login"
    URL = "url"
    TOKEN = "token"
    PHONE = "phone"
    TEXT = "text"
    # Structural: a line that contained the block separator
    SEPARATOR = "separator"


@dataclass(frozen=True)
class Token:
    """One trimmed, non-empty piece of the pasted text."""
    text: str
    kind: TokenKind
    position: int
    line: int
    inline: bool = False


@dataclass(frozen=True)
class ClassifierRule:
    """A named shape check mapping matching text to a TokenKind."""
    name: str
    kind: TokenKind
    matches: Callable[[str], bool]


def looks_like_url(value: str) -> bool:
    return bool(URL_PATTERN.match(value))


def looks_like_login(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value)) and not looks_like_url(value)


def looks_like_token(value: str) -> bool:
    return bool(TOKEN_PATTERN.match(value))


def looks_like_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def find_url(value: str) -> Optional[str]:
    """First URL embedded anywhere in ``value``."""
    match = URL_SEARCH_PATTERN.search(value)
    return match.group(0) if match else None


# Order matters: a URL containing '@' must never become a login.
CLASSIFIER_RULES: tuple[ClassifierRule, ...] = (
    ClassifierRule("url", TokenKind.URL, looks_like_url),
    ClassifierRule("login", TokenKind.LOGIN, looks_like_login),
    ClassifierRule("token", TokenKind.TOKEN, looks_like_token),
    ClassifierRule("phone", TokenKind.PHONE, looks_like_phone),
)


def classify(text: str, rules: Sequence[ClassifierRule] = CLASSIFIER_RULES) -> TokenKind:
    """Return the kind of the first rule that matches, else TEXT."""
    for rule in rules:
        if rule.matches(text):
            return rule.kind
    return TokenKind.TEXT


def clean_token(value: str, trim_punctuation: bool = False) -> str:
    """Strip whitespace and invisible characters (and stray , ; if asked)."""
    strip_chars = _INVISIBLE + (_PUNCTUATION if trim_punctuation else "")
    cleaned = value.strip()
    while True:
        stripped = cleaned.strip(strip_chars).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def _split_lines(raw: str) -> list[str]:
    return raw.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def _split_fields(line: str, delimiters: Sequence[str]) -> list[str]:
    fields = [line]
    for delimiter in delimiters:
        if delimiter in ("\r\n", "\r", "\n"):
            continue
        fields = [part for field in fields for part in field.split(delimiter)]
    return fields


def tokenize(
    raw: str,
    delimiters: Sequence[str] = DEFAULT_DELIMITERS,
    block_separator: Optional[str] = DEFAULT_BLOCK_SEPARATOR,
    trim_punctuation: bool = False,
) -> list[Token]:
    """
    Split ``raw`` into classified tokens.

    Lines are always split on line breaks; the other ``delimiters`` split a
    line into fields. A line containing ``block_separator`` yields a
    SEPARATOR token followed by one inline token per non-empty part.
    """
    tokens: list[Token] = []

    def emit(text: str, kind: TokenKind, line: int, inline: bool = False) -> None:
        tokens.append(Token(
            text=text,
            kind=kind,
            position=len(tokens) + 1,
            line=line,
            inline=inline,
        ))

    for line_number, line in enumerate(_split_lines(raw), start=1):
        if block_separator and block_separator in line:
            emit(block_separator, TokenKind.SEPARATOR, line_number)
            for part in line.split(block_separator):
                text = clean_token(part, trim_punctuation)
                if text:
                    emit(text, classify(text), line_number, inline=True)
            continue

        for field in _split_fields(line, delimiters):
            text = clean_token(field, trim_punctuation)
            if text:
                emit(text, classify(text), line_number)

    return tokens
