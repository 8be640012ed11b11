"""
Draft Builder

Assembles classified tokens into account drafts, one per login.

Two grammars are supported, and they disagree on purpose:

FREEFORM - best effort. Lines are grouped under the last login seen and
each line is placed by content heuristics. Nothing is ever rejected; a
login without a password is kept with an empty password.

STRICT - positional. Every record is ``login, password, [token,
app password, 2FA url, messages url], extra...``. Anything that breaks
that shape aborts the whole import with ImportFormatError.

IMPORTANT: Drafts are proposals. They carry no identifier and no
timestamps; the Reconciler decides whether each one creates or updates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, Sequence

from account_manager.models.dataset import AccountDraft
from account_manager.parsing.tokenizer import (
    DEFAULT_BLOCK_SEPARATOR,
    Token,
    TokenKind,
    find_url,
    looks_like_login,
    looks_like_token,
    tokenize,
)


DEFAULT_AUTHENTICATOR_URL = "https://2fa.fun"

# Length of a Google-style app password once spaces are removed
APP_PASSWORD_LENGTH = 16

# Fields after the password in a strict record, in order
STRICT_OPTIONAL_FIELDS = (
    "authenticator_token",
    "app_password",
    "authenticator_url",
    "messages_url",
)
STRICT_RECORD_SHAPE = (
    "login, password[, 2FA token, app password, 2FA url, messages url, note...]"
)


class ImportMode(str, Enum):
    """Which import grammar to use."""
    FREEFORM = "freeform"
    STRICT = "strict"


class ParsingError(Exception):
    """Base exception for import parsing errors."""
    pass


class ImportFormatError(ParsingError):
    """Pasted text does not follow the strict record layout."""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        line: Optional[int] = None,
        token: Optional[str] = None,
        expected: str = STRICT_RECORD_SHAPE,
    ):
        self.position = position
        self.line = line
        self.token = token
        self.expected = expected
        super().__init__(message)


def mask_value(value: str) -> str:
    """
    Hide a secret for display.

    Short values are fully starred; longer ones keep two characters
    at each end.
    """
    if not value:
        return "-"
    if len(value) <= 6:
        return "*" * len(value)
    stars = "*" * max(len(value) - 4, 4)
    return f"{value[:2]}{stars}{value[-2:]}"


# =============================================================================
# FREE-FORM FIELD RULES
# =============================================================================

@dataclass
class DraftInProgress:
    """A draft being assembled plus lines nobody claimed yet."""
    draft: AccountDraft
    held: list[str] = field(default_factory=list)

    def append_note(self, line: str) -> None:
        if not line:
            return
        self.draft.note = f"{self.draft.note}\n{line}" if self.draft.note else line


@dataclass(frozen=True)
class FieldRule:
    """
    A named heuristic for one free-form line.

    ``extract`` returns the value to store, or None when the rule does not
    apply. ``apply`` writes that value into the draft.
    """
    name: str
    extract: Callable[[Token], Optional[str]]
    apply: Callable[[DraftInProgress, str], None]


def _prefixed_value(prefixes: Sequence[str]) -> Callable[[Token], Optional[str]]:
    """Match ``<prefix>...:<value>`` (ASCII or full-width colon)."""
    lowered = tuple(prefix.lower() for prefix in prefixes)

    def extract(token: Token) -> Optional[str]:
        text = token.text
        if not text.lower().startswith(lowered):
            return None
        for colon in (":", "："):
            if colon in text:
                return text.split(colon, 1)[1].strip()
        return None

    return extract


def _url_containing(keywords: Sequence[str]) -> Callable[[Token], Optional[str]]:
    def extract(token: Token) -> Optional[str]:
        if token.kind != TokenKind.URL:
            return None
        lowered = token.text.lower()
        if keywords and not any(keyword in lowered for keyword in keywords):
            return None
        return token.text

    return extract


def _of_kind(kind: TokenKind) -> Callable[[Token], Optional[str]]:
    def extract(token: Token) -> Optional[str]:
        return token.text if token.kind == kind else None

    return extract


def _set(attribute: str) -> Callable[[DraftInProgress, str], None]:
    def apply(state: DraftInProgress, value: str) -> None:
        setattr(state.draft, attribute, value)

    return apply


def _set_authenticator_url(state: DraftInProgress, value: str) -> None:
    state.draft.authenticator_url = find_url(value) or value


def _append_note(state: DraftInProgress, value: str) -> None:
    state.append_note(value)


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("recovery_prefix", _prefixed_value(("recovery", "辅助邮箱")), _set("recovery_email")),
    FieldRule("phone_prefix", _prefixed_value(("phone", "手机号")), _set("phone")),
    FieldRule("sms_prefix", _prefixed_value(("sms:", "接码链接:", "接码链接：")), _append_note),
    FieldRule(
        "authenticator_prefix",
        _prefixed_value(("2fa:", "2FA验证码查看网站:", "2FA验证码查看网站：")),
        _set_authenticator_url,
    ),
    FieldRule("authenticator_link", _url_containing(("2fa", "totp")), _set("authenticator_url")),
    FieldRule("sms_link", _url_containing(("sms", "接码")), _append_note),
    FieldRule("messages_link", _url_containing(()), _set("messages_url")),
    FieldRule("token_shape", _of_kind(TokenKind.TOKEN), _set("authenticator_token")),
    FieldRule("phone_shape", _of_kind(TokenKind.PHONE), _set("phone")),
)


def apply_field_rules(
    state: DraftInProgress,
    token: Token,
    rules: Sequence[FieldRule] = FIELD_RULES,
) -> Optional[str]:
    """
    Place ``token`` with the first matching rule.

    Returns the rule name, or None when the line was held for the note.
    """
    for rule in rules:
        value = rule.extract(token)
        if value is not None:
            rule.apply(state, value)
            return rule.name
    state.held.append(token.text)
    return None


# =============================================================================
# BUILDER
# =============================================================================

class DraftBuilder:
    """
    Turns a classified token stream into account drafts.

    Usage:
        builder = DraftBuilder(ImportMode.STRICT)
        drafts = builder.build(tokenize(raw))
    """

    def __init__(
        self,
        mode: ImportMode = ImportMode.FREEFORM,
        default_authenticator_url: str = DEFAULT_AUTHENTICATOR_URL,
        field_rules: Sequence[FieldRule] = FIELD_RULES,
    ):
        self.mode = ImportMode(mode)
        self._default_authenticator_url = default_authenticator_url
        self._field_rules = tuple(field_rules)

    def build(self, tokens: Sequence[Token]) -> list[AccountDraft]:
        if self.mode == ImportMode.STRICT:
            return list(self._build_strict(tokens))
        return list(self._build_freeform(tokens))

    def finalize(self, state: DraftInProgress) -> AccountDraft:
        """
        Flush held lines and fill defaults.

        The first held 16-character line that is not a 2FA secret becomes
        the app password; every other held line goes to the note.
        """
        draft = state.draft
        for line in state.held:
            if (
                not draft.app_password
                and len(line) == APP_PASSWORD_LENGTH
                and not looks_like_token(line)
            ):
                draft.app_password = line
            else:
                state.append_note(line)
        state.held = []

        if draft.authenticator_token and not draft.authenticator_url:
            draft.authenticator_url = self._default_authenticator_url

        return draft

    # -------------------------------------------------------------------------
    # Free-form
    # -------------------------------------------------------------------------

    def _build_freeform(self, tokens: Sequence[Token]) -> Iterator[AccountDraft]:
        current: Optional[DraftInProgress] = None
        index = 0

        while index < len(tokens):
            token = tokens[index]
            index += 1

            if token.kind == TokenKind.SEPARATOR:
                # An inline record always closes the block in progress
                if current is not None:
                    yield self.finalize(current)
                    current = None
                parts = []
                while index < len(tokens) and tokens[index].inline and tokens[index].line == token.line:
                    parts.append(tokens[index])
                    index += 1
                inline = self._inline_record(parts)
                if inline is not None:
                    yield self.finalize(inline)
                continue

            if token.kind == TokenKind.LOGIN:
                # A login followed by more fields on its line opens a record
                starts_record = index < len(tokens) and tokens[index].line == token.line
                if (
                    current is not None
                    and not starts_record
                    and current.draft.password
                    and not current.draft.recovery_email
                ):
                    current.draft.recovery_email = token.text
                    continue
                if current is not None:
                    yield self.finalize(current)
                current = DraftInProgress(AccountDraft(login=token.text))
                continue

            if current is None:
                # Text before the first login has no owner
                continue

            if not current.draft.password:
                current.draft.password = token.text
            else:
                apply_field_rules(current, token, self._field_rules)

        if current is not None:
            yield self.finalize(current)

    def _inline_record(self, parts: Sequence[Token]) -> Optional[DraftInProgress]:
        """``login----password----recovery-or-token----token``"""
        if not parts or parts[0].kind != TokenKind.LOGIN:
            return None

        draft = AccountDraft(login=parts[0].text)
        if len(parts) > 1:
            draft.password = parts[1].text
        if len(parts) > 2:
            if looks_like_login(parts[2].text):
                draft.recovery_email = parts[2].text
            elif looks_like_token(parts[2].text):
                draft.authenticator_token = parts[2].text
        if len(parts) > 3 and looks_like_token(parts[3].text):
            draft.authenticator_token = parts[3].text
        return DraftInProgress(draft)

    # -------------------------------------------------------------------------
    # Strict
    # -------------------------------------------------------------------------

    def _build_strict(self, tokens: Sequence[Token]) -> Iterator[AccountDraft]:
        # Validate the whole batch before emitting anything
        records: list[tuple[Token, list[str]]] = []

        for token in tokens:
            if token.kind == TokenKind.SEPARATOR:
                continue
            if token.kind == TokenKind.LOGIN:
                records.append((token, []))
                continue
            if not records:
                raise ImportFormatError(
                    f"Expected a login (email address) at token {token.position} "
                    f"(line {token.line}) but found '{mask_value(token.text)}'. "
                    f"Each record must look like: {STRICT_RECORD_SHAPE}",
                    position=token.position,
                    line=token.line,
                    token=token.text,
                )
            records[-1][1].append(token.text)

        for login, fields in records:
            if not fields:
                raise ImportFormatError(
                    f"Login '{login.text}' at token {login.position} (line {login.line}) "
                    f"has no password. Each record must look like: {STRICT_RECORD_SHAPE}",
                    position=login.position,
                    line=login.line,
                    token=login.text,
                )

        for login, fields in records:
            draft = AccountDraft(login=login.text, password=fields[0])
            optional = fields[1:1 + len(STRICT_OPTIONAL_FIELDS)]
            for name, value in zip(STRICT_OPTIONAL_FIELDS, optional):
                setattr(draft, name, value)
            state = DraftInProgress(draft)
            for extra in fields[1 + len(STRICT_OPTIONAL_FIELDS):]:
                state.append_note(extra)
            yield self.finalize(state)


def parse_accounts(
    raw: str,
    mode: ImportMode = ImportMode.FREEFORM,
    block_separator: Optional[str] = DEFAULT_BLOCK_SEPARATOR,
    default_authenticator_url: str = DEFAULT_AUTHENTICATOR_URL,
) -> list[AccountDraft]:
    """
    Parse pasted text into drafts, in order of first appearance.

    Raises:
        ImportFormatError: strict mode only, on the first malformed record
    """
    mode = ImportMode(mode)
    tokens = tokenize(
        raw,
        block_separator=block_separator,
        trim_punctuation=mode == ImportMode.FREEFORM,
    )
    builder = DraftBuilder(mode, default_authenticator_url=default_authenticator_url)
    return builder.build(tokens)
