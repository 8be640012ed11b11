"""Tests for turning pasted text into account drafts."""

import pytest

from account_manager.parsing import (
    FIELD_RULES,
    DraftBuilder,
    ImportFormatError,
    ImportMode,
    mask_value,
    parse_accounts,
    tokenize,
)
from account_manager.parsing.drafts import DEFAULT_AUTHENTICATOR_URL


FULL_BLOCK = """\
user@example.com
s3cret!
recovery: backup@example.com
phone: +1 555 123 4567
JBSWY3DPEHPK3PXP
https://mail.example.com/inbox
"""


class TestFreeformImport:
    """Best-effort parsing of loosely formatted dumps."""

    def test_full_block(self):
        """Test that every line of a typical block finds its field."""
        drafts = parse_accounts(FULL_BLOCK)

        assert len(drafts) == 1
        draft = drafts[0]
        assert draft.login == "user@example.com"
        assert draft.password == "s3cret!"
        assert draft.recovery_email == "backup@example.com"
        assert draft.phone == "+1 555 123 4567"
        assert draft.authenticator_token == "JBSWY3DPEHPK3PXP"
        assert draft.authenticator_url == DEFAULT_AUTHENTICATOR_URL
        assert draft.messages_url == "https://mail.example.com/inbox"
        assert draft.note == ""

    def test_semicolon_separated_line(self):
        """Test the one-line login;password form."""
        drafts = parse_accounts("a@b.com;pw1")
        assert [(d.login, d.password) for d in drafts] == [("a@b.com", "pw1")]

    def test_second_login_becomes_recovery(self):
        """Test that an email after the password is the recovery address."""
        drafts = parse_accounts("a@example.com\npw\nb@example.com\nc@example.com\npw2")

        assert [d.login for d in drafts] == ["a@example.com", "c@example.com"]
        assert drafts[0].recovery_email == "b@example.com"
        assert drafts[1].password == "pw2"

    def test_one_record_per_line(self):
        """Test that a login opening a line starts a new account."""
        drafts = parse_accounts("a@b.com;pw1\nc@d.com;pw2\ne@f.com;pw3")

        assert [(d.login, d.password) for d in drafts] == [
            ("a@b.com", "pw1"),
            ("c@d.com", "pw2"),
            ("e@f.com", "pw3"),
        ]
        assert all(d.recovery_email == "" and d.note == "" for d in drafts)

    def test_recovery_on_own_line(self):
        drafts = parse_accounts("a@b.com\npw\nrecovery@x.com")

        assert len(drafts) == 1
        assert drafts[0].recovery_email == "recovery@x.com"

    def test_recovery_at_end_of_line(self):
        drafts = parse_accounts("a@b.com;pw;recovery@x.com\nc@d.com;pw2")

        assert [d.login for d in drafts] == ["a@b.com", "c@d.com"]
        assert drafts[0].recovery_email == "recovery@x.com"

    def test_login_without_password_is_kept(self):
        """Test that free-form mode never rejects a login."""
        drafts = parse_accounts("a@example.com\nb@example.com\npw")

        assert [(d.login, d.password) for d in drafts] == [
            ("a@example.com", ""),
            ("b@example.com", "pw"),
        ]

    def test_text_before_first_login_is_ignored(self):
        drafts = parse_accounts("hello\nx@example.com\npw")
        assert len(drafts) == 1
        assert drafts[0].note == ""

    def test_no_login_means_no_drafts(self):
        """Test that text without any email yields nothing."""
        assert parse_accounts("just some words") == []
        assert parse_accounts("") == []

    def test_app_password_and_notes(self):
        """Test that a 16-character unclaimed line is the app password."""
        drafts = parse_accounts(
            "a@example.com\npw\nabcd-efgh-ijkl-m\nlikes cats\nsecond note"
        )

        assert drafts[0].app_password == "abcd-efgh-ijkl-m"
        assert drafts[0].note == "likes cats\nsecond note"

    def test_only_first_app_password_is_taken(self):
        drafts = parse_accounts("a@example.com\npw\nabcd-efgh-ijkl-m\nnopq-rstu-vwxy-z")
        assert drafts[0].app_password == "abcd-efgh-ijkl-m"
        assert drafts[0].note == "nopq-rstu-vwxy-z"

    def test_authenticator_link(self):
        """Test that a 2FA lookup link is not mistaken for a messages link."""
        drafts = parse_accounts(
            "a@example.com\npw\nJBSWY3DPEHPK3PXP\nhttps://2fa.live/tok/JBSWY3DPEHPK3PXP"
        )
        assert drafts[0].authenticator_url == "https://2fa.live/tok/JBSWY3DPEHPK3PXP"
        assert drafts[0].messages_url == ""

    def test_authenticator_prefix(self):
        """Test that the URL is pulled out of a labelled line."""
        drafts = parse_accounts("a@example.com\npw\n2fa: see https://2fa.live/abc")
        assert drafts[0].authenticator_url == "https://2fa.live/abc"

    def test_sms_links_go_to_note(self):
        drafts = parse_accounts(
            "a@example.com\npw\nhttps://sms.example.net/get?id=1\nsms: https://other.example/1"
        )
        assert drafts[0].note == "https://sms.example.net/get?id=1\nhttps://other.example/1"
        assert drafts[0].messages_url == ""

    def test_default_url_only_with_token(self):
        """Test that no lookup URL is attached without a 2FA secret."""
        drafts = parse_accounts("a@example.com\npw")
        assert drafts[0].authenticator_url == ""

    def test_custom_default_url(self):
        drafts = parse_accounts(
            "a@example.com\npw\nJBSWY3DPEHPK3PXP",
            default_authenticator_url="https://totp.example",
        )
        assert drafts[0].authenticator_url == "https://totp.example"

    def test_localized_labels(self):
        """Test the Chinese field labels found in purchased account dumps."""
        drafts = parse_accounts(
            "a@example.com\npw\n辅助邮箱：backup@example.com\n手机号：13800138000"
        )
        assert drafts[0].recovery_email == "backup@example.com"
        assert drafts[0].phone == "13800138000"

    def test_trailing_punctuation_trimmed(self):
        drafts = parse_accounts("a@example.com,\npw")
        assert drafts[0].login == "a@example.com"

    def test_inline_record(self):
        """Test login----password----recovery----token."""
        drafts = parse_accounts(
            "a@example.com----pw1----rec@example.com----JBSWY3DPEHPK3PXP"
        )

        assert len(drafts) == 1
        draft = drafts[0]
        assert draft.password == "pw1"
        assert draft.recovery_email == "rec@example.com"
        assert draft.authenticator_token == "JBSWY3DPEHPK3PXP"
        assert draft.authenticator_url == DEFAULT_AUTHENTICATOR_URL

    def test_inline_record_with_token_third(self):
        drafts = parse_accounts("a@example.com----pw1----JBSWY3DPEHPK3PXP")
        assert drafts[0].authenticator_token == "JBSWY3DPEHPK3PXP"
        assert drafts[0].recovery_email == ""

    def test_inline_record_closes_open_block(self):
        """Test that lines after an inline record have no owner."""
        drafts = parse_accounts("x@example.com\npwx\ny@example.com----pwy\nleftover")

        assert [(d.login, d.password) for d in drafts] == [
            ("x@example.com", "pwx"),
            ("y@example.com", "pwy"),
        ]
        assert drafts[0].note == ""
        assert drafts[1].note == ""

    def test_order_of_first_appearance(self):
        drafts = parse_accounts("z@example.com;pw\na@example.com;pw\nm@example.com;pw")
        assert [d.login for d in drafts] == ["z@example.com", "a@example.com", "m@example.com"]

    def test_field_rule_order(self):
        """Test that prefixed lines are tried before shape rules."""
        names = [rule.name for rule in FIELD_RULES]
        assert names.index("recovery_prefix") < names.index("phone_shape")
        assert names.index("authenticator_link") < names.index("messages_link")

    def test_custom_field_rules(self):
        """Test that without rules every extra line lands in the note."""
        builder = DraftBuilder(field_rules=())
        drafts = builder.build(tokenize("a@x.com\npw\nhttps://x.com/inbox"))
        assert drafts[0].note == "https://x.com/inbox"
        assert drafts[0].messages_url == ""


class TestStrictImport:
    """Positional parsing that rejects malformed input."""

    def test_login_and_password(self):
        drafts = parse_accounts("a@b.com;pw1", mode=ImportMode.STRICT)
        assert [(d.login, d.password) for d in drafts] == [("a@b.com", "pw1")]

    def test_full_record(self):
        """Test positional mapping of every optional field."""
        drafts = parse_accounts(
            "a@b.com;pw;JBSWY3DPEHPK3PXP;abcdefghijklmnop;https://2fa.live/x;"
            "https://mail.example.com/inbox;extra one;extra two",
            mode="strict",
        )

        draft = drafts[0]
        assert draft.authenticator_token == "JBSWY3DPEHPK3PXP"
        assert draft.app_password == "abcdefghijklmnop"
        assert draft.authenticator_url == "https://2fa.live/x"
        assert draft.messages_url == "https://mail.example.com/inbox"
        assert draft.note == "extra one\nextra two"

    def test_multiline_records(self):
        drafts = parse_accounts("a@b.com\npw\nc@d.com;pw2", mode=ImportMode.STRICT)
        assert [(d.login, d.password) for d in drafts] == [("a@b.com", "pw"), ("c@d.com", "pw2")]

    def test_default_url_with_token(self):
        drafts = parse_accounts("a@b.com;pw;JBSWY3DPEHPK3PXP", mode=ImportMode.STRICT)
        assert drafts[0].authenticator_url == DEFAULT_AUTHENTICATOR_URL

    def test_punctuation_is_kept(self):
        """Test that strict mode takes passwords literally."""
        drafts = parse_accounts("a@b.com;pw,", mode=ImportMode.STRICT)
        assert drafts[0].password == "pw,"

    def test_separator_lines(self):
        drafts = parse_accounts("a@b.com----pw", mode=ImportMode.STRICT)
        assert [(d.login, d.password) for d in drafts] == [("a@b.com", "pw")]

    def test_text_without_login_is_rejected(self):
        """Test that stray text is an error that reports where it was."""
        with pytest.raises(ImportFormatError) as exc_info:
            parse_accounts("just some words", mode=ImportMode.STRICT)

        assert exc_info.value.position == 1
        assert exc_info.value.line == 1

    def test_error_message_masks_the_token(self):
        """Test that a misplaced secret is not echoed back in full."""
        with pytest.raises(ImportFormatError) as exc_info:
            parse_accounts("hello world\na@b.com;pw", mode=ImportMode.STRICT)

        message = str(exc_info.value)
        assert "he*******ld" in message
        assert "hello world" not in message
        assert "login, password" in message

    def test_login_without_password_is_rejected(self):
        with pytest.raises(ImportFormatError) as exc_info:
            parse_accounts("a@b.com\nb@c.com;pw", mode=ImportMode.STRICT)

        assert exc_info.value.position == 1
        assert exc_info.value.token == "a@b.com"

    def test_error_in_last_record_rejects_everything(self):
        """Test that no partial batch is returned."""
        with pytest.raises(ImportFormatError) as exc_info:
            parse_accounts("a@b.com;pw\nc@d.com;pw\ne@f.com", mode=ImportMode.STRICT)

        assert exc_info.value.line == 3

    def test_empty_input(self):
        assert parse_accounts("   ", mode=ImportMode.STRICT) == []


class TestMaskValue:
    """Display masking for secrets."""

    @pytest.mark.parametrize("value,masked", [
        ("", "-"),
        ("abc", "***"),
        ("abcdef", "******"),
        ("abcdefgh", "ab****gh"),
        ("abcdefghij", "ab******ij"),
    ])
    def test_mask(self, value, masked):
        assert mask_value(value) == masked


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
