"""Tests for tmember.auth.credential."""

from __future__ import annotations

import pytest

from tmember.auth import credential
from tmember.errors import WeakPassword


class TestPasswordHashing(object):
    def test_hash_verifies(self) -> None:
        password_hash = credential.hash_password("Str0ngPassword")

        assert password_hash != "Str0ngPassword"
        assert credential.verify_password("Str0ngPassword", password_hash)

    def test_wrong_password_does_not_verify(self) -> None:
        password_hash = credential.hash_password("Str0ngPassword")

        assert not credential.verify_password("str0ngpassword", password_hash)

    def test_hashes_are_salted(self) -> None:
        """Hashing the same password twice yields different hashes."""
        assert credential.hash_password("Str0ngPassword") != credential.hash_password("Str0ngPassword")

    def test_malformed_hash_is_a_mismatch(self) -> None:
        assert not credential.verify_password("Str0ngPassword", "not-a-bcrypt-hash")


class TestPasswordPolicy(object):
    @pytest.mark.parametrize(
        "password",
        [
            "Abcdefg1",
            "Str0ngPassword",
            "UPPER lower 9",
        ],
    )
    def test_accepts_conforming_passwords(self, password: str) -> None:
        credential.validate_password_policy(password)

    @pytest.mark.parametrize(
        ("password", "reason"),
        [
            ("Abc1", "at least 8 characters"),
            ("abcdefg1", "uppercase"),
            ("ABCDEFG1", "lowercase"),
            ("Abcdefgh", "number"),
            ("\u00c9clairs12", "uppercase"),
            ("ABCDEFGH1\u00e9", "lowercase"),
            ("ABCDEFGh\u0661", "number"),
            ("Abcdefg\u00b2", "number"),
        ],
    )
    def test_rejects_nonconforming_passwords(self, password: str, reason: str) -> None:
        with pytest.raises(WeakPassword) as exc_info:
            credential.validate_password_policy(password)

        assert reason in exc_info.value.message
        assert exc_info.value.code == "WEAK_PASSWORD"

    def test_first_failing_rule_is_reported(self) -> None:
        """A short, all-lowercase password is reported as too short."""
        with pytest.raises(WeakPassword, match="at least 8 characters"):
            credential.validate_password_policy("abc")

    @pytest.mark.parametrize("password", ["Qwerty123", "QWERTy123", "qWERTY123"])
    def test_deny_list_is_case_insensitive(self, password: str) -> None:
        with pytest.raises(WeakPassword, match="too common"):
            credential.validate_password_policy(password)

    def test_deny_list_matches_whole_password(self) -> None:
        credential.validate_password_policy("Qwerty1234")

    def test_length_is_counted_in_bytes(self) -> None:
        # seven characters, eight bytes
        credential.validate_password_policy("Abcde1\u00e9")

    def test_rejects_passwords_longer_than_bcrypt_input(self) -> None:
        with pytest.raises(WeakPassword, match="at most 72 bytes"):
            credential.validate_password_policy("Aa1" + "x" * 70)


class TestEmailSyntax(object):
    @pytest.mark.parametrize(
        "email",
        [
            "user@example.com",
            "first.last+tag@sub.example.org",
            "a_b%c-d@example.co",
        ],
    )
    def test_accepts(self, email: str) -> None:
        assert credential.validate_email_syntax(email)

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "user",
            "user@",
            "@example.com",
            "user@example",
            "user@example.c",
            "user name@example.com",
            "user@example.com ",
        ],
    )
    def test_rejects(self, email: str) -> None:
        assert not credential.validate_email_syntax(email)


class TestPolicyExamples(object):
    @pytest.mark.parametrize(
        "password",
        ["password", "12345678", "short", "nouppercase123", "NOLOWERCASE123", "NoDigitsHere", ""],
    )
    def test_rejected(self, password: str) -> None:
        with pytest.raises(WeakPassword):
            credential.validate_password_policy(password)

    def test_accepted(self) -> None:
        credential.validate_password_policy("Password123")

    @pytest.mark.parametrize(("first", "second"), [("Password123", "Password124"), ("Secure456", "secure456")])
    def test_hash_of_one_password_rejects_another(self, first: str, second: str) -> None:
        assert not credential.verify_password(first, credential.hash_password(second))
