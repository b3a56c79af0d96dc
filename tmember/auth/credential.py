"""Password hashing, password policy and email syntax checks."""

import logging
import re

import bcrypt

from tmember.errors import WeakPassword

logger = logging.getLogger(__name__)

MinPasswordLength = 8
# bcrypt only considers the first 72 bytes of its input
MaxPasswordBytes = 72
DeniedPasswords = frozenset({"password", "12345678", "qwerty123"})

UppercasePattern = re.compile(r"[A-Z]")
LowercasePattern = re.compile(r"[a-z]")
DigitPattern = re.compile(r"[0-9]")

EmailPattern = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash.

    A malformed stored hash is treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("stored password hash could not be parsed")
        return False


def validate_password_policy(password: str) -> None:
    """Reject passwords that fail the policy; the first failing rule is reported.

    Character classes are ASCII only and lengths are counted in UTF-8 bytes.

    Raises:
        WeakPassword
    """
    if len(password.encode("utf-8")) < MinPasswordLength:
        raise WeakPassword(f"Password must be at least {MinPasswordLength} characters long")
    if UppercasePattern.search(password) is None:
        raise WeakPassword("Password must contain at least one uppercase letter")
    if LowercasePattern.search(password) is None:
        raise WeakPassword("Password must contain at least one lowercase letter")
    if DigitPattern.search(password) is None:
        raise WeakPassword("Password must contain at least one number")
    if password.lower() in DeniedPasswords:
        raise WeakPassword("Password is too common")
    if len(password.encode("utf-8")) > MaxPasswordBytes:
        raise WeakPassword(f"Password must be at most {MaxPasswordBytes} bytes long")


def validate_email_syntax(email: str) -> bool:
    return EmailPattern.fullmatch(email) is not None
