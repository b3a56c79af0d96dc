"""Session token issuance and verification."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import jwt
import pydantic as p

from tmember.errors import InvalidToken
from tmember.model import BaseModel, UserID

if t.TYPE_CHECKING:
    from tmember.core.provider import TimestampProvider


class Claims(BaseModel):
    """Decoded token payload."""

    user_id: UserID
    email: str
    issued_at: datetime.datetime = p.Field(validation_alias="iat")
    expires_at: datetime.datetime = p.Field(validation_alias="exp")
    issuer: str = p.Field(validation_alias="iss")


class TokenManager(object):
    """Issues and verifies HS256 session tokens.

    Tokens carry the user's ID and email; there is no refresh or revocation,
    a token is valid until it expires.
    """

    _secret_key: p.Secret[str]
    _algorithm: t.Literal["HS256"]
    _lifetime: datetime.timedelta
    _issuer: str
    _utcnow: TimestampProvider

    def __init__(
        self,
        secret_key: p.Secret[str],
        algorithm: t.Literal["HS256"] = "HS256",
        token_lifetime_hours: t.Annotated[int, ant.Gt(0)] = 24,
        issuer: str = "tmember",
        utcnow: TimestampProvider | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = datetime.timedelta(hours=token_lifetime_hours)
        self._issuer = issuer
        self._utcnow = utcnow or (lambda: datetime.datetime.now(datetime.UTC))

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def lifetime(self) -> datetime.timedelta:
        return self._lifetime

    def issue(self, user_id: UserID, email: str) -> str:
        """Create a signed token for the user, valid for the configured lifetime."""
        now = self._utcnow()
        payload: dict[str, t.Any] = {
            "user_id": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
            "iss": self._issuer,
        }
        return jwt.encode(payload, self._secret_key.get_secret_value(), algorithm=self._algorithm)

    def verify(self, token: str) -> Claims:
        """Decode and validate a token.

        Raises:
            InvalidToken: On a bad signature, an expired token, or a payload
                missing or mistyping any claim
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key.get_secret_value(),
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["user_id", "email", "iat", "exp", "iss"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken("token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken(str(e)) from e

        try:
            return Claims.model_validate(payload)
        except p.ValidationError as e:
            raise InvalidToken("token claims are malformed") from e
