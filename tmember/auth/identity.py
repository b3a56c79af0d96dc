"""Registration, login and token authentication."""

from __future__ import annotations

import logging
import typing as t

import sqlalchemy as sqla

from tmember.errors import EmailExists, InternalError, InvalidCredentials, InvalidEmail, InvalidToken, \
    NotAuthenticated, TMemberError
from tmember.model import AuthenticatedIdentity, OrganizationWithRole, User
from tmember.storage import organization as organization_storage
from tmember.storage import Session
from tmember.storage import user as user_storage

from . import credential
from .jwt import TokenManager

logger = logging.getLogger(__name__)


class IdentityService(object):
    """Account lifecycle for a single unit of work.

    Each instance holds one session; every public method runs in its own
    transaction on it.
    """

    def __init__(self, session: Session, tokens: TokenManager) -> None:
        self._session = session
        self._tokens = tokens

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> IdentityService:
        return self

    def __exit__(self, *exc_info: t.Any) -> None:
        self.close()

    @property
    def tokens(self) -> TokenManager:
        return self._tokens

    def register(self, email: str, password: str) -> tuple[User, str]:
        """Create an account and return it with a fresh session token.

        Raises:
            InvalidEmail, WeakPassword: Before anything is stored
            EmailExists: If the email is taken, whether seen by the pre-check
                or by the unique constraint on insert
            InternalError: On any other storage failure
        """
        if not credential.validate_email_syntax(email):
            raise InvalidEmail()
        credential.validate_password_policy(password)

        password_hash = credential.hash_password(password)
        try:
            with self._session.begin():
                if user_storage.get(email=email, session=self._session) is not None:
                    raise EmailExists()
                try:
                    user = user_storage.create(email=email, password_hash=password_hash, session=self._session)
                except sqla.exc.IntegrityError as e:
                    logger.info("registration lost a race on email uniqueness", extra={"email": email})
                    raise EmailExists() from e
        except TMemberError:
            raise
        except sqla.exc.SQLAlchemyError as e:
            logger.exception("failed to store new user", extra={"email": email})
            raise InternalError("Failed to create user") from e

        logger.info("user registered", extra={"user_id": user.user_id})
        return user, self._tokens.issue(user.user_id, user.email)

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the user with a fresh session token.

        An unknown email and a wrong password are indistinguishable to the
        caller.

        Raises:
            InvalidCredentials
        """
        try:
            with self._session.begin():
                found = user_storage.get(email=email, with_credentials=True, session=self._session)
        except sqla.exc.SQLAlchemyError as e:
            logger.exception("failed to look up user for login")
            raise InternalError("Database error") from e

        if found is None or not credential.verify_password(password, found.password_hash):
            logger.debug("login rejected", extra={"email": email})
            raise InvalidCredentials()

        user = User.model_validate(found.model_dump(exclude={"password_hash"}))
        logger.info("user logged in", extra={"user_id": user.user_id})
        return user, self._tokens.issue(user.user_id, user.email)

    def authenticate(self, token: str) -> AuthenticatedIdentity:
        """Resolve a bearer token into the caller's identity.

        Raises:
            NotAuthenticated: If the token fails verification for any reason
        """
        try:
            claims = self._tokens.verify(token)
        except InvalidToken as e:
            logger.debug("token rejected", extra={"reason": str(e)})
            raise NotAuthenticated("Invalid or expired token") from e
        return AuthenticatedIdentity(user_id=claims.user_id, email=claims.email)

    def get_current_user(self, identity: AuthenticatedIdentity) -> tuple[User, tuple[OrganizationWithRole, ...]]:
        """The caller's account and the organizations they belong to, with their role in each.

        Raises:
            NotAuthenticated: If the account behind the token no longer exists
        """
        try:
            with self._session.begin():
                user = user_storage.get(user_id=identity.user_id, session=self._session)
                if user is None:
                    raise NotAuthenticated("User not found")
                organizations = organization_storage.find(
                    user_id=identity.user_id, with_role=True, session=self._session
                )
        except TMemberError:
            raise
        except sqla.exc.SQLAlchemyError as e:
            logger.exception("failed to load current user", extra={"user_id": identity.user_id})
            raise InternalError("Failed to fetch user") from e
        return user, organizations
