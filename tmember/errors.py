"""Error taxonomy shared by the services and the HTTP layer."""

import typing as t


class TMemberError(Exception):
    """Base class for errors surfaced to API callers."""

    code: t.ClassVar[str] = "INTERNAL_ERROR"
    default_message: t.ClassVar[str] = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# validation


class ValidationError(TMemberError):
    """Input was malformed or violated a policy; nothing was written."""


class InvalidEmail(ValidationError):
    code = "INVALID_EMAIL"
    default_message = "Invalid email format"


class WeakPassword(ValidationError):
    code = "WEAK_PASSWORD"
    default_message = "Password does not meet requirements"


class InvalidName(ValidationError):
    code = "INVALID_NAME"
    default_message = "Organization name is required"


class InvalidRole(ValidationError):
    code = "INVALID_ROLE"
    default_message = "Role must be 'admin' or 'member'"


class InvalidRequest(ValidationError):
    code = "INVALID_REQUEST"
    default_message = "Invalid request payload"


# conflicts


class ConflictError(TMemberError):
    """A uniqueness rule would be violated."""


class EmailExists(ConflictError):
    code = "EMAIL_EXISTS"
    default_message = "Email already registered"


class NameExists(ConflictError):
    code = "NAME_EXISTS"
    default_message = "Organization name already exists"


# authentication


class AuthenticationError(TMemberError):
    """The caller could not be identified."""


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class NotAuthenticated(AuthenticationError):
    code = "NOT_AUTHENTICATED"
    default_message = "Authentication required"


class InvalidToken(Exception):
    """A session token failed signature, expiry or claims validation."""


# authorization


class AuthorizationError(TMemberError):
    """The caller is known but lacks access to the resource."""


class AccessDenied(AuthorizationError):
    code = "ACCESS_DENIED"
    default_message = "Access denied to organization"


class AdminRequired(AuthorizationError):
    code = "ADMIN_REQUIRED"
    default_message = "Admin access required"


class NotFound(TMemberError):
    code = "MEMBERSHIP_NOT_FOUND"
    default_message = "Membership not found"


class IntegrityViolation(TMemberError):
    """A business rule over stored state forbids the change."""


class LastAdminError(IntegrityViolation):
    code = "LAST_ADMIN_ERROR"
    default_message = "Cannot remove the last admin from organization"


class InternalError(TMemberError):
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"
